"""API dependencies."""
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from catalog_service.core.database import get_db
from catalog_service.core.exceptions import Unauthorized
from catalog_service.models import User
from catalog_service.services.authenticator import Authenticator
from catalog_service.services.catalog import CatalogCache
from catalog_service.services.permissions import Permission, require_permission

# auto_error=False so a missing header is reported as 401, not 403
security_scheme = HTTPBearer(auto_error=False)


def get_catalog(request: Request) -> CatalogCache:
    """The application's single catalog cache."""
    return request.app.state.catalog


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator),
) -> User:
    """Resolve the bearer token in the Authorization header to a user."""
    if credentials is None:
        raise Unauthorized("No authorization token provided.")
    return authenticator.resolve_token(db, credentials.credentials)


def permission_required(action: Permission):
    """Dependency factory: the current user, once it has passed the permission gate."""
    def dependency(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> User:
        require_permission(db, user, action)
        return user
    return dependency


__all__ = ["get_db", "get_catalog", "get_authenticator", "get_current_user", "permission_required"]
