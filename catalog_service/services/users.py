"""User management: accounts, passwords and permission sets."""
from typing import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from catalog_service import crud
from catalog_service import schemas
from catalog_service.core.exceptions import (
    IdNotFound, InternalServerError, Unauthorized, UsernameExists
)
from catalog_service.core.logging_config import logger
from catalog_service.core.security import generate_salt, hash_password, verify_password
from catalog_service.core.timeutils import utcnow
from catalog_service.models import User
from catalog_service.services.permissions import (
    Permission, PermissionMask, load_permissions, require_permission
)


def _get_target(db: Session, user_id: int) -> User:
    user = crud.get_user_by_id(db, user_id)
    if user is None:
        raise IdNotFound()
    return user


def create_user(db: Session, caller: User, request: schemas.UserCreate,
                clock: Callable[[], datetime] = utcnow) -> User:
    """Create a disabled user with an empty permission set. Requires USER_ADD."""
    require_permission(db, caller, Permission.USER_ADD)

    if crud.get_user_by_username(db, request.username) is not None:
        raise UsernameExists()

    salt = generate_salt()
    password_hash = hash_password(request.password, salt)
    return crud.create_user(db, request.username, salt, password_hash, clock())


def update_user(db: Session, caller: User, user_id: int, request: schemas.UserUpdate) -> User:
    """Enable or disable a user. Requires USER_UPDATE."""
    require_permission(db, caller, Permission.USER_UPDATE)
    user = _get_target(db, user_id)
    logger.info(f"User {caller.id} set enabled={request.enabled} on user {user.id}")
    return crud.update_user_enabled(db, user, request.enabled)


def delete_user(db: Session, caller: User, user_id: int) -> None:
    """Delete a user and its permission set. Requires USER_DELETE."""
    require_permission(db, caller, Permission.USER_DELETE)
    user = _get_target(db, user_id)
    crud.delete_user(db, user)
    logger.info(f"User {caller.id} deleted user {user_id}")


def change_password(db: Session, caller: User, user_id: int, request: schemas.PasswordChange) -> None:
    """Change a password.

    Users changing their own password must present the old one; changing
    anyone else's requires USER_UPDATE instead. The stored salt is reused.
    """
    if caller.id == user_id:
        target = caller
        if not request.old_password or not verify_password(target.password_hash, request.old_password):
            raise Unauthorized("Old password did not match.")
    else:
        require_permission(db, caller, Permission.USER_UPDATE)
        target = _get_target(db, user_id)

    crud.update_user_password(db, target, hash_password(request.new_password, target.salt))
    logger.info(f"Password changed for user {target.id}")


def _permissions_response(user: User, mask: PermissionMask) -> schemas.PermissionsResponse:
    return schemas.PermissionsResponse(
        user_id=user.id,
        granted_actions=mask.bits,
        actions=[p.name for p in mask.actions()],
    )


def get_permissions(db: Session, caller: User, user_id: int) -> schemas.PermissionsResponse:
    """Read a permission set. Anyone may read their own; others need PERMISSIONS_UPDATE."""
    if caller.id == user_id:
        target = caller
    else:
        require_permission(db, caller, Permission.PERMISSIONS_UPDATE)
        target = _get_target(db, user_id)
    return _permissions_response(target, load_permissions(db, target))


def set_permissions(db: Session, caller: User, user_id: int,
                    request: schemas.PermissionsUpdate) -> schemas.PermissionsResponse:
    """Replace a user's granted actions. Requires PERMISSIONS_UPDATE."""
    require_permission(db, caller, Permission.PERMISSIONS_UPDATE)
    mask = PermissionMask.from_bits(request.granted_actions)
    target = _get_target(db, user_id)

    permission_set = crud.get_permission_set(db, target)
    if permission_set is None:
        logger.warning(f"Failed to locate expected permission set: user {target.id} -> {target.permission_id}")
        raise InternalServerError()
    crud.update_permission_set(db, permission_set, mask.bits)
    logger.info(f"User {caller.id} set permissions of user {target.id} to {mask.bits}")
    return _permissions_response(target, mask)


def ensure_admin(db: Session, username: str, password: str,
                 clock: Callable[[], datetime] = utcnow) -> User:
    """Create an enabled user holding every permission unless the username exists."""
    user = crud.get_user_by_username(db, username)
    if user is not None:
        return user
    salt = generate_salt()
    user = crud.create_user(
        db, username, salt, hash_password(password, salt), clock(),
        enabled=True, granted_actions=PermissionMask.everything().bits,
    )
    logger.info(f"Bootstrap administrator created: {username}")
    return user
