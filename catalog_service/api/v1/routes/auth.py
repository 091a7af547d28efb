"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session
from catalog_service import schemas
from catalog_service.api.deps import get_authenticator, get_db
from catalog_service.services.authenticator import Authenticator

router = APIRouter()


@router.post("/login", response_model=schemas.LoginResponse)
def login(
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator),
):
    """Exchange a username and password for a session token."""
    return authenticator.login(db, username, password)
