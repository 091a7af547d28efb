"""User management API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from catalog_service import schemas
from catalog_service.api.deps import get_current_user, get_db
from catalog_service.models import User
from catalog_service.services import users

router = APIRouter()


@router.post("/", response_model=schemas.UserCreateResponse, status_code=status.HTTP_201_CREATED)
def create_user_api(
    request: schemas.UserCreate,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    """Create a disabled user. Requires the USER_ADD permission."""
    user = users.create_user(db, caller, request)
    return schemas.UserCreateResponse(user_id=user.id)


@router.put("/{user_id}", response_model=schemas.UserResponse)
def update_user_api(
    user_id: int,
    request: schemas.UserUpdate,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    """Enable or disable a user. Requires the USER_UPDATE permission."""
    return users.update_user(db, caller, user_id, request)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_api(
    user_id: int,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    """Delete a user. Requires the USER_DELETE permission."""
    users.delete_user(db, caller, user_id)


@router.put("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password_api(
    user_id: int,
    request: schemas.PasswordChange,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    """Change your own password, or anyone's with the USER_UPDATE permission."""
    users.change_password(db, caller, user_id, request)


@router.get("/{user_id}/permissions", response_model=schemas.PermissionsResponse)
def get_permissions_api(
    user_id: int,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    return users.get_permissions(db, caller, user_id)


@router.put("/{user_id}/permissions", response_model=schemas.PermissionsResponse)
def set_permissions_api(
    user_id: int,
    request: schemas.PermissionsUpdate,
    db: Session = Depends(get_db),
    caller: User = Depends(get_current_user),
):
    """Replace a user's granted actions. Requires the PERMISSIONS_UPDATE permission."""
    return users.set_permissions(db, caller, user_id, request)
