"""Pydantic schemas."""
from catalog_service.schemas.schemas import (
    BookBase, BookCreate, BookUpdate, CatalogRecord, BooksResponse,
    Pagination, BookSearch,
    LoginResponse,
    UserCreate, UserCreateResponse, UserUpdate, PasswordChange, UserResponse,
    PermissionsUpdate, PermissionsResponse
)

__all__ = [
    "BookBase", "BookCreate", "BookUpdate", "CatalogRecord", "BooksResponse",
    "Pagination", "BookSearch",
    "LoginResponse",
    "UserCreate", "UserCreateResponse", "UserUpdate", "PasswordChange", "UserResponse",
    "PermissionsUpdate", "PermissionsResponse"
]
