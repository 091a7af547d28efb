"""Pydantic schemas for request/response validation."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# --- Book Schemas ---
class BookBase(BaseModel):
    title: str
    author: str
    publication_year: int
    isbn: str = Field(min_length=1)


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    id: int
    # Accepted for compatibility with full records; always overwritten.
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CatalogRecord(BookBase):
    """A persisted book as held by the catalog cache."""
    id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BooksResponse(BaseModel):
    books: List[CatalogRecord]


class Pagination(BaseModel):
    # 0 means "the most recent per_page records"
    page: int = Field(default=0, ge=0)
    per_page: int = Field(default=50, ge=1)


class BookSearch(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None


# --- Authentication Schemas ---
class LoginResponse(BaseModel):
    token: str
    token_expiry: datetime


# --- User Schemas ---
class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreateResponse(BaseModel):
    user_id: int


class UserUpdate(BaseModel):
    enabled: bool


class PasswordChange(BaseModel):
    old_password: Optional[str] = None
    new_password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: int
    username: str
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


# --- Permission Schemas ---
class PermissionsUpdate(BaseModel):
    granted_actions: int = Field(ge=0)


class PermissionsResponse(BaseModel):
    user_id: int
    granted_actions: int
    actions: List[str]
