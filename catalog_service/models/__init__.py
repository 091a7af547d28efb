"""SQLAlchemy models."""
from catalog_service.models.models import Book, User, PermissionSet
from catalog_service.core.database import Base

__all__ = ["Book", "User", "PermissionSet", "Base"]
