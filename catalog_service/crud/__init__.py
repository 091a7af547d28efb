"""Database CRUD operations."""
from catalog_service.crud.crud import (
    store_call,
    get_all_books,
    get_book_by_id,
    get_book_by_isbn,
    create_book,
    create_books,
    update_book,
    delete_book_by_id,
    get_user_by_id,
    get_user_by_username,
    get_user_by_token,
    update_user_token,
    create_user,
    update_user_enabled,
    update_user_password,
    delete_user,
    get_permission_set,
    update_permission_set
)

__all__ = [
    "store_call",
    "get_all_books",
    "get_book_by_id",
    "get_book_by_isbn",
    "create_book",
    "create_books",
    "update_book",
    "delete_book_by_id",
    "get_user_by_id",
    "get_user_by_username",
    "get_user_by_token",
    "update_user_token",
    "create_user",
    "update_user_enabled",
    "update_user_password",
    "delete_user",
    "get_permission_set",
    "update_permission_set"
]
