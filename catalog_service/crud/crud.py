"""Database CRUD operations.

Every store failure is rolled back, logged at warning level and re-raised as
DatabaseError so no store detail leaves this module.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_service import schemas
from catalog_service.core.exceptions import DatabaseError
from catalog_service.core.logging_config import logger
from catalog_service.models import Book, User, PermissionSet


@contextmanager
def store_call(db: Session, operation: str):
    """Map any store failure inside the block to DatabaseError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Store call failed ({operation}): {e}")
        raise DatabaseError()


# --- Books ---

def get_all_books(db: Session) -> List[Book]:
    """Get every book in the store."""
    with store_call(db, "get_all_books"):
        return db.query(Book).order_by(Book.id).all()


def get_book_by_id(db: Session, book_id: int) -> Optional[Book]:
    """Get a book by its primary key."""
    with store_call(db, "get_book_by_id"):
        return db.query(Book).filter(Book.id == book_id).first()


def get_book_by_isbn(db: Session, isbn: str) -> Optional[Book]:
    """Get a book by its ISBN."""
    with store_call(db, "get_book_by_isbn"):
        return db.query(Book).filter(Book.isbn == isbn).first()


def _book_from_record(record: schemas.BookBase, created_at: datetime, updated_at: datetime) -> Book:
    return Book(
        id=getattr(record, "id", None),
        isbn=record.isbn,
        title=record.title,
        author=record.author,
        publication_year=record.publication_year,
        created_at=created_at,
        updated_at=updated_at,
    )


def create_book(db: Session, book: schemas.BookCreate, now: datetime) -> Book:
    """Insert a new book; created_at and updated_at are both set to now."""
    db_book = _book_from_record(book, now, now)
    with store_call(db, "create_book"):
        db.add(db_book)
        db.commit()
        db.refresh(db_book)
    logger.info(f"Book created: {db_book.isbn} (ID: {db_book.id})")
    return db_book


def create_books(db: Session, records: List[schemas.CatalogRecord]) -> List[Book]:
    """Insert several records in one transaction, keeping their timestamps."""
    db_books = [_book_from_record(r, r.created_at, r.updated_at) for r in records]
    with store_call(db, "create_books"):
        db.add_all(db_books)
        db.commit()
        for db_book in db_books:
            db.refresh(db_book)
    return db_books


def update_book(db: Session, record: schemas.CatalogRecord) -> Optional[Book]:
    """Overwrite the non-key fields of the book with record.id.

    Returns None when no such row exists.
    """
    with store_call(db, "update_book"):
        db_book = db.query(Book).filter(Book.id == record.id).first()
        if not db_book:
            return None
        db_book.title = record.title
        db_book.author = record.author
        db_book.publication_year = record.publication_year
        db_book.created_at = record.created_at
        db_book.updated_at = record.updated_at
        db.commit()
        db.refresh(db_book)
    return db_book


def delete_book_by_id(db: Session, book_id: int) -> int:
    """Delete a book by id and return the number of rows affected."""
    with store_call(db, "delete_book_by_id"):
        deleted = db.query(Book).filter(Book.id == book_id).delete()
        db.commit()
    return deleted


# --- Users ---

def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    with store_call(db, "get_user_by_id"):
        return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    with store_call(db, "get_user_by_username"):
        return db.query(User).filter(User.username == username).first()


def get_user_by_token(db: Session, token: str, now: datetime) -> Optional[User]:
    """Get the enabled user holding token, provided it expires strictly after now."""
    with store_call(db, "get_user_by_token"):
        return db.query(User).filter(
            User.session_token == token,
            User.token_expiry > now,
            User.enabled == True,
        ).first()


def update_user_token(db: Session, user: User, token: str, expiry: datetime) -> User:
    with store_call(db, "update_user_token"):
        user.session_token = token
        user.token_expiry = expiry
        db.commit()
        db.refresh(user)
    return user


def create_user(db: Session, username: str, salt: str, password_hash: str,
                now: datetime, enabled: bool = False, granted_actions: int = 0) -> User:
    """Create a user together with its permission set in a single transaction."""
    db_user = User(
        username=username,
        salt=salt,
        password_hash=password_hash,
        enabled=enabled,
        created_at=now,
    )
    with store_call(db, "create_user"):
        db.add(db_user)
        db.flush()
        permission_set = PermissionSet(user_id=db_user.id, granted_actions=granted_actions)
        db.add(permission_set)
        db.flush()
        db_user.permission_id = permission_set.id
        db.commit()
        db.refresh(db_user)
    logger.info(f"User created: {db_user.username} (ID: {db_user.id})")
    return db_user


def update_user_enabled(db: Session, user: User, enabled: bool) -> User:
    with store_call(db, "update_user_enabled"):
        user.enabled = enabled
        db.commit()
        db.refresh(user)
    return user


def update_user_password(db: Session, user: User, password_hash: str) -> User:
    with store_call(db, "update_user_password"):
        user.password_hash = password_hash
        db.commit()
        db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Delete a user; its permission set goes with it."""
    with store_call(db, "delete_user"):
        db.delete(user)
        db.commit()


# --- Permission sets ---

def get_permission_set(db: Session, user: User) -> Optional[PermissionSet]:
    """Get the permission set referenced by the user and owned by it."""
    with store_call(db, "get_permission_set"):
        return db.query(PermissionSet).filter(
            PermissionSet.id == user.permission_id,
            PermissionSet.user_id == user.id,
        ).first()


def update_permission_set(db: Session, permission_set: PermissionSet, granted_actions: int) -> PermissionSet:
    with store_call(db, "update_permission_set"):
        permission_set.granted_actions = granted_actions
        db.commit()
        db.refresh(permission_set)
    return permission_set
