"""Catalog API endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from catalog_service import schemas
from catalog_service.api.deps import get_catalog, get_current_user, get_db, permission_required
from catalog_service.models import User
from catalog_service.services.catalog import CatalogCache
from catalog_service.services.permissions import Permission

router = APIRouter()


@router.get("/", response_model=schemas.BooksResponse)
def list_books(
    page: int = Query(0, ge=0),
    per_page: int = Query(50, ge=1),
    title: Optional[str] = None,
    author: Optional[str] = None,
    isbn: Optional[str] = None,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(get_current_user),
):
    """List books after a full sync with the store. Page 0 returns the most recent ones."""
    books = catalog.get_all(
        db,
        schemas.Pagination(page=page, per_page=per_page),
        schemas.BookSearch(title=title, author=author, isbn=isbn),
    )
    return schemas.BooksResponse(books=books)


@router.get("/isbn/{isbn}", response_model=schemas.CatalogRecord)
def get_book_by_isbn(
    isbn: str,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(get_current_user),
):
    return catalog.get_by_isbn(db, isbn)


@router.get("/{book_id}", response_model=schemas.CatalogRecord)
def get_book(
    book_id: int,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(get_current_user),
):
    return catalog.get_by_id(db, book_id)


@router.post("/", response_model=schemas.CatalogRecord, status_code=status.HTTP_201_CREATED)
def add_book(
    book: schemas.BookCreate,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(permission_required(Permission.BOOK_ADD)),
):
    """Add a book. Requires the BOOK_ADD permission."""
    return catalog.add(db, book)


@router.put("/{book_id}", response_model=schemas.CatalogRecord)
def update_book(
    book_id: int,
    book: schemas.BookUpdate,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(permission_required(Permission.BOOK_UPDATE)),
):
    """Update a book's title, author and year. Requires the BOOK_UPDATE permission."""
    if book.id != book_id:
        raise HTTPException(status_code=400, detail="Book id in path and body do not match.")
    return catalog.update(db, book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def drop_book(
    book_id: int,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    user: User = Depends(permission_required(Permission.BOOK_DELETE)),
):
    """Delete a book. Requires the BOOK_DELETE permission."""
    catalog.drop(db, book_id)
