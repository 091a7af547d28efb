"""Write-through catalog cache kept in sync with the books table.

The cache maps isbn -> CatalogRecord and is the source of truth for reads once
populated. Writes go to the store first; the cache is only touched after the
store call succeeded. One lock guards the whole key space.

Lock discipline:
- add, update, get_by_id and get_by_isbn hold the lock across their store
  round trip, so check-then-write sequences cannot interleave.
- reconcile holds it only while computing the backlog and while swapping in
  the new map.
- drop deletes in the store without the lock and takes it to evict.
"""
import threading
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from catalog_service import crud
from catalog_service import schemas
from catalog_service.core.exceptions import (
    IdNotFound, IsbnExists, IsbnMismatch, IsbnNotFound, PaginationInvalid
)
from catalog_service.core.logging_config import logger
from catalog_service.core.timeutils import utcnow


def _snapshot(db_book) -> schemas.CatalogRecord:
    return schemas.CatalogRecord.model_validate(db_book)


def _matches(record: schemas.CatalogRecord, search: schemas.BookSearch) -> bool:
    """Conjunctive, case-insensitive substring match on the given filters."""
    for field in ("title", "author", "isbn"):
        needle = getattr(search, field)
        if needle and needle.lower() not in getattr(record, field).lower():
            return False
    return True


def paginate(records: List[schemas.CatalogRecord], pagination: schemas.Pagination) -> List[schemas.CatalogRecord]:
    """Slice an id-sorted list.

    Page 0 returns the last per_page records in order; page n >= 1 returns the
    n-th per_page-sized window. A window starting at or past the end of a
    non-empty list is rejected.
    """
    per_page = pagination.per_page
    if pagination.page == 0:
        return records[-per_page:]

    start = (pagination.page - 1) * per_page
    if start > 0 and start >= len(records):
        raise PaginationInvalid()
    return records[start:start + per_page]


class CatalogCache:
    """In-memory catalog index.

    Created once per application and handed to request handlers through
    dependency injection; every operation takes the request's session as its
    handle on the store.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._records: Dict[str, schemas.CatalogRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def snapshot(self) -> Dict[str, schemas.CatalogRecord]:
        """Copy of the current cache contents, keyed by isbn."""
        with self._lock:
            return dict(self._records)

    def seed(self, records: Iterable[schemas.CatalogRecord]) -> None:
        """Place records directly in the cache without touching the store.

        Seeded records that the store does not know about are written out by
        the next reconcile.
        """
        with self._lock:
            for record in records:
                self._records[record.isbn] = record

    # --- Reconciliation ---

    def reconcile(self, db: Session) -> None:
        """Make cache and store hold the same record set.

        Cache entries whose isbn is missing from the store (the backlog) are
        bulk inserted, then the cache is replaced by the store's view merged
        with the persisted backlog. Any store failure propagates as
        DatabaseError and leaves the cache as it was.
        """
        stored = [_snapshot(b) for b in crud.get_all_books(db)]
        stored_isbns = {r.isbn for r in stored}

        with self._lock:
            backlog = [r for isbn, r in self._records.items() if isbn not in stored_isbns]

        persisted = []
        if backlog:
            logger.warning(f"Reconciling {len(backlog)} cached record(s) missing from the store")
            persisted = [_snapshot(b) for b in crud.create_books(db, backlog)]

        merged = {r.isbn: r for r in stored}
        for record in persisted:
            merged[record.isbn] = record

        with self._lock:
            self._records = merged
        logger.debug(f"Catalog reconciled: {len(merged)} record(s)")

    # --- Reads ---

    def get_all(self, db: Session,
                pagination: Optional[schemas.Pagination] = None,
                search: Optional[schemas.BookSearch] = None) -> List[schemas.CatalogRecord]:
        """Reconcile, then filter, sort by id and paginate."""
        pagination = pagination or schemas.Pagination()
        search = search or schemas.BookSearch()

        self.reconcile(db)
        with self._lock:
            records = list(self._records.values())

        records = sorted((r for r in records if _matches(r, search)), key=lambda r: r.id)
        return paginate(records, pagination)

    def _find_id(self, book_id: int) -> Optional[schemas.CatalogRecord]:
        for record in self._records.values():
            if record.id == book_id:
                return record
        return None

    def _get_by_id_locked(self, db: Session, book_id: int) -> schemas.CatalogRecord:
        record = self._find_id(book_id)
        if record is not None:
            return record

        db_book = crud.get_book_by_id(db, book_id)
        if db_book is None:
            raise IdNotFound()
        record = _snapshot(db_book)
        self._records[record.isbn] = record
        return record

    def get_by_id(self, db: Session, book_id: int) -> schemas.CatalogRecord:
        """Cache-first lookup by id, backfilling the cache on a store hit."""
        with self._lock:
            return self._get_by_id_locked(db, book_id)

    def get_by_isbn(self, db: Session, isbn: str) -> schemas.CatalogRecord:
        """Cache-first lookup by isbn, backfilling the cache on a store hit."""
        with self._lock:
            record = self._records.get(isbn)
            if record is not None:
                return record

            db_book = crud.get_book_by_isbn(db, isbn)
            if db_book is None:
                raise IsbnNotFound()
            record = _snapshot(db_book)
            self._records[record.isbn] = record
            return record

    # --- Writes ---

    def add(self, db: Session, book: schemas.BookCreate) -> schemas.CatalogRecord:
        """Persist a new book, then cache it. Rejects an isbn already known."""
        with self._lock:
            if book.isbn in self._records:
                raise IsbnExists()

            existing = crud.get_book_by_isbn(db, book.isbn)
            if existing is not None:
                self._records[existing.isbn] = _snapshot(existing)
                raise IsbnExists()

            record = _snapshot(crud.create_book(db, book, self._clock()))
            self._records[record.isbn] = record
            return record

    def update(self, db: Session, book: schemas.BookUpdate) -> schemas.CatalogRecord:
        """Replace the non-key fields of an existing book.

        created_at is carried over from the existing record and updated_at is
        stamped now, whatever the caller sent.
        """
        with self._lock:
            existing = self._get_by_id_locked(db, book.id)
            if book.isbn != existing.isbn:
                raise IsbnMismatch()

            record = schemas.CatalogRecord(
                id=existing.id,
                isbn=existing.isbn,
                title=book.title,
                author=book.author,
                publication_year=book.publication_year,
                created_at=existing.created_at,
                updated_at=self._clock(),
            )
            db_book = crud.update_book(db, record)
            if db_book is None:
                # Deleted in the store since it was cached
                self._records.pop(existing.isbn, None)
                raise IdNotFound()

            record = _snapshot(db_book)
            self._records[record.isbn] = record
            return record

    def drop(self, db: Session, book_id: int) -> None:
        """Delete a book in the store, then evict it from the cache."""
        if crud.delete_book_by_id(db, book_id) == 0:
            raise IdNotFound()

        with self._lock:
            record = self._find_id(book_id)
            if record is not None:
                del self._records[record.isbn]
        logger.info(f"Book dropped: ID {book_id}")
