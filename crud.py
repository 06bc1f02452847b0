"""Book store: the DML issued against the ``book`` table.

Every statement uses bound parameters. Constraint checks are left to the
database engine; an ``IntegrityError`` rolls the session back and is
re-raised as one of the errors in :mod:`errors`.
"""
import logging
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import delete, insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from errors import (
    BookNotFoundError,
    ConstraintViolationError,
    DuplicateIsbnError,
    MissingValueError,
)

logger = logging.getLogger(__name__)

COLUMNS = ("title", "author", "isbn")

# SQLSTATE codes reported by PostgreSQL drivers
_UNIQUE_VIOLATION = "23505"
_NOT_NULL_VIOLATION = "23502"

_SORT_COLUMNS = {
    "title": models.Book.title,
    "author": models.Book.author,
    "isbn": models.Book.isbn,
}

book_table = models.book_table


def _row(values: Mapping[str, Any], partial: bool = False) -> dict:
    if partial:
        return {column: values[column] for column in COLUMNS if column in values}
    return {column: values.get(column) for column in COLUMNS}


def _violated_column(message: str) -> Optional[str]:
    for column in COLUMNS:
        if f"book.{column}" in message or f'"{column}"' in message:
            return column
    return None


def translate_integrity_error(exc: IntegrityError) -> ConstraintViolationError:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig)
    lowered = message.lower()

    if code == _UNIQUE_VIOLATION or "unique" in lowered:
        return DuplicateIsbnError()
    if code == _NOT_NULL_VIOLATION or "not null" in lowered or "not-null" in lowered:
        column = _violated_column(lowered)
        return MissingValueError(f"Missing value for {column or 'a required column'}", column=column)
    return ConstraintViolationError(message)


def _fail(db: Session, exc: IntegrityError) -> ConstraintViolationError:
    db.rollback()
    error = translate_integrity_error(exc)
    logger.warning("Constraint violation on book: %s", error)
    return error


def get_book(db: Session, isbn: str) -> Optional[models.Book]:
    return db.get(models.Book, isbn)


def list_books(
    db: Session,
    title: Optional[str] = None,
    author: Optional[str] = None,
    isbn: Optional[str] = None,
    sort: str = "title",
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[models.Book], int]:
    query = db.query(models.Book)

    if title:
        query = query.filter(models.Book.title.icontains(title, autoescape=True))
    if author:
        query = query.filter(models.Book.author.icontains(author, autoescape=True))
    if isbn:
        query = query.filter(models.Book.isbn.icontains(isbn, autoescape=True))

    # isbn is unique, so it makes the order total
    query = query.order_by(_SORT_COLUMNS[sort].asc(), models.Book.isbn.asc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def create_book(db: Session, values: Mapping[str, Any]) -> models.Book:
    row = _row(values)
    try:
        db.execute(insert(book_table).values(**row))
        db.commit()
    except IntegrityError as exc:
        raise _fail(db, exc) from exc

    logger.info("Created book isbn=%s", row["isbn"])
    return get_book(db, row["isbn"])


def update_book(db: Session, isbn: str, values: Mapping[str, Any]) -> models.Book:
    """Update the book keyed by ``isbn``; ``values`` may hold a new isbn."""
    row = _row(values, partial=True)
    if not row:
        book = get_book(db, isbn)
        if book is None:
            raise BookNotFoundError(isbn)
        return book

    try:
        result = db.execute(
            update(book_table).where(book_table.c.isbn == isbn).values(**row)
        )
        if result.rowcount == 0:
            db.rollback()
            raise BookNotFoundError(isbn)
        db.commit()
    except IntegrityError as exc:
        raise _fail(db, exc) from exc

    new_isbn = row.get("isbn", isbn)
    logger.info("Updated book isbn=%s", new_isbn)
    return get_book(db, new_isbn)


def delete_book(db: Session, isbn: str) -> None:
    result = db.execute(delete(book_table).where(book_table.c.isbn == isbn))
    if result.rowcount == 0:
        db.rollback()
        raise BookNotFoundError(isbn)
    db.commit()
    logger.info("Deleted book isbn=%s", isbn)


def import_books(db: Session, rows: Iterable[Mapping[str, Any]]) -> int:
    """Insert all rows in a single transaction. Either every row is stored or none is."""
    records = [_row(values) for values in rows]
    if not records:
        return 0

    try:
        db.execute(insert(book_table), records)
        db.commit()
    except IntegrityError as exc:
        raise _fail(db, exc) from exc

    logger.info("Imported %d books", len(records))
    return len(records)
