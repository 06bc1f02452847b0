import json
import logging
from typing import Optional
from urllib.parse import urlencode

import redis
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

import crud, schemas
from config import settings
from database import get_db
from errors import (
    BookError,
    BookNotFoundError,
    DuplicateIsbnError,
    ImportFormatError,
    MissingValueError,
)
from importer import parse_books
from redis_client import get_redis_client

router = APIRouter(prefix="/books", tags=["Books"])
logger = logging.getLogger(__name__)

CACHE_PREFIX = "books:list"


def _http_error(error: BookError) -> HTTPException:
    if isinstance(error, BookNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    if isinstance(error, DuplicateIsbnError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, MissingValueError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, ImportFormatError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))


def _list_cache_key(title, author, isbn, page, page_size, sort) -> str:
    # urlencode escapes ":" so filter values cannot collide across fields
    params = urlencode(
        [
            ("title", title or ""),
            ("author", author or ""),
            ("isbn", isbn or ""),
            ("page", page),
            ("page_size", page_size),
            ("sort", sort),
        ]
    )
    return f"{CACHE_PREFIX}:{params}"


def _invalidate_books_cache() -> None:
    redis_client = get_redis_client()
    if not redis_client:
        return
    try:
        keys = list(redis_client.scan_iter(match=f"{CACHE_PREFIX}:*", count=200))
        if keys:
            redis_client.delete(*keys)
    except redis.RedisError as exc:
        logger.warning("Failed to invalidate books cache: %s", exc)


# Add Book
@router.post("/", response_model=schemas.BookOut, status_code=status.HTTP_201_CREATED)
def add_book(book: schemas.BookCreate, db: Session = Depends(get_db)):
    try:
        new_book = crud.create_book(db, book.model_dump())
    except BookError as exc:
        raise _http_error(exc) from exc

    _invalidate_books_cache()
    return new_book


# Bulk import
@router.post("/import", response_model=schemas.ImportResult, status_code=status.HTTP_201_CREATED)
def import_books(file: UploadFile = File(...), db: Session = Depends(get_db)):
    content = file.file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be UTF-8 encoded")

    try:
        books = parse_books(text, settings.IMPORT_DELIMITER)
        imported = crud.import_books(db, books)
    except BookError as exc:
        logger.warning("Import of %s rejected: %s", file.filename, exc)
        raise _http_error(exc) from exc

    _invalidate_books_cache()
    return {"imported": imported}


# Get Books
@router.get("/", response_model=schemas.BookListResponse)
def get_books(
    title: Optional[str] = Query(default=None),
    author: Optional[str] = Query(default=None),
    isbn: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    sort: schemas.SortField = Query(default="title"),
    db: Session = Depends(get_db),
):
    cache_key = None
    redis_client = get_redis_client()
    if redis_client:
        cache_key = _list_cache_key(title, author, isbn, page, page_size, sort)
        try:
            cached = redis_client.get(cache_key)
            if cached:
                return json.loads(cached)
        except redis.RedisError as exc:
            logger.warning("Books cache read failed: %s", exc)
            cache_key = None

    items, total = crud.list_books(
        db, title=title, author=author, isbn=isbn, sort=sort, page=page, page_size=page_size
    )
    total_pages = max(1, (total + page_size - 1) // page_size)

    response_payload = {
        "items": [schemas.BookOut.model_validate(item) for item in items],
        "meta": {
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": total_pages,
        },
    }
    encoded_payload = jsonable_encoder(response_payload)

    if redis_client and cache_key:
        try:
            redis_client.setex(cache_key, settings.CACHE_TTL_SECONDS, json.dumps(encoded_payload))
        except redis.RedisError as exc:
            logger.warning("Books cache write failed: %s", exc)

    return encoded_payload


@router.get("/{isbn}", response_model=schemas.BookOut)
def get_book(isbn: str, db: Session = Depends(get_db)):
    book = crud.get_book(db, isbn)
    if not book:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return book


@router.put("/{isbn}", response_model=schemas.BookOut)
def update_book(isbn: str, book: schemas.BookUpdate, db: Session = Depends(get_db)):
    try:
        db_book = crud.update_book(db, isbn, book.model_dump())
    except BookError as exc:
        raise _http_error(exc) from exc

    _invalidate_books_cache()
    return db_book


@router.delete("/{isbn}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(isbn: str, db: Session = Depends(get_db)):
    try:
        crud.delete_book(db, isbn)
    except BookError as exc:
        raise _http_error(exc) from exc

    _invalidate_books_cache()
