"""Errors raised by the book store and the importer.

Constraint violations are detected by the database engine; these classes
only give them a name the HTTP layer can map to a status code.
"""
from typing import Optional


class BookError(Exception):
    pass


class BookNotFoundError(BookError):
    def __init__(self, isbn: str):
        super().__init__(f"Book with isbn {isbn!r} not found")
        self.isbn = isbn


class ConstraintViolationError(BookError):
    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class DuplicateIsbnError(ConstraintViolationError):
    def __init__(self, message: str = "A book with this isbn already exists"):
        super().__init__(message, column="isbn")


class MissingValueError(ConstraintViolationError):
    pass


class ImportFormatError(BookError):
    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
