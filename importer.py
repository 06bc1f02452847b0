"""Reader for delimited book files.

The first non-blank line is a header naming the columns, every following
non-blank line is one book::

    title;author;isbn
    The Last Wish;Andrzej Sapkowski;978-0-316-02918-9
"""
import csv
import io

from pydantic import ValidationError

import schemas
from crud import COLUMNS
from errors import ImportFormatError

DEFAULT_DELIMITER = ";"


def read_delimited(text: str, delimiter: str = DEFAULT_DELIMITER) -> tuple[list[str], list[tuple[int, list[str]]]]:
    """Split ``text`` into a header and ``(line_number, cells)`` rows."""
    header: list[str] = []
    rows: list[tuple[int, list[str]]] = []

    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        cells = [cell.strip() for cell in cells]
        if not header:
            header = cells
        else:
            rows.append((reader.line_num, cells))

    return header, rows


def _check_header(header: list[str]) -> list[str]:
    if not header:
        raise ImportFormatError("file is empty")

    columns = [column.lower() for column in header]
    unknown = [column for column in columns if column not in COLUMNS]
    if unknown:
        raise ImportFormatError(f"unknown columns: {', '.join(unknown)}")
    if len(set(columns)) != len(columns):
        raise ImportFormatError("duplicate columns in header")
    missing = [column for column in COLUMNS if column not in columns]
    if missing:
        raise ImportFormatError(f"missing columns: {', '.join(missing)}")
    return columns


def parse_books(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[dict]:
    header, rows = read_delimited(text, delimiter)
    columns = _check_header(header)

    books = []
    for line, cells in rows:
        if len(cells) != len(columns):
            raise ImportFormatError(
                f"expected {len(columns)} values, got {len(cells)}", line=line
            )
        try:
            book = schemas.BookCreate(**dict(zip(columns, cells)))
        except ValidationError as exc:
            fields = ", ".join(str(error["loc"][0]) for error in exc.errors())
            raise ImportFormatError(f"invalid value for {fields}", line=line) from exc
        books.append(book.model_dump())

    return books
