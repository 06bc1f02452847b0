from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    isbn: str = Field(min_length=1, max_length=32)


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    pass


class BookOut(BaseModel):
    title: str
    author: str
    isbn: str

    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class BookListResponse(BaseModel):
    items: list[BookOut]
    meta: PaginationMeta


class ImportResult(BaseModel):
    imported: int


SortField = Literal["title", "author", "isbn"]
