from sqlalchemy import Column, Index, String, Table

from database import Base


# No primary key is declared; isbn is NOT NULL and unique, so the mapper
# uses it as the row identity.
book_table = Table(
    "book",
    Base.metadata,
    Column("title", String, nullable=False),
    Column("author", String, nullable=False),
    Column("isbn", String, nullable=False),
    Index("book_isbn_idx", "isbn", unique=True),
)


class Book(Base):
    __table__ = book_table
    __mapper_args__ = {"primary_key": [book_table.c.isbn]}

    def __repr__(self) -> str:
        return f"Book(isbn={self.isbn!r}, title={self.title!r}, author={self.author!r})"
