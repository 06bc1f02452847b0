import pytest
from sqlalchemy import inspect, insert, select, update
from sqlalchemy.exc import IntegrityError

from models import Book, book_table

WITCHER = {"title": "The Last Wish", "author": "Andrzej Sapkowski", "isbn": "978-0-316-02918-9"}


def test_book_table_shape(engine):
    inspector = inspect(engine)

    columns = {column["name"]: column for column in inspector.get_columns("book")}
    assert list(columns) == ["title", "author", "isbn"]
    assert not any(column["nullable"] for column in columns.values())

    assert inspector.get_pk_constraint("book")["constrained_columns"] == []

    indexes = inspector.get_indexes("book")
    assert [(index["name"], index["column_names"], bool(index["unique"])) for index in indexes] == [
        ("book_isbn_idx", ["isbn"], True)
    ]


def test_insert_with_all_columns_succeeds(engine):
    with engine.begin() as conn:
        conn.execute(insert(book_table).values(**WITCHER))

    with engine.connect() as conn:
        rows = conn.execute(select(book_table)).mappings().all()
    assert [dict(row) for row in rows] == [WITCHER]


@pytest.mark.parametrize("column", ["title", "author", "isbn"])
def test_insert_with_null_column_fails(engine, column):
    values = dict(WITCHER, **{column: None})

    with pytest.raises(IntegrityError, match="NOT NULL"):
        with engine.begin() as conn:
            conn.execute(insert(book_table).values(**values))


def test_second_insert_with_same_isbn_fails(engine):
    with engine.begin() as conn:
        conn.execute(insert(book_table).values(**WITCHER))

    with pytest.raises(IntegrityError, match="UNIQUE"):
        with engine.begin() as conn:
            conn.execute(
                insert(book_table).values(title="Sword of Destiny", author="Andrzej Sapkowski", isbn=WITCHER["isbn"])
            )

    with engine.connect() as conn:
        titles = conn.execute(select(book_table.c.title)).scalars().all()
    assert titles == ["The Last Wish"]


def test_update_isbn_to_existing_value_fails(engine):
    with engine.begin() as conn:
        conn.execute(insert(book_table).values(**WITCHER))
        conn.execute(insert(book_table).values(title="Blood of Elves", author="Andrzej Sapkowski", isbn="978-0-316-02919-6"))

    with pytest.raises(IntegrityError, match="UNIQUE"):
        with engine.begin() as conn:
            conn.execute(
                update(book_table).where(book_table.c.isbn == "978-0-316-02919-6").values(isbn=WITCHER["isbn"])
            )


def test_duplicate_title_and_author_are_accepted(engine):
    with engine.begin() as conn:
        conn.execute(insert(book_table).values(title="Dune", author="Frank Herbert", isbn="0-441-17271-7"))
        conn.execute(insert(book_table).values(title="Dune", author="Frank Herbert", isbn="978-0-441-17271-9"))

    with engine.connect() as conn:
        count = len(conn.execute(select(book_table)).all())
    assert count == 2


def test_mapper_uses_isbn_as_identity(db_session):
    db_session.execute(insert(book_table).values(**WITCHER))
    db_session.commit()

    book = db_session.get(Book, WITCHER["isbn"])

    assert book.title == "The Last Wish"
    assert book.author == "Andrzej Sapkowski"
