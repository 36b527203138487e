"""SQL shape of BookRepository against a recording database double."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from books.predicates import MatchMode, build_patch_set, build_predicate
from books.repository import BookRepository, InvalidOrderColumn
from books.schemas import Book, PartialBook


class RecordingDatabase:
    def __init__(self, status: str = "UPDATE 1", rows: list[dict[str, Any]] | None = None) -> None:
        self.status = status
        self.rows = rows or []
        self.statements: list[tuple[str, tuple[Any, ...]]] = []

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.statements.append((sql, args))
        return self.rows

    async def execute(self, sql: str, *args: Any) -> str:
        self.statements.append((sql, args))
        return self.status


def run(coro):
    return asyncio.run(coro)


def full_book(**overrides: Any) -> Book:
    values = dict(isbn="978-1", title="T", author_name="A", author_surname="S", published="P", publisher="Q")
    values.update(overrides)
    return Book(**values)


class TestListBooks:
    def test_limit_and_offset_are_bound(self) -> None:
        db = RecordingDatabase()
        run(BookRepository(db).list_books(order_by="title", limit=5, offset=5))
        [(sql, args)] = db.statements
        assert sql.endswith("FROM book ORDER BY title ASC LIMIT $1 OFFSET $2")
        assert args == (5, 5)

    def test_unknown_column_issues_no_sql(self) -> None:
        db = RecordingDatabase()
        with pytest.raises(InvalidOrderColumn) as excinfo:
            run(BookRepository(db).list_books(order_by="1; DROP TABLE book", limit=5, offset=0))
        assert excinfo.value.status_code == 400
        assert db.statements == []


class TestFilterBooks:
    def test_predicate_is_bound(self) -> None:
        db = RecordingDatabase(rows=[{"book_id": 1}])
        predicate = build_predicate(Book(title="Rose"), MatchMode.CONTAINS)
        assert run(BookRepository(db).filter_books(predicate)) == [{"book_id": 1}]
        [(sql, args)] = db.statements
        assert "WHERE title::text ILIKE $1" in sql
        assert args == ("%Rose%",)


class TestInsertBooks:
    def test_single_statement_with_column_arrays(self) -> None:
        db = RecordingDatabase(status="INSERT 0 2")
        books = [full_book(isbn="1", title="One"), full_book(isbn="2", title="Two", book_id=40)]
        assert run(BookRepository(db).insert_books(books)) == 2
        [(sql, args)] = db.statements
        assert sql.startswith("INSERT INTO book (isbn, title, author_name, author_surname, published, publisher)")
        assert "unnest($1::text[], $2::text[], $3::text[], $4::text[], $5::text[], $6::text[])" in sql
        assert args[0] == ["1", "2"]
        assert args[1] == ["One", "Two"]
        assert "book_id" not in sql

    def test_empty_batch_skips_database(self) -> None:
        db = RecordingDatabase()
        assert run(BookRepository(db).insert_books([])) == 0
        assert db.statements == []


class TestUpdateBook:
    def test_all_columns_replaced(self) -> None:
        db = RecordingDatabase(status="UPDATE 0")
        assert run(BookRepository(db).update_book(full_book(book_id=9))) == 0
        [(sql, args)] = db.statements
        assert sql == (
            "UPDATE book SET isbn = $1, title = $2, author_name = $3, author_surname = $4, "
            "published = $5, publisher = $6 WHERE book_id = $7"
        )
        assert args == ("978-1", "T", "A", "S", "P", "Q", 9)


class TestPatchBook:
    def test_only_assigned_columns(self) -> None:
        db = RecordingDatabase(status="UPDATE 1")
        patch = build_patch_set(PartialBook(book_id=3, publisher="New"))
        assert run(BookRepository(db).patch_book(patch)) == 1
        [(sql, args)] = db.statements
        assert sql == "UPDATE book SET publisher = $1 WHERE book_id = $2"
        assert args == ("New", 3)

    def test_nothing_to_assign_is_zero_rows(self) -> None:
        db = RecordingDatabase()
        assert run(BookRepository(db).patch_book(build_patch_set(PartialBook(book_id=3)))) == 0
        assert db.statements == []


class TestDeleteBook:
    def test_delete_by_id(self) -> None:
        db = RecordingDatabase(status="DELETE 1")
        assert run(BookRepository(db).delete_book(4)) == 1
        assert db.statements == [("DELETE FROM book WHERE book_id = $1", (4,))]
