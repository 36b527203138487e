"""Shared pytest fixtures for the book API tests."""

from __future__ import annotations

import re
from typing import Any, Sequence

import pytest
from fastapi.testclient import TestClient

from books.predicates import PatchSet, Predicate
from books.repository import ORDERABLE_COLUMNS, InvalidOrderColumn
from books.schemas import Book
from core.config import Settings
from core.errors import StorageError
from main import create_app

_CONDITION = re.compile(r"^(\w+)(?:::text)? (ILIKE|=) \$(\d+)$")


class InMemoryBookRepository:
    """
    Dict-backed stand-in for BookRepository.

    Interprets the predicates produced by books.predicates so HTTP tests
    exercise the real builders without a database.
    """

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _sorted(self, key: str = "book_id") -> list[dict[str, Any]]:
        return [dict(r) for r in sorted(self.rows.values(), key=lambda r: (r[key], r["book_id"]))]

    async def list_books(self, *, order_by: str, limit: int, offset: int) -> list[dict[str, Any]]:
        if order_by not in ORDERABLE_COLUMNS:
            raise InvalidOrderColumn(order_by)
        self._enter("list_books")
        return self._sorted(order_by)[offset:offset + limit]

    async def filter_books(self, predicate: Predicate) -> list[dict[str, Any]]:
        self._enter("filter_books")
        use_or = " OR " in predicate.sql
        parts = predicate.sql.split(" OR " if use_or else " AND ")
        checks = []
        for part in parts:
            column, op, n = _CONDITION.match(part).groups()
            checks.append((column, op, predicate.args[int(n) - 1]))

        def matches(row: dict[str, Any]) -> bool:
            results = []
            for column, op, arg in checks:
                if op == "ILIKE":
                    results.append(arg.strip("%").lower() in str(row[column]).lower())
                else:
                    results.append(row[column] == arg)
            return any(results) if use_or else all(results)

        return [r for r in self._sorted() if matches(r)]

    async def insert_books(self, books: Sequence[Book]) -> int:
        self._enter("insert_books")
        isbns = [bk.isbn for bk in books]
        existing = {r["isbn"] for r in self.rows.values()}
        if len(set(isbns)) != len(isbns) or existing.intersection(isbns):
            raise StorageError('duplicate key value violates unique constraint "book_isbn_key"')
        for bk in books:
            row = bk.model_dump()
            row["book_id"] = self.next_id
            self.rows[self.next_id] = row
            self.next_id += 1
        return len(books)

    async def update_book(self, book: Book) -> int:
        self._enter("update_book")
        if book.book_id not in self.rows:
            return 0
        self.rows[book.book_id] = book.model_dump()
        return 1

    async def patch_book(self, patch: PatchSet) -> int:
        self._enter("patch_book")
        if not patch.assignments or patch.book_id not in self.rows:
            return 0
        self.rows[patch.book_id].update(dict(patch.assignments))
        return 1

    async def delete_book(self, book_id: int) -> int:
        self._enter("delete_book")
        return 1 if self.rows.pop(book_id, None) is not None else 0


def make_book(n: int, **overrides: Any) -> dict[str, Any]:
    book = {
        "isbn": f"978-0-00-{n:06d}",
        "title": f"Title {n}",
        "author_name": "Umberto",
        "author_surname": "Eco",
        "published": "1980",
        "publisher": "Harcourt",
    }
    book.update(overrides)
    return book


@pytest.fixture
def store() -> InMemoryBookRepository:
    return InMemoryBookRepository()


@pytest.fixture
def client(store: InMemoryBookRepository):
    app = create_app(Settings(), repository=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded(client: TestClient, store: InMemoryBookRepository) -> InMemoryBookRepository:
    """Store pre-loaded with three books; call log cleared."""
    books = [
        make_book(1, title="The Name of the Rose"),
        make_book(2, title="Foucault's Pendulum"),
        make_book(3, title="The Alexandria Link", author_name="Steve", author_surname="Berry",
                  publisher="Ballantine"),
    ]
    response = client.post("/v1/books", json=books)
    assert response.status_code == 200
    store.calls.clear()
    return store
