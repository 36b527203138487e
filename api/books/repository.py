"""
Book persistence.
This module is where book-related SQL lives.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from core.db import Database, rows_affected
from core.errors import BadRequest
from core import messages

from .predicates import COLUMNS, TEXT_FIELDS, PatchSet, Predicate
from .schemas import Book

logger = logging.getLogger(__name__)

TABLE = "book"

# ORDER BY cannot take a bind parameter, so the column is checked against this set.
ORDERABLE_COLUMNS: frozenset[str] = frozenset(COLUMNS)

_SELECT = f"SELECT {', '.join(COLUMNS)} FROM {TABLE}"
_TEXT_COLUMNS = tuple(f.column for f in TEXT_FIELDS)


class InvalidOrderColumn(BadRequest):
    def __init__(self, column: str) -> None:
        super().__init__(messages.BAD_REQUEST)
        self.column = column


class BookRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def ensure_schema(self) -> None:
        await self._db.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TABLE} (
              book_id        SERIAL PRIMARY KEY,
              isbn           TEXT NOT NULL UNIQUE,
              title          TEXT NOT NULL,
              author_name    TEXT NOT NULL,
              author_surname TEXT NOT NULL,
              published      TEXT NOT NULL,
              publisher      TEXT NOT NULL
            )
            """
        )

    async def list_books(self, *, order_by: str, limit: int, offset: int) -> list[dict[str, Any]]:
        """
        One page of books, ascending by `order_by`.
        """
        if order_by not in ORDERABLE_COLUMNS:
            raise InvalidOrderColumn(order_by)

        sql = f"{_SELECT} ORDER BY {order_by} ASC LIMIT $1 OFFSET $2"
        logger.debug("list_books sql=%r limit=%s offset=%s", sql, limit, offset)
        return await self._db.fetch_all(sql, limit, offset)

    async def filter_books(self, predicate: Predicate) -> list[dict[str, Any]]:
        sql = f"{_SELECT} WHERE {predicate.sql} ORDER BY book_id ASC"
        logger.debug("filter_books sql=%r args=%r", sql, predicate.args)
        return await self._db.fetch_all(sql, *predicate.args)

    async def insert_books(self, books: Sequence[Book]) -> int:
        """
        Insert every book in one statement: the batch commits or fails as a whole.
        book_id is generated by the table and ignored on input.
        """
        if not books:
            return 0

        columns = [[getattr(bk, column) for bk in books] for column in _TEXT_COLUMNS]
        unnest_args = ", ".join(f"${n}::text[]" for n in range(1, len(_TEXT_COLUMNS) + 1))
        sql = (
            f"INSERT INTO {TABLE} ({', '.join(_TEXT_COLUMNS)}) "
            f"SELECT * FROM unnest({unnest_args})"
        )
        logger.debug("insert_books sql=%r rows=%s", sql, len(books))
        status = await self._db.execute(sql, *columns)
        count = rows_affected(status)
        logger.debug("insert_books rows_affected=%s", count)
        return count

    async def update_book(self, book: Book) -> int:
        """
        Replace every mutable column of the row matching book.book_id.
        """
        assignments = ", ".join(
            f"{column} = ${n}" for n, column in enumerate(_TEXT_COLUMNS, start=1)
        )
        id_placeholder = len(_TEXT_COLUMNS) + 1
        sql = f"UPDATE {TABLE} SET {assignments} WHERE book_id = ${id_placeholder}"
        args = [getattr(book, column) for column in _TEXT_COLUMNS]
        logger.debug("update_book sql=%r book_id=%s", sql, book.book_id)
        status = await self._db.execute(sql, *args, book.book_id)
        count = rows_affected(status)
        logger.debug("update_book rows_affected=%s", count)
        return count

    async def patch_book(self, patch: PatchSet) -> int:
        """
        Update only the assigned columns. Nothing to assign touches no row.
        """
        if not patch.assignments:
            logger.debug("patch_book book_id=%s no assignments", patch.book_id)
            return 0

        set_clause, args = patch.set_clause()
        sql = f"UPDATE {TABLE} SET {set_clause} WHERE book_id = ${len(args) + 1}"
        logger.debug("patch_book sql=%r book_id=%s", sql, patch.book_id)
        status = await self._db.execute(sql, *args, patch.book_id)
        count = rows_affected(status)
        logger.debug("patch_book rows_affected=%s", count)
        return count

    async def delete_book(self, book_id: int) -> int:
        sql = f"DELETE FROM {TABLE} WHERE book_id = $1"
        logger.debug("delete_book sql=%r book_id=%s", sql, book_id)
        status = await self._db.execute(sql, book_id)
        count = rows_affected(status)
        logger.debug("delete_book rows_affected=%s", count)
        return count
