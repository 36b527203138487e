"""
Book business logic.

Scope:
- validate request payloads against the field table
- build predicates / patch sets and hand them to the repository
- shape rows-affected responses
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from core import messages
from core.errors import ValidationFailed

from . import predicates
from .predicates import MatchMode, PatchSet, Predicate
from .schemas import Book, ListBooksQuery, PartialBook

logger = logging.getLogger(__name__)


class BookStore(Protocol):
    async def list_books(self, *, order_by: str, limit: int, offset: int) -> list[dict[str, Any]]: ...

    async def filter_books(self, predicate: Predicate) -> list[dict[str, Any]]: ...

    async def insert_books(self, books: Sequence[Book]) -> int: ...

    async def update_book(self, book: Book) -> int: ...

    async def patch_book(self, patch: PatchSet) -> int: ...

    async def delete_book(self, book_id: int) -> int: ...


def rows_affected_response(rows: int, success_message: str, *, warning: str | None = None) -> dict:
    body: dict[str, Any] = {
        "message": success_message if rows else messages.NO_DATA_UPDATE,
        "rows_affected": rows,
    }
    if warning:
        body["warning"] = warning
    return body


async def list_books(store: BookStore, query: ListBooksQuery) -> list[dict[str, Any]]:
    return await store.list_books(
        order_by=query.order_by,
        limit=query.page_size,
        offset=query.offset,
    )


async def find_books(store: BookStore, book: Book, mode: MatchMode) -> list[dict[str, Any]] | dict:
    """
    Search (CONTAINS) or exact match (EXACT) on the populated fields of `book`.
    """
    predicate = predicates.build_predicate(book, mode)
    if predicate is None:
        logger.warning("find_books_empty_query mode=%s", mode.value)
        return {"message": messages.NO_QUERY_DATA}
    return await store.filter_books(predicate)


async def insert_books(store: BookStore, books: Sequence[Book]) -> dict:
    # Validate the whole batch before writing any of it.
    for book in books:
        try:
            predicates.require_populated(book, include_id=False)
        except ValidationFailed as exc:
            logger.warning("insert_books_rejected reason=%s", exc)
            raise
    rows = await store.insert_books(books)
    return rows_affected_response(rows, messages.ADD_SUCCESS)


async def update_book(store: BookStore, book: Book) -> dict:
    try:
        predicates.require_populated(book, include_id=True)
    except ValidationFailed as exc:
        logger.warning("update_book_rejected reason=%s", exc)
        raise
    rows = await store.update_book(book)
    return rows_affected_response(rows, messages.UPDATE_SUCCESS)


async def patch_book(store: BookStore, patch: PartialBook) -> dict:
    try:
        patch_set = predicates.build_patch_set(patch)
    except ValidationFailed as exc:
        logger.warning("patch_book_rejected reason=%s", exc)
        raise

    warning = patch_set.warning
    if warning:
        logger.warning("patch_book_omitted book_id=%s %s", patch_set.book_id, warning)
    rows = await store.patch_book(patch_set)
    return rows_affected_response(rows, messages.UPDATE_SUCCESS, warning=warning)


async def delete_book(store: BookStore, book_id: int) -> dict:
    rows = await store.delete_book(book_id)
    return rows_affected_response(rows, messages.DELETE_SUCCESS)
