"""
Book API endpoints, mounted under /v1.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Path, Query, Request

from core import messages
from core.errors import UnsupportedMediaType

from . import service
from .predicates import MatchMode
from .schemas import (
    MAX_BOOK_ID,
    MAX_PAGE_ID,
    Book,
    ListBooksQuery,
    MessageResponse,
    PartialBook,
    RowsAffectedResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> service.BookStore:
    return request.app.state.books


async def require_json(request: Request) -> None:
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != "application/json":
        logger.error("%s %s", messages.UNSUPPORTED_CONTENT_TYPE, content_type)
        raise UnsupportedMediaType(messages.UNSUPPORTED_CONTENT_TYPE)


@router.get("/", response_model=MessageResponse)
async def home() -> dict:
    return {"message": messages.HOMEPAGE}


@router.get("/books")
async def list_books(
    order_by: str = Query("book_id"),
    page_id: int = Query(1, ge=1, le=MAX_PAGE_ID),
    page_size: int = Query(25, ge=5, le=1000),
    store: service.BookStore = Depends(get_store),
) -> list[dict]:
    """
    List books one page at a time, ordered ascending by `order_by`.
    """
    query = ListBooksQuery(order_by=order_by, page_id=page_id, page_size=page_size)
    return await service.list_books(store, query)


@router.post("/books/search", dependencies=[Depends(require_json)], response_model=None)
async def search_books(
    book: Book,
    store: service.BookStore = Depends(get_store),
) -> list[dict] | dict:
    """
    Books where any populated field contains the given value (OR, case-insensitive ILIKE %value%).
    """
    return await service.find_books(store, book, MatchMode.CONTAINS)


@router.post("/books/get", dependencies=[Depends(require_json)], response_model=None)
async def get_books(
    book: Book,
    store: service.BookStore = Depends(get_store),
) -> list[dict] | dict:
    """
    Books where every populated field equals the given value (AND, =).
    """
    return await service.find_books(store, book, MatchMode.EXACT)


@router.post(
    "/books",
    dependencies=[Depends(require_json)],
    response_model=RowsAffectedResponse,
    response_model_exclude_none=True,
)
async def insert_books(
    books: list[Book],
    store: service.BookStore = Depends(get_store),
) -> dict:
    return await service.insert_books(store, books)


@router.put(
    "/books",
    dependencies=[Depends(require_json)],
    response_model=RowsAffectedResponse,
    response_model_exclude_none=True,
)
async def update_book(
    book: Book,
    store: service.BookStore = Depends(get_store),
) -> dict:
    return await service.update_book(store, book)


@router.patch(
    "/books",
    dependencies=[Depends(require_json)],
    response_model=RowsAffectedResponse,
    response_model_exclude_none=True,
)
async def patch_book(
    patch: PartialBook,
    store: service.BookStore = Depends(get_store),
) -> dict:
    return await service.patch_book(store, patch)


@router.delete(
    "/books/{book_id}",
    response_model=RowsAffectedResponse,
    response_model_exclude_none=True,
)
async def delete_book(
    book_id: int = Path(ge=0, le=MAX_BOOK_ID),
    store: service.BookStore = Depends(get_store),
) -> dict:
    return await service.delete_book(store, book_id)
