"""
Pydantic schemas for book endpoints.

Every field carries its zero value as default ("" or 0): a request may send
any subset of fields, and a zero value means "not supplied".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# book_id is a PostgreSQL int4 (SERIAL); larger values can never match a row.
MAX_BOOK_ID = 2**31 - 1
# Keeps (page_id - 1) * page_size inside a bigint OFFSET.
MAX_PAGE_ID = 2**31 - 1


class Book(BaseModel):
    # Strict: "2" is not an id and 5 is not a title.
    model_config = ConfigDict(extra="ignore", strict=True)

    book_id: int = Field(default=0, ge=0, le=MAX_BOOK_ID)
    isbn: str = ""
    title: str = ""
    author_name: str = ""
    author_surname: str = ""
    published: str = ""
    publisher: str = ""


class PartialBook(Book):
    """
    Patch payload: book_id is the match key, empty strings are left untouched.
    """


class ListBooksQuery(BaseModel):
    order_by: str = "book_id"
    page_id: int = Field(default=1, ge=1, le=MAX_PAGE_ID)
    page_size: int = Field(default=25, ge=5, le=1000)

    @property
    def offset(self) -> int:
        return (self.page_id - 1) * self.page_size


class MessageResponse(BaseModel):
    message: str


class RowsAffectedResponse(BaseModel):
    message: str
    rows_affected: int
    warning: str | None = None
