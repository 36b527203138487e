"""
Filter and patch-set construction for the `book` table.

FIELDS is the single ordered description of a Book's columns. Search, exact
match, validation and patch code all walk it; a field takes part when its
value differs from the zero value of its kind ("" for text, 0 for ints).

Values are never formatted into SQL. Builders return SQL fragments with $n
placeholders plus the argument list to bind.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from core import messages
from core.errors import ValidationFailed

from .schemas import Book, PartialBook


@dataclass(frozen=True)
class BookField:
    name: str
    column: str
    kind: type

    def value(self, book: Book) -> Any:
        return getattr(book, self.name)

    def is_zero(self, book: Book) -> bool:
        return self.value(book) == self.kind()


FIELDS: tuple[BookField, ...] = (
    BookField("book_id", "book_id", int),
    BookField("isbn", "isbn", str),
    BookField("title", "title", str),
    BookField("author_name", "author_name", str),
    BookField("author_surname", "author_surname", str),
    BookField("published", "published", str),
    BookField("publisher", "publisher", str),
)

ID_FIELD = FIELDS[0]
TEXT_FIELDS: tuple[BookField, ...] = tuple(f for f in FIELDS if f.kind is str)
COLUMNS: tuple[str, ...] = tuple(f.column for f in FIELDS)


def empty_field_error(name: str) -> ValidationFailed:
    return ValidationFailed(f"{name} {messages.FIELD_EMPTY}")


class MatchMode(enum.Enum):
    # column ILIKE '%value%' joined with OR, ignoring case
    CONTAINS = "contains"
    # column = value joined with AND
    EXACT = "exact"


@dataclass(frozen=True)
class Predicate:
    sql: str
    args: tuple[Any, ...]


def populated_fields(book: Book) -> list[BookField]:
    return [f for f in FIELDS if not f.is_zero(book)]


def build_predicate(book: Book, mode: MatchMode) -> Predicate | None:
    """
    Build a WHERE expression from the populated fields of `book`.

    Returns None when no field is populated; callers answer with the
    "no data to query" message and skip the database.
    """
    conditions: list[str] = []
    args: list[Any] = []
    for n, f in enumerate(populated_fields(book), start=1):
        if mode is MatchMode.CONTAINS:
            conditions.append(f"{f.column}::text ILIKE ${n}")
            args.append(f"%{f.value(book)}%")
        else:
            conditions.append(f"{f.column} = ${n}")
            args.append(f.value(book))

    if not conditions:
        return None
    joiner = " OR " if mode is MatchMode.CONTAINS else " AND "
    return Predicate(sql=joiner.join(conditions), args=tuple(args))


@dataclass(frozen=True)
class PatchSet:
    book_id: int
    assignments: tuple[tuple[str, Any], ...] = ()
    omitted: tuple[str, ...] = ()

    @property
    def warning(self) -> str | None:
        if not self.omitted:
            return None
        return f"{messages.FIELDS_NOT_UPDATED} {', '.join(self.omitted)}"

    def set_clause(self) -> tuple[str, tuple[Any, ...]]:
        parts = [
            f"{column} = ${n}"
            for n, (column, _) in enumerate(self.assignments, start=1)
        ]
        return ", ".join(parts), tuple(value for _, value in self.assignments)


def build_patch_set(patch: PartialBook) -> PatchSet:
    """
    Split a partial book into assignments and omitted (empty) text fields.

    A zero book_id cannot identify a row and is rejected.
    """
    if ID_FIELD.is_zero(patch):
        raise empty_field_error(ID_FIELD.name)

    assignments: list[tuple[str, Any]] = []
    omitted: list[str] = []
    for f in TEXT_FIELDS:
        if f.is_zero(patch):
            omitted.append(f.name)
        else:
            assignments.append((f.column, f.value(patch)))

    return PatchSet(
        book_id=int(patch.book_id),
        assignments=tuple(assignments),
        omitted=tuple(omitted),
    )


def require_populated(book: Book, *, include_id: bool) -> None:
    """
    Reject the first empty required field, in column order.
    """
    for f in FIELDS:
        if f is ID_FIELD and not include_id:
            continue
        if f.is_zero(book):
            raise empty_field_error(f.name)
