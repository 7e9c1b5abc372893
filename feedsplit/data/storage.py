"""
Paginated read contract consumed by the database loader.

Concrete engines live outside this package; anything exposing the three
``get_*`` methods of `Database` can feed `load_data_from_database`.
`InMemoryDatabase` is a list-backed implementation for tests and small
experiments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence, TypeVar


@dataclass(frozen=True)
class User:
    user_id: str


@dataclass(frozen=True)
class Item:
    item_id: str


@dataclass(frozen=True)
class Feedback:
    user_id: str
    item_id: str


class Database(Protocol):
    """
    Cursor-based page fetches, one per entity kind.

    Each call receives the cursor returned by the previous call (an empty
    string for the first page) and returns ``(next_cursor, records)``. An
    empty ``next_cursor`` means the collection is exhausted. Failures are
    raised as exceptions.
    """

    def get_users(self, cursor: str, n: int) -> tuple[str, Sequence[User]]:
        ...

    def get_items(self, cursor: str, n: int) -> tuple[str, Sequence[Item]]:
        ...

    def get_feedback(self, cursor: str, n: int) -> tuple[str, Sequence[Feedback]]:
        ...


T = TypeVar("T")


def _paginate(records: Sequence[T], cursor: str, n: int) -> tuple[str, list[T]]:
    if n <= 0:
        raise ValueError("Batch size must be greater than zero.")
    try:
        offset = int(cursor) if cursor else 0
    except ValueError as exc:
        raise ValueError(f"Malformed cursor {cursor!r}") from exc
    page = list(records[offset : offset + n])
    end = offset + len(page)
    next_cursor = str(end) if end < len(records) else ""
    return next_cursor, page


@dataclass
class InMemoryDatabase:
    """List-backed `Database` whose cursors are decimal offsets."""

    users: list[User] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    feedback: list[Feedback] = field(default_factory=list)

    def insert_user(self, user_id: str) -> None:
        self.users.append(User(user_id))

    def insert_item(self, item_id: str) -> None:
        self.items.append(Item(item_id))

    def insert_feedback(self, user_id: str, item_id: str) -> None:
        self.feedback.append(Feedback(user_id, item_id))

    def get_users(self, cursor: str, n: int) -> tuple[str, list[User]]:
        return _paginate(self.users, cursor, n)

    def get_items(self, cursor: str, n: int) -> tuple[str, list[Item]]:
        return _paginate(self.items, cursor, n)

    def get_feedback(self, cursor: str, n: int) -> tuple[str, list[Feedback]]:
        return _paginate(self.feedback, cursor, n)
