"""
Indexing utilities that map raw identifiers to contiguous integer ranges.

Two interchangeable indexes are provided. `MapIndex` hashes arbitrary strings
and hands out positions in order of first appearance, while `DirectIndex`
treats identifiers that are already small non-negative integers as their own
position and skips the hashing entirely.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

NOT_FOUND = -1


class Index(ABC):
    """Bidirectional mapping between raw IDs and contiguous indices."""

    @abstractmethod
    def add(self, name: str) -> None:
        """Register ``name``; calling it again for a known name is a no-op."""

    @abstractmethod
    def to_number(self, name: str) -> int:
        """Return the index of ``name`` or ``NOT_FOUND``."""

    @abstractmethod
    def to_name(self, index: int) -> str:
        """Return the raw ID stored at ``index``."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.to_number(name) != NOT_FOUND


class MapIndex(Index):
    """Hash-backed index preserving the order of first appearance."""

    def __init__(self) -> None:
        self.id_to_index: dict[str, int] = {}
        self.index_to_id: list[str] = []

    def __len__(self) -> int:
        return len(self.index_to_id)

    def __repr__(self) -> str:
        return f"MapIndex(size={len(self)})"

    def add(self, name: str) -> None:
        if name not in self.id_to_index:
            self.id_to_index[name] = len(self.index_to_id)
            self.index_to_id.append(name)

    def to_number(self, name: str) -> int:
        return self.id_to_index.get(name, NOT_FOUND)

    def to_name(self, index: int) -> str:
        if index < 0:
            raise IndexError(f"Index {index} out of bounds for mapping")
        try:
            return self.index_to_id[index]
        except IndexError as exc:
            raise IndexError(f"Index {index} out of bounds for mapping") from exc


class DirectIndex(Index):
    """
    Index for datasets whose raw IDs are already dense integers.

    The numeric value of an ID is its position. ``len`` reports one more than
    the largest position added so far, which keeps every position below it
    addressable.
    """

    def __init__(self) -> None:
        self.limit = 0

    def __len__(self) -> int:
        return self.limit

    def __repr__(self) -> str:
        return f"DirectIndex(limit={self.limit})"

    @staticmethod
    def _parse(name: str) -> int | None:
        # int() also accepts signs, whitespace, underscores and non-ASCII digits.
        if not isinstance(name, str) or not (name.isascii() and name.isdigit()):
            return None
        return int(name)

    def add(self, name: str) -> None:
        value = self._parse(name)
        if value is None:
            raise ValueError(
                f"DirectIndex expects non-negative integer IDs, got {name!r}"
            )
        if value >= self.limit:
            self.limit = value + 1

    def to_number(self, name: str) -> int:
        value = self._parse(name)
        if value is None or value >= self.limit:
            return NOT_FOUND
        return value

    def to_name(self, index: int) -> str:
        if not 0 <= index < self.limit:
            raise IndexError(f"Index {index} out of bounds for mapping")
        return str(index)


def build_index_mapping(values: Iterable[str]) -> MapIndex:
    """
    Create a MapIndex that preserves the order of first appearance.

    Parameters
    ----------
    values:
        Iterable of raw identifiers (user IDs, item IDs, etc.).
    """
    mapping = MapIndex()
    for value in values:
        mapping.add(value)
    return mapping
