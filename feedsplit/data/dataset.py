"""
In-memory bipartite store of user/item feedback.

A `FeedbackDataset` keeps a flat event log alongside user→items and
item→users adjacency tables. Both views are appended to together, so position
``j`` of ``user_feedback[u]`` always corresponds to the ``j``-th logged event of
user ``u``.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from .indexers import NOT_FOUND, DirectIndex, Index, MapIndex


def _grow_to(table: list[list[int]], index: int) -> None:
    """Append empty slots until ``table[index]`` exists."""
    while index >= len(table):
        table.append([])


def _empty_table(size: int) -> list[list[int]]:
    return [[] for _ in range(size)]


class FeedbackDataset:
    """
    Feedback events indexed by dense user and item positions.

    Parameters
    ----------
    user_index, item_index:
        Identifier indexes owned by this dataset. Datasets produced by
        `split_dataset` share them with their parent.
    """

    def __init__(self, user_index: Index, item_index: Index) -> None:
        self.user_index = user_index
        self.item_index = item_index
        self.feedback_users: list[int] = []
        self.feedback_items: list[int] = []
        self.user_feedback: list[list[int]] = []
        self.item_feedback: list[list[int]] = []
        self.negatives: list[list[int]] = []

    @classmethod
    def with_map_index(cls) -> "FeedbackDataset":
        return cls(MapIndex(), MapIndex())

    @classmethod
    def with_direct_index(cls) -> "FeedbackDataset":
        return cls(DirectIndex(), DirectIndex())

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(users={self.user_count()}, "
            f"items={self.item_count()}, feedback={self.count()})"
        )

    def add_user(self, user_id: str) -> None:
        self.user_index.add(user_id)
        _grow_to(self.user_feedback, self.user_index.to_number(user_id))

    def add_item(self, item_id: str) -> None:
        self.item_index.add(item_id)
        _grow_to(self.item_feedback, self.item_index.to_number(item_id))

    def add_feedback(self, user_id: str, item_id: str, insert_unseen: bool) -> bool:
        """
        Record one interaction between ``user_id`` and ``item_id``.

        When ``insert_unseen`` is false both IDs must already be indexed; an
        event referencing an unknown ID is dropped without error. Returns
        whether the event was recorded.
        """
        if insert_unseen:
            self.user_index.add(user_id)
            self.item_index.add(item_id)
        user_idx = self.user_index.to_number(user_id)
        item_idx = self.item_index.to_number(item_id)
        if user_idx == NOT_FOUND or item_idx == NOT_FOUND:
            return False
        self._append(user_idx, item_idx)
        return True

    def _append(self, user_idx: int, item_idx: int) -> None:
        self.feedback_users.append(user_idx)
        self.feedback_items.append(item_idx)
        _grow_to(self.user_feedback, user_idx)
        self.user_feedback[user_idx].append(item_idx)
        _grow_to(self.item_feedback, item_idx)
        self.item_feedback[item_idx].append(user_idx)

    def set_negatives(self, user_id: str, item_ids: Iterable[str]) -> None:
        """Replace the negative candidates of a known user; unknown items are skipped."""
        user_idx = self.user_index.to_number(user_id)
        if user_idx == NOT_FOUND:
            return
        _grow_to(self.negatives, user_idx)
        resolved = (self.item_index.to_number(item_id) for item_id in item_ids)
        self.negatives[user_idx] = [idx for idx in resolved if idx != NOT_FOUND]

    def count(self) -> int:
        return len(self.feedback_users)

    def user_count(self) -> int:
        return len(self.user_index)

    def item_count(self) -> int:
        return len(self.item_index)

    def get_id(self, i: int) -> tuple[str, str]:
        user_idx, item_idx = self.get_index(i)
        return self.user_index.to_name(user_idx), self.item_index.to_name(item_idx)

    def get_index(self, i: int) -> tuple[int, int]:
        return self.feedback_users[i], self.feedback_items[i]

    def get_negatives(self, user_idx: int) -> list[int]:
        if user_idx < len(self.negatives):
            return self.negatives[user_idx]
        return []

    def user_positive_items(self) -> dict[int, set[int]]:
        """Map each user with feedback to the set of items they interacted with."""
        return {
            user_idx: set(items)
            for user_idx, items in enumerate(self.user_feedback)
            if items
        }

    def to_frame(self) -> pd.DataFrame:
        """Return the event log as a DataFrame, one row per event in log order."""
        return pd.DataFrame(
            {
                "user_id": [self.user_index.to_name(u) for u in self.feedback_users],
                "item_id": [self.item_index.to_name(i) for i in self.feedback_items],
                "user_idx": self.feedback_users,
                "item_idx": self.feedback_items,
            }
        ).astype({"user_idx": "int64", "item_idx": "int64"})
