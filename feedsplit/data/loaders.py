"""
Loaders that populate a `FeedbackDataset` from files, frames or a database.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence, TypeVar

import pandas as pd
from loguru import logger

from .dataset import FeedbackDataset
from .storage import Database

DEFAULT_BATCH_SIZE = 1000

T = TypeVar("T")


def load_data_from_csv(
    path: Path, *, sep: str = "\t", has_header: bool = False
) -> FeedbackDataset:
    r"""
    Load feedback from a delimited text file.

    Each line is ``<user id><sep><item id>[<sep><rating>][<sep><extras>...]``.
    Only the first two fields are used. Bytes that are not valid UTF-8 are
    kept through ``surrogateescape`` so such IDs still load. For example, the
    ``u.data`` file of MovieLens 100K reads::

        196\t242\t3\t881250949
        186\t302\t3\t891717742

    Parameters
    ----------
    path:
        CSV file to read.
    sep:
        Literal field delimiter.
    has_header:
        Skip exactly one leading line when true.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Expected CSV at {path} but file was not found.")

    dataset = FeedbackDataset.with_map_index()
    skipped = 0
    with path.open("r", encoding="utf-8", errors="surrogateescape") as handle:
        for line_no, line in enumerate(handle):
            if has_header and line_no == 0:
                continue
            fields = line.rstrip("\r\n").split(sep)
            if len(fields) < 2:
                skipped += 1
                continue
            dataset.add_feedback(fields[0], fields[1], insert_unseen=True)

    if skipped:
        logger.debug("Skipped {} lines with fewer than two fields in {}", skipped, path)
    logger.info(
        "Loaded {} | users={} items={} feedback={}",
        path,
        dataset.user_count(),
        dataset.item_count(),
        dataset.count(),
    )
    return dataset


def load_data_from_frame(
    frame: pd.DataFrame,
    *,
    user_col: str = "user_id",
    item_col: str = "item_id",
) -> FeedbackDataset:
    """Load feedback from the rows of a DataFrame in order; rows missing an ID are skipped."""
    if user_col not in frame.columns or item_col not in frame.columns:
        raise ValueError(f"Frame must contain '{user_col}' and '{item_col}' columns.")

    dataset = FeedbackDataset.with_map_index()
    pairs = frame[[user_col, item_col]].dropna().convert_dtypes()
    for user_id, item_id in zip(pairs[user_col].astype(str), pairs[item_col].astype(str)):
        dataset.add_feedback(user_id, item_id, insert_unseen=True)
    return dataset


def _drain(
    kind: str,
    fetch: Callable[[str, int], tuple[str, Sequence[T]]],
    batch_size: int,
    consume: Callable[[T], None],
) -> int:
    cursor = ""
    total = 0
    while True:
        try:
            cursor, page = fetch(cursor, batch_size)
        except Exception:
            logger.error("Failed to fetch {} page after {} records", kind, total)
            raise
        for record in page:
            consume(record)
        total += len(page)
        if not cursor:
            return total


def load_data_from_database(
    database: Database, *, batch_size: int = DEFAULT_BATCH_SIZE
) -> FeedbackDataset:
    """
    Pull users, then items, then feedback from ``database``.

    Feedback referencing a user or item outside the pulled collections is
    dropped. A failing page fetch aborts the whole load and its exception
    propagates to the caller.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than zero.")

    dataset = FeedbackDataset.with_map_index()
    _drain("users", database.get_users, batch_size, lambda user: dataset.add_user(user.user_id))
    _drain("items", database.get_items, batch_size, lambda item: dataset.add_item(item.item_id))

    dropped = 0

    def _add(feedback) -> None:
        nonlocal dropped
        if not dataset.add_feedback(feedback.user_id, feedback.item_id, insert_unseen=False):
            dropped += 1

    pulled = _drain("feedback", database.get_feedback, batch_size, _add)
    if dropped:
        logger.info(
            "Dropped {} of {} feedback records referencing unknown users or items.",
            dropped,
            pulled,
        )
    logger.info(
        "Loaded database | users={} items={} feedback={}",
        dataset.user_count(),
        dataset.item_count(),
        dataset.count(),
    )
    return dataset
