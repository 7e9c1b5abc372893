"""Negative candidate sampling for evaluation sets."""

from __future__ import annotations

import numpy as np
from loguru import logger

from .dataset import FeedbackDataset


def sample_negative_candidates(
    dataset: FeedbackDataset,
    *,
    num_candidates: int,
    seed: int,
    known: FeedbackDataset | None = None,
) -> int:
    """
    Attach up to ``num_candidates`` unseen items to every user with feedback.

    Candidates are drawn without replacement from the items the user never
    interacted with and stored through `FeedbackDataset.set_negatives`. When
    ``known`` is given (usually the unsplit source of a test set) its feedback
    is what the candidates must avoid. Returns the number of users that
    received candidates.
    """
    if num_candidates <= 0:
        raise ValueError("num_candidates must be greater than zero.")

    rng = np.random.default_rng(seed)
    num_items = dataset.item_count()
    assigned = 0
    for user_idx, items in enumerate(dataset.user_feedback):
        if not items:
            continue
        if known is None:
            seen = items
        elif user_idx < len(known.user_feedback):
            seen = known.user_feedback[user_idx]
        else:
            # user added after the split; only its own feedback is known
            seen = items
        pool = np.setdiff1d(np.arange(num_items), np.asarray(seen, dtype=np.int64))
        if pool.size == 0:
            continue
        chosen = rng.choice(pool, size=min(num_candidates, pool.size), replace=False)
        dataset.set_negatives(
            dataset.user_index.to_name(user_idx),
            [dataset.item_index.to_name(int(item_idx)) for item_idx in chosen],
        )
        assigned += 1

    logger.debug(
        "Attached up to {} negative candidates to {} users", num_candidates, assigned
    )
    return assigned
