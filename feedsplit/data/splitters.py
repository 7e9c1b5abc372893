"""Seeded leave-one-out splitting of a feedback dataset."""

from __future__ import annotations

import numpy as np
from loguru import logger

from .dataset import FeedbackDataset, _empty_table


def _sample_test_users(
    rng: np.random.Generator, num_users: int, num_test_users: int
) -> list[int]:
    if num_test_users == num_users:
        return list(range(num_users))
    # Draw order matters: each sampled user consumes the next position draw.
    sampled = rng.choice(num_users, size=num_test_users, replace=False)
    return [int(user_idx) for user_idx in sampled]


def split_dataset(
    dataset: FeedbackDataset,
    num_test_users: int,
    seed: int,
) -> tuple[FeedbackDataset, FeedbackDataset]:
    """
    Hold out one interaction for each of ``num_test_users`` users.

    When ``num_test_users`` equals the number of users every user is held out
    in index order; otherwise the users are drawn uniformly without
    replacement. For each held-out user a single position of its adjacency list
    is drawn and that interaction goes to the test set. Every other interaction
    goes to the training set.

    Both returned datasets share ``dataset.user_index`` and
    ``dataset.item_index`` with the source: IDs added to any of the three
    afterwards are visible in all of them.

    Parameters
    ----------
    dataset:
        Populated source dataset. It is not modified.
    num_test_users:
        Number of users contributing a test interaction, between zero and
        ``dataset.user_count()``.
    seed:
        Seed for ``numpy.random.default_rng``. Identical inputs and seed
        reproduce identical splits.
    """
    num_users = dataset.user_count()
    num_items = dataset.item_count()
    if not 0 <= num_test_users <= num_users:
        raise ValueError(
            f"num_test_users must be between 0 and {num_users}, got {num_test_users}."
        )

    train_set = FeedbackDataset(dataset.user_index, dataset.item_index)
    test_set = FeedbackDataset(dataset.user_index, dataset.item_index)
    for subset in (train_set, test_set):
        subset.user_feedback = _empty_table(num_users)
        subset.item_feedback = _empty_table(num_items)

    rng = np.random.default_rng(seed)
    held_out: dict[int, int] = {}
    empty_test_users = 0
    for user_idx in _sample_test_users(rng, num_users, num_test_users):
        user_items = _user_items(dataset, user_idx)
        if not user_items:
            empty_test_users += 1
            continue
        held_out[user_idx] = int(rng.integers(len(user_items)))

    for user_idx in range(num_users):
        test_position = held_out.get(user_idx, -1)
        for position, item_idx in enumerate(_user_items(dataset, user_idx)):
            target = test_set if position == test_position else train_set
            target._append(user_idx, item_idx)

    if empty_test_users:
        logger.debug(
            "{} sampled test users had no feedback and were left out of the test set.",
            empty_test_users,
        )
    logger.info(
        "Split feedback | train={} test={} test_users={} seed={}",
        train_set.count(),
        test_set.count(),
        len(held_out),
        seed,
    )
    return train_set, test_set


def _user_items(dataset: FeedbackDataset, user_idx: int) -> list[int]:
    if user_idx < len(dataset.user_feedback):
        return dataset.user_feedback[user_idx]
    return []
