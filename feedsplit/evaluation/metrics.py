"""Top-k ranking scores computed against a held-out feedback set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from ..data.dataset import FeedbackDataset


@dataclass(frozen=True)
class Score:
    """Mean top-k quality over the users that hold test feedback."""

    ndcg: float
    precision: float
    recall: float

    def as_row(self, top_k: int) -> dict[str, float]:
        return {
            f"NDCG@{top_k}": self.ndcg,
            f"Precision@{top_k}": self.precision,
            f"Recall@{top_k}": self.recall,
        }


def _dcg(relevance: Sequence[int]) -> float:
    return float(sum(rel / np.log2(idx + 2) for idx, rel in enumerate(relevance)))


def ndcg_at_k(predicted: Sequence[int], ground_truth: set[int], k: int) -> float:
    ideal = _dcg([1] * min(k, len(ground_truth)))
    if ideal == 0:
        return 0.0
    return _dcg([1 if item in ground_truth else 0 for item in predicted[:k]]) / ideal


def precision_at_k(predicted: Sequence[int], ground_truth: set[int], k: int) -> float:
    return len(set(predicted[:k]) & ground_truth) / max(k, 1)


def recall_at_k(predicted: Sequence[int], ground_truth: set[int], k: int) -> float:
    return len(set(predicted[:k]) & ground_truth) / max(len(ground_truth), 1)


def evaluate_recommendations(
    recommendations: Mapping[int, Sequence[int]],
    test_set: FeedbackDataset,
    top_k: int,
) -> Score:
    """
    Score ranked item indices per user against ``test_set``.

    Users without test feedback are ignored; a user with test feedback but no
    recommendation counts as a complete miss.
    """
    if top_k <= 0:
        raise ValueError("top_k must be greater than zero.")

    ndcgs: list[float] = []
    precisions: list[float] = []
    recalls: list[float] = []
    for user_idx, ground_truth in test_set.user_positive_items().items():
        predicted = list(recommendations.get(user_idx, []))
        ndcgs.append(ndcg_at_k(predicted, ground_truth, top_k))
        precisions.append(precision_at_k(predicted, ground_truth, top_k))
        recalls.append(recall_at_k(predicted, ground_truth, top_k))

    def _aggregate(values: list[float]) -> float:
        return float(np.mean(values)) if values else 0.0

    return Score(
        ndcg=_aggregate(ndcgs),
        precision=_aggregate(precisions),
        recall=_aggregate(recalls),
    )
