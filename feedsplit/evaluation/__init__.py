"""Evaluation helpers for ranking quality on held-out feedback."""

from .metrics import (  # noqa: F401
    Score,
    evaluate_recommendations,
    ndcg_at_k,
    precision_at_k,
    recall_at_k,
)
