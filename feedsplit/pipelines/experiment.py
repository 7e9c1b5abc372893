"""
Experiment orchestration entry point.

This module couples dataset loading, seeded splitting and the hand-off to a
model's ``fit``. Models are looked up in an explicit `ModelRegistry` built by
the caller, keeping scripts thin while remaining testable.
"""

from __future__ import annotations

import importlib
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from loguru import logger

from ..data import (
    FeedbackDataset,
    load_data_from_csv,
    load_data_from_database,
    sample_negative_candidates,
    split_dataset,
)
from ..data.storage import Database
from ..evaluation import Score


@dataclass(frozen=True)
class FitConfig:
    """Runtime options handed to `Model.fit`."""

    verbose: int = 1
    jobs: int = 1
    top_k: int = 10
    candidates: int = 100

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "FitConfig":
        values = dict(values or {})
        return cls(
            verbose=int(values.get("verbose", cls.verbose)),
            jobs=int(values.get("jobs", cls.jobs)),
            top_k=int(values.get("top_k", cls.top_k)),
            candidates=int(values.get("candidates", cls.candidates)),
        )


class Model(Protocol):
    def fit(
        self, train_set: FeedbackDataset, test_set: FeedbackDataset, config: FitConfig
    ) -> Score:
        ...


ModelFactory = Callable[[Mapping[str, Any]], Model]


class ModelRegistry:
    """Name → factory table, constructed once at startup and passed around."""

    def __init__(self) -> None:
        self._factories: dict[str, ModelFactory] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def register(self, name: str, factory: ModelFactory) -> None:
        if name in self._factories:
            raise ValueError(f"Model '{name}' is already registered.")
        self._factories[name] = factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, name: str, params: Mapping[str, Any] | None = None) -> Model:
        try:
            factory = self._factories[name]
        except KeyError as exc:
            raise KeyError(
                f"Unknown model '{name}'. Registered models: {', '.join(self.names()) or 'none'}"
            ) from exc
        return factory(dict(params or {}))

    @classmethod
    def from_mapping(cls, entries: Mapping[str, str] | None) -> "ModelRegistry":
        """Build a registry from ``{name: "package.module:attribute"}`` entries."""
        registry = cls()
        for name, target in (entries or {}).items():
            module_name, sep, attribute = str(target).partition(":")
            if not sep:
                raise ValueError(
                    f"Model '{name}' must be declared as 'module:attribute', got {target!r}"
                )
            module = importlib.import_module(module_name)
            registry.register(name, getattr(module, attribute))
        return registry


@dataclass
class ExperimentResult:
    model_name: str
    score: Score
    fit_config: FitConfig
    train_count: int
    test_count: int
    runtime_seconds: float


def load_dataset_from_config(
    data_cfg: Mapping[str, Any],
    *,
    database: Database | None = None,
) -> FeedbackDataset:
    """Load feedback from the source named by ``data_cfg["source"]``."""
    source = str(data_cfg.get("source", "csv"))
    if source == "csv":
        if "path" not in data_cfg:
            raise ValueError("data.path is required when data.source is 'csv'.")
        path = Path(data_cfg["path"])
        logger.info("Loading csv file {}", path)
        return load_data_from_csv(
            path,
            sep=str(data_cfg.get("sep", "\t")),
            has_header=bool(data_cfg.get("header", False)),
        )
    if source == "database":
        if database is None:
            raise ValueError("data.source is 'database' but no database was provided.")
        return load_data_from_database(
            database, batch_size=int(data_cfg.get("batch_size", 1000))
        )
    raise ValueError(f"Unsupported data source: {source}")


def split_from_config(
    dataset: FeedbackDataset, split_cfg: Mapping[str, Any]
) -> tuple[FeedbackDataset, FeedbackDataset]:
    """Split ``dataset``; a missing or null ``num_test_users`` holds out every user."""
    value = split_cfg.get("num_test_users")
    num_test_users = dataset.user_count() if value is None else int(value)
    seed = int(split_cfg.get("seed", 0))
    return split_dataset(dataset, num_test_users, seed)


def run_experiment(
    config: Mapping[str, Any],
    model_name: str,
    registry: ModelRegistry,
    *,
    database: Database | None = None,
) -> ExperimentResult:
    model = registry.create(model_name, (config.get("params") or {}).get(model_name))
    dataset = load_dataset_from_config(config.get("data", {}), database=database)
    split_cfg = config.get("split", {})
    train_set, test_set = split_from_config(dataset, split_cfg)

    fit_config = FitConfig.from_mapping(config.get("fit"))
    if fit_config.candidates > 0 and dataset.item_count() > 1:
        sample_negative_candidates(
            test_set,
            num_candidates=fit_config.candidates,
            seed=int(split_cfg.get("seed", 0)),
            known=dataset,
        )

    logger.info("Fitting {} with {}", model_name, fit_config)
    start = time.time()
    score = model.fit(train_set, test_set, fit_config)
    elapsed = time.time() - start
    logger.info("Complete cross validation in {:.2f}s | {}", elapsed, score)

    return ExperimentResult(
        model_name=model_name,
        score=score,
        fit_config=fit_config,
        train_count=train_set.count(),
        test_count=test_set.count(),
        runtime_seconds=elapsed,
    )
