"""Experiment orchestration: load, split, then hand off to a model."""

from .experiment import (  # noqa: F401
    ExperimentResult,
    FitConfig,
    Model,
    ModelRegistry,
    load_dataset_from_config,
    run_experiment,
    split_from_config,
)
