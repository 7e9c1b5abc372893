"""Command-line interface for cross-validating a registered model."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from loguru import logger

from feedsplit.pipelines import ModelRegistry, run_experiment
from feedsplit.utils import apply_overrides, load_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("model", help="Name of a model declared under `models`.")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/default.yaml"),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config entry, e.g. --set fit.top_k=20 (repeatable).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = apply_overrides(load_config(args.config), args.overrides)
    registry = ModelRegistry.from_mapping(config.get("models"))

    logger.info("Starting cross validation of {} with config at {}", args.model, args.config)
    result = run_experiment(config, args.model, registry)
    for name, value in result.score.as_row(result.fit_config.top_k).items():
        logger.info("{:<14} {:.6f}", name, value)


if __name__ == "__main__":
    main()
