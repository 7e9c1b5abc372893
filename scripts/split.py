"""Load feedback from the configured source and report its train/test split."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from loguru import logger

from feedsplit.pipelines import load_dataset_from_config, split_from_config
from feedsplit.utils import apply_overrides, load_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
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
        help="Override a config entry, e.g. --set split.seed=7 (repeatable).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = apply_overrides(load_config(args.config), args.overrides)

    dataset = load_dataset_from_config(config.get("data", {}))
    if dataset.count() == 0:
        logger.warning("No feedback loaded; nothing to split.")
        return

    train_set, test_set = split_from_config(dataset, config.get("split", {}))
    logger.info(
        "Counts | users={} items={} feedback={} | train={} test={}",
        dataset.user_count(),
        dataset.item_count(),
        dataset.count(),
        train_set.count(),
        test_set.count(),
    )


if __name__ == "__main__":
    main()
