from pathlib import Path

import pytest

from feedsplit.data.storage import InMemoryDatabase
from feedsplit.evaluation import Score, evaluate_recommendations
from feedsplit.pipelines.experiment import (
    FitConfig,
    ModelRegistry,
    load_dataset_from_config,
    run_experiment,
    split_from_config,
)


class RecordingModel:
    """Recommends every negative candidate, then scores the test set."""

    def __init__(self, params):
        self.params = params
        self.calls = []

    def fit(self, train_set, test_set, config):
        self.calls.append((train_set, test_set, config))
        recommendations = {
            user_idx: test_set.get_negatives(user_idx)[: config.top_k]
            for user_idx in range(test_set.user_count())
        }
        return evaluate_recommendations(recommendations, test_set, config.top_k)


def _write_csv(tmp_path: Path) -> Path:
    path = tmp_path / "ratings.csv"
    path.write_text("user,item\nu1,a\nu1,b\nu2,a\nu2,c\nu3,b\n", encoding="utf-8")
    return path


def test_fit_config_from_mapping_defaults():
    config = FitConfig.from_mapping({"top_k": "5"})

    assert config == FitConfig(verbose=1, jobs=1, top_k=5, candidates=100)
    assert FitConfig.from_mapping(None) == FitConfig()


def test_registry_registers_and_creates_models():
    registry = ModelRegistry()
    registry.register("recording", RecordingModel)

    model = registry.create("recording", {"lr": 0.1})

    assert "recording" in registry
    assert registry.names() == ["recording"]
    assert model.params == {"lr": 0.1}
    with pytest.raises(ValueError):
        registry.register("recording", RecordingModel)
    with pytest.raises(KeyError):
        registry.create("missing")


def test_registry_from_mapping_imports_factories():
    registry = ModelRegistry.from_mapping({"fit_config": "feedsplit.pipelines.experiment:FitConfig"})

    assert "fit_config" in registry
    with pytest.raises(ValueError):
        ModelRegistry.from_mapping({"broken": "feedsplit.pipelines.experiment"})


def test_load_dataset_from_config_sources(tmp_path: Path):
    dataset = load_dataset_from_config(
        {"source": "csv", "path": str(_write_csv(tmp_path)), "sep": ",", "header": True}
    )
    assert dataset.count() == 5

    database = InMemoryDatabase()
    database.insert_user("u1")
    database.insert_item("a")
    database.insert_feedback("u1", "a")
    database.insert_feedback("u1", "z")
    loaded = load_dataset_from_config({"source": "database"}, database=database)
    assert loaded.count() == 1

    with pytest.raises(ValueError):
        load_dataset_from_config({"source": "database"})
    with pytest.raises(ValueError):
        load_dataset_from_config({"source": "parquet"})
    with pytest.raises(ValueError):
        load_dataset_from_config({"source": "csv"})


def test_split_from_config_defaults_to_every_user_and_honours_zero(tmp_path: Path):
    dataset = load_dataset_from_config(
        {"path": str(_write_csv(tmp_path)), "sep": ",", "header": True}
    )

    train, test = split_from_config(dataset, {"num_test_users": None, "seed": 1})
    assert test.count() == 3
    assert train.count() == 2

    train, test = split_from_config(dataset, {"seed": 1})
    assert test.count() == 3

    train, test = split_from_config(dataset, {"num_test_users": 0})
    assert test.count() == 0
    assert train.count() == 5

    train, test = split_from_config(dataset, {"num_test_users": 1})
    assert test.count() == 1
    assert train.count() == 4


def test_run_experiment_hands_split_to_model(tmp_path: Path):
    models = {}

    def factory(params):
        models["recording"] = RecordingModel(params)
        return models["recording"]

    registry = ModelRegistry()
    registry.register("recording", factory)
    config = {
        "data": {"source": "csv", "path": str(_write_csv(tmp_path)), "sep": ",", "header": True},
        "split": {"seed": 2},
        "fit": {"top_k": 3, "candidates": 5},
        "params": {"recording": {"reg": 0.01}},
    }

    result = run_experiment(config, "recording", registry)

    model = models["recording"]
    assert model.params == {"reg": 0.01}
    train_set, test_set, fit_config = model.calls[0]
    assert fit_config.top_k == 3
    assert train_set.user_index is test_set.user_index
    assert result.train_count + result.test_count == 5
    assert result.test_count == 3
    assert isinstance(result.score, Score)
    # candidates never include items the user has interacted with
    assert result.score.recall == 0.0
    for user_idx in range(test_set.user_count()):
        seen = set(train_set.user_feedback[user_idx]) | set(test_set.user_feedback[user_idx])
        assert not seen & set(test_set.get_negatives(user_idx))
