import pytest

from feedsplit.data.dataset import FeedbackDataset
from feedsplit.data.loaders import load_data_from_csv
from feedsplit.data.splitters import split_dataset


def _build_dataset(num_users: int = 6, items_per_user: int = 4) -> FeedbackDataset:
    dataset = FeedbackDataset.with_map_index()
    for user in range(num_users):
        for offset in range(items_per_user):
            dataset.add_feedback(f"u{user}", f"i{(user + offset) % 7}", insert_unseen=True)
    return dataset


def _events(dataset: FeedbackDataset) -> list[tuple[int, int]]:
    return [dataset.get_index(i) for i in range(dataset.count())]


def test_leave_one_out_for_every_user():
    dataset = _build_dataset()
    train, test = split_dataset(dataset, dataset.user_count(), seed=1)

    assert train.count() + test.count() == dataset.count()
    assert test.count() == dataset.user_count()
    for user_idx in range(dataset.user_count()):
        assert len(test.user_feedback[user_idx]) == 1
        assert len(train.user_feedback[user_idx]) == len(dataset.user_feedback[user_idx]) - 1
    assert sorted(_events(train) + _events(test)) == sorted(_events(dataset))


def test_subset_of_test_users():
    dataset = _build_dataset()
    train, test = split_dataset(dataset, 2, seed=3)

    held_out = [len(items) for items in test.user_feedback]
    assert sorted(held_out) == [0, 0, 0, 0, 1, 1]
    assert train.count() + test.count() == dataset.count()
    assert sorted(_events(train) + _events(test)) == sorted(_events(dataset))


def test_split_shares_identifier_indexes():
    dataset = _build_dataset()
    train, test = split_dataset(dataset, 3, seed=0)

    assert train.user_index is dataset.user_index
    assert test.item_index is dataset.item_index
    assert len(train.item_feedback) == dataset.item_count()

    dataset.add_user("late")
    assert train.user_count() == test.user_count() == dataset.user_count()


def test_split_is_deterministic_for_seed():
    dataset = _build_dataset(num_users=10, items_per_user=5)

    first = split_dataset(dataset, 4, seed=42)
    second = split_dataset(dataset, 4, seed=42)

    for a, b in zip(first, second):
        assert a.feedback_users == b.feedback_users
        assert a.feedback_items == b.feedback_items
        assert a.user_feedback == b.user_feedback
        assert a.item_feedback == b.item_feedback


def test_single_interaction_user_keeps_no_training_feedback():
    dataset = FeedbackDataset.with_map_index()
    dataset.add_feedback("solo", "i1", insert_unseen=True)
    dataset.add_feedback("pair", "i1", insert_unseen=True)
    dataset.add_feedback("pair", "i2", insert_unseen=True)

    train, test = split_dataset(dataset, 2, seed=5)

    assert train.user_feedback[0] == []
    assert test.user_feedback[0] == [0]
    assert train.count() == 1
    assert test.count() == 2


def test_sampled_user_without_feedback_is_skipped():
    dataset = FeedbackDataset.with_map_index()
    dataset.add_user("idle")
    dataset.add_feedback("busy", "i1", insert_unseen=True)

    train, test = split_dataset(dataset, 2, seed=0)

    assert test.count() == 1
    assert train.count() == 0
    assert test.user_feedback == [[], [0]]


def test_split_rejects_invalid_test_user_count():
    dataset = _build_dataset(num_users=2)

    with pytest.raises(ValueError):
        split_dataset(dataset, 3, seed=0)
    with pytest.raises(ValueError):
        split_dataset(dataset, -1, seed=0)


def test_zero_test_users_keeps_everything_in_train():
    dataset = _build_dataset(num_users=3)
    train, test = split_dataset(dataset, 0, seed=0)

    assert test.count() == 0
    assert train.count() == dataset.count()


def test_csv_leave_one_out_scenario(tmp_path):
    path = tmp_path / "feedback.csv"
    path.write_text("1,10\n1,11\n2,10\n", encoding="utf-8")
    dataset = load_data_from_csv(path, sep=",")

    train, test = split_dataset(dataset, 2, seed=0)

    assert dataset.count() == 3
    assert train.count() + test.count() == 3
    assert [len(items) for items in test.user_feedback] == [1, 1]
    assert [len(items) for items in train.user_feedback] == [1, 0]
