"""Feedback storage, identifier indexing, loading and splitting."""

from .dataset import FeedbackDataset  # noqa: F401
from .indexers import NOT_FOUND, DirectIndex, Index, MapIndex, build_index_mapping  # noqa: F401
from .loaders import load_data_from_csv, load_data_from_database, load_data_from_frame  # noqa: F401
from .samplers import sample_negative_candidates  # noqa: F401
from .splitters import split_dataset  # noqa: F401
from .storage import Database, Feedback, InMemoryDatabase, Item, User  # noqa: F401
