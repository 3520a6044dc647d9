"""In-memory datasets for training and evaluation."""

from . import synthetic  # noqa: F401  (registers the built-in datasets)
from .registry import Dataset, available_datasets, get_dataset, register_dataset
from .utils import as_examples, one_hot

__all__ = [
    "Dataset",
    "as_examples",
    "available_datasets",
    "get_dataset",
    "one_hot",
    "register_dataset",
]
