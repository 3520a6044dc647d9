"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

import numpy as np

from ..core.types import Array

TASK_TYPES = {"regression", "classification"}


@dataclass(frozen=True)
class Dataset:
    """An in-memory training set, one example per row.

    Attributes
    ----------
    inputs:
        ``(set_length, input_units)`` float32 array.
    desired:
        ``(set_length, output_units)`` float32 array.  Classification sets
        carry one-hot rows.
    task_type:
        ``"regression"`` or ``"classification"``.
    provenance:
        Generator parameters, recorded in run manifests.
    """

    name: str
    inputs: Array
    desired: Array
    task_type: str = "regression"
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def set_length(self) -> int:
        return int(self.inputs.shape[0])

    @property
    def input_units(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_units(self) -> int:
        return int(self.desired.shape[1])

    def flat(self) -> tuple[Array, Array]:
        """Return the contiguous flat arrays of the dataset convention."""

        return np.ascontiguousarray(self.inputs).reshape(-1), np.ascontiguousarray(
            self.desired
        ).reshape(-1)


DatasetFactory = Callable[..., Dataset]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, **options: Any) -> Dataset:
    """Build the registered dataset ``name`` with ``options``."""

    if name not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {name}")
    dataset = _REGISTRY[name](**options)
    _validate(dataset)
    return dataset


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate(dataset: Dataset) -> None:
    if dataset.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {dataset.task_type}")
    if dataset.inputs.ndim != 2 or dataset.desired.ndim != 2:
        raise ValueError(f"Dataset {dataset.name!r} must hold 2-D inputs and desired arrays")
    if dataset.inputs.shape[0] != dataset.desired.shape[0]:
        raise ValueError(
            f"Dataset {dataset.name!r} has {dataset.inputs.shape[0]} inputs "
            f"but {dataset.desired.shape[0]} desired rows"
        )


__all__ = [
    "Dataset",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
