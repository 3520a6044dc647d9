"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from ..core.types import DTYPE
from .registry import Dataset, register_dataset
from .utils import one_hot

_TRUTH_INPUTS = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=DTYPE)
_TRUTH_TABLES = {
    "xor": [0, 1, 1, 0],
    "and": [0, 0, 0, 1],
    "or": [0, 1, 1, 1],
}


def _truth_table(name: str) -> Dataset:
    desired = np.array(_TRUTH_TABLES[name], dtype=DTYPE).reshape(-1, 1)
    return Dataset(
        name=name,
        inputs=_TRUTH_INPUTS.copy(),
        desired=desired,
        task_type="regression",
        provenance={"type": "truth_table", "gate": name},
    )


@register_dataset("xor")
def make_xor(**_: object) -> Dataset:
    return _truth_table("xor")


@register_dataset("and")
def make_and(**_: object) -> Dataset:
    return _truth_table("and")


@register_dataset("or")
def make_or(**_: object) -> Dataset:
    return _truth_table("or")


@register_dataset("blobs")
def make_blobs(
    n_points: int = 64,
    seed: int = 0,
    spread: float = 0.4,
    distance: float = 2.0,
    **_: object,
) -> Dataset:
    """Two Gaussian clusters centred at ``-distance`` and ``+distance`` on
    both axes, with one-hot targets.

    Points straying across the separating line ``x0 + x1 = 0`` are
    reflected back, so the set is always linearly separable.
    """

    rng = np.random.default_rng(seed)
    labels = np.arange(n_points) % 2
    centers = np.where(labels[:, None] == 1, distance, -distance)
    points = centers + spread * rng.standard_normal((n_points, 2))
    side = np.where(labels == 1, 1.0, -1.0)
    crossed = side * points.sum(axis=1) <= 0
    points[crossed] = -points[crossed]
    order = rng.permutation(n_points)
    return Dataset(
        name="blobs",
        inputs=points[order].astype(DTYPE),
        desired=one_hot(labels[order], 2),
        task_type="classification",
        provenance={
            "type": "blobs",
            "n_points": n_points,
            "seed": seed,
            "spread": spread,
            "distance": distance,
        },
    )


@register_dataset("sine")
def make_sine(n_points: int = 32, freq: float = 1.0, seed: int = 0, **_: object) -> Dataset:
    """One period-scaled sine wave squashed into the sigmoid's (0, 1) range."""

    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 1.0, n_points).reshape(-1, 1)
    y = 0.5 + 0.4 * np.sin(2.0 * np.pi * freq * x)
    y = y + 0.01 * rng.standard_normal(size=y.shape)
    return Dataset(
        name="sine",
        inputs=x.astype(DTYPE),
        desired=np.clip(y, 0.0, 1.0).astype(DTYPE),
        task_type="regression",
        provenance={"type": "sine", "n_points": n_points, "freq": freq, "seed": seed},
    )


__all__ = ["make_and", "make_blobs", "make_or", "make_sine", "make_xor"]
