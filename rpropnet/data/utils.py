"""Helpers for the flat dataset convention.

Training drivers accept ``inputs``/``desired`` either as contiguous flat
arrays holding ``set_length`` consecutive examples or as 2-D arrays with one
example per row.
"""

from __future__ import annotations

import numpy as np

from ..core.types import DTYPE, Array


def as_examples(
    inputs: Array,
    desired: Array,
    input_units: int,
    output_units: int,
    set_length: int | None = None,
) -> tuple[Array, Array]:
    """Return ``(inputs, desired)`` as float32 arrays of one example per row."""

    x = np.ascontiguousarray(inputs, dtype=DTYPE).reshape(-1)
    y = np.ascontiguousarray(desired, dtype=DTYPE).reshape(-1)
    if set_length is None:
        if x.size % input_units:
            raise ValueError(
                f"inputs hold {x.size} values, not a multiple of {input_units} input units"
            )
        set_length = x.size // input_units
    if set_length <= 0:
        raise ValueError("set_length must be positive")
    if x.size < set_length * input_units:
        raise ValueError(
            f"inputs hold {x.size} values, need {set_length} x {input_units}"
        )
    if y.size < set_length * output_units:
        raise ValueError(
            f"desired holds {y.size} values, need {set_length} x {output_units}"
        )
    x = x[: set_length * input_units].reshape(set_length, input_units)
    y = y[: set_length * output_units].reshape(set_length, output_units)
    return x, y


def one_hot(labels: Array, num_classes: int) -> Array:
    labels = np.asarray(labels).reshape(-1).astype(int)
    out = np.zeros((labels.shape[0], num_classes), dtype=DTYPE)
    out[np.arange(labels.shape[0]), labels] = 1.0
    return out


__all__ = ["as_examples", "one_hot"]
