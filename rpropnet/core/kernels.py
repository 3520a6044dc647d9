"""Dot-product and accumulate kernels used by the forward and backward passes.

Two implementations share one contract:

``vectorized``
    whole-layer numpy matrix products.
``lanes``
    row-at-a-time accumulation over fixed-width lanes followed by a
    horizontal reduction and a scalar loop over the tail elements.

They differ only in floating-point summation order.
"""

from __future__ import annotations

import numpy as np

from .types import DTYPE, Array

LANE_WIDTH = 8


def dot_lanes(w: Array, o: Array, width: int = LANE_WIDTH) -> DTYPE:
    """Return ``sum(w * o)`` accumulated ``width`` elements at a time."""

    n = w.shape[0]
    steps = n // width
    acc = DTYPE(0.0)
    k = 0
    for _ in range(steps):
        acc += DTYPE(np.sum(w[k : k + width] * o[k : k + width], dtype=DTYPE))
        k += width
    for k in range(k, n):
        acc += w[k] * o[k]
    return acc


def scale_into_lanes(out: Array, scalar: DTYPE, x: Array, width: int = LANE_WIDTH) -> None:
    """``out[:] = scalar * x`` in lane-sized blocks."""

    n = x.shape[0]
    k = 0
    for _ in range(n // width):
        out[k : k + width] = scalar * x[k : k + width]
        k += width
    for k in range(k, n):
        out[k] = scalar * x[k]


def axpy_lanes(y: Array, scalar: DTYPE, x: Array, width: int = LANE_WIDTH) -> None:
    """``y += scalar * x`` in lane-sized blocks."""

    n = x.shape[0]
    k = 0
    for _ in range(n // width):
        y[k : k + width] += scalar * x[k : k + width]
        k += width
    for k in range(k, n):
        y[k] += scalar * x[k]


def matvec(weight: Array, vector: Array, kernel: str) -> Array:
    """Return ``weight @ vector`` for a ``(targets, sources)`` matrix."""

    if kernel == "vectorized":
        return weight @ vector
    out = np.empty(weight.shape[0], dtype=DTYPE)
    for row in range(weight.shape[0]):
        out[row] = dot_lanes(weight[row], vector)
    return out


def backprop_rows(
    signal: Array,
    source_output: Array,
    weight: Array,
    gradient: Array,
    source_error: Array,
    kernel: str,
) -> None:
    """Write ``gradient = outer(signal, source_output)`` and accumulate
    ``source_error += signal @ weight``."""

    if kernel == "vectorized":
        np.multiply(signal[:, None], source_output[None, :], out=gradient)
        source_error += signal @ weight
        return
    for row in range(weight.shape[0]):
        scale_into_lanes(gradient[row], signal[row], source_output)
        axpy_lanes(source_error, signal[row], weight[row])


def check_kernel(kernel: str) -> str:
    if kernel not in {"vectorized", "lanes"}:
        raise ValueError(f"Unknown kernel: {kernel!r}")
    return kernel


__all__ = [
    "LANE_WIDTH",
    "axpy_lanes",
    "backprop_rows",
    "check_kernel",
    "dot_lanes",
    "matvec",
    "scale_into_lanes",
]
