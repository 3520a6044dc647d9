"""Node transfer functions.

Only the sigmoid is wired into backpropagation; ``relu`` and ``identity``
are available to collaborators that evaluate outputs on their own.
"""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``, preserving its dtype."""

    x = np.asarray(x)
    one = x.dtype.type(1) if x.dtype.kind == "f" else 1.0
    return one / (one + np.exp(-x))


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def identity(x: Array) -> Array:
    return np.asarray(x)


def sigmoid_deriv(output: Array) -> Array:
    """Sigmoid derivative expressed through the node output ``o*(1-o)``."""

    return output * (1 - output)


def relu_deriv(output: Array) -> Array:
    return (output > 0).astype(np.asarray(output).dtype)


def identity_deriv(output: Array) -> Array:
    return np.ones_like(output)


__all__ = [
    "identity",
    "identity_deriv",
    "relu",
    "relu_deriv",
    "sigmoid",
    "sigmoid_deriv",
]
