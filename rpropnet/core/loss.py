"""Error functions evaluated on the output layer."""

from __future__ import annotations

import numpy as np

from .network import Network
from .types import DTYPE, Array


def global_error(net: Network, desired: Array) -> float:
    """Half the sum of squared differences between ``desired`` and the outputs."""

    outputs = net.output_layer.output
    diff = np.asarray(desired, dtype=DTYPE).reshape(-1)[: outputs.shape[0]] - outputs
    return float(0.5 * np.dot(diff, diff))


def mean_squared_error(net: Network, desired: Array) -> float:
    """Mean of the squared output differences.

    This is the loss whose derivative :func:`calculate_output_error` computes;
    it equals ``global_error * 2 / output_units``.
    """

    outputs = net.output_layer.output
    diff = outputs - np.asarray(desired, dtype=DTYPE).reshape(-1)[: outputs.shape[0]]
    return float(np.dot(diff, diff) / outputs.shape[0])


def calculate_output_error(net: Network, desired: Array) -> None:
    """Set ``error[j] = 2/outputs * (output[j] - desired[j])`` on the output layer."""

    layer = net.output_layer
    factor = DTYPE(2.0 / layer.units)
    desired = np.asarray(desired, dtype=DTYPE).reshape(-1)[: layer.units]
    np.multiply(factor, layer.output - desired, out=layer.error)


__all__ = ["calculate_output_error", "global_error", "mean_squared_error"]
