"""Forward simulation."""

from __future__ import annotations

import numpy as np

from .activations import sigmoid
from .kernels import matvec
from .loss import global_error
from .network import Network
from .types import Array


def set_input(net: Network, inputs: Array) -> None:
    """Copy ``net.input_units`` values into the input layer, leaving the bias slot alone."""

    layer = net.input_layer
    n = layer.targets
    layer.output[:n] = np.asarray(inputs).reshape(-1)[:n]


def simulate(net: Network) -> None:
    """Propagate the input layer's outputs through to the output layer."""

    for index in range(net.layer_count - 2, -1, -1):
        layer = net.layers[index]
        source = net.layers[index + 1]
        activation = matvec(layer.weight, source.output, net.kernel)
        layer.output[: layer.targets] = sigmoid(activation)


def simulate_error(net: Network, inputs: Array, desired: Array) -> float:
    """Set the input, simulate and return the global error against ``desired``."""

    set_input(net, inputs)
    simulate(net)
    return global_error(net, desired)


__all__ = ["set_input", "simulate", "simulate_error"]
