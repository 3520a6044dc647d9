"""Error back-propagation into per-weight gradients."""

from __future__ import annotations

import numpy as np

from .activations import sigmoid_deriv
from .forward import simulate
from .kernels import backprop_rows
from .loss import calculate_output_error, global_error, mean_squared_error
from .network import Network
from .types import DTYPE, Array

NUMERIC_EPSILON = 1e-3


def calculate_gradients(net: Network, desired: Array) -> None:
    """Back-propagate the output error and fill every layer's ``gradient``.

    Must be called right after :func:`rpropnet.core.forward.simulate` on the
    same example.  Walking from the output layer toward the input, each
    target unit's error is turned into an error signal through the sigmoid
    derivative, written into its gradient row (signal times the source
    outputs), and spread back over the source layer's ``error`` buffer
    through the connection weights.
    """

    calculate_output_error(net, desired)
    for index in range(net.layer_count - 1):
        layer = net.layers[index]
        source = net.layers[index + 1]
        source.error.fill(0.0)
        n = layer.targets
        out = layer.output[:n]
        signal = (layer.error[:n] * sigmoid_deriv(out)).astype(DTYPE, copy=False)
        backprop_rows(signal, source.output, layer.weight, layer.gradient, source.error, net.kernel)


def calculate_gradients_numeric(
    net: Network,
    desired: Array,
    epsilon: float = NUMERIC_EPSILON,
    *,
    central: bool = True,
) -> None:
    """Finite-difference reference for :func:`calculate_gradients`.

    Perturbs one weight at a time, re-simulates and differentiates the
    mean squared error (the loss the analytic output error derives from).
    The input must already be loaded.  Every weight is restored.
    """

    for layer in net.connection_layers():
        weight = layer.weight
        for idx in np.ndindex(weight.shape):
            original = weight[idx]
            weight[idx] = original + DTYPE(epsilon)
            simulate(net)
            upper = mean_squared_error(net, desired)
            if central:
                weight[idx] = original - DTYPE(epsilon)
                simulate(net)
                lower = mean_squared_error(net, desired)
                step = 2.0 * epsilon
            else:
                weight[idx] = original
                simulate(net)
                lower = mean_squared_error(net, desired)
                step = epsilon
            weight[idx] = original
            layer.gradient[idx] = (upper - lower) / step
    simulate(net)


__all__ = [
    "calculate_gradients",
    "calculate_gradients_numeric",
    "calculate_output_error",
    "global_error",
    "mean_squared_error",
]
