"""Plain gradient descent weight adaptation.

Under GD the ``delta`` buffer is not a step size but a running sum of
gradients that :func:`adjust_weights` scales by the learning rate.
"""

from __future__ import annotations

from .network import Network
from .types import DTYPE


def update_deltas_gd(net: Network) -> None:
    for layer in net.connection_layers():
        layer.delta += layer.gradient


def adjust_weights(net: Network, set_length: int) -> None:
    """``weight -= learning_rate / set_length * delta`` for every weight."""

    rate = DTYPE(net.learning_rate / set_length)
    for layer in net.connection_layers():
        layer.weight -= rate * layer.delta


__all__ = ["adjust_weights", "update_deltas_gd"]
