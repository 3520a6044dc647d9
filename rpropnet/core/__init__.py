"""Core numerical primitives for rpropnet."""

from . import activations, forward, gd, gradients, kernels, loss, network, rprop, types

__all__ = [
    "activations",
    "forward",
    "gd",
    "gradients",
    "kernels",
    "loss",
    "network",
    "rprop",
    "types",
]
