"""Resilient backpropagation (RPROP) weight adaptation.

See Riedmiller & Braun, "A Direct Adaptive Method for Faster
Backpropagation Learning: The RPROP Algorithm" (1993).

``sgradient`` is the gradient summed over the whole training set for the
current epoch, ``pgradient`` the one remembered from the previous epoch and
``delta`` the per-weight step size.
"""

from __future__ import annotations

import numpy as np

from .network import Network
from .types import DTYPE, Array


def sign(x: Array) -> Array:
    """Return -1, 0 or +1 elementwise (zero stays zero)."""

    return np.sign(x).astype(DTYPE, copy=False)


def reset_sgradient(net: Network) -> None:
    net.reset_sgradient()


def update_sgradient(net: Network) -> None:
    """Add the last example's gradient to the set-wise gradient."""

    for layer in net.connection_layers():
        layer.sgradient += layer.gradient


def adjust_weights_rprop(net: Network) -> None:
    """Apply one RPROP update per weight from the epoch's set-wise gradient.

    With ``t = pgradient * sgradient``:

    * ``t > 0``: the direction held, grow the step (capped at
      ``rprop_maxupdate``), step against ``sgradient`` and remember it.
    * ``t < 0``: the last step overshot, revert it with the old step size,
      shrink the step (floored at ``rprop_minupdate``) and forget the
      direction so the next epoch takes the ``t == 0`` branch.
    * ``t == 0``: no previous direction, step against ``sgradient`` with the
      current step size unchanged and remember it.
    """

    nplus = DTYPE(net.rprop_nplus)
    nminus = DTYPE(net.rprop_nminus)
    maxupdate = DTYPE(net.rprop_maxupdate)
    minupdate = DTYPE(net.rprop_minupdate)

    for layer in net.connection_layers():
        sgrad = layer.sgradient
        pgrad = layer.pgradient
        delta = layer.delta
        weight = layer.weight

        t = pgrad * sgrad
        grow = t > 0
        shrink = t < 0
        hold = ~(grow | shrink)

        # Revert the overshooting steps before the step sizes change.
        weight[shrink] += sign(pgrad[shrink]) * delta[shrink]
        delta[shrink] = np.maximum(delta[shrink] * nminus, minupdate)
        pgrad[shrink] = 0.0

        delta[grow] = np.minimum(delta[grow] * nplus, maxupdate)
        weight[grow] -= sign(sgrad[grow]) * delta[grow]
        pgrad[grow] = sgrad[grow]

        weight[hold] -= sign(sgrad[hold]) * delta[hold]
        pgrad[hold] = sgrad[hold]


__all__ = ["adjust_weights_rprop", "reset_sgradient", "sign", "update_sgradient"]
