"""Epoch drivers sequencing simulation, back-propagation and weight updates."""

from __future__ import annotations

import logging
import warnings
from typing import Callable, Dict, Iterable, Mapping

from ..core.forward import simulate_error
from ..core.gd import adjust_weights, update_deltas_gd
from ..core.gradients import calculate_gradients
from ..core.network import Network
from ..core.rprop import adjust_weights_rprop, reset_sgradient, update_sgradient
from ..core.types import Array
from ..data.utils import as_examples

logger = logging.getLogger(__name__)

EpochFn = Callable[..., float]


def rprop_epoch(
    net: Network, inputs: Array, desired: Array, set_length: int | None = None
) -> float:
    """One RPROP epoch: accumulate the set-wise gradient, then update once.

    Returns the mean global error over the set, measured before the update.
    """

    x, y = as_examples(inputs, desired, net.input_units, net.output_units, set_length)
    error = 0.0
    reset_sgradient(net)
    for row in range(x.shape[0]):
        error += simulate_error(net, x[row], y[row])
        calculate_gradients(net, y[row])
        update_sgradient(net)
    adjust_weights_rprop(net)
    return error / x.shape[0]


def gd_epoch(
    net: Network,
    inputs: Array,
    desired: Array,
    set_length: int | None = None,
    *,
    online: bool = True,
) -> float:
    """One gradient descent epoch.

    By default weights are adjusted after every example (the delta buffer is
    cleared, refilled with that example's gradient and applied scaled by
    ``learning_rate / set_length``).  ``online=False`` accumulates the
    gradient over the whole set and applies it once instead.
    """

    x, y = as_examples(inputs, desired, net.input_units, net.output_units, set_length)
    n = x.shape[0]
    error = 0.0
    if not online:
        net.set_deltas(0.0)
    for row in range(n):
        if online:
            net.set_deltas(0.0)
        error += simulate_error(net, x[row], y[row])
        calculate_gradients(net, y[row])
        update_deltas_gd(net)
        if online:
            adjust_weights(net, n)
    if not online:
        adjust_weights(net, n)
    return error / n


ALGORITHMS: Dict[str, EpochFn] = {
    "rprop": rprop_epoch,
    "bprop": rprop_epoch,
    "gd": gd_epoch,
}

_DEPRECATED_ALIASES = {"bprop": "rprop"}


def resolve_algorithm(name: str) -> EpochFn:
    key = str(name).lower()
    if key not in ALGORITHMS:
        available = ", ".join(sorted(ALGORITHMS))
        raise ValueError(f"Unknown algorithm {name!r}. Available algorithms: {available}")
    if key in _DEPRECATED_ALIASES:
        warnings.warn(
            f"Algorithm {name!r} is deprecated; use {_DEPRECATED_ALIASES[key]!r}",
            DeprecationWarning,
            stacklevel=2,
        )
    return ALGORITHMS[key]


def emit_epoch(callbacks: Iterable[object], epoch: int, metrics: Mapping[str, float]) -> None:
    for callback in callbacks:
        if hasattr(callback, "on_epoch"):
            callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
        elif callable(callback):
            callback(epoch, metrics)


def train(
    net: Network,
    inputs: Array,
    desired: Array,
    max_error: float,
    max_epochs: int,
    set_length: int | None = None,
    algorithm: str = "rprop",
    callbacks: Iterable[object] = (),
    epoch_options: Mapping[str, object] | None = None,
) -> float:
    """Run epochs until the mean error drops below ``max_error`` or
    ``max_epochs`` epochs have run.  Returns the last epoch's mean error.

    ``epoch_options`` are forwarded to the epoch function (for instance
    ``{"online": False}`` for batch GD).  Both convergence and an exhausted
    budget are normal returns.
    """

    epoch_fn = resolve_algorithm(algorithm)
    x, y = as_examples(inputs, desired, net.input_units, net.output_units, set_length)
    callbacks = list(callbacks)
    options = dict(epoch_options or {})
    error = max_error + 1
    epoch = 0
    while epoch < max_epochs and error >= max_error:
        epoch += 1
        error = epoch_fn(net, x, y, **options)
        logger.debug("epoch %d %s error %.6f", epoch, algorithm, error)
        emit_epoch(callbacks, epoch, {"loss": float(error)})
    if error < max_error:
        logger.info("converged after %d epochs, error %.6f", epoch, error)
    else:
        logger.info("epoch budget of %d exhausted, error %.6f", max_epochs, error)
    return float(error)


__all__ = ["ALGORITHMS", "emit_epoch", "gd_epoch", "resolve_algorithm", "rprop_epoch", "train"]
