"""Training loop with pluggable metric sinks."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Array, TrainResult
from .epochs import emit_epoch, resolve_algorithm, train
from .evaluation import test_error

logger = logging.getLogger(__name__)


class Trainer:
    """Train a network with RPROP or GD and report per-epoch metrics.

    ``callbacks`` and the ``split_loggers`` given to :meth:`run` receive
    ``on_epoch(epoch, metrics)`` calls (plain callables are called
    directly).
    """

    def __init__(
        self,
        network: Network,
        algorithm: str = "rprop",
        callbacks: Sequence[object] | None = None,
    ) -> None:
        resolve_algorithm(algorithm)
        self.network = network
        self.algorithm = algorithm
        self.callbacks = list(callbacks or [])

    def run(
        self,
        inputs: Array,
        desired: Array,
        *,
        max_epochs: int,
        max_error: float = 0.0,
        seed: int | None = None,
        test_inputs: Array | None = None,
        test_desired: Array | None = None,
        eval_every: int = 1,
        classify: bool = False,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
        epoch_options: Mapping[str, object] | None = None,
    ) -> TrainResult:
        if seed is not None:
            self.network.reset(np.random.default_rng(seed))
        logger.info(
            "training %r with %s for up to %d epochs", self.network, self.algorithm, max_epochs
        )

        split_loggers = split_loggers or {}
        train_loggers = list(self.callbacks) + list(split_loggers.get("train", []))
        test_loggers = list(split_loggers.get("test", []))
        has_test = test_inputs is not None and test_desired is not None
        eval_every = max(1, int(eval_every))
        epochs_run = 0

        def _on_epoch(epoch: int, metrics: Mapping[str, float]) -> None:
            nonlocal epochs_run
            epochs_run = epoch
            emit_epoch(train_loggers, epoch, metrics)
            if has_test and epoch % eval_every == 0:
                emit_epoch(test_loggers, epoch, self._evaluate(test_inputs, test_desired, classify))

        error = train(
            self.network,
            inputs,
            desired,
            max_error,
            max_epochs,
            algorithm=self.algorithm,
            callbacks=[_on_epoch],
            epoch_options=epoch_options,
        )

        final_test = None
        final_class = None
        if has_test:
            metrics = self._evaluate(test_inputs, test_desired, classify)
            final_test = metrics["loss"]
            final_class = metrics.get("class_error")
        elif classify:
            _, final_class = test_error(self.network, inputs, desired, classify=True)

        return TrainResult(
            epochs=epochs_run,
            error=error,
            converged=error < max_error,
            test_error=final_test,
            class_error=final_class,
        )

    def _evaluate(self, inputs: Array, desired: Array, classify: bool) -> Mapping[str, float]:
        avg, pct = test_error(self.network, inputs, desired, classify=classify)
        metrics = {"loss": float(avg)}
        if pct is not None:
            metrics["class_error"] = float(pct)
        return metrics


__all__ = ["Trainer"]
