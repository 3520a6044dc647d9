"""Core typing contracts for rpropnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

Array = np.ndarray

DTYPE = np.float32


@dataclass(frozen=True)
class TrainResult:
    """Outcome of a training run driven by :class:`rpropnet.training.trainer.Trainer`."""

    epochs: int
    error: float
    converged: bool
    test_error: Optional[float] = None
    class_error: Optional[float] = None


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`rpropnet.training.pipelines.run_pipeline`."""

    epochs: int
    error: float
    converged: bool
    metrics_path: str
    manifest_path: str
    class_error: Optional[float] = None
    plot_path: str = ""
