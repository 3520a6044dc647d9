"""rpropnet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.forward import set_input, simulate, simulate_error
from .core.gradients import calculate_gradients, calculate_gradients_numeric
from .core.network import (
    AllocationError,
    BufferAllocator,
    Network,
    clone,
    create_network,
    create_network2,
    create_network3,
    create_network4,
    free,
)
from .data import get_dataset
from .training.epochs import gd_epoch, rprop_epoch, train
from .training.evaluation import class_error, test_error
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "AllocationError",
    "BufferAllocator",
    "Network",
    "Trainer",
    "activations",
    "calculate_gradients",
    "calculate_gradients_numeric",
    "class_error",
    "clone",
    "create_network",
    "create_network2",
    "create_network3",
    "create_network4",
    "free",
    "gd_epoch",
    "get_dataset",
    "load_preset",
    "presets",
    "rprop_epoch",
    "run_pipeline",
    "set_input",
    "simulate",
    "simulate_error",
    "test_error",
    "train",
    "types",
]
