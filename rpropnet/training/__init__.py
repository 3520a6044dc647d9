"""Training drivers, evaluation and pipeline assembly."""

from .epochs import ALGORITHMS, gd_epoch, resolve_algorithm, rprop_epoch, train
from .evaluation import class_error, test_error
from .pipelines import load_preset, presets, run_pipeline
from .trainer import Trainer

__all__ = [
    "ALGORITHMS",
    "Trainer",
    "class_error",
    "gd_epoch",
    "load_preset",
    "presets",
    "resolve_algorithm",
    "rprop_epoch",
    "run_pipeline",
    "test_error",
    "train",
]
