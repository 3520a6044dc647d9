"""Read-only evaluation of a network over a dataset."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core.forward import simulate_error
from ..core.network import Network
from ..core.types import Array
from ..data.utils import as_examples


def class_error(net: Network, desired: Array) -> int:
    """Return 1 if the last simulation picked the wrong class, else 0.

    The expected class is the first index whose desired value is exactly
    ``1``; a row without one never matches.  The network's class is the
    arg-max of its outputs, first maximum winning.
    """

    desired = np.asarray(desired).reshape(-1)
    hits = np.flatnonzero(desired == 1)
    class_id = int(hits[0]) if hits.size else desired.shape[0]
    out_id = int(np.argmax(net.output_layer.output))
    return int(out_id != class_id)


def test_error(
    net: Network,
    inputs: Array,
    desired: Array,
    set_length: int | None = None,
    *,
    classify: bool = True,
) -> tuple[float, Optional[float]]:
    """Simulate every example and return ``(avg_error, class_error_percent)``.

    ``avg_error`` is the mean global error over the set.  The class error
    percentage is ``None`` when ``classify`` is false.
    """

    x, y = as_examples(inputs, desired, net.input_units, net.output_units, set_length)
    error = 0.0
    mistakes = 0
    for row in range(x.shape[0]):
        error += simulate_error(net, x[row], y[row])
        if classify:
            mistakes += class_error(net, y[row])
    avg = error / x.shape[0]
    pct = mistakes * 100.0 / x.shape[0] if classify else None
    return avg, pct


# Not a pytest test despite the name.
test_error.__test__ = False

__all__ = ["class_error", "test_error"]
