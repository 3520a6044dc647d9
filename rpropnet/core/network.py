"""Network store: layer/weight memory layout and lifecycle.

Layers are indexed from the output side: layer ``0`` is the output layer
and the last layer is the input layer.  Every layer except the output layer
carries a trailing bias unit whose output is pinned to ``1.0``.

Each layer nearer the output owns the connections coming into it from its
input-ward neighbour.  The five per-connection buffers (``weight``,
``gradient``, ``sgradient``, ``pgradient`` and ``delta``) share one shape::

    (targets, source_units)

where ``targets`` excludes this layer's own bias unit (nothing connects into
a bias unit) and ``source_units`` includes the neighbour's bias unit (bias
connections act as a learned additive term).  Rows are target units,
columns are source units, stored C-contiguous.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

import numpy as np

from .types import DTYPE, Array

logger = logging.getLogger(__name__)

DEFAULT_RPROP_NPLUS = 1.2
DEFAULT_RPROP_NMINUS = 0.5
DEFAULT_RPROP_MAXUPDATE = 50.0
DEFAULT_RPROP_MINUPDATE = 0.000001
RPROP_INITIAL_DELTA = 0.1
DEFAULT_LEARN_RATE = 0.1
INIT_WEIGHT_RANGE = 0.05

KERNELS = ("vectorized", "lanes")
KERNEL_ENV = "RPROPNET_KERNEL"

CONNECTION_BUFFERS = ("weight", "gradient", "sgradient", "pgradient", "delta")
UNIT_BUFFERS = ("output", "error")


class AllocationError(MemoryError):
    """Raised when a network buffer cannot be allocated."""


def default_kernel() -> str:
    kernel = os.environ.get(KERNEL_ENV, "vectorized").strip().lower() or "vectorized"
    if kernel not in KERNELS:
        raise ValueError(f"{KERNEL_ENV} must be one of {KERNELS}, got {kernel!r}")
    return kernel


class BufferAllocator:
    """Hand out zero-filled float32 buffers and keep allocation bookkeeping."""

    def __init__(self) -> None:
        self.allocated = 0
        self.released = 0

    @property
    def live(self) -> int:
        return self.allocated - self.released

    def zeros(self, shape) -> Array:
        try:
            buffer = np.zeros(shape, dtype=DTYPE)
        except MemoryError as exc:
            raise AllocationError(f"Unable to allocate buffer of shape {shape}") from exc
        self.allocated += 1
        return buffer

    def release(self, buffer: Array | None) -> None:
        if buffer is not None:
            self.released += 1


@dataclass
class Layer:
    """State of one fully-connected layer."""

    units: int = 0
    bias: bool = False
    output: Optional[Array] = field(default=None, repr=False)
    error: Optional[Array] = field(default=None, repr=False)
    weight: Optional[Array] = field(default=None, repr=False)
    gradient: Optional[Array] = field(default=None, repr=False)
    sgradient: Optional[Array] = field(default=None, repr=False)
    pgradient: Optional[Array] = field(default=None, repr=False)
    delta: Optional[Array] = field(default=None, repr=False)

    @property
    def targets(self) -> int:
        """Units that receive connections (the bias unit never does)."""

        return self.units - int(self.bias)

    @property
    def connections(self) -> int:
        return 0 if self.weight is None else int(self.weight.size)

    def buffers(self) -> Iterator[tuple[str, Array]]:
        for name in UNIT_BUFFERS + CONNECTION_BUFFERS:
            value = getattr(self, name)
            if value is not None:
                yield name, value

    def reset(self) -> None:
        """Drop every buffer reference and return to the zero-unit state."""

        self.units = 0
        self.bias = False
        for name in UNIT_BUFFERS + CONNECTION_BUFFERS:
            setattr(self, name, None)


class Network:
    """Feed-forward sigmoid network with RPROP and GD training state."""

    def __init__(self, layers: int, allocator: BufferAllocator | None = None) -> None:
        if layers < 2:
            raise ValueError("A network needs at least an input and an output layer")
        self.allocator = allocator or BufferAllocator()
        self.layers: List[Layer] = [Layer() for _ in range(layers)]
        self.rprop_nplus = DEFAULT_RPROP_NPLUS
        self.rprop_nminus = DEFAULT_RPROP_NMINUS
        self.rprop_maxupdate = DEFAULT_RPROP_MAXUPDATE
        self.rprop_minupdate = DEFAULT_RPROP_MINUPDATE
        self.learning_rate = DEFAULT_LEARN_RATE
        self.kernel = default_kernel()

    @classmethod
    def alloc(cls, layers: int, allocator: BufferAllocator | None = None) -> "Network":
        """Return a network of ``layers`` zero-unit layers and default hyperparameters."""

        return cls(layers, allocator)

    def __repr__(self) -> str:
        units = [layer.units for layer in self.layers]
        return f"<Network units={units} kernel={self.kernel!r}>"

    def __enter__(self) -> "Network":
        return self

    def __exit__(self, *exc_info) -> None:
        self.free()

    # ------------------------------------------------------------------
    # Lifecycle

    def init_layer(self, index: int, units: int, bias: bool) -> None:
        """Size and zero-fill layer ``index``.

        The input-ward neighbour (``index + 1``) must already be initialised
        because it determines the column count of the connection buffers.
        On allocation failure the layer is released and reset and
        :class:`AllocationError` propagates; other layers are not touched.
        """

        if index < self.layer_count - 1 and self.layers[index + 1].units == 0:
            raise ValueError(f"Layer {index + 1} must be initialised before layer {index}")
        layer = self.layers[index]
        self._release_layer(layer)
        total = units + int(bias)
        layer.units = total
        layer.bias = bool(bias)
        try:
            layer.output = self.allocator.zeros(total)
            layer.error = self.allocator.zeros(total)
            if index < self.layer_count - 1:
                shape = (layer.targets, self.layers[index + 1].units)
                for name in CONNECTION_BUFFERS:
                    setattr(layer, name, self.allocator.zeros(shape))
        except AllocationError:
            self._release_layer(layer)
            raise
        if bias:
            layer.output[-1] = 1.0

    def free(self) -> None:
        """Release every layer's buffers, then the layer sequence."""

        for layer in self.layers:
            self._release_layer(layer)
        self.layers = []

    @property
    def freed(self) -> bool:
        return not self.layers

    def _release_layer(self, layer: Layer) -> None:
        for _, buffer in layer.buffers():
            self.allocator.release(buffer)
        layer.reset()

    def clone(self, allocator: BufferAllocator | None = None) -> "Network":
        """Return a deep copy sharing no buffer with this network."""

        copy = Network(self.layer_count, allocator or self.allocator)
        try:
            for index in reversed(range(self.layer_count)):
                src = self.layers[index]
                copy.init_layer(index, src.targets, src.bias)
                dst = copy.layers[index]
                for name, buffer in src.buffers():
                    np.copyto(getattr(dst, name), buffer)
        except AllocationError:
            copy.free()
            raise
        copy.rprop_nplus = self.rprop_nplus
        copy.rprop_nminus = self.rprop_nminus
        copy.rprop_maxupdate = self.rprop_maxupdate
        copy.rprop_minupdate = self.rprop_minupdate
        copy.learning_rate = self.learning_rate
        copy.kernel = self.kernel
        return copy

    # ------------------------------------------------------------------
    # Derived queries

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    @property
    def input_layer(self) -> Layer:
        return self.layers[-1]

    @property
    def output_layer(self) -> Layer:
        return self.layers[0]

    @property
    def input_units(self) -> int:
        return self.input_layer.targets

    @property
    def output_units(self) -> int:
        return self.output_layer.units

    def units(self, layer: int) -> int:
        return self.layers[layer].units

    def connection_layers(self) -> Iterator[Layer]:
        """Yield the layers owning connection buffers, output side first."""

        for layer in self.layers[:-1]:
            yield layer

    def count_weights(self) -> int:
        """Total learnable weights; bias units are never counted as targets."""

        total = 0
        for index in range(self.layer_count - 1):
            total += self.layers[index].targets * self.layers[index + 1].units
        return total

    # ------------------------------------------------------------------
    # Accessors

    def output_vector(self) -> Array:
        return self.output_layer.output.copy()

    def output(self, layer: int, unit: int) -> float:
        return float(self.layers[layer].output[unit])

    def error(self, layer: int, unit: int) -> float:
        return float(self.layers[layer].error[unit])

    def weight(self, layer: int, target: int, source: int) -> float:
        return float(self.layers[layer].weight[target, source])

    def set_weight(self, layer: int, target: int, source: int, value: float) -> None:
        self.layers[layer].weight[target, source] = value

    def gradient(self, layer: int, target: int, source: int) -> float:
        return float(self.layers[layer].gradient[target, source])

    def sgradient(self, layer: int, target: int, source: int) -> float:
        return float(self.layers[layer].sgradient[target, source])

    def pgradient(self, layer: int, target: int, source: int) -> float:
        return float(self.layers[layer].pgradient[target, source])

    def delta(self, layer: int, target: int, source: int) -> float:
        return float(self.layers[layer].delta[target, source])

    # ------------------------------------------------------------------
    # Bulk maintenance

    def set_random_weights(self, rng: np.random.Generator | None = None) -> None:
        """Draw every weight uniformly from ``[-0.05, 0.05)``."""

        rng = rng or np.random.default_rng()
        for layer in self.connection_layers():
            layer.weight[...] = rng.uniform(
                -INIT_WEIGHT_RANGE, INIT_WEIGHT_RANGE, size=layer.weight.shape
            )

    def reset(self, rng: np.random.Generator | None = None) -> None:
        """Re-randomise the weights and clear all training state."""

        for layer in self.layers:
            for name, buffer in layer.buffers():
                if name != "output":
                    buffer.fill(0.0)
        self.set_random_weights(rng)
        self.set_deltas(RPROP_INITIAL_DELTA)

    def scale_weights(self, factor: float) -> None:
        for layer in self.connection_layers():
            layer.weight *= DTYPE(factor)

    def set_deltas(self, value: float) -> None:
        for layer in self.connection_layers():
            layer.delta.fill(value)

    def reset_sgradient(self) -> None:
        for layer in self.connection_layers():
            layer.sgradient.fill(0.0)

    def state_dict(self) -> Mapping[str, Array]:
        return {f"W{idx}": layer.weight.copy() for idx, layer in enumerate(self.connection_layers())}

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for idx, layer in enumerate(self.connection_layers()):
            key = f"W{idx}"
            if key not in state:
                raise KeyError(f"Missing weight {key} in state dict")
            value = np.asarray(state[key], dtype=DTYPE)
            if value.shape != layer.weight.shape:
                raise ValueError(
                    f"Weight {key} has shape {value.shape}, expected {layer.weight.shape}"
                )
            np.copyto(layer.weight, value)

    def describe(self) -> Dict[str, object]:
        return {
            "units": [layer.units for layer in self.layers],
            "inputs": self.input_units,
            "outputs": self.output_units,
            "weights": self.count_weights(),
            "kernel": self.kernel,
        }


def create_network(
    units: Sequence[int],
    *,
    rng: np.random.Generator | None = None,
    allocator: BufferAllocator | None = None,
) -> Network:
    """Create a network from unit counts listed output layer first.

    Every layer but the output one receives a bias unit.  On allocation
    failure the partially built network is freed and :class:`AllocationError`
    propagates.
    """

    units = [int(u) for u in units]
    if any(u <= 0 for u in units):
        raise ValueError(f"Unit counts must be positive, got {units}")
    net = Network(len(units), allocator)
    try:
        for index in reversed(range(len(units))):
            net.init_layer(index, units[index], index > 0)
    except AllocationError:
        logger.debug("Allocation failed while building %s, releasing partial network", units)
        net.free()
        raise
    net.set_random_weights(rng)
    net.set_deltas(RPROP_INITIAL_DELTA)
    net.learning_rate = DEFAULT_LEARN_RATE
    return net


def create_network2(inputs: int, outputs: int, **kwargs) -> Network:
    """Two-layer network: inputs connect straight into the outputs."""

    return create_network([outputs, inputs], **kwargs)


def create_network3(inputs: int, hidden: int, outputs: int, **kwargs) -> Network:
    return create_network([outputs, hidden, inputs], **kwargs)


def create_network4(inputs: int, hidden: int, hidden2: int, outputs: int, **kwargs) -> Network:
    return create_network([outputs, hidden2, hidden, inputs], **kwargs)


def clone(net: Network) -> Network:
    return net.clone()


def free(net: Network) -> None:
    net.free()


__all__ = [
    "AllocationError",
    "BufferAllocator",
    "DEFAULT_LEARN_RATE",
    "DEFAULT_RPROP_MAXUPDATE",
    "DEFAULT_RPROP_MINUPDATE",
    "DEFAULT_RPROP_NMINUS",
    "DEFAULT_RPROP_NPLUS",
    "KERNELS",
    "Layer",
    "Network",
    "RPROP_INITIAL_DELTA",
    "clone",
    "create_network",
    "create_network2",
    "create_network3",
    "create_network4",
    "free",
]
