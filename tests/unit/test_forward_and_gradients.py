from __future__ import annotations

import numpy as np
import pytest

from rpropnet.core import kernels
from rpropnet.core.activations import (
    identity,
    identity_deriv,
    relu,
    relu_deriv,
    sigmoid,
    sigmoid_deriv,
)
from rpropnet.core.forward import set_input, simulate, simulate_error
from rpropnet.core.gradients import (
    calculate_gradients,
    calculate_gradients_numeric,
    calculate_output_error,
    global_error,
    mean_squared_error,
)
from rpropnet.core.network import create_network, create_network2, create_network3


def _sig(x: float) -> float:
    return 1.0 / (1.0 + np.exp(-x))


def test_sigmoid_preserves_float32():
    x = np.array([-2.0, 0.0, 2.0], dtype=np.float32)
    out = sigmoid(x)
    assert out.dtype == np.float32
    assert out[1] == pytest.approx(0.5)
    np.testing.assert_allclose(sigmoid_deriv(out), out * (1 - out))


def test_auxiliary_activations():
    x = np.array([-1.0, 0.0, 2.0], dtype=np.float32)
    np.testing.assert_array_equal(relu(x), [0.0, 0.0, 2.0])
    np.testing.assert_array_equal(relu_deriv(relu(x)), [0.0, 0.0, 1.0])
    np.testing.assert_array_equal(identity(x), x)
    np.testing.assert_array_equal(identity_deriv(x), np.ones(3))


def test_set_input_leaves_bias_alone():
    net = create_network2(2, 1)
    set_input(net, np.array([0.3, 0.7, 5.0], dtype=np.float32))
    np.testing.assert_allclose(net.input_layer.output, [0.3, 0.7, 1.0])


def test_simulate_single_layer_by_hand():
    net = create_network2(2, 1)
    net.layers[0].weight[...] = [[1.0, 2.0, -1.0]]

    set_input(net, [1.0, 0.0])
    simulate(net)
    assert net.output(0, 0) == pytest.approx(0.5)

    set_input(net, [1.0, 1.0])
    simulate(net)
    assert net.output_vector()[0] == pytest.approx(_sig(2.0), rel=1e-6)


def test_simulate_two_layers_by_hand():
    net = create_network3(1, 1, 1)
    net.layers[1].weight[...] = [[2.0, -1.0]]
    net.layers[0].weight[...] = [[1.5, 0.5]]
    set_input(net, [1.0])
    simulate(net)
    hidden = _sig(2.0 - 1.0)
    assert net.output(1, 0) == pytest.approx(hidden, rel=1e-6)
    assert net.output(0, 0) == pytest.approx(_sig(1.5 * hidden + 0.5), rel=1e-6)


def test_bias_outputs_stay_pinned():
    rng = np.random.default_rng(3)
    net = create_network([2, 5, 4, 3], rng=rng)
    net.scale_weights(40.0)
    for _ in range(10):
        set_input(net, rng.uniform(-3, 3, size=3))
        simulate(net)
        for layer in net.layers[1:]:
            assert layer.output[-1] == 1.0


def test_global_error_and_mse():
    net = create_network2(2, 3)
    net.output_layer.output[...] = [0.2, 0.5, 0.9]
    desired = np.array([0.0, 1.0, 1.0], dtype=np.float32)
    expected = 0.04 + 0.25 + 0.01
    assert global_error(net, desired) == pytest.approx(0.5 * expected, rel=1e-6)
    assert mean_squared_error(net, desired) == pytest.approx(expected / 3, rel=1e-6)

    assert simulate_error(net, [0.0, 0.0], desired) == pytest.approx(
        global_error(net, desired)
    )


def test_output_error_rule():
    net = create_network2(1, 2)
    net.output_layer.output[...] = [0.25, 0.75]
    calculate_output_error(net, [1.0, 0.0])
    np.testing.assert_allclose(net.output_layer.error, [2 / 2 * -0.75, 2 / 2 * 0.75])


@pytest.mark.parametrize(
    "units, seed",
    [([1, 2, 2], 0), ([2, 4, 3], 1), ([3, 5, 4, 2], 2), ([2, 3], 3)],
)
@pytest.mark.parametrize("central", [True, False])
def test_analytic_gradient_matches_finite_differences(units, seed, central):
    rng = np.random.default_rng(seed)
    net = create_network(units, rng=rng)
    net.scale_weights(20.0)
    inputs = rng.uniform(-1, 1, size=net.input_units)
    desired = rng.uniform(0.1, 0.9, size=net.output_units)

    set_input(net, inputs)
    simulate(net)
    calculate_gradients(net, desired)
    analytic = [layer.gradient.copy() for layer in net.connection_layers()]
    weights = [layer.weight.copy() for layer in net.connection_layers()]

    calculate_gradients_numeric(net, desired, epsilon=1e-3, central=central)
    numeric = [layer.gradient.copy() for layer in net.connection_layers()]

    tolerance = 1e-2 if central else 5e-2
    for a, n in zip(analytic, numeric):
        np.testing.assert_allclose(a, n, rtol=tolerance, atol=2e-4)
    for layer, w in zip(net.connection_layers(), weights):
        np.testing.assert_array_equal(layer.weight, w)


def test_bias_column_gradient_equals_error_signal():
    net = create_network3(2, 3, 1, rng=np.random.default_rng(5))
    set_input(net, [0.4, -0.2])
    simulate(net)
    calculate_gradients(net, [1.0])
    out = net.output(0, 0)
    signal = net.error(0, 0) * out * (1 - out)
    assert net.gradient(0, 0, 3) == pytest.approx(signal, rel=1e-5)


def test_lane_helpers_match_numpy():
    rng = np.random.default_rng(0)
    for n in (1, 7, 8, 9, 23):
        w = rng.standard_normal(n).astype(np.float32)
        o = rng.standard_normal(n).astype(np.float32)
        assert kernels.dot_lanes(w, o) == pytest.approx(float(np.dot(w, o)), rel=1e-5, abs=1e-5)
        out = np.empty(n, dtype=np.float32)
        kernels.scale_into_lanes(out, np.float32(0.5), o)
        np.testing.assert_allclose(out, 0.5 * o)
        y = w.copy()
        kernels.axpy_lanes(y, np.float32(2.0), o)
        np.testing.assert_allclose(y, w + 2.0 * o, rtol=1e-6, atol=1e-6)


def test_lanes_kernel_matches_vectorized():
    rng = np.random.default_rng(9)
    net = create_network([3, 11, 20], rng=rng)
    net.scale_weights(10.0)
    lanes = net.clone()
    lanes.kernel = "lanes"
    inputs = rng.uniform(-1, 1, size=20)
    desired = np.array([1.0, 0.0, 0.0])

    for candidate in (net, lanes):
        set_input(candidate, inputs)
        simulate(candidate)
        calculate_gradients(candidate, desired)

    for a, b in zip(net.layers, lanes.layers):
        np.testing.assert_allclose(a.output, b.output, rtol=1e-5, atol=1e-6)
        np.testing.assert_allclose(a.error, b.error, rtol=1e-4, atol=1e-6)
    for a, b in zip(net.connection_layers(), lanes.connection_layers()):
        np.testing.assert_allclose(a.gradient, b.gradient, rtol=1e-4, atol=1e-6)


def test_check_kernel_rejects_unknown_names():
    assert kernels.check_kernel("lanes") == "lanes"
    with pytest.raises(ValueError):
        kernels.check_kernel("avx")
