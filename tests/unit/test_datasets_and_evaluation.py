from __future__ import annotations

import numpy as np
import pytest

from rpropnet.core.network import create_network2
from rpropnet.data import (
    Dataset,
    as_examples,
    available_datasets,
    get_dataset,
    one_hot,
    register_dataset,
)
from rpropnet.training.evaluation import class_error, test_error


def test_truth_tables():
    xor = get_dataset("xor")
    assert xor.inputs.shape == (4, 2)
    assert xor.desired.reshape(-1).tolist() == [0.0, 1.0, 1.0, 0.0]
    assert get_dataset("and").desired.reshape(-1).tolist() == [0.0, 0.0, 0.0, 1.0]
    assert get_dataset("or").desired.reshape(-1).tolist() == [0.0, 1.0, 1.0, 1.0]
    assert {"xor", "and", "or", "blobs", "sine"} <= set(available_datasets())


def test_flat_convention():
    xor = get_dataset("xor")
    inputs, desired = xor.flat()
    assert inputs.shape == (8,)
    assert desired.shape == (4,)
    x, y = as_examples(inputs, desired, 2, 1, 4)
    np.testing.assert_array_equal(x, xor.inputs)
    np.testing.assert_array_equal(y, xor.desired)


def test_as_examples_validates_shapes():
    with pytest.raises(ValueError):
        as_examples(np.zeros(5), np.zeros(2), 2, 1)
    with pytest.raises(ValueError):
        as_examples(np.zeros(8), np.zeros(3), 2, 1)
    with pytest.raises(ValueError):
        as_examples(np.zeros(8), np.zeros(4), 2, 1, set_length=0)
    x, y = as_examples(np.zeros(8), np.zeros(4), 2, 1, set_length=3)
    assert x.shape == (3, 2) and y.shape == (3, 1)
    assert x.dtype == np.float32


def test_blobs_are_separable_and_seeded():
    a = get_dataset("blobs", n_points=50, seed=3)
    b = get_dataset("blobs", n_points=50, seed=3)
    np.testing.assert_array_equal(a.inputs, b.inputs)
    assert a.task_type == "classification"
    assert a.desired.shape == (50, 2)
    np.testing.assert_array_equal(a.desired.sum(axis=1), np.ones(50))
    labels = a.desired.argmax(axis=1)
    margin = a.inputs.sum(axis=1)
    assert np.all(margin[labels == 1] > 0)
    assert np.all(margin[labels == 0] < 0)


def test_sine_stays_in_sigmoid_range():
    data = get_dataset("sine", n_points=16)
    assert data.set_length == 16
    assert data.input_units == 1 and data.output_units == 1
    assert np.all((data.desired >= 0.0) & (data.desired <= 1.0))


def test_registry_round_trip():
    def make_tiny(**_):
        return Dataset(
            name="tiny",
            inputs=np.zeros((2, 1), dtype=np.float32),
            desired=np.ones((2, 1), dtype=np.float32),
        )

    register_dataset("tiny", make_tiny)
    assert get_dataset("tiny").set_length == 2
    with pytest.raises(KeyError):
        get_dataset("does-not-exist")


def test_registry_rejects_bad_datasets():
    @register_dataset("ragged")
    def make_ragged(**_):
        return Dataset(
            name="ragged",
            inputs=np.zeros((3, 1), dtype=np.float32),
            desired=np.zeros((2, 1), dtype=np.float32),
        )

    with pytest.raises(ValueError):
        get_dataset("ragged")


def test_one_hot():
    np.testing.assert_array_equal(one_hot([1, 0, 2], 3), np.eye(3, dtype=np.float32)[[1, 0, 2]])


def _net_with_outputs(values):
    net = create_network2(1, len(values))
    net.output_layer.output[...] = values
    return net


def test_class_error_rules():
    assert class_error(_net_with_outputs([0.1, 0.8, 0.3]), [0, 1, 0]) == 0
    assert class_error(_net_with_outputs([0.9, 0.8, 0.3]), [0, 1, 0]) == 1
    # first maximum wins
    assert class_error(_net_with_outputs([0.5, 0.5]), [1, 0]) == 0
    assert class_error(_net_with_outputs([0.5, 0.5]), [0, 1]) == 1
    # no desired entry equal to one never matches
    assert class_error(_net_with_outputs([0.9, 0.1]), [0.9, 0.1]) == 1


def test_test_error_reports_average_and_percent():
    net = create_network2(2, 2, rng=np.random.default_rng(0))
    data = get_dataset("blobs", n_points=10)
    weights = net.state_dict()
    avg, pct = test_error(net, data.inputs, data.desired)
    assert avg > 0
    assert 0.0 <= pct <= 100.0
    assert pct * data.set_length / 100.0 == pytest.approx(round(pct * data.set_length / 100.0))
    avg_only, none = test_error(net, data.inputs, data.desired, classify=False)
    assert avg_only == pytest.approx(avg)
    assert none is None
    for key, value in net.state_dict().items():
        np.testing.assert_array_equal(value, weights[key])
