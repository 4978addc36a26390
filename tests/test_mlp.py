import copy
import math

import pytest

from tinyann.layer import layer_delta, layer_predict
from tinyann.mlp import Mlp
from tinyann.mlp_ops import mlp_backpropagate


def mse_derivative(out, desired, index):
    return out[index] - desired[index]


def sigmoid(values, index):
    return 1.0 / (1.0 + math.exp(-values[index]))


def sigmoid_derivative(values, index):
    return values[index] * (1.0 - values[index])


def _seeded(sizes, **kwargs):
    net = Mlp.create(sizes, mse_derivative, **kwargs)
    counter = 0
    for w in net.weights:
        for i in range(len(w)):
            counter += 1
            w[i] = ((counter * 37) % 11 - 5) / 10.0
    for b in net.biases:
        for i in range(len(b)):
            counter += 1
            b[i] = ((counter * 13) % 7 - 3) / 10.0
    return net


def _loss(out, desired):
    return sum((o - d) ** 2 for o, d in zip(out, desired))


def test_create_allocates_zeroed_buffers():
    net = Mlp.create([3, 4, 2], mse_derivative)
    assert [len(w) for w in net.weights] == [12, 8]
    assert [len(b) for b in net.biases] == [4, 2]
    assert all(v == 0.0 for w in net.weights for v in w)
    assert net.depth == 3
    assert net.layers == 2


def test_zero_network_predicts_zero():
    net = Mlp.create([2, 3, 2], mse_derivative)
    assert net.predict([1.0, -2.0]) == [0.0, 0.0]


def test_depth_two_is_rejected():
    with pytest.raises(ValueError):
        Mlp.create([2, 2], mse_derivative)


def test_missing_loss_derivative_is_rejected():
    with pytest.raises(ValueError):
        Mlp.create([2, 3, 1], None)


def test_zero_size_is_rejected():
    with pytest.raises(ValueError):
        Mlp.create([2, 0, 1], mse_derivative)


def test_wrong_number_of_activations_is_rejected():
    with pytest.raises(ValueError):
        Mlp.create([2, 3, 1], mse_derivative, acts=[sigmoid])


def test_predict_rejects_wrong_input_length():
    net = Mlp.create([2, 3, 1], mse_derivative)
    with pytest.raises(ValueError):
        net.predict([1.0])


def test_predict_matches_layer_chain_and_fills_cache():
    net = _seeded([2, 3, 2], acts=[sigmoid, None])
    inp = [0.5, -1.5]
    hidden = layer_predict(inp, net.weights[0], net.biases[0], 3, sigmoid)
    expected = layer_predict(hidden, net.weights[1], net.biases[1], 2, None)
    out = net.predict(inp)
    assert out == pytest.approx(expected)
    assert net.outcache[0] == pytest.approx(hidden)
    assert net.outcache[-1] == pytest.approx(expected)


def test_follow_with_zero_delta_keeps_weights():
    net = _seeded([2, 3, 2])
    net.predict([1.0, 2.0])
    before_w = copy.deepcopy(net.weights)
    before_b = copy.deepcopy(net.biases)
    net.follow([1.0, 2.0], [0.0, 0.0])
    assert net.weights == before_w
    assert net.biases == before_b


def test_follow_matches_backpropagation():
    net = _seeded([2, 3, 2], actderivs=[sigmoid_derivative, None], acts=[sigmoid, None])
    inp = [0.3, 0.7]
    net.predict(inp)
    weights = copy.deepcopy(net.weights)
    biases = copy.deepcopy(net.biases)
    outputs = copy.deepcopy(net.outcache)
    expected = mlp_backpropagate(
        inp, [0.2, -0.1], net.sizes, outputs, weights, biases,
        net.actderivs, net.learningrate, net.learningrate_bias,
    )
    net.follow(inp, [0.2, -0.1])
    assert len(net.weights) == len(weights)
    for a, b in zip(net.weights, weights):
        assert a == pytest.approx(b)
    for a, b in zip(net.biases, biases):
        assert a == pytest.approx(b)
    for a, b in zip(net.deltastream, expected):
        assert a == pytest.approx(b)


def test_follow_rejects_wrong_delta_length():
    net = _seeded([2, 3, 2])
    with pytest.raises(ValueError):
        net.follow([1.0, 1.0], [0.1])


def test_train_returns_output_before_update():
    net = _seeded([2, 3, 1])
    inp = [1.0, 0.5]
    reference = copy.deepcopy(net)
    out = net.train(inp, [1.0])
    assert out == pytest.approx(reference.predict(inp))
    assert net.weights != reference.weights


def test_train_stores_output_delta():
    net = _seeded([2, 3, 2])
    inp = [0.4, -0.2]
    desired = [1.0, 0.0]
    out = net.train(inp, desired)
    assert net.deltastream[-1] == pytest.approx(
        layer_delta(out, desired, None, mse_derivative)
    )


def test_train_reduces_loss():
    net = _seeded([2, 4, 1], learningrate=0.05, learningrate_bias=0.05)
    inp = [0.5, -0.25]
    desired = [0.75]
    first = _loss(net.predict(inp), desired)
    for _ in range(200):
        net.train(inp, desired)
    last = _loss(net.predict(inp), desired)
    assert last < first
    assert last < 1e-3


def test_train_with_sigmoid_reduces_loss():
    net = _seeded(
        [2, 3, 1],
        acts=[sigmoid, sigmoid],
        actderivs=[sigmoid_derivative, sigmoid_derivative],
        learningrate=0.5,
        learningrate_bias=0.5,
    )
    inp = [1.0, 0.0]
    desired = [0.9]
    first = _loss(net.predict(inp), desired)
    for _ in range(300):
        net.train(inp, desired)
    assert _loss(net.predict(inp), desired) < first


def test_train_rejects_wrong_desired_length():
    net = _seeded([2, 3, 2])
    with pytest.raises(ValueError):
        net.train([1.0, 1.0], [1.0])


def test_train_auto_matches_train():
    a = _seeded([3, 2, 2])
    b = copy.deepcopy(a)
    inp = [0.1, 0.2, 0.3]
    desired = [0.5, -0.5]
    out_a = a.train(inp, desired)
    out_b = b.train_auto(inp, desired)
    assert out_b == pytest.approx(out_a)
    assert b.outcache[-1] == pytest.approx(out_a)
    for wa, wb in zip(a.weights, b.weights):
        assert wa == pytest.approx(wb)


def test_zero_learning_rates_leave_network_unchanged():
    net = _seeded([2, 3, 1], learningrate=0.0, learningrate_bias=0.0)
    before = copy.deepcopy(net.weights)
    net.train([1.0, 1.0], [5.0])
    assert net.weights == before