import pytest

from tinyann.layer import (
    identity,
    identity_derivative,
    layer_delta,
    layer_fit,
    layer_follow,
    layer_predict,
)


def mse_deriv(out, desired, index):
    return out[index] - desired[index]


def relu(values, index):
    return max(0.0, values[index])


def test_identity_returns_indexed_value():
    assert identity([1.5, -2.0], 1) == -2.0


def test_identity_derivative_is_one():
    assert identity_derivative([7.0, 8.0], 0) == 1.0


def test_predict_identity_matrix_returns_input():
    inp = [0.5, -1.25, 3.0]
    weight = [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]
    assert layer_predict(inp, weight, [0.0, 0.0, 0.0], 3) == pytest.approx(inp)


def test_predict_zero_weights_returns_bias():
    bias = [0.25, -0.75]
    assert layer_predict([4.0, 5.0, 6.0], [0.0] * 6, bias, 2) == pytest.approx(bias)


def test_predict_applies_activation():
    out = layer_predict([-1.0, 2.0], [1.0, 0.0, 0.0, 1.0], [0.0, 0.0], 2, relu)
    assert out == pytest.approx([0.0, 2.0])


def test_activation_sees_whole_preactivation_vector():
    inp = [1.0, 2.0, 4.0]
    weight = [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]
    out = layer_predict(inp, weight, [0.0] * 3, 3, lambda v, i: sum(v))
    assert out == pytest.approx([sum(inp)] * 3)


def test_predict_short_weight_raises():
    with pytest.raises(ValueError):
        layer_predict([1.0, 2.0], [1.0], [0.0], 1)


def test_predict_short_bias_raises():
    with pytest.raises(ValueError):
        layer_predict([1.0], [1.0, 1.0], [0.0], 2)


def test_delta_zero_when_output_matches():
    out = [0.3, -0.2]
    assert layer_delta(out, list(out), None, mse_deriv) == pytest.approx([0.0, 0.0])


def test_delta_uses_activation_derivative():
    delta = layer_delta([3.0], [1.0], lambda v, i: 2.0, mse_deriv)
    assert delta == pytest.approx([4.0])


def test_delta_without_loss_raises():
    with pytest.raises(ValueError):
        layer_delta([1.0], [1.0], None, None)


def test_follow_zero_delta_keeps_parameters():
    weight = [0.1, 0.2, 0.3, 0.4]
    bias = [0.5, 0.6]
    layer_follow([1.0, 2.0], [0.0, 0.0], weight, bias, 0.1, 0.1)
    assert weight == [0.1, 0.2, 0.3, 0.4]
    assert bias == [0.5, 0.6]


def test_follow_zero_rates_keeps_parameters():
    weight = [0.1, 0.2]
    bias = [0.5]
    layer_follow([1.0, 2.0], [3.0], weight, bias, 0.0, 0.0)
    assert weight == [0.1, 0.2]
    assert bias == [0.5]


def test_follow_moves_against_positive_delta():
    weight = [1.0, 1.0]
    bias = [1.0]
    layer_follow([1.0, 2.0], [0.5], weight, bias, 0.1, 0.1)
    assert weight[0] < 1.0
    assert weight[1] < weight[0]
    assert bias[0] < 1.0


def test_fit_returns_delta_and_updates():
    inp = [1.0, -1.0]
    weight = [0.2, 0.4]
    bias = [0.0]
    out = layer_predict(inp, weight, bias, 1)
    expected_delta = layer_delta(out, [1.0], None, mse_deriv)
    delta = layer_fit(inp, out, [1.0], weight, bias, None, mse_deriv, 0.1, 0.1)
    assert delta == pytest.approx(expected_delta)
    assert weight != [0.2, 0.4]


def test_fit_reduces_error():
    inp = [0.5, 1.0, -0.5]
    target = [1.0, -1.0]
    weight = [0.1] * 6
    bias = [0.0, 0.0]

    def error():
        out = layer_predict(inp, weight, bias, 2)
        return sum((o - t) ** 2 for o, t in zip(out, target))

    before = error()
    for _ in range(50):
        out = layer_predict(inp, weight, bias, 2)
        layer_fit(inp, out, target, weight, bias, None, mse_deriv, 0.1, 0.1)
    assert error() < before * 0.01