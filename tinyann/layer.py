"""Single fully connected layer: prediction, delta computation and weight updates.

Weights are stored flat and row-major: the weight that connects input ``j``
to output ``i`` is ``weight[i * len(inp) + j]``.

An activation (or activation derivative) is a callable ``f(values, index)``
returning the value for position ``index`` given the whole vector ``values``.
A loss derivative is a callable ``f(out, out_desired, index)``.
"""

from __future__ import annotations

from collections.abc import Callable, MutableSequence, Sequence
from typing import Optional

Activation = Callable[[Sequence[float], int], float]
LossDerivative = Callable[[Sequence[float], Sequence[float], int], float]

__all__ = [
    "Activation",
    "LossDerivative",
    "identity",
    "identity_derivative",
    "layer_predict",
    "layer_delta",
    "layer_follow",
    "layer_fit",
]


def identity(values: Sequence[float], index: int) -> float:
    """Pass-through activation."""
    return float(values[index])


def identity_derivative(values: Sequence[float], index: int) -> float:
    """Derivative of the pass-through activation: 1 at every valid position."""
    if not -len(values) <= index < len(values):
        raise IndexError(f"index {index} is out of range for {len(values)} values")
    return 1.0


def _check_shapes(
    inc: int, outc: int, weight: Sequence[float], bias: Sequence[float]
) -> None:
    if len(weight) < inc * outc:
        raise ValueError(
            f"weight holds {len(weight)} values, {inc * outc} are needed"
        )
    if len(bias) < outc:
        raise ValueError(f"bias holds {len(bias)} values, {outc} are needed")


def layer_predict(
    inp: Sequence[float],
    weight: Sequence[float],
    bias: Sequence[float],
    outc: int,
    act: Optional[Activation] = None,
) -> list[float]:
    """Compute the activated outputs of one layer for ``inp``."""
    inc = len(inp)
    _check_shapes(inc, outc, weight, bias)
    activation = act or identity
    pre = [
        sum(x * w for x, w in zip(inp, weight[i * inc : (i + 1) * inc])) + bias[i]
        for i in range(outc)
    ]
    return [activation(pre, i) for i in range(outc)]


def layer_delta(
    out: Sequence[float],
    out_desired: Sequence[float],
    actderiv: Optional[Activation],
    lossderiv: Optional[LossDerivative],
) -> list[float]:
    """Delta of an output layer: activation derivative times loss derivative."""
    if lossderiv is None:
        raise ValueError("a loss derivative is required")
    if len(out_desired) < len(out):
        raise ValueError("desired output is shorter than the output")
    derivative = actderiv or identity_derivative
    return [
        derivative(out, i) * lossderiv(out, out_desired, i) for i in range(len(out))
    ]


def layer_follow(
    inp: Sequence[float],
    delta: Sequence[float],
    weight: MutableSequence[float],
    bias: MutableSequence[float],
    learningrate: float,
    learningrate_bias: float,
) -> None:
    """Update ``weight`` and ``bias`` in place by gradient descent on ``delta``."""
    if learningrate == 0 and learningrate_bias == 0:
        return
    inc = len(inp)
    outc = len(delta)
    _check_shapes(inc, outc, weight, bias)
    for i, d in enumerate(delta):
        row = i * inc
        for j, x in enumerate(inp):
            weight[row + j] -= d * x * learningrate
        bias[i] -= d * learningrate_bias


def layer_fit(
    inp: Sequence[float],
    out: Sequence[float],
    out_desired: Sequence[float],
    weight: MutableSequence[float],
    bias: MutableSequence[float],
    actderiv: Optional[Activation],
    lossderiv: Optional[LossDerivative],
    learningrate: float,
    learningrate_bias: float,
) -> list[float]:
    """Compute the delta for ``out`` and apply it to the layer; return the delta."""
    delta = layer_delta(out, out_desired, actderiv, lossderiv)
    layer_follow(inp, delta, weight, bias, learningrate, learningrate_bias)
    return delta