"""Forward and backward passes of a multi-layer perceptron over plain lists.

A network of depth ``d`` is described by ``sizes`` (``d`` layer widths,
input first) and by ``d - 1`` weight and bias vectors. Layer ``k`` maps
``sizes[k]`` values to ``sizes[k + 1]`` values. Its weights are flat and
row-major: ``weights[k][i * sizes[k] + j]`` connects input ``j`` to output ``i``.
"""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence
from typing import Optional

from tinyann.layer import Activation, identity_derivative, layer_follow, layer_predict

__all__ = ["hidden_delta", "mlp_predict", "mlp_backpropagate"]


def hidden_delta(
    weight: Sequence[float], delta: Sequence[float], inc: int, index: int
) -> float:
    """Error sent back to input ``index`` of a layer with ``inc`` inputs."""
    if not 0 <= index < inc:
        raise IndexError(f"index {index} is outside a layer of {inc} inputs")
    if len(weight) < inc * len(delta):
        raise ValueError(
            f"weight holds {len(weight)} values, {inc * len(delta)} are needed"
        )
    return sum(weight[inc * i + index] * d for i, d in enumerate(delta))


def _check_network(
    sizes: Sequence[int],
    weights: Sequence[Sequence[float]],
    biases: Sequence[Sequence[float]],
) -> int:
    depth = len(sizes)
    if depth <= 2:
        raise ValueError("a network needs at least one hidden layer (depth > 2)")
    if any(size <= 0 for size in sizes):
        raise ValueError("layer sizes must be positive")
    layers = depth - 1
    if len(weights) != layers:
        raise ValueError(f"{len(weights)} weight vectors given, {layers} are needed")
    if len(biases) != layers:
        raise ValueError(f"{len(biases)} bias vectors given, {layers} are needed")
    for k, (w, b) in enumerate(zip(weights, biases)):
        needed = sizes[k] * sizes[k + 1]
        if len(w) != needed:
            raise ValueError(
                f"weights of layer {k} hold {len(w)} values, {needed} are needed"
            )
        if len(b) != sizes[k + 1]:
            raise ValueError(
                f"bias of layer {k} holds {len(b)} values, {sizes[k + 1]} are needed"
            )
    return layers


def _per_layer(
    functions: Optional[Sequence[Optional[Activation]]], layers: int, name: str
) -> list[Optional[Activation]]:
    if functions is None:
        return [None] * layers
    if len(functions) != layers:
        raise ValueError(f"{name} needs {layers} entries, got {len(functions)}")
    return list(functions)


def mlp_predict(
    inp: Sequence[float],
    sizes: Sequence[int],
    weights: Sequence[Sequence[float]],
    biases: Sequence[Sequence[float]],
    acts: Optional[Sequence[Optional[Activation]]] = None,
) -> list[list[float]]:
    """Run the network on ``inp``; return the output of every layer.

    The last entry is the network's output. A missing activation passes
    values through unchanged.
    """
    layers = _check_network(sizes, weights, biases)
    if len(inp) != sizes[0]:
        raise ValueError(f"input holds {len(inp)} values, {sizes[0]} are needed")
    activations = _per_layer(acts, layers, "acts")

    outputs: list[list[float]] = []
    current: Sequence[float] = inp
    for outc, w, b, act in zip(sizes[1:], weights, biases, activations):
        current = layer_predict(current, w, b, outc, act)
        outputs.append(current)
    return outputs


def mlp_backpropagate(
    inp: Sequence[float],
    delta: Sequence[float],
    sizes: Sequence[int],
    outputs: Sequence[Sequence[float]],
    weights: Sequence[MutableSequence[float]],
    biases: Sequence[MutableSequence[float]],
    actderivs: Optional[Sequence[Optional[Activation]]],
    learningrate: float,
    learningrate_bias: float,
) -> list[list[float]]:
    """Update every layer from the output-layer ``delta``, last layer first.

    ``outputs`` are the layer outputs of the forward pass (as returned by
    :func:`mlp_predict`; the final output may be left out). Each layer is
    updated before its error is sent back through the updated weights.
    Returns the delta of every layer, the given ``delta`` last.
    """
    layers = _check_network(sizes, weights, biases)
    if len(inp) != sizes[0]:
        raise ValueError(f"input holds {len(inp)} values, {sizes[0]} are needed")
    if len(delta) != sizes[-1]:
        raise ValueError(f"delta holds {len(delta)} values, {sizes[-1]} are needed")
    if len(outputs) < layers - 1:
        raise ValueError(
            f"{len(outputs)} layer outputs given, at least {layers - 1} are needed"
        )
    for k, out in enumerate(outputs[: layers - 1]):
        if len(out) != sizes[k + 1]:
            raise ValueError(
                f"output of layer {k} holds {len(out)} values, {sizes[k + 1]} are needed"
            )
    derivatives = _per_layer(actderivs, layers, "actderivs")

    deltas: list[list[float]] = [[] for _ in range(layers)]
    deltas[-1] = list(delta)
    for k in range(layers - 1, 0, -1):
        layer_input = outputs[k - 1]
        layer_follow(
            layer_input, deltas[k], weights[k], biases[k], learningrate, learningrate_bias
        )
        derivative = derivatives[k - 1] or identity_derivative
        deltas[k - 1] = [
            derivative(layer_input, j) * hidden_delta(weights[k], deltas[k], sizes[k], j)
            for j in range(sizes[k])
        ]
    layer_follow(inp, deltas[0], weights[0], biases[0], learningrate, learningrate_bias)
    return deltas