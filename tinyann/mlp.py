"""A multi-layer perceptron that owns its weights, biases and caches."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from tinyann.layer import Activation, LossDerivative, layer_delta
from tinyann.mlp_ops import mlp_backpropagate, mlp_predict

__all__ = ["Mlp"]


@dataclass
class Mlp:
    """A fully connected network with at least one hidden layer.

    ``sizes`` holds the width of every layer, input first. Layer ``k`` maps
    ``sizes[k]`` values to ``sizes[k + 1]`` values; its weights are flat and
    row-major in ``weights[k]`` and its biases are in ``biases[k]``.
    ``outcache`` keeps the output of every layer from the last prediction and
    ``deltastream`` the delta of every layer from the last update.
    """

    sizes: tuple[int, ...]
    lossderiv: Optional[LossDerivative]
    acts: list[Optional[Activation]] = field(default_factory=list)
    actderivs: list[Optional[Activation]] = field(default_factory=list)
    learningrate: float = 0.1
    learningrate_bias: float = 0.1
    weights: list[list[float]] = field(default_factory=list)
    biases: list[list[float]] = field(default_factory=list)
    outcache: list[list[float]] = field(default_factory=list)
    deltastream: list[list[float]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sizes = tuple(self.sizes)
        if len(self.sizes) <= 2:
            raise ValueError("a network needs at least one hidden layer (depth > 2)")
        if any(size <= 0 for size in self.sizes):
            raise ValueError("layer sizes must be positive")
        if self.lossderiv is None:
            raise ValueError("a loss derivative is required")
        layers = self.layers
        widths = self.sizes[1:]
        self.acts = self._functions(self.acts, "acts")
        self.actderivs = self._functions(self.actderivs, "actderivs")
        if not self.weights:
            self.weights = [
                [0.0] * (n_in * n_out) for n_in, n_out in zip(self.sizes, widths)
            ]
        if not self.biases:
            self.biases = [[0.0] * n for n in widths]
        if not self.outcache:
            self.outcache = [[0.0] * n for n in widths]
        if not self.deltastream:
            self.deltastream = [[0.0] * n for n in widths]
        if len(self.weights) != layers or len(self.biases) != layers:
            raise ValueError(f"{layers} weight and bias vectors are needed")
        for k, (w, b) in enumerate(zip(self.weights, self.biases)):
            needed = self.sizes[k] * self.sizes[k + 1]
            if len(w) != needed:
                raise ValueError(
                    f"weights of layer {k} hold {len(w)} values, {needed} are needed"
                )
            if len(b) != self.sizes[k + 1]:
                raise ValueError(
                    f"bias of layer {k} holds {len(b)} values, "
                    f"{self.sizes[k + 1]} are needed"
                )

    def _functions(
        self, functions: Optional[Sequence[Optional[Activation]]], name: str
    ) -> list[Optional[Activation]]:
        if not functions:
            return [None] * self.layers
        if len(functions) != self.layers:
            raise ValueError(
                f"{name} needs {self.layers} entries, got {len(functions)}"
            )
        return list(functions)

    @property
    def depth(self) -> int:
        """Number of layers, input layer included."""
        return len(self.sizes)

    @property
    def layers(self) -> int:
        """Number of weighted layers."""
        return len(self.sizes) - 1

    @classmethod
    def create(
        cls,
        sizes: Sequence[int],
        lossderiv: Optional[LossDerivative],
        acts: Optional[Sequence[Optional[Activation]]] = None,
        actderivs: Optional[Sequence[Optional[Activation]]] = None,
        learningrate: float = 0.1,
        learningrate_bias: float = 0.1,
    ) -> "Mlp":
        """Make a network with all weights, biases and caches set to zero."""
        return cls(
            sizes=tuple(sizes),
            lossderiv=lossderiv,
            acts=list(acts) if acts else [],
            actderivs=list(actderivs) if actderivs else [],
            learningrate=learningrate,
            learningrate_bias=learningrate_bias,
        )

    def predict(self, inp: Sequence[float]) -> list[float]:
        """Return the network's output for ``inp``; keep every layer's output."""
        outputs = mlp_predict(inp, self.sizes, self.weights, self.biases, self.acts)
        self.outcache = [list(out) for out in outputs]
        return list(outputs[-1])

    def follow(self, inp: Sequence[float], delta: Sequence[float]) -> None:
        """Update every layer from the output-layer ``delta``.

        The hidden outputs of the last prediction are used as layer inputs.
        """
        deltas = mlp_backpropagate(
            inp,
            delta,
            self.sizes,
            self.outcache,
            self.weights,
            self.biases,
            self.actderivs,
            self.learningrate,
            self.learningrate_bias,
        )
        self.deltastream = deltas

    def train(self, inp: Sequence[float], out_desired: Sequence[float]) -> list[float]:
        """Predict on ``inp`` and update towards ``out_desired``.

        Returns the output predicted before the update.
        """
        if len(out_desired) != self.sizes[-1]:
            raise ValueError(
                f"desired output holds {len(out_desired)} values, "
                f"{self.sizes[-1]} are needed"
            )
        out = self.predict(inp)
        delta = layer_delta(out, out_desired, self.actderivs[-1], self.lossderiv)
        self.follow(inp, delta)
        return out

    def train_auto(
        self, inp: Sequence[float], out_desired: Sequence[float]
    ) -> list[float]:
        """Train like :meth:`train`, keeping the output only in ``outcache``.

        Returns the output predicted before the update, as stored in the cache.
        """
        self.train(inp, out_desired)
        return self.outcache[-1]