"""A single-layer perceptron that owns its weights, bias and caches."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from tinyann.layer import (
    Activation,
    LossDerivative,
    layer_delta,
    layer_fit,
    layer_follow,
    layer_predict,
)

__all__ = ["Slp"]


@dataclass
class Slp:
    """A fully connected layer with ``inc`` inputs and ``outc`` outputs.

    ``weight`` is flat and row-major: ``weight[i * inc + j]`` connects input
    ``j`` to output ``i``. ``cacheact`` holds the outputs of the last
    prediction and ``cachedelta`` the last computed delta.
    """

    inc: int
    outc: int
    lossderiv: Optional[LossDerivative]
    act: Optional[Activation] = None
    actderiv: Optional[Activation] = None
    learningrate: float = 0.1
    learningrate_bias: float = 0.1
    weight: list[float] = field(default_factory=list)
    bias: list[float] = field(default_factory=list)
    cachedelta: list[float] = field(default_factory=list)
    cacheact: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.inc < 0 or self.outc < 0:
            raise ValueError("layer sizes must not be negative")
        if not self.weight:
            self.weight = [0.0] * (self.inc * self.outc)
        if not self.bias:
            self.bias = [0.0] * self.outc
        if not self.cachedelta:
            self.cachedelta = [0.0] * self.outc
        if not self.cacheact:
            self.cacheact = [0.0] * self.outc
        if len(self.weight) != self.inc * self.outc:
            raise ValueError(
                f"weight holds {len(self.weight)} values, "
                f"{self.inc * self.outc} are needed"
            )
        if len(self.bias) != self.outc:
            raise ValueError(f"bias holds {len(self.bias)} values, {self.outc} are needed")

    @classmethod
    def create(
        cls,
        inc: int,
        outc: int,
        lossderiv: Optional[LossDerivative],
        act: Optional[Activation] = None,
        actderiv: Optional[Activation] = None,
        learningrate: float = 0.1,
        learningrate_bias: float = 0.1,
    ) -> "Slp":
        """Make a layer with all weights, biases and caches set to zero."""
        return cls(
            inc=inc,
            outc=outc,
            lossderiv=lossderiv,
            act=act,
            actderiv=actderiv,
            learningrate=learningrate,
            learningrate_bias=learningrate_bias,
        )

    def _check_input(self, inp: Sequence[float]) -> None:
        if len(inp) != self.inc:
            raise ValueError(f"input holds {len(inp)} values, {self.inc} are needed")

    def _check_output(self, values: Sequence[float], name: str) -> None:
        if len(values) != self.outc:
            raise ValueError(f"{name} holds {len(values)} values, {self.outc} are needed")

    def predict(self, inp: Sequence[float]) -> list[float]:
        """Return the activated outputs for ``inp`` and keep them in ``cacheact``."""
        self._check_input(inp)
        out = layer_predict(inp, self.weight, self.bias, self.outc, self.act)
        self.cacheact = list(out)
        return out

    def fetch_delta(
        self, out: Sequence[float], out_desired: Sequence[float]
    ) -> list[float]:
        """Return the delta of ``out`` against ``out_desired`` and cache it."""
        self._check_output(out, "output")
        self._check_output(out_desired, "desired output")
        delta = layer_delta(out, out_desired, self.actderiv, self.lossderiv)
        self.cachedelta = list(delta)
        return delta

    def follow(self, inp: Sequence[float], delta: Sequence[float]) -> None:
        """Update weights and bias from ``inp`` and a given ``delta``."""
        self._check_input(inp)
        self._check_output(delta, "delta")
        layer_follow(
            inp, delta, self.weight, self.bias, self.learningrate, self.learningrate_bias
        )

    def fit(
        self,
        inp: Sequence[float],
        out: Sequence[float],
        out_desired: Sequence[float],
    ) -> list[float]:
        """Compute the delta of ``out`` and apply it to the layer; return the delta."""
        self._check_input(inp)
        self._check_output(out, "output")
        self._check_output(out_desired, "desired output")
        delta = layer_fit(
            inp,
            out,
            out_desired,
            self.weight,
            self.bias,
            self.actderiv,
            self.lossderiv,
            self.learningrate,
            self.learningrate_bias,
        )
        self.cachedelta = list(delta)
        return delta

    def train(self, inp: Sequence[float], out_desired: Sequence[float]) -> list[float]:
        """Predict on ``inp``, then fit towards ``out_desired``.

        Returns the outputs predicted before the update.
        """
        if self.lossderiv is None:
            raise ValueError("a loss derivative is required")
        out = self.predict(inp)
        self.fit(inp, out, out_desired)
        return out