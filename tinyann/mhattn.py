"""Multi-head scaled dot-product attention with forward and backward passes.

Sequences are lists of rows: ``query[s]`` is the model vector at position ``s``
and holds ``mdldist`` values. Weight matrices are ``mdldist`` by ``mdldist``
lists of rows; a projection is ``x @ w``, so ``w[j][k]`` maps feature ``j`` of
the input to feature ``k`` of the result. Head ``h`` uses the features
``h * kdist`` up to ``(h + 1) * kdist`` of every projected row.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Optional

__all__ = [
    "softmax",
    "softmax_derivative",
    "AttentionOutput",
    "AttentionGradients",
    "MultiHeadAttention",
]

Matrix = list[list[float]]
RowActivation = Callable[[Sequence[float], int], float]
RowActivationDerivative = Callable[[Sequence[float], Sequence[float], int], float]


def softmax(values: Sequence[float], index: int) -> float:
    """Softmax of ``values`` at position ``index``."""
    top = max(values)
    exps = [math.exp(v - top) for v in values]
    return exps[index] / sum(exps)


def softmax_derivative(
    grad: Sequence[float], softmax_out: Sequence[float], index: int
) -> float:
    """Gradient at the softmax input ``index`` given the gradient at its output."""
    weighted = sum(g * s for g, s in zip(grad, softmax_out))
    return softmax_out[index] * (grad[index] - weighted)


def _transpose(m: Sequence[Sequence[float]]) -> Matrix:
    return [list(col) for col in zip(*m)]


def _matmul(a: Sequence[Sequence[float]], b: Sequence[Sequence[float]]) -> Matrix:
    cols = _transpose(b)
    return [[sum(x * y for x, y in zip(row, col)) for col in cols] for row in a]


def _columns(m: Sequence[Sequence[float]], start: int, stop: int) -> Matrix:
    return [list(row[start:stop]) for row in m]


def _check_matrix(m: Sequence[Sequence[float]], rows: int, cols: int, name: str) -> None:
    if len(m) != rows or any(len(row) != cols for row in m):
        raise ValueError(f"{name} must be {rows} by {cols}")


@dataclass
class AttentionOutput:
    """Everything a forward pass produces.

    ``attnw[h]`` and ``attno[h]`` are the attention weights
    (seqlen by seqlen) and the attended values (seqlen by kdist) of head ``h``;
    ``q``, ``k`` and ``v`` are the projected inputs (seqlen by mdldist).
    """

    out: Matrix
    attnw: list[Matrix]
    attno: list[Matrix]
    q: Matrix
    k: Matrix
    v: Matrix


@dataclass
class AttentionGradients:
    """Gradients of the four weight matrices."""

    wqry: Matrix
    wkey: Matrix
    wval: Matrix
    wout: Matrix


@dataclass
class MultiHeadAttention:
    """Attention over ``headc`` heads sharing a model width of ``mdldist``."""

    mdldist: int
    headc: int
    wqry: Matrix = field(default_factory=list)
    wkey: Matrix = field(default_factory=list)
    wval: Matrix = field(default_factory=list)
    wout: Matrix = field(default_factory=list)
    act: RowActivation = softmax
    actderiv: RowActivationDerivative = softmax_derivative

    def __post_init__(self) -> None:
        if self.mdldist <= 0 or self.headc <= 0:
            raise ValueError("model width and head count must be positive")
        if self.mdldist % self.headc:
            raise ValueError("model width must be a multiple of the head count")
        n = self.mdldist
        for name in ("wqry", "wkey", "wval", "wout"):
            weights = getattr(self, name)
            if not weights:
                setattr(self, name, [[0.0] * n for _ in range(n)])
            else:
                _check_matrix(weights, n, n, name)

    def kdist(self) -> int:
        """Width of one head."""
        return self.mdldist // self.headc

    def _heads(self, m: Matrix) -> list[Matrix]:
        kd = self.kdist()
        return [_columns(m, h * kd, (h + 1) * kd) for h in range(self.headc)]

    def _check_sequence(self, seq: Sequence[Sequence[float]], seqlen: int, name: str) -> None:
        _check_matrix(seq, seqlen, self.mdldist, name)

    def forward(
        self,
        query: Sequence[Sequence[float]],
        key: Sequence[Sequence[float]],
        value: Sequence[Sequence[float]],
        mask: Optional[Sequence[Sequence[float]]] = None,
    ) -> AttentionOutput:
        """Attend ``query`` over ``key`` and ``value``.

        ``mask`` (seqlen by seqlen) is added to the scaled scores of every head.
        """
        seqlen = len(query)
        if seqlen == 0:
            raise ValueError("sequence must not be empty")
        for seq, name in ((query, "query"), (key, "key"), (value, "value")):
            self._check_sequence(seq, seqlen, name)
        if mask is not None:
            _check_matrix(mask, seqlen, seqlen, "mask")

        q = _matmul(query, self.wqry)
        k = _matmul(key, self.wkey)
        v = _matmul(value, self.wval)
        scale = 1.0 / math.sqrt(self.kdist())

        attnw: list[Matrix] = []
        attno: list[Matrix] = []
        for qh, kh, vh in zip(self._heads(q), self._heads(k), self._heads(v)):
            scores = [
                [
                    sum(a * b for a, b in zip(qrow, krow)) * scale
                    + (mask[i][j] if mask is not None else 0.0)
                    for j, krow in enumerate(kh)
                ]
                for i, qrow in enumerate(qh)
            ]
            weights = [[self.act(row, j) for j in range(seqlen)] for row in scores]
            attnw.append(weights)
            attno.append(_matmul(weights, vh))

        concat = [sum((head[s] for head in attno), []) for s in range(seqlen)]
        out = _matmul(concat, self.wout)
        return AttentionOutput(out=out, attnw=attnw, attno=attno, q=q, k=k, v=v)

    def backward(
        self,
        grad_out: Sequence[Sequence[float]],
        query: Sequence[Sequence[float]],
        key: Sequence[Sequence[float]],
        value: Sequence[Sequence[float]],
        forward_output: AttentionOutput,
    ) -> AttentionGradients:
        """Gradients of the weights given the gradient at the output."""
        seqlen = len(query)
        for seq, name in (
            (grad_out, "grad_out"),
            (query, "query"),
            (key, "key"),
            (value, "value"),
        ):
            self._check_sequence(seq, seqlen, name)
        fwd = forward_output
        if len(fwd.attnw) != self.headc or len(fwd.attno) != self.headc:
            raise ValueError("forward output does not match the head count")

        kd = self.kdist()
        scale = 1.0 / math.sqrt(kd)
        concat = [sum((head[s] for head in fwd.attno), []) for s in range(seqlen)]
        grad_wout = _matmul(_transpose(concat), grad_out)
        grad_concat = _matmul(grad_out, _transpose(self.wout))

        grad_q: Matrix = [[0.0] * self.mdldist for _ in range(seqlen)]
        grad_k: Matrix = [[0.0] * self.mdldist for _ in range(seqlen)]
        grad_v: Matrix = [[0.0] * self.mdldist for _ in range(seqlen)]

        heads = zip(
            self._heads(grad_concat),
            fwd.attnw,
            self._heads(fwd.q),
            self._heads(fwd.k),
            self._heads(fwd.v),
        )
        for h, (gh, weights, qh, kh, vh) in enumerate(heads):
            grad_vh = _matmul(_transpose(weights), gh)
            grad_weights = _matmul(gh, _transpose(vh))
            grad_scores = [
                [self.actderiv(grow, wrow, j) * scale for j in range(seqlen)]
                for grow, wrow in zip(grad_weights, weights)
            ]
            grad_qh = _matmul(grad_scores, kh)
            grad_kh = _matmul(_transpose(grad_scores), qh)
            for target, part in ((grad_q, grad_qh), (grad_k, grad_kh), (grad_v, grad_vh)):
                for row, prow in zip(target, part):
                    row[h * kd : (h + 1) * kd] = prow

        return AttentionGradients(
            wqry=_matmul(_transpose(query), grad_q),
            wkey=_matmul(_transpose(key), grad_k),
            wval=_matmul(_transpose(value), grad_v),
            wout=grad_wout,
        )