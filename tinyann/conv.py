"""Convolution and pooling over flat, row-major n-dimensional arrays."""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import IntEnum
from itertools import product
from typing import Optional

__all__ = ["PoolType", "conv1d", "pool1d", "conv", "pool"]

_FLT_MAX = 3.4028234663852886e38


class PoolType(IntEnum):
    """How a pooling window is reduced."""

    MAX = 0
    MIN = 1
    ADD = 2
    AVG = 3

    @property
    def is_additive(self) -> bool:
        return bool(self & 0b10)


def conv1d(
    inp: Sequence[float], kernel: Sequence[float], stride: int = 1, pad: int = 0
) -> list[float]:
    """One-dimensional convolution with zero padding on both ends."""
    if stride <= 0:
        raise ValueError("stride must be positive")
    if pad < 0:
        raise ValueError("pad must not be negative")
    infc, ingc = len(inp), len(kernel)
    if infc + 2 * pad < ingc:
        raise ValueError("kernel is longer than the padded input")
    outc = (infc - ingc + 2 * pad) // stride + 1
    out = [0.0] * outc
    if outc <= 2 * pad:
        return out
    for i in range(outc):
        begin = i * stride
        total = 0.0
        for j, g in enumerate(kernel):
            pos = begin + j
            if pad <= pos < infc + pad:
                total += inp[pos - pad] * g
        out[i] = total
    return out


def pool1d(
    inp: Sequence[float],
    window: int,
    stride: int = 1,
    pool_type: PoolType = PoolType.MAX,
    out: Optional[Sequence[float]] = None,
) -> list[float]:
    """One-dimensional pooling.

    When ``out`` is given, each window is folded into the matching value of
    ``out`` instead of starting afresh, and averages are not divided.
    """
    pool_type = PoolType(pool_type)
    if stride <= 0:
        raise ValueError("stride must be positive")
    if window < 0 or len(inp) < window:
        raise ValueError("window does not fit the input")
    outc = 1 + (len(inp) - window) // stride
    if out is not None and len(out) < outc:
        raise ValueError(f"out holds {len(out)} values, {outc} are needed")
    if window == 0:
        return list(out[:outc]) if out is not None else [0.0] * outc

    result = []
    for i in range(outc):
        begin = i * stride
        if out is not None:
            acc = float(out[i])
        elif pool_type.is_additive:
            acc = 0.0
        else:
            acc = float(inp[begin])
        for value in inp[begin : begin + window]:
            if pool_type.is_additive:
                acc += value
            elif pool_type is PoolType.MAX:
                acc = max(acc, value)
            else:
                acc = min(acc, value)
        if pool_type is PoolType.AVG and out is None:
            acc /= window
        result.append(acc)
    return result


def _per_dim(values: Optional[Sequence[int]], dim: int, default: int, name: str) -> list[int]:
    if values is None:
        return [default] * dim
    if len(values) != dim:
        raise ValueError(f"{name} needs {dim} values, got {len(values)}")
    return list(values)


def _row_major_strides(dims: Sequence[int]) -> list[int]:
    strides = [1] * len(dims)
    for i in range(len(dims) - 2, -1, -1):
        strides[i] = strides[i + 1] * dims[i + 1]
    return strides


def _check_size(values: Sequence[float], dims: Sequence[int], name: str) -> None:
    if len(values) != math.prod(dims):
        raise ValueError(f"{name} holds {len(values)} values, dims give {math.prod(dims)}")


def conv(
    inp: Sequence[float],
    in_dims: Sequence[int],
    kernel: Sequence[float],
    kernel_dims: Sequence[int],
    stride: Optional[Sequence[int]] = None,
    pad: Optional[Sequence[int]] = None,
) -> tuple[list[float], tuple[int, ...]]:
    """N-dimensional convolution; returns the flat output and its dimensions."""
    dim = len(in_dims)
    if dim == 0:
        raise ValueError("at least one dimension is required")
    if len(kernel_dims) != dim:
        raise ValueError("input and kernel must have the same number of dimensions")
    _check_size(inp, in_dims, "input")
    _check_size(kernel, kernel_dims, "kernel")
    strides = _per_dim(stride, dim, 1, "stride")
    pads = _per_dim(pad, dim, 0, "pad")

    out_dims = []
    for n, k, s, p in zip(in_dims, kernel_dims, strides, pads):
        if s <= 0:
            raise ValueError("stride must be positive")
        if p < 0:
            raise ValueError("pad must not be negative")
        if n + 2 * p < k:
            raise ValueError("kernel is larger than the padded input")
        out_dims.append((n - k + 2 * p) // s + 1)

    in_strides = _row_major_strides(in_dims)
    geometry = list(zip(strides, pads, in_dims, in_strides))
    kernel_positions = list(enumerate(product(*(range(k) for k in kernel_dims))))

    out = []
    for out_index in product(*(range(n) for n in out_dims)):
        acc = 0.0
        for k_pos, k_index in kernel_positions:
            offset = 0
            for o, f, (s, p, n, st) in zip(out_index, k_index, geometry):
                c = o * s + f - p
                if not 0 <= c < n:
                    break
                offset += c * st
            else:
                acc += inp[offset] * kernel[k_pos]
        out.append(acc)
    return out, tuple(out_dims)


def pool(
    inp: Sequence[float],
    in_dims: Sequence[int],
    window: Sequence[int],
    stride: Optional[Sequence[int]] = None,
    pool_type: PoolType = PoolType.MAX,
) -> tuple[list[float], tuple[int, ...]]:
    """N-dimensional pooling; returns the flat output and its dimensions."""
    pool_type = PoolType(pool_type)
    dim = len(in_dims)
    if dim == 0:
        raise ValueError("at least one dimension is required")
    if len(window) != dim:
        raise ValueError("window needs one value per dimension")
    _check_size(inp, in_dims, "input")
    strides = _per_dim(stride, dim, 1, "stride")

    out_dims = []
    for n, w, s in zip(in_dims, window, strides):
        if s <= 0:
            raise ValueError("stride must be positive")
        if w < 0 or n < w:
            raise ValueError("window does not fit the input")
        out_dims.append((n - w) // s + 1)

    in_strides = _row_major_strides(in_dims)
    window_indices = list(product(*(range(w) for w in window)))
    window_size = len(window_indices)

    out = []
    for out_index in product(*(range(n) for n in out_dims)):
        if pool_type is PoolType.MAX:
            acc = -_FLT_MAX
        elif pool_type is PoolType.MIN:
            acc = _FLT_MAX
        else:
            acc = 0.0
        for w_index in window_indices:
            offset = sum(
                (o * s + w) * st
                for o, w, s, st in zip(out_index, w_index, strides, in_strides)
            )
            value = inp[offset]
            if pool_type.is_additive:
                acc += value
            elif pool_type is PoolType.MAX:
                acc = max(acc, value)
            else:
                acc = min(acc, value)
        if pool_type is PoolType.AVG and window_size:
            acc /= window_size
        out.append(acc)
    return out, tuple(out_dims)