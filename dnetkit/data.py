"""In-memory datasets: paired input and label matrices and ways to slice them."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

FLOAT = np.float32


def _empty() -> np.ndarray:
    return np.zeros((0, 0), dtype=FLOAT)


def _as_matrix(values) -> np.ndarray:
    m = np.asarray(values, dtype=FLOAT)
    if m.ndim == 1 and m.size == 0:
        return m.reshape(0, 0)
    if m.ndim != 2:
        raise ValueError("data matrices must be two-dimensional")
    return m


@dataclass
class Data:
    """Inputs ``X`` and targets ``y``, one example per row."""

    X: np.ndarray = field(default_factory=_empty)
    y: np.ndarray = field(default_factory=_empty)
    w: int = 0
    h: int = 0
    num_boxes: int = 0
    boxes: Any = None

    def __post_init__(self) -> None:
        self.X = _as_matrix(self.X)
        self.y = _as_matrix(self.y)

    @property
    def rows(self) -> int:
        return self.X.shape[0]

    def copy(self) -> "Data":
        """Deep copy of the matrices; ``boxes`` is shared."""
        return Data(
            X=self.X.copy(),
            y=self.y.copy(),
            w=self.w,
            h=self.h,
            num_boxes=self.num_boxes,
            boxes=self.boxes,
        )


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def distance_from_edge(x: int, maximum: int) -> float:
    """Closeness of ``x`` to the centre of ``[0, maximum)``, capped at 1."""
    half = _trunc_div(maximum, 2)
    dx = abs(half - x)
    dx = (half + 1 - dx) * 2
    return min(dx / maximum, 1.0)


def _concat_rows(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    if second.shape[0] == 0:
        return first.copy()
    if first.shape[0] == 0:
        return second.copy()
    if first.shape[1] != second.shape[1]:
        raise ValueError("cannot concatenate matrices with different column counts")
    return np.vstack([first, second])


def concat_data(d1: Data, d2: Data) -> Data:
    """Rows of ``d1`` followed by rows of ``d2``; sizes come from ``d1``."""
    return Data(
        X=_concat_rows(d1.X, d2.X),
        y=_concat_rows(d1.y, d2.y),
        w=d1.w,
        h=d1.h,
    )


def concat_datas(datas: Sequence[Data]) -> Data:
    """Join datasets, each one placed in front of those before it.

    The result therefore holds the last dataset's rows first.
    """
    out = Data()
    for d in datas:
        out = concat_data(d, out)
    return out


def scale_data_rows(d: Data, s: float) -> None:
    """Multiply every input value by ``s`` in place."""
    d.X *= FLOAT(s)


def translate_data_rows(d: Data, s: float) -> None:
    """Add ``s`` to every input value in place."""
    d.X += FLOAT(s)


def smooth_data(d: Data) -> None:
    """Apply label smoothing (epsilon 0.1) to the targets in place."""
    if d.y.shape[1] == 0:
        return
    scale = 1.0 / d.y.shape[1]
    eps = 0.1
    d.y[:] = (eps * scale + (1 - eps) * d.y).astype(FLOAT)


def randomize_data(d: Data, rng: Optional[random.Random] = None) -> None:
    """Shuffle rows of ``X`` and ``y`` together in place."""
    rng = rng or random.Random()
    for i in range(d.X.shape[0] - 1, 0, -1):
        index = rng.randrange(i)
        d.X[[index, i]] = d.X[[i, index]]
        d.y[[index, i]] = d.y[[i, index]]


def _part_bounds(rows: int, part: int, total: int) -> tuple[int, int]:
    if total <= 0 or not 0 <= part < total:
        raise ValueError("part must lie in [0, total)")
    return rows * part // total, rows * (part + 1) // total


def get_data_part(d: Data, part: int, total: int) -> Data:
    """The ``part``-th of ``total`` consecutive slices, sharing memory with ``d``."""
    xs, xe = _part_bounds(d.X.shape[0], part, total)
    ys, ye = _part_bounds(d.y.shape[0], part, total)
    return Data(X=d.X[xs:xe], y=d.y[ys:ye])


def get_random_data(d: Data, num: int, rng: Optional[random.Random] = None) -> Data:
    """``num`` rows drawn with replacement."""
    rng = rng or random.Random()
    if num > 0 and d.X.shape[0] == 0:
        raise ValueError("cannot sample from empty data")
    indices = [rng.randrange(d.X.shape[0]) for _ in range(num)]
    return Data(
        X=d.X[indices].reshape(num, d.X.shape[1]),
        y=d.y[indices].reshape(num, d.y.shape[1]),
    )


def split_data(d: Data, part: int, total: int) -> tuple[Data, Data]:
    """Split into ``(train, test)`` where test is the ``part``-th slice."""
    start, end = _part_bounds(d.X.shape[0], part, total)
    keep = np.r_[0:start, end:d.X.shape[0]]
    train = Data(X=d.X[keep], y=d.y[keep])
    test = Data(X=d.X[start:end].copy(), y=d.y[start:end].copy())
    return train, test


def get_next_batch(d: Data, n: int, offset: int):
    """Rows ``offset`` to ``offset+n`` as flat ``(X, y)`` buffers."""
    if offset < 0 or offset + n > d.X.shape[0]:
        raise IndexError("batch extends past the end of the data")
    x = d.X[offset:offset + n].ravel().copy()
    y = d.y[offset:offset + n].ravel().copy() if d.y.shape[0] else None
    return x, y


def get_random_batch(d: Data, n: int, rng: Optional[random.Random] = None):
    """``n`` random rows as flat ``(X, y)`` buffers."""
    rng = rng or random.Random()
    if n > 0 and d.X.shape[0] == 0:
        raise ValueError("cannot sample from empty data")
    indices = [rng.randrange(d.X.shape[0]) for _ in range(n)]
    return d.X[indices].ravel().copy(), d.y[indices].ravel().copy()


def select_data(datas: Sequence[Data], inds: Sequence[int]) -> Data:
    """Row ``i`` of the result is row ``i`` of ``datas[inds[i]]``."""
    first = datas[0]
    rows = first.X.shape[0]
    X = np.array([datas[inds[i]].X[i] for i in range(rows)], dtype=FLOAT)
    y = np.array([datas[inds[i]].y[i] for i in range(rows)], dtype=FLOAT)
    return Data(
        X=X.reshape(rows, first.X.shape[1]),
        y=y.reshape(rows, first.y.shape[1]),
        w=first.w,
        h=first.h,
    )