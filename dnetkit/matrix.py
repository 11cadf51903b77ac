"""Row-major float matrices: construction, resizing, CSV and accuracy helpers."""

from __future__ import annotations

import csv
import math
import random
from typing import Optional

import numpy as np

FLOAT = np.float32


def make_matrix(rows, cols) -> np.ndarray:
    """Return a zero-filled ``rows`` x ``cols`` matrix."""
    if rows < 0 or cols < 0:
        raise ValueError("matrix dimensions must not be negative")
    return np.zeros((rows, cols), dtype=FLOAT)


def _top_k(row: np.ndarray, k: int) -> np.ndarray:
    return np.argsort(-row, kind="stable")[:k]


def matrix_topk_accuracy(truth, guess, k) -> float:
    """Fraction of rows whose true class is among the ``k`` highest guesses."""
    truth = np.asarray(truth, dtype=FLOAT)
    guess = np.asarray(guess, dtype=FLOAT)
    if truth.shape[0] == 0:
        return math.nan
    correct = sum(
        1
        for truth_row, guess_row in zip(truth, guess)
        if any(truth_row[cls] for cls in _top_k(guess_row[: truth.shape[1]], k))
    )
    return correct / truth.shape[0]


def resize_matrix(m, size) -> np.ndarray:
    """Return ``m`` with ``size`` rows, truncating or appending zero rows."""
    m = np.asarray(m, dtype=FLOAT)
    if size < 0:
        raise ValueError("size must not be negative")
    rows, cols = m.shape
    if size <= rows:
        return m[:size].copy()
    return np.vstack([m, np.zeros((size - rows, cols), dtype=FLOAT)])


def hold_out_matrix(m, n, rng: Optional[random.Random] = None):
    """Remove ``n`` random rows; return ``(held_out, remaining)``.

    Each picked row is replaced by the current last row, so the order of the
    remaining rows follows the same swap-with-last scheme.
    """
    rng = rng or random.Random()
    rows = list(np.asarray(m, dtype=FLOAT))
    cols = np.asarray(m).shape[1] if np.asarray(m).ndim == 2 else 0
    if n > len(rows):
        raise ValueError("cannot hold out more rows than the matrix has")
    held = []
    for _ in range(n):
        index = rng.randrange(len(rows))
        held.append(rows[index])
        last = rows.pop()
        if index < len(rows):
            rows[index] = last
    held_m = np.array(held, dtype=FLOAT).reshape(n, cols)
    rest_m = np.array(rows, dtype=FLOAT).reshape(len(rows), cols)
    return held_m, rest_m


def pop_column(m, c):
    """Remove column ``c``; return ``(column, remaining)``."""
    m = np.asarray(m, dtype=FLOAT)
    if not 0 <= c < m.shape[1]:
        raise IndexError("column index out of range")
    return m[:, c].copy(), np.delete(m, c, axis=1)


def _parse_field(text: str) -> float:
    text = text.strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def csv_to_matrix(path) -> np.ndarray:
    """Read a CSV file of numbers; the first row fixes the column count."""
    with open(path, newline="") as handle:
        rows = [row for row in csv.reader(handle)]
    if not rows:
        return make_matrix(0, 0)
    cols = len(rows[0])
    out = np.full((len(rows), cols), np.nan, dtype=FLOAT)
    for out_row, fields in zip(out, rows):
        values = [_parse_field(f) for f in fields[:cols]]
        out_row[: len(values)] = values
    return out


def matrix_to_csv(m) -> str:
    """Render a matrix as CSV text with full precision."""
    m = np.asarray(m, dtype=FLOAT)
    return "".join(
        ",".join(f"{float(v):.17g}" for v in row) + "\n" for row in m
    )


def format_matrix(m) -> str:
    """Render a matrix inside a box, one row per line."""
    m = np.asarray(m, dtype=FLOAT)
    rows, cols = m.shape
    pad = " " * max(0, 16 * cols - 1)
    lines = [
        f"{rows} X {cols} Matrix:",
        f" __{pad}__ ",
        f"|  {pad}  |",
    ]
    for row in m:
        lines.append("|  " + "".join(f"{float(v):15.7f} " for v in row) + " |")
    lines.append(f"|__{pad}__|")
    return "\n".join(lines) + "\n"