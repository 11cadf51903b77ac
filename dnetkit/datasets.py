"""Loaders for labelled datasets: path lists, label files and binary dumps."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .data import Data, scale_data_rows, smooth_data
from .matrix import csv_to_matrix, make_matrix, pop_column
from .options import read_lines
from .tree import Tree

FLOAT = np.float32

SECRET_NUM = -1234.0
"""Marker written into targets that should be ignored by the loss."""

CIFAR_RECORDS = 10000
CIFAR_PIXELS = 3072
CIFAR_CLASSES = 10
GO_BOARD = 19 * 19

_TAG_REPLACEMENTS = (("images", "labels"), (".jpg", ".txt"))
_REGRESSION_REPLACEMENTS = (
    ("images", "labels"),
    ("JPEGImages", "labels"),
    (".BMP", ".txt"),
    (".JPEG", ".txt"),
    (".JPG", ".txt"),
    (".JPeG", ".txt"),
    (".Jpeg", ".txt"),
    (".PNG", ".txt"),
    (".TIF", ".txt"),
    (".bmp", ".txt"),
    (".jpeg", ".txt"),
    (".jpg", ".txt"),
    (".png", ".txt"),
    (".tif", ".txt"),
)
_GO_MOVE = re.compile(r"\s*([+-]?\d+)\s+([+-]?\d+)")


def _replace_chain(path: str, replacements) -> str:
    for find, replace in replacements:
        path = path.replace(find, replace, 1)
    return path


def _leading_numbers(text: str, convert) -> list:
    values = []
    for token in text.split():
        try:
            values.append(convert(token))
        except ValueError:
            break
    return values


def get_paths(path) -> list:
    """Lines of a list file, one path per line."""
    return read_lines(path)


def get_labels(path) -> list:
    """Class names listed one per line."""
    return read_lines(path)


def fill_truth(path: str, labels: Sequence[str], k: int) -> np.ndarray:
    """One-hot target marking every label whose name occurs in ``path``."""
    truth = np.zeros(k, dtype=FLOAT)
    count = 0
    for i, label in enumerate(labels[:k]):
        if label in path:
            truth[i] = 1
            count += 1
    if count != 1 and (k != 1 or count != 0):
        print(f"Too many or too few labels: {count}, {path}", file=sys.stderr)
    return truth


def fill_hierarchy(truth, k: int, hierarchy: Tree) -> np.ndarray:
    """Propagate set labels to their ancestors and mask groups with no label."""
    out = np.array(truth, dtype=FLOAT).ravel()
    for j in range(k):
        if out[j]:
            parent = hierarchy.parent[j]
            while parent >= 0:
                out[parent] = 1
                parent = hierarchy.parent[parent]
    count = 0
    for size in hierarchy.group_size:
        block = out[count:count + size]
        if not block.any():
            block[:] = SECRET_NUM
        count += size
    return out


def load_labels_paths(paths: Sequence[str], labels, k: int,
                      hierarchy: Optional[Tree] = None) -> np.ndarray:
    """Targets for each path from the label names it contains."""
    y = make_matrix(len(paths), k)
    if not labels:
        return y
    for row, path in zip(y, paths):
        truth = fill_truth(path, labels, k)
        if hierarchy is not None:
            truth = fill_hierarchy(truth, k, hierarchy)
        row[:] = truth
    return y


def load_tags_paths(paths: Sequence[str], k: int) -> np.ndarray:
    """Multi-hot targets read from each image's tag file; missing files give zeros."""
    y = make_matrix(len(paths), k)
    for row, path in zip(y, paths):
        label = Path(_replace_chain(path, _TAG_REPLACEMENTS))
        try:
            text = label.read_text()
        except FileNotFoundError:
            continue
        for tag in _leading_numbers(text, int):
            if 0 <= tag < k:
                row[tag] = 1
    return y


def load_regression_labels_paths(paths: Sequence[str], k: int) -> np.ndarray:
    """Read ``k`` target values from each image's label file."""
    y = make_matrix(len(paths), k)
    for row, path in zip(y, paths):
        label = Path(_replace_chain(path, _REGRESSION_REPLACEMENTS))
        values = _leading_numbers(label.read_text(), float)[:k]
        row[: len(values)] = values
    return y


def _one_hot(column: np.ndarray, k: int) -> np.ndarray:
    y = make_matrix(column.shape[0], k)
    for row, value in zip(y, column):
        index = int(value)
        if not 0 <= index < k:
            raise ValueError(f"class index {index} outside [0, {k})")
        row[index] = 1
    return y


def load_categorical_data_csv(path, target: int, k: int) -> Data:
    """CSV data whose ``target`` column holds a class index among ``k``."""
    X = csv_to_matrix(path)
    column, X = pop_column(X, target)
    return Data(X=X, y=_one_hot(column, k))


def _read_cifar_batch(path):
    raw = np.fromfile(path, dtype=np.uint8)
    needed = CIFAR_RECORDS * (CIFAR_PIXELS + 1)
    if raw.size < needed:
        raise ValueError(f"{path}: expected {needed} bytes, found {raw.size}")
    records = raw[:needed].reshape(CIFAR_RECORDS, CIFAR_PIXELS + 1)
    classes = records[:, 0].astype(np.int64)
    if (classes >= CIFAR_CLASSES).any():
        raise ValueError(f"{path}: class byte out of range")
    return records[:, 1:].astype(FLOAT), classes


def _cifar_data(pixels: np.ndarray, classes: np.ndarray) -> Data:
    y = make_matrix(classes.shape[0], CIFAR_CLASSES)
    y[np.arange(classes.shape[0]), classes] = 1
    d = Data(X=pixels, y=y)
    scale_data_rows(d, 1.0 / 255)
    return d


def load_cifar10_data(path) -> Data:
    """One CIFAR-10 binary batch, pixels scaled to [0, 1]."""
    return _cifar_data(*_read_cifar_batch(path))


def load_all_cifar10(paths: Sequence) -> Data:
    """All given CIFAR-10 training batches, scaled and label-smoothed."""
    if not paths:
        raise ValueError("no CIFAR-10 batch files given")
    batches = [_read_cifar_batch(p) for p in paths]
    d = _cifar_data(
        np.vstack([pixels for pixels, _ in batches]),
        np.concatenate([classes for _, classes in batches]),
    )
    smooth_data(d)
    return d


def load_go(path) -> Data:
    """Go positions: a ``row col`` move line followed by a 361-character board."""
    lines = read_lines(path)
    if len(lines) % 2:
        raise ValueError(f"{path}: move line without a board")
    count = len(lines) // 2
    X = make_matrix(count, GO_BOARD)
    y = make_matrix(count, GO_BOARD)
    for n, (move, board) in enumerate(zip(lines[0::2], lines[1::2])):
        match = _GO_MOVE.match(move)
        if not match:
            raise ValueError(f"{path}: bad move line {move!r}")
        index = int(match.group(1)) * 19 + int(match.group(2))
        if not 0 <= index < GO_BOARD:
            raise ValueError(f"{path}: move {move!r} off the board")
        if len(board) < GO_BOARD:
            raise ValueError(f"{path}: board line too short")
        y[n, index] = 1
        cells = np.frombuffer(board[:GO_BOARD].encode("latin-1"), dtype=np.uint8)
        X[n] = np.where(cells == ord("1"), 1.0, np.where(cells == ord("2"), -1.0, 0.0))
    return Data(X=X, y=y)