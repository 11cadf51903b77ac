"""Readers for the MNIST IDX image and label files."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from .data import Data, scale_data_rows
from .matrix import make_matrix

IMAGE_MAGIC = 2051
LABEL_MAGIC = 2049
NUM_CLASSES = 10

FLOAT = np.float32


class MnistFormatError(ValueError):
    """Raised when a file is not a valid MNIST IDX file."""


def swap_bytes(value: int) -> int:
    """Reverse the byte order of a 32-bit unsigned value."""
    return int.from_bytes((value & 0xFFFFFFFF).to_bytes(4, "little"), "big")


def _header(raw: bytes, count: int, path) -> tuple:
    size = 4 * count
    if len(raw) < size:
        raise MnistFormatError(f"{path}: truncated header")
    return struct.unpack(f">{count}I", raw[:size])


def load_mnist_images(path) -> Data:
    """Images as rows of pixels scaled to [0, 1]; targets are left empty."""
    raw = Path(path).read_bytes()
    magic = _header(raw, 1, path)[0]
    if magic != IMAGE_MAGIC:
        raise MnistFormatError("Invalid MNIST image file!")
    _, count, rows, cols = _header(raw, 4, path)
    image_size = rows * cols
    pixels = np.frombuffer(raw, dtype=np.uint8, offset=16)
    if pixels.size < count * image_size:
        raise MnistFormatError(f"{path}: truncated image data")
    d = Data(X=pixels[: count * image_size].reshape(count, image_size).astype(FLOAT))
    scale_data_rows(d, 1.0 / 255)
    return d


def load_mnist_labels(path) -> np.ndarray:
    """Labels as one-hot rows over the ten digit classes."""
    raw = Path(path).read_bytes()
    magic = _header(raw, 1, path)[0]
    if magic != LABEL_MAGIC:
        raise MnistFormatError("Invalid MNIST label file!")
    _, count = _header(raw, 2, path)
    labels = np.frombuffer(raw, dtype=np.uint8, offset=8)
    if labels.size < count:
        raise MnistFormatError(f"{path}: truncated label data")
    labels = labels[:count].astype(np.int64)
    if (labels >= NUM_CLASSES).any():
        raise MnistFormatError(f"{path}: label outside 0-9")
    y = make_matrix(count, NUM_CLASSES)
    y[np.arange(count), labels] = 1
    return y


def load_mnist(images_path, labels_path) -> Data:
    """Images paired with their labels."""
    d = load_mnist_images(images_path)
    y = load_mnist_labels(labels_path)
    if y.shape[0] != d.X.shape[0]:
        raise MnistFormatError("image and label counts differ")
    d.y = y
    return d