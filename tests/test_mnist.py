import struct

import numpy as np
import pytest

from dnetkit.mnist import (
    MnistFormatError,
    load_mnist,
    load_mnist_images,
    load_mnist_labels,
    swap_bytes,
)


def write_images(path, images, rows, cols, magic=2051):
    header = struct.pack(">4I", magic, len(images), rows, cols)
    path.write_bytes(header + bytes(b for img in images for b in img))
    return path


def write_labels(path, labels, magic=2049):
    path.write_bytes(struct.pack(">2I", magic, len(labels)) + bytes(labels))
    return path


def test_swap_bytes_example():
    assert swap_bytes(0xAABBCCDD) == 0xDDCCBBAA


@pytest.mark.parametrize("value", [0, 1, 2051, 0x12345678, 0xFFFFFFFF])
def test_swap_bytes_involution(value):
    assert swap_bytes(swap_bytes(value)) == value


def test_load_images(tmp_path):
    path = write_images(tmp_path / "img", [[0, 255, 0, 255], [255, 0, 0, 0]], 2, 2)
    d = load_mnist_images(path)
    assert d.X.shape == (2, 4)
    assert d.X[0].tolist() == pytest.approx([0, 1, 0, 1])
    assert d.X[1, 0] == pytest.approx(1.0)
    assert d.y.shape[0] == 0


def test_load_images_bad_magic(tmp_path):
    path = write_images(tmp_path / "img", [[0]], 1, 1, magic=2049)
    with pytest.raises(MnistFormatError, match="Invalid MNIST image file!"):
        load_mnist_images(path)


def test_load_images_truncated(tmp_path):
    path = tmp_path / "img"
    path.write_bytes(struct.pack(">4I", 2051, 3, 2, 2) + bytes(4))
    with pytest.raises(MnistFormatError):
        load_mnist_images(path)


def test_load_labels_one_hot(tmp_path):
    labels = [3, 0, 9, 3]
    y = load_mnist_labels(write_labels(tmp_path / "lbl", labels))
    assert y.shape == (4, 10)
    assert np.argmax(y, axis=1).tolist() == labels
    assert y.sum(axis=1).tolist() == [1, 1, 1, 1]


def test_load_labels_bad_magic(tmp_path):
    path = write_labels(tmp_path / "lbl", [1], magic=2051)
    with pytest.raises(MnistFormatError, match="Invalid MNIST label file!"):
        load_mnist_labels(path)


def test_load_labels_out_of_range(tmp_path):
    with pytest.raises(MnistFormatError):
        load_mnist_labels(write_labels(tmp_path / "lbl", [10]))


def test_load_mnist_pairs(tmp_path):
    images = write_images(tmp_path / "img", [[255], [0]], 1, 1)
    labels = write_labels(tmp_path / "lbl", [7, 2])
    d = load_mnist(images, labels)
    assert d.X.ravel().tolist() == pytest.approx([1.0, 0.0])
    assert np.argmax(d.y, axis=1).tolist() == [7, 2]


def test_load_mnist_count_mismatch(tmp_path):
    images = write_images(tmp_path / "img", [[255]], 1, 1)
    labels = write_labels(tmp_path / "lbl", [7, 2])
    with pytest.raises(MnistFormatError):
        load_mnist(images, labels)