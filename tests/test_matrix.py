import random

import numpy as np
import pytest

from dnetkit.matrix import (
    csv_to_matrix,
    format_matrix,
    hold_out_matrix,
    make_matrix,
    matrix_to_csv,
    matrix_topk_accuracy,
    pop_column,
    resize_matrix,
)


def test_make_matrix_is_zero_filled():
    m = make_matrix(3, 4)
    assert m.shape == (3, 4)
    assert not m.any()


def test_make_matrix_rejects_negative():
    with pytest.raises(ValueError):
        make_matrix(-1, 2)


def test_topk_accuracy_perfect_and_wrong():
    truth = np.eye(3, dtype=np.float32)
    assert matrix_topk_accuracy(truth, truth, 1) == 1.0
    wrong = np.roll(truth, 1, axis=1)
    assert matrix_topk_accuracy(truth, wrong, 1) == 0.0


def test_topk_accuracy_grows_with_k():
    truth = np.eye(3, dtype=np.float32)
    guess = np.array([[0.1, 0.5, 0.4], [0.2, 0.7, 0.1], [0.3, 0.2, 0.5]], dtype=np.float32)
    a1 = matrix_topk_accuracy(truth, guess, 1)
    a3 = matrix_topk_accuracy(truth, guess, 3)
    assert a1 <= a3
    assert a3 == 1.0


def test_topk_accuracy_empty_is_nan():
    result = matrix_topk_accuracy(make_matrix(0, 3), make_matrix(0, 3), 1)
    assert str(float(result)) == "nan"


def test_resize_grow_and_shrink():
    m = np.arange(6, dtype=np.float32).reshape(2, 3)
    grown = resize_matrix(m, 4)
    assert grown.shape == (4, 3)
    assert np.array_equal(grown[:2], m)
    assert not grown[2:].any()
    shrunk = resize_matrix(m, 1)
    assert np.array_equal(shrunk, m[:1])


def test_hold_out_partitions_rows():
    m = np.arange(20, dtype=np.float32).reshape(5, 4)
    held, rest = hold_out_matrix(m, 2, random.Random(7))
    assert held.shape == (2, 4)
    assert rest.shape == (3, 4)
    combined = sorted(tuple(r) for r in np.vstack([held, rest]))
    assert combined == sorted(tuple(r) for r in m)


def test_hold_out_too_many():
    with pytest.raises(ValueError):
        hold_out_matrix(make_matrix(2, 2), 3, random.Random(0))


def test_pop_column():
    m = np.arange(12, dtype=np.float32).reshape(3, 4)
    col, rest = pop_column(m, 1)
    assert np.array_equal(col, m[:, 1])
    assert np.array_equal(rest, np.delete(m, 1, axis=1))


def test_pop_column_out_of_range():
    with pytest.raises(IndexError):
        pop_column(make_matrix(2, 2), 5)


def test_csv_round_trip(tmp_path):
    m = np.array([[0.1, -2.5, 3.0], [1e-7, 42.0, -0.333]], dtype=np.float32)
    path = tmp_path / "m.csv"
    path.write_text(matrix_to_csv(m))
    back = csv_to_matrix(path)
    assert back.shape == m.shape
    assert np.array_equal(back, m)


def test_csv_empty_field_is_nan(tmp_path):
    path = tmp_path / "m.csv"
    path.write_text("1,,3\n")
    back = csv_to_matrix(path)
    assert str(float(back[0, 1])) == "nan"
    assert back[0, 2] == 3.0


def test_format_matrix_layout():
    text = format_matrix(make_matrix(2, 3))
    lines = text.splitlines()
    assert lines[0] == "2 X 3 Matrix:"
    assert len(lines) == 2 + 4
    assert all(line.startswith("|") for line in lines[2:])