import numpy as np
import pytest

from dnetkit import blas


def _data(n, seed=0):
    return np.random.default_rng(seed).random(n).astype(np.float32)


def test_reorg_round_trip():
    w, h, c, batch, stride = 3, 2, 4, 2, 2
    x = _data(w * h * c * batch)
    forward = blas.reorg(x, w, h, c, batch, stride, True)
    back = blas.reorg(forward, w, h, c, batch, stride, False)
    assert np.array_equal(back, x)
    assert sorted(forward.tolist()) == sorted(x.tolist())


def test_reorg_rejects_too_few_channels():
    with pytest.raises(ValueError):
        blas.reorg(_data(4), 2, 2, 1, 1, 2, True)


def test_flatten_round_trip_and_layout():
    size, layers, batch = 5, 3, 2
    x = np.arange(size * layers * batch, dtype=np.float32)
    flat = blas.flatten(x, size, layers, batch, True)
    assert flat[1] == x[size]
    assert np.array_equal(blas.flatten(flat, size, layers, batch, False), x)


def test_weighted_sum_extremes():
    a, b = _data(6, 1), _data(6, 2)
    assert np.allclose(blas.weighted_sum(a, b, np.ones(6)), a)
    assert np.allclose(blas.weighted_sum(a, b, np.zeros(6)), b)
    assert np.allclose(blas.weighted_sum(a, None, np.zeros(6)), np.zeros(6))


def test_weighted_delta_parts():
    a, b, s, dc = _data(4, 1), _data(4, 2), _data(4, 3), _data(4, 4)
    da, db, ds = blas.weighted_delta(a, b, s, dc)
    assert np.allclose(da + db, dc)
    assert np.allclose(ds, dc * (a - b))


def test_shortcut_same_shape_copies_add():
    add = _data(2 * 3 * 3 * 2)
    out = _data(2 * 3 * 3 * 2, 9)
    result = blas.shortcut(2, 3, 3, 2, add, 3, 3, 2, 0.0, 1.0, out)
    assert np.allclose(result, add)
    assert np.allclose(out, _data(2 * 3 * 3 * 2, 9))


def test_shortcut_inconsistent_shapes():
    with pytest.raises(ValueError):
        blas.shortcut(1, 4, 2, 1, _data(8), 2, 2, 1, 1.0, 1.0, _data(4))


def test_mean_and_variance_match_numpy():
    batch, filters, spatial = 3, 2, 4
    x = _data(batch * filters * spatial)
    shaped = x.reshape(batch, filters, spatial)
    m = blas.mean(x, batch, filters, spatial)
    v = blas.variance(x, m, batch, filters, spatial)
    assert np.allclose(m, shaped.mean(axis=(0, 2)), atol=1e-6)
    assert np.allclose(v, shaped.var(axis=(0, 2), ddof=1), atol=1e-6)


def test_normalize_centres_filters():
    batch, filters, spatial = 2, 3, 5
    x = _data(batch * filters * spatial)
    m = blas.mean(x, batch, filters, spatial)
    v = blas.variance(x, m, batch, filters, spatial)
    y = blas.normalize(x, m, v, batch, filters, spatial)
    assert np.allclose(y.reshape(batch, filters, spatial).mean(axis=(0, 2)), 0, atol=1e-5)


def test_l2normalize_unit_norm():
    batch, filters, spatial = 2, 3, 4
    x = _data(batch * filters * spatial) + 0.1
    normed, dx = blas.l2normalize(x, batch, filters, spatial)
    norms = np.sqrt((normed.reshape(batch, filters, spatial) ** 2).sum(axis=1))
    assert np.allclose(norms, 1, atol=1e-5)
    assert dx.shape == normed.shape


def test_losses_agree_for_small_errors():
    pred, truth = _data(8, 1) * 0.5, _data(8, 2) * 0.5
    d1, e1 = blas.smooth_l1(pred, truth)
    d2, e2 = blas.l2(pred, truth)
    assert np.allclose(d1, d2)
    assert np.allclose(e1, e2)


def test_smooth_l1_large_error_sign():
    delta, error = blas.smooth_l1([0.0, 5.0], [5.0, 0.0])
    assert delta.tolist() == [-1.0, 1.0]
    assert np.allclose(error, 2 * np.abs([5.0, -5.0]) - 1)


def test_l1_error_is_absolute_difference():
    pred, truth = _data(5, 1), _data(5, 2)
    delta, error = blas.l1(pred, truth)
    assert np.allclose(error, np.abs(truth - pred))
    assert set(delta.tolist()) <= {1.0, -1.0}


def test_cross_entropies_agree_on_positive_targets():
    pred = _data(5, 3) * 0.9 + 0.05
    truth = np.ones(5)
    d1, e1 = blas.softmax_x_ent(pred, truth)
    d2, e2 = blas.logistic_x_ent(pred, truth)
    assert np.allclose(d1, d2)
    assert np.allclose(e1, e2, atol=1e-6)


def test_softmax_x_ent_ignores_zero_targets():
    _, error = blas.softmax_x_ent([0.0, 0.5], [0.0, 1.0])
    assert error[0] == 0


def test_dot_with_ones_is_sum():
    x = _data(7)
    assert blas.dot(x, np.ones(7)) == pytest.approx(float(x.sum()), rel=1e-5)


def test_inter_deinter_round_trip():
    x, y = _data(6, 1), _data(4, 2)
    out = blas.inter(x, y, 3, 2, 2)
    xs, ys = blas.deinter(out, 3, 2, 2)
    assert np.array_equal(xs, x)
    assert np.array_equal(ys, y)


def test_softmax_sums_to_one_and_orders():
    values = [1.0, 3.0, 2.0]
    out = blas.softmax(values, 1.0)
    assert out.sum() == pytest.approx(1.0, abs=1e-6)
    assert np.argmax(out) == 1


def test_softmax_batch_groups():
    values = _data(12)
    out = blas.softmax_batch(values, 3, 2, 6, 2, 3, 1, 1.0)
    assert np.allclose(out.reshape(4, 3).sum(axis=1), 1, atol=1e-6)


def test_upsample_identity_and_backward():
    w, h, c, batch, stride = 2, 3, 2, 1, 2
    x = _data(w * h * c * batch)
    assert np.allclose(blas.upsample(x, w, h, c, batch, 1, 1.0), x)
    up = blas.upsample(x, w, h, c, batch, stride, 1.0)
    assert up.size == x.size * stride * stride
    back = blas.upsample_backward(up, w, h, c, batch, stride, 1.0)
    assert np.allclose(back, stride * stride * x, atol=1e-5)