"""Dense vector and tensor kernels used by the network layers.

Every function takes array-like input and returns fresh numpy arrays;
inputs are never modified.
"""

from __future__ import annotations

import numpy as np

FLOAT = np.float32


def _arr(values) -> np.ndarray:
    return np.asarray(values, dtype=FLOAT)


def reorg(x, w, h, c, batch, stride, forward):
    """Rearrange spatial blocks into channels (or back when ``forward`` is false)."""
    x = _arr(x).ravel()
    out_c = c // (stride * stride)
    if out_c < 1:
        raise ValueError("channel count must be at least stride squared")
    b, k, j, i = np.meshgrid(
        np.arange(batch), np.arange(c), np.arange(h), np.arange(w), indexing="ij"
    )
    in_index = i + w * (j + h * (k + c * b))
    c2 = k % out_c
    offset = k // out_c
    w2 = i * stride + offset % stride
    h2 = j * stride + offset // stride
    out_index = w2 + w * stride * (h2 + h * stride * (c2 + out_c * b))
    out = np.zeros_like(x)
    if forward:
        out[out_index.ravel()] = x[in_index.ravel()]
    else:
        out[in_index.ravel()] = x[out_index.ravel()]
    return out


def flatten(x, size, layers, batch, forward):
    """Interleave channel planes per position (forward) or undo it."""
    x = _arr(x).ravel()
    if forward:
        return x.reshape(batch, layers, size).transpose(0, 2, 1).ravel().copy()
    return x.reshape(batch, size, layers).transpose(0, 2, 1).ravel().copy()


def weighted_sum(a, b, s):
    """Return ``s*a + (1-s)*b``; a missing ``b`` counts as zeros."""
    a = _arr(a)
    s = _arr(s)
    other = np.zeros_like(a) if b is None else _arr(b)
    return s * a + (1 - s) * other


def weighted_delta(a, b, s, dc):
    """Return the gradients ``(da, db, ds)`` of a weighted sum."""
    a, b, s, dc = _arr(a), _arr(b), _arr(s), _arr(dc)
    return dc * s, dc * (1 - s), dc * (a - b)


def shortcut(batch, w1, h1, c1, add, w2, h2, c2, s1, s2, out):
    """Blend ``add`` (w1 x h1 x c1) into ``out`` (w2 x h2 x c2); return the result."""
    stride = w1 // w2
    sample = w2 // w1
    if stride != h1 // h2 or sample != h2 // h1:
        raise ValueError("shortcut shapes have inconsistent aspect ratios")
    stride = max(stride, 1)
    sample = max(sample, 1)
    minw, minh, minc = min(w1, w2), min(h1, h2), min(c1, c2)
    add = _arr(add).ravel()
    result = _arr(out).ravel().copy()
    b, k, j, i = np.meshgrid(
        np.arange(batch), np.arange(minc), np.arange(minh), np.arange(minw), indexing="ij"
    )
    out_index = (i * sample + w2 * (j * sample + h2 * (k + c2 * b))).ravel()
    add_index = (i * stride + w1 * (j * stride + h1 * (k + c1 * b))).ravel()
    result[out_index] = s1 * result[out_index] + s2 * add[add_index]
    return result


def mean(x, batch, filters, spatial):
    """Per-filter mean over batch and spatial positions."""
    x = _arr(x).reshape(batch, filters, spatial)
    scale = FLOAT(1.0 / (batch * spatial))
    return (x.sum(axis=(0, 2)) * scale).astype(FLOAT)


def variance(x, mean, batch, filters, spatial):
    """Per-filter unbiased variance around the given means."""
    x = _arr(x).reshape(batch, filters, spatial)
    centre = _arr(mean).reshape(1, filters, 1)
    scale = FLOAT(1.0 / (batch * spatial - 1))
    return (((x - centre) ** 2).sum(axis=(0, 2)) * scale).astype(FLOAT)


def l2normalize(x, batch, filters, spatial):
    """Normalise across filters at each position; return ``(x, dx)``."""
    x = _arr(x).reshape(batch, filters, spatial)
    norm = np.sqrt((x ** 2).sum(axis=1, keepdims=True))
    normed = x / norm
    dx = (1 - normed) / norm
    return normed.ravel(), dx.ravel()


def normalize(x, mean, variance, batch, filters, spatial):
    """Standardise each filter with the given mean and variance."""
    x = _arr(x).reshape(batch, filters, spatial)
    m = _arr(mean).reshape(1, filters, 1)
    v = _arr(variance).reshape(1, filters, 1)
    return ((x - m) / (np.sqrt(v) + FLOAT(0.000001))).ravel()


def smooth_l1(pred, truth):
    """Smooth L1 loss; return ``(delta, error)``."""
    diff = _arr(truth) - _arr(pred)
    absolute = np.abs(diff)
    small = absolute < 1
    error = np.where(small, diff * diff, 2 * absolute - 1).astype(FLOAT)
    delta = np.where(small, diff, np.where(diff < 0, 1, -1)).astype(FLOAT)
    return delta, error


def l1(pred, truth):
    """L1 loss; return ``(delta, error)``."""
    diff = _arr(truth) - _arr(pred)
    return np.where(diff > 0, 1, -1).astype(FLOAT), np.abs(diff)


def l2(pred, truth):
    """Squared error loss; return ``(delta, error)``."""
    diff = _arr(truth) - _arr(pred)
    return diff, diff * diff


def softmax_x_ent(pred, truth):
    """Softmax cross entropy; return ``(delta, error)``."""
    p, t = _arr(pred), _arr(truth)
    with np.errstate(divide="ignore", invalid="ignore"):
        error = np.where(t != 0, -np.log(p), 0).astype(FLOAT)
    return t - p, error


def logistic_x_ent(pred, truth):
    """Logistic cross entropy; return ``(delta, error)``."""
    p, t = _arr(pred), _arr(truth)
    with np.errstate(divide="ignore", invalid="ignore"):
        error = (-t * np.log(p) - (1 - t) * np.log(1 - p)).astype(FLOAT)
    return t - p, error


def dot(x, y):
    """Inner product of two vectors."""
    return float(np.dot(_arr(x).ravel(), _arr(y).ravel()))


def inter(x, y, nx, ny, batch):
    """Concatenate rows of ``x`` and ``y`` batch by batch."""
    xs = _arr(x).reshape(batch, nx)
    ys = _arr(y).reshape(batch, ny)
    return np.concatenate([xs, ys], axis=1).ravel()


def deinter(out, nx, ny, batch):
    """Split an interleaved buffer back into its ``(x, y)`` parts."""
    rows = _arr(out).reshape(batch, nx + ny)
    return rows[:, :nx].ravel().copy(), rows[:, nx:].ravel().copy()


def softmax(values, temp=1.0):
    """Temperature softmax of a vector."""
    v = _arr(values)
    largest = v.max() if v.size else FLOAT(0)
    e = np.exp(v / temp - largest / temp).astype(FLOAT)
    return e / e.sum()


def softmax_batch(values, n, batch, batch_offset, groups, group_offset, stride, temp):
    """Apply softmax to strided groups; untouched positions are zero."""
    v = _arr(values).ravel()
    out = np.zeros_like(v)
    steps = np.arange(n) * stride
    for b in range(batch):
        for g in range(groups):
            idx = b * batch_offset + g * group_offset + steps
            out[idx] = softmax(v[idx], temp)
    return out


def upsample(x, w, h, c, batch, stride, scale):
    """Nearest-neighbour upsampling by ``stride``, multiplied by ``scale``."""
    x = _arr(x).reshape(batch, c, h, w)
    up = np.repeat(np.repeat(x, stride, axis=2), stride, axis=3)
    return (FLOAT(scale) * up).ravel()


def upsample_backward(delta, w, h, c, batch, stride, scale):
    """Gradient of :func:`upsample` with respect to its input."""
    d = _arr(delta).reshape(batch, c, h, stride, w, stride)
    return (FLOAT(scale) * d.sum(axis=(3, 5))).astype(FLOAT).ravel()