"""Bounding boxes, their overlap measures and non-maximum suppression."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(slots=True)
class Box:
    """A box given by its centre and size."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0


@dataclass(slots=True)
class DBox:
    """Gradient of a box measure with respect to a box."""

    dx: float = 0.0
    dy: float = 0.0
    dw: float = 0.0
    dh: float = 0.0


@dataclass
class Detection:
    """A detected box with per-class probabilities."""

    bbox: Box
    prob: list = field(default_factory=list)
    objectness: float = 0.0
    sort_class: int = -1
    mask: Optional[list] = None


def overlap(x1, w1, x2, w2):
    """Length of the overlap of two centred intervals (negative if apart)."""
    left = max(x1 - w1 / 2, x2 - w2 / 2)
    right = min(x1 + w1 / 2, x2 + w2 / 2)
    return right - left


def box_intersection(a: Box, b: Box) -> float:
    w = overlap(a.x, a.w, b.x, b.w)
    h = overlap(a.y, a.h, b.y, b.h)
    if w < 0 or h < 0:
        return 0.0
    return w * h


def box_union(a: Box, b: Box) -> float:
    return a.w * a.h + b.w * b.h - box_intersection(a, b)


def box_iou(a: Box, b: Box) -> float:
    """Intersection over union; degenerate boxes with no area give 0."""
    union = box_union(a, b)
    if union == 0:
        return 0.0
    return box_intersection(a, b) / union


def box_rmse(a: Box, b: Box) -> float:
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.w - b.w) ** 2 + (a.h - b.h) ** 2)


def _edge_derivative(pos_a, size_a, pos_b, size_b):
    d_pos = 0.0
    d_size = 0.0
    l1, l2 = pos_a - size_a / 2, pos_b - size_b / 2
    r1, r2 = pos_a + size_a / 2, pos_b + size_b / 2
    if l1 > l2:
        d_pos -= 1
        d_size += 0.5
    if r1 < r2:
        d_pos += 1
        d_size += 0.5
    if l1 > r2:
        d_pos, d_size = -1.0, 0.0
    if r1 < l2:
        d_pos, d_size = 1.0, 0.0
    return d_pos, d_size


def derivative(a: Box, b: Box) -> DBox:
    """Derivative of the overlap lengths of ``a`` and ``b`` with respect to ``a``."""
    dx, dw = _edge_derivative(a.x, a.w, b.x, b.w)
    dy, dh = _edge_derivative(a.y, a.h, b.y, b.h)
    return DBox(dx, dy, dw, dh)


def dintersect(a: Box, b: Box) -> DBox:
    w = overlap(a.x, a.w, b.x, b.w)
    h = overlap(a.y, a.h, b.y, b.h)
    d = derivative(a, b)
    return DBox(dx=d.dx * h, dy=d.dy * w, dw=d.dw * h, dh=d.dh * w)


def dunion(a: Box, b: Box) -> DBox:
    di = dintersect(a, b)
    return DBox(dx=-di.dx, dy=-di.dy, dw=a.h - di.dw, dh=a.w - di.dh)


def diou(a: Box, b: Box) -> DBox:
    """Gradient used for the IoU loss: the plain difference ``b - a``."""
    return DBox(dx=b.x - a.x, dy=b.y - a.y, dw=b.w - a.w, dh=b.h - a.h)


def float_to_box(values: Sequence[float], stride: int = 1) -> Box:
    return Box(
        float(values[0]),
        float(values[stride]),
        float(values[2 * stride]),
        float(values[3 * stride]),
    )


def encode_box(b: Box, anchor: Box) -> Box:
    return Box(
        (b.x - anchor.x) / anchor.w,
        (b.y - anchor.y) / anchor.h,
        math.log2(b.w / anchor.w),
        math.log2(b.h / anchor.h),
    )


def decode_box(b: Box, anchor: Box) -> Box:
    return Box(
        b.x * anchor.w + anchor.x,
        b.y * anchor.h + anchor.y,
        2.0 ** b.w * anchor.w,
        2.0 ** b.h * anchor.h,
    )


def _split_active(dets: list) -> tuple[list, list]:
    active = [d for d in dets if d.objectness != 0]
    empty = [d for d in dets if d.objectness == 0]
    return active, empty


def do_nms_obj(dets: list, classes: int, thresh: float) -> None:
    """Suppress overlapping detections by objectness, reordering ``dets`` in place."""
    active, empty = _split_active(dets)
    for d in active:
        d.sort_class = -1
    active.sort(key=lambda d: d.objectness, reverse=True)
    for i, a in enumerate(active):
        if a.objectness == 0:
            continue
        for b in active[i + 1:]:
            if b.objectness == 0:
                continue
            if box_iou(a.bbox, b.bbox) > thresh:
                b.objectness = 0.0
                for k in range(classes):
                    b.prob[k] = 0.0
    dets[:] = active + empty


def do_nms_sort(dets: list, classes: int, thresh: float) -> None:
    """Suppress overlapping detections class by class, reordering ``dets`` in place."""
    active, empty = _split_active(dets)
    for k in range(classes):
        for d in active:
            d.sort_class = k
        active.sort(key=lambda d: d.prob[k], reverse=True)
        for i, a in enumerate(active):
            if a.prob[k] == 0:
                continue
            for b in active[i + 1:]:
                if box_iou(a.bbox, b.bbox) > thresh:
                    b.prob[k] = 0.0
    dets[:] = active + empty


def do_nms(boxes: Sequence[Box], probs: list, thresh: float) -> None:
    """Zero the weaker class probability of every overlapping pair, in place."""
    total = len(boxes)
    for i in range(total):
        if not any(p > 0 for p in probs[i]):
            continue
        for j in range(i + 1, total):
            if box_iou(boxes[i], boxes[j]) > thresh:
                for k in range(len(probs[i])):
                    if probs[i][k] < probs[j][k]:
                        probs[i][k] = 0.0
                    else:
                        probs[j][k] = 0.0