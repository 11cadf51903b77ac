"""Box label files, ground-truth layouts and run-length masks."""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .box import Box

FLOAT = np.float32

SWAG_MAX_BOXES = 90
"""Number of box slots in a swag target."""

SENTINEL = 999999.0
"""Coordinates given to boxes whose centre lies at the origin."""

DETECTION_REPLACEMENTS = (
    ("images", "labels"),
    ("JPEGImages", "labels"),
    ("raw", "labels"),
    (".jpg", ".txt"),
    (".png", ".txt"),
    (".JPG", ".txt"),
    (".JPEG", ".txt"),
)
REGION_REPLACEMENTS = (
    ("images", "labels"),
    ("JPEGImages", "labels"),
    (".jpg", ".txt"),
    (".png", ".txt"),
    (".JPG", ".txt"),
    (".JPEG", ".txt"),
)
SWAG_REPLACEMENTS = (
    ("images", "labels"),
    ("JPEGImages", "labels"),
    (".jpg", ".txt"),
    (".JPG", ".txt"),
    (".JPEG", ".txt"),
)
MASK_REPLACEMENTS = (
    ("images", "mask"),
    ("JPEGImages", "mask"),
    (".jpg", ".txt"),
    (".JPG", ".txt"),
    (".JPEG", ".txt"),
)


@dataclass
class BoxLabel:
    """A labelled box in relative image coordinates, with its edges."""

    id: int
    x: float
    y: float
    w: float
    h: float
    left: float
    right: float
    top: float
    bottom: float

    @classmethod
    def from_center(cls, id: int, x: float, y: float, w: float, h: float) -> "BoxLabel":
        return cls(id, x, y, w, h, x - w / 2, x + w / 2, y - h / 2, y + h / 2)


def label_path(path, replacements) -> str:
    """Apply each ``(find, replace)`` pair to the first occurrence in ``path``."""
    result = str(path)
    for find, replace in replacements:
        result = result.replace(find, replace, 1)
    return result


def read_boxes(path) -> list:
    """Read ``id x y w h`` records until the first malformed one."""
    tokens = Path(path).read_text().split()
    boxes = []
    for group in zip(*[iter(tokens)] * 5):
        try:
            ident = int(group[0])
            x, y, w, h = (float(t) for t in group[1:])
        except ValueError:
            break
        boxes.append(BoxLabel.from_center(ident, x, y, w, h))
    return boxes


def randomize_boxes(boxes: list, rng: Optional[random.Random] = None) -> None:
    """Shuffle ``boxes`` in place by swapping each with a random position."""
    rng = rng or random.Random()
    n = len(boxes)
    for i in range(n):
        index = rng.randrange(n)
        boxes[i], boxes[index] = boxes[index], boxes[i]


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def correct_boxes(boxes: Sequence[BoxLabel], dx, dy, sx, sy, flip) -> None:
    """Shift, scale, optionally mirror and clip boxes in place."""
    for b in boxes:
        if b.x == 0 and b.y == 0:
            b.x = b.y = b.w = b.h = SENTINEL
            continue
        b.left = b.left * sx - dx
        b.right = b.right * sx - dx
        b.top = b.top * sy - dy
        b.bottom = b.bottom * sy - dy
        if flip:
            b.left, b.right = 1.0 - b.right, 1.0 - b.left
        b.left = _clamp(b.left)
        b.right = _clamp(b.right)
        b.top = _clamp(b.top)
        b.bottom = _clamp(b.bottom)
        b.x = (b.left + b.right) / 2
        b.y = (b.top + b.bottom) / 2
        b.w = _clamp(b.right - b.left)
        b.h = _clamp(b.bottom - b.top)


def fill_truth_detection(boxes: Sequence[BoxLabel], num_boxes: int) -> np.ndarray:
    """Targets of ``num_boxes`` slots of ``x y w h id``; tiny boxes are dropped."""
    truth = np.zeros((num_boxes, 5), dtype=FLOAT)
    kept = [b for b in boxes[:num_boxes] if not (b.w < 0.001 or b.h < 0.001)]
    for slot, b in zip(truth, kept):
        slot[:] = (b.x, b.y, b.w, b.h, b.id)
    return truth.ravel()


def fill_truth_region(boxes: Sequence[BoxLabel], classes: int, num_boxes: int) -> np.ndarray:
    """Grid targets: each cell holds objectness, class one-hot and ``x y w h``.

    The first box to land in a cell wins; ``x`` and ``y`` are stored
    relative to the cell.
    """
    cells = np.zeros((num_boxes * num_boxes, 5 + classes), dtype=FLOAT)
    for b in boxes:
        if b.w < 0.005 or b.h < 0.005:
            continue
        col = int(b.x * num_boxes)
        row = int(b.y * num_boxes)
        if not (0 <= col < num_boxes and 0 <= row < num_boxes):
            raise ValueError(f"box centre ({b.x}, {b.y}) lies outside the grid")
        cell = cells[col + row * num_boxes]
        if cell[0]:
            continue
        cell[0] = 1
        if 0 <= b.id < classes:
            cell[1 + b.id] = 1
        cell[1 + classes:] = (b.x * num_boxes - col, b.y * num_boxes - row, b.w, b.h)
    return cells.ravel()


def fill_truth_swag(boxes: Sequence[BoxLabel], classes: int) -> np.ndarray:
    """Up to 90 slots of ``x y w h`` followed by a class one-hot."""
    truth = np.zeros((SWAG_MAX_BOXES, 4 + classes), dtype=FLOAT)
    for slot, b in zip(truth, boxes[:SWAG_MAX_BOXES]):
        if b.w < 0 or b.h < 0:
            continue
        slot[:4] = (b.x, b.y, b.w, b.h)
        if 0 <= b.id < classes:
            slot[4 + b.id] = 1
    return truth.ravel()


def load_rle(mask, rle: Sequence[int]) -> np.ndarray:
    """Decode alternating runs of 0 and 1 into an array shaped like ``mask``.

    Positions after the last run take the value the next run would have had.
    """
    out = np.empty_like(np.asarray(mask, dtype=FLOAT))
    flat = out.reshape(-1)
    count = 0
    curr = 0
    for run in rle:
        if run < 0:
            raise ValueError("run lengths must not be negative")
        if count + run > flat.size:
            raise ValueError("runs exceed the mask size")
        flat[count:count + run] = curr
        count += run
        curr = 1 - curr
    flat[count:] = curr
    return out


def _planes(image) -> np.ndarray:
    arr = np.array(image, dtype=FLOAT)
    if arr.ndim == 2:
        arr = arr[np.newaxis]
    if arr.ndim != 3:
        raise ValueError("images must be (channels, height, width) arrays")
    return arr


def or_image(src, dest, c: int) -> np.ndarray:
    """Copy of ``dest`` with channel ``c`` set to 1 wherever ``src`` is nonzero."""
    out = _planes(dest)
    if not 0 <= c < out.shape[0]:
        raise IndexError("channel index out of range")
    plane = _planes(src)[0]
    out[c][plane != 0] = 1
    return out


def exclusive_image(src) -> np.ndarray:
    """Copy of ``src`` where each pixel keeps only its first nonzero channel."""
    out = _planes(src)
    for k in range(out.shape[0] - 1):
        hit = out[k] != 0
        out[k + 1:, hit] = 0
    return out


def bound_image(mask) -> Box:
    """Bounding box (left, top, width, height) of the nonzero pixels.

    An empty mask gives the left/top at the image size and a nonpositive size.
    """
    plane = _planes(mask)[0]
    height, width = plane.shape
    ys, xs = np.nonzero(plane)
    if xs.size:
        minx, maxx = int(xs.min()), int(xs.max())
        miny, maxy = int(ys.min()), int(ys.max())
    else:
        minx, miny, maxx, maxy = width, height, 0, 0
    return Box(float(minx), float(miny), float(maxx - minx + 1), float(maxy - miny + 1))