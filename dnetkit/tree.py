"""Class hierarchies and hierarchical prediction helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")


@dataclass
class Tree:
    """A class hierarchy where siblings form consecutive groups."""

    parent: list = field(default_factory=list)
    child: list = field(default_factory=list)
    name: list = field(default_factory=list)
    group: list = field(default_factory=list)
    group_offset: list = field(default_factory=list)
    group_size: list = field(default_factory=list)
    leaf: list = field(default_factory=list)

    @property
    def n(self) -> int:
        return len(self.name)

    @property
    def groups(self) -> int:
        return len(self.group_size)

    def change_leaves(self, leaves: Iterable[str]) -> int:
        """Mark exactly the named nodes as leaves; return how many were found."""
        wanted = set(leaves)
        self.leaf = [1 if name in wanted else 0 for name in self.name]
        return sum(self.leaf)


def _parse_line(line: str) -> tuple[str, int]:
    tokens = line.split(None, 1)
    if not tokens:
        return "", -1
    name = tokens[0]
    parent = -1
    if len(tokens) > 1:
        match = _INT_PREFIX.match(tokens[1])
        if match:
            parent = int(match.group())
    return name, parent


def parse_tree(lines: Iterable[str]) -> Tree:
    """Build a tree from ``name parent`` lines (parent -1 for roots)."""
    t = Tree()
    last_parent = -1
    group_size = 0
    groups = 0
    for n, line in enumerate(lines):
        name, parent = _parse_line(line)
        t.parent.append(parent)
        t.child.append(-1)
        t.name.append(name)
        if parent != last_parent:
            groups += 1
            t.group_offset.append(n - group_size)
            t.group_size.append(group_size)
            group_size = 0
            last_parent = parent
        t.group.append(groups)
        if parent >= 0:
            if parent >= len(t.child):
                raise ValueError(f"node {name!r} refers to unknown parent {parent}")
            t.child[parent] = groups
        group_size += 1
    total = len(t.name)
    t.group_offset.append(total - group_size)
    t.group_size.append(group_size)
    t.leaf = [1] * total
    for p in t.parent:
        if p >= 0:
            t.leaf[p] = 0
    return t


def read_tree(path) -> Tree:
    """Read a hierarchy file."""
    with open(path) as handle:
        return parse_tree(line.rstrip("\r\n") for line in handle)


def get_hierarchy_probability(x, hier: Tree, c: int, stride: int = 1) -> float:
    """Product of the predictions along the path from ``c`` to its root."""
    p = 1.0
    while c >= 0:
        p *= float(x[c * stride])
        c = hier.parent[c]
    return p


def hierarchy_predictions(predictions, n, hier: Tree, only_leaves, stride=1) -> np.ndarray:
    """Turn conditional predictions into absolute ones; return a new array."""
    out = np.array(predictions, dtype=np.float32).ravel()
    for j in range(n):
        parent = hier.parent[j]
        if parent >= 0:
            out[j * stride] *= out[parent * stride]
    if only_leaves:
        for j in range(n):
            if not hier.leaf[j]:
                out[j * stride] = 0
    return out


def hierarchy_top_prediction(predictions, hier: Tree, thresh: float, stride: int = 1) -> int:
    """Descend the tree while the path probability stays above ``thresh``."""
    p = 1.0
    group = 0
    while True:
        best = 0.0
        best_i = 0
        offset = hier.group_offset[group]
        for i in range(hier.group_size[group]):
            val = float(predictions[(i + offset) * stride])
            if val > best:
                best_i = i + offset
                best = val
        if p * best > thresh:
            p *= best
            group = hier.child[best_i]
            if group < 0:
                return best_i
        elif group == 0:
            return best_i
        else:
            return hier.parent[hier.group_offset[group]]