from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from typing import Dict, Iterable, NamedTuple, Tuple

import numpy as np


class Cell(NamedTuple):
    x: int
    y: int


class PentominoType(IntEnum):
    F = 1
    I = 2
    L = 3
    P = 4
    N = 5
    T = 6
    U = 7
    V = 8
    W = 9
    X = 10
    Y = 11
    Z = 12


# Rows are y, columns are x (rotation 0)
BASE_SHAPES = {
    PentominoType.F: np.array([[0, 1, 0], [1, 1, 0], [0, 1, 1]], dtype=np.int8),
    PentominoType.I: np.array([[1], [1], [1], [1], [1]], dtype=np.int8),
    PentominoType.L: np.array([[1, 0], [1, 0], [1, 0], [1, 1]], dtype=np.int8),
    PentominoType.P: np.array([[1, 1], [1, 1], [1, 0]], dtype=np.int8),
    PentominoType.N: np.array([[1, 0], [1, 1], [0, 1], [0, 1]], dtype=np.int8),
    PentominoType.T: np.array([[1, 1, 1], [0, 1, 0], [0, 1, 0]], dtype=np.int8),
    PentominoType.U: np.array([[1, 0, 1], [1, 1, 1]], dtype=np.int8),
    PentominoType.V: np.array([[1, 0, 0], [1, 0, 0], [1, 1, 1]], dtype=np.int8),
    PentominoType.W: np.array([[1, 1, 0], [0, 1, 1], [0, 0, 1]], dtype=np.int8),
    PentominoType.X: np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]], dtype=np.int8),
    PentominoType.Y: np.array([[0, 1], [1, 1], [0, 1], [0, 1]], dtype=np.int8),
    PentominoType.Z: np.array([[1, 1, 0], [0, 1, 0], [0, 1, 1]], dtype=np.int8),
}


def normalize(cells: Iterable[Tuple[int, int]]) -> Tuple[Cell, ...]:
    """Shift cells so that the minimum x and minimum y are both 0.

    Order is preserved.
    """
    pts = np.asarray(list(cells), dtype=np.int64).reshape(-1, 2)
    pts = pts - pts.min(axis=0)
    return tuple(Cell(int(x), int(y)) for x, y in pts)


def _rotate_cw(pts: np.ndarray) -> np.ndarray:
    # (x, y) -> (y, -x)
    return np.column_stack((pts[:, 1], -pts[:, 0]))


@dataclass(frozen=True)
class Pentomino:
    """Immutable named shape of five normalized cells."""

    kind: PentominoType
    cells: Tuple[Cell, ...]

    @classmethod
    def from_array(cls, kind: PentominoType, shape: np.ndarray) -> "Pentomino":
        return cls(kind, normalize((int(x), int(y)) for y, x in np.argwhere(shape)))

    @property
    def name(self) -> str:
        return self.kind.name

    def rotated(self, rotation: int) -> Tuple[Cell, ...]:
        return rotate(self, rotation)

    def bounding_box(self, rotation: int = 0) -> Tuple[int, int]:
        """Get (width, height) of the shape at rotation"""
        cells = rotate(self, rotation)
        return 1 + max(c.x for c in cells), 1 + max(c.y for c in cells)


@lru_cache(maxsize=None)
def rotate(shape: Pentomino, rotation: int) -> Tuple[Cell, ...]:
    """Cells of ``shape`` after ``rotation`` clockwise quarter turns, renormalized."""
    pts = np.asarray(shape.cells, dtype=np.int64)
    for _ in range(rotation % 4):
        pts = _rotate_cw(pts)
        pts = pts - pts.min(axis=0)
    return normalize(pts)


PENTOMINOES: Dict[PentominoType, Pentomino] = {
    kind: Pentomino.from_array(kind, shape) for kind, shape in BASE_SHAPES.items()
}

CATALOG: Tuple[Pentomino, ...] = tuple(PENTOMINOES[kind] for kind in PentominoType)
