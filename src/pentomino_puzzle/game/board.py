from __future__ import annotations

from typing import Dict, Hashable, List, Tuple

import numpy as np

from .geometry import Cell, Pentomino, rotate


class Board:
    """Fixed-size occupancy grid for pentomino placement.

    The grid is a boolean array indexed ``[y, x]``. Every occupied cell is
    claimed by exactly one placed piece id; ``placements`` records which.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.bool_)
        self._placements: Dict[Hashable, Tuple[Cell, ...]] = {}

    def clear(self) -> None:
        self.grid.fill(False)
        self._placements.clear()

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def fits(self, shape: Pentomino, rotation: int, anchor_x: int, anchor_y: int) -> bool:
        for cx, cy in rotate(shape, rotation):
            x, y = anchor_x + cx, anchor_y + cy
            if not self.is_inside(x, y):
                return False
            if self.grid[y, x]:
                return False
        return True

    def place(
        self, shape: Pentomino, rotation: int, anchor_x: int, anchor_y: int, piece_id: Hashable
    ) -> Tuple[Cell, ...]:
        """Claim cells for ``piece_id`` and return them.

        Assumes ``fits`` was checked with the same arguments in the same turn.
        """
        assert piece_id not in self._placements, f"piece {piece_id!r} is already placed"
        cells = tuple(Cell(anchor_x + cx, anchor_y + cy) for cx, cy in rotate(shape, rotation))
        for x, y in cells:
            self.grid[y, x] = True
        self._placements[piece_id] = cells
        return cells

    def remove(self, piece_id: Hashable) -> Tuple[Cell, ...]:
        """Free the cells of ``piece_id``; unknown ids free nothing."""
        cells = self._placements.pop(piece_id, ())
        for x, y in cells:
            self.grid[y, x] = False
        return cells

    def is_complete(self) -> bool:
        return bool(self.grid.all())

    def is_placed(self, piece_id: Hashable) -> bool:
        return piece_id in self._placements

    def cells_of(self, piece_id: Hashable) -> Tuple[Cell, ...]:
        return self._placements.get(piece_id, ())

    @property
    def placements(self) -> Dict[Hashable, Tuple[Cell, ...]]:
        return dict(self._placements)

    def valid_anchors(self, shape: Pentomino, rotation: int) -> List[Tuple[int, int]]:
        """All (x, y) anchors where the rotated shape fits"""
        width, height = shape.bounding_box(rotation)
        return [
            (x, y)
            for y in range(self.height - height + 1)
            for x in range(self.width - width + 1)
            if self.fits(shape, rotation, x, y)
        ]

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def filled_ratio(self) -> float:
        return float(self.filled_count()) / float(self.width * self.height)

    def clone_state(self) -> np.ndarray:
        return self.grid.astype(np.int8)
