"""Coordinate maths for placing the 3x3 grid inside a scene.

Scene coordinates grow rightward and upward (origin bottom-left), while
row 0 of the board is drawn at the top of the grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .game import SIZE, GameStatus, Position

Point = Tuple[float, float]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2


@dataclass(frozen=True)
class GridLayout:
    frame: Rect
    scale_factor: float = 0.85
    dimension: int = SIZE

    @property
    def cell_size(self) -> float:
        grid = min(self.frame.width, self.frame.height) * self.scale_factor
        return grid / self.dimension

    @property
    def grid_size(self) -> float:
        return self.cell_size * self.dimension

    @property
    def grid_origin(self) -> Point:
        half = self.grid_size / 2
        return self.frame.mid_x - half, self.frame.mid_y - half

    def position(self, row: int, col: int) -> Point:
        """Centre of cell (row, col) in scene coordinates."""
        ox, oy = self.grid_origin
        size = self.cell_size
        inverted_row = (self.dimension - 1) - row
        return (
            ox + col * size + size / 2,
            oy + inverted_row * size + size / 2,
        )

    def cell_at(self, point: Point) -> Optional[Position]:
        x, y = point
        ox, oy = self.grid_origin
        size = self.cell_size
        if size <= 0:
            return None
        if not (ox <= x <= ox + self.grid_size and oy <= y <= oy + self.grid_size):
            return None
        last = self.dimension - 1
        # The far edges belong to the last row/column
        col = min(int((x - ox) / size), last)
        inverted_row = min(int((y - oy) / size), last)
        return last - inverted_row, col

    def line_endpoints(self, status: GameStatus) -> Optional[Tuple[Point, Point]]:
        ends = status.endpoints
        if ends is None:
            return None
        start, end = ends
        return self.position(*start), self.position(*end)
