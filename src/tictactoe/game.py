"""Core rules for a single 3x3 tic-tac-toe board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Position = Tuple[int, int]  # (row, col)
Line = Tuple[Position, Position, Position]

EMPTY = " "
SIZE = 3

# Fixed enumeration order: rows top to bottom, columns left to right,
# main diagonal, anti-diagonal. The first match wins.
WINNING_LINES: Tuple[Line, ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)

IN_PROGRESS = "in_progress"
WON = "won"
DRAW = "draw"


class InvalidMove(ValueError):
    """Raised when a mark cannot be placed; the board is left untouched."""


def opponent(player: Player) -> Player:
    return "O" if player == "X" else "X"


# ---------- Status ----------


@dataclass(frozen=True)
class GameStatus:
    state: str = IN_PROGRESS
    winner: Optional[Player] = None
    line: Optional[Line] = None

    @classmethod
    def in_progress(cls) -> "GameStatus":
        return cls()

    @classmethod
    def won(cls, player: Player, line: Line) -> "GameStatus":
        return cls(state=WON, winner=player, line=line)

    @classmethod
    def draw(cls) -> "GameStatus":
        return cls(state=DRAW)

    @property
    def is_over(self) -> bool:
        return self.state != IN_PROGRESS

    @property
    def endpoints(self) -> Optional[Tuple[Position, Position]]:
        """Start and end cell of the winning line, for drawing it."""
        if self.line is None:
            return None
        return self.line[0], self.line[-1]


# ---------- Board ----------


@dataclass
class Board:
    # Row-major, 'X', 'O', or ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * (SIZE * SIZE))

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        """
        Build a board from three strings such as ``["XO ", " X ", "  O"]``.
        Any character other than 'X' or 'O' is read as an empty cell.
        """
        if len(rows) != SIZE or any(len(r) != SIZE for r in rows):
            raise ValueError("Expected three rows of three cells")
        cells = [c if c in ("X", "O") else EMPTY for r in rows for c in r]
        diff = cells.count("X") - cells.count("O")
        if diff not in (0, 1):
            raise ValueError("X moves first and turns alternate")
        return cls(cells=cells)

    # ---- queries ----

    @property
    def move_count(self) -> int:
        return sum(1 for c in self.cells if c != EMPTY)

    @property
    def current_player(self) -> Player:
        if self.cells.count("X") == self.cells.count("O"):
            return "X"
        return "O"

    @property
    def last_player(self) -> Player:
        # X on a fresh board, same as after X's first move
        if self.move_count == 0:
            return "X"
        return opponent(self.current_player)

    def cell(self, row: int, col: int) -> str:
        self._check_bounds(row, col)
        return self.cells[row * SIZE + col]

    def rows(self) -> List[List[str]]:
        return [self.cells[r * SIZE : (r + 1) * SIZE] for r in range(SIZE)]

    def empty_cells(self) -> List[Position]:
        return [divmod(i, SIZE) for i, c in enumerate(self.cells) if c == EMPTY]

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def status(self) -> GameStatus:
        for line in WINNING_LINES:
            a, b, c = (self.cells[r * SIZE + col] for r, col in line)
            if a != EMPTY and a == b == c:
                return GameStatus.won(a, line)
        if self.is_full():
            return GameStatus.draw()
        return GameStatus.in_progress()

    # ---- mutation ----

    def place_mark(self, row: int, col: int) -> GameStatus:
        """Place the current player's mark and return the resulting status."""
        self._check_bounds(row, col)
        if self.status().is_over:
            raise InvalidMove("Game already finished")
        idx = row * SIZE + col
        if self.cells[idx] != EMPTY:
            raise InvalidMove(f"Cell ({row}, {col}) already occupied")
        self.cells[idx] = self.current_player
        return self.status()

    def reset(self) -> None:
        self.cells = [EMPTY] * (SIZE * SIZE)

    # ---- helpers ----

    @staticmethod
    def _check_bounds(row: int, col: int) -> None:
        for value in (row, col):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidMove(f"Coordinates must be integers, got {value!r}")
            if not 0 <= value < SIZE:
                raise InvalidMove(f"Coordinates ({row}, {col}) are off the board")
