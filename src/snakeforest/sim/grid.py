from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, order=True)
class Cell:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Cell":
        return Cell(self.x + dx, self.y + dy)

    def step(self, direction: "Direction") -> "Cell":
        return Cell(self.x + direction.dx, self.y + direction.dy)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        return self.dy == 0

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Stable candidate order for agent moves.
AXIS_DIRECTIONS: tuple[Direction, ...] = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


@dataclass(frozen=True)
class ArenaSize:
    cols: int
    rows: int

    def __post_init__(self) -> None:
        if not isinstance(self.cols, int) or self.cols < 8:
            raise ValueError("arena.cols must be an integer >= 8")
        if not isinstance(self.rows, int) or self.rows < 8:
            raise ValueError("arena.rows must be an integer >= 8")

    @property
    def center(self) -> Cell:
        return Cell(self.cols // 2, self.rows // 2)

    def contains(self, cell: Cell) -> bool:
        return 0 <= cell.x < self.cols and 0 <= cell.y < self.rows

    def in_interior(self, cell: Cell) -> bool:
        """True when the cell is inside the one-cell border margin."""
        return 1 <= cell.x < self.cols - 1 and 1 <= cell.y < self.rows - 1

    def clamp(self, cell: Cell) -> Cell:
        return Cell(
            max(0, min(self.cols - 1, cell.x)),
            max(0, min(self.rows - 1, cell.y)),
        )


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def chebyshev(a: Cell, b: Cell) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))
