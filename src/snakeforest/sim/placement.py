from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TypeVar

from snakeforest.sim.grid import ArenaSize, Cell

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomPlacer:
    """Bounded-retry cell sampler shared by obstacle, agent and consumable siting.

    Candidates are drawn uniformly from a half-open box and handed to an
    ``accept`` callback; the first non-None result wins. Exhausting the retry
    budget returns None and counts a drop.
    """

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.drops: dict[str, int] = {}

    def sample(self, x_lo: int, x_hi: int, y_lo: int, y_hi: int) -> Cell:
        x = x_lo + int(self.rng.random() * (x_hi - x_lo))
        y = y_lo + int(self.rng.random() * (y_hi - y_lo))
        return Cell(x, y)

    def find(
        self,
        *,
        label: str,
        attempts: int,
        bounds: tuple[int, int, int, int],
        accept: Callable[[Cell], T | None],
    ) -> T | None:
        if attempts <= 0:
            raise ValueError("attempts must be a positive integer")
        x_lo, x_hi, y_lo, y_hi = bounds
        if x_hi <= x_lo or y_hi <= y_lo:
            raise ValueError(f"empty placement bounds for {label}: {bounds}")
        for _ in range(attempts):
            result = accept(self.sample(x_lo, x_hi, y_lo, y_hi))
            if result is not None:
                return result
        self.drops[label] = self.drops.get(label, 0) + 1
        logger.debug("placement exhausted label=%s attempts=%d", label, attempts)
        return None

    def find_cell(
        self,
        *,
        label: str,
        attempts: int,
        bounds: tuple[int, int, int, int],
        is_valid: Callable[[Cell], bool],
    ) -> Cell | None:
        return self.find(
            label=label,
            attempts=attempts,
            bounds=bounds,
            accept=lambda cell: cell if is_valid(cell) else None,
        )


def full_bounds(arena: ArenaSize) -> tuple[int, int, int, int]:
    return (0, arena.cols, 0, arena.rows)


def interior_bounds(arena: ArenaSize) -> tuple[int, int, int, int]:
    return (1, arena.cols - 1, 1, arena.rows - 1)
