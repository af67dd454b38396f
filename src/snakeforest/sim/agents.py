from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from snakeforest.sim.forest import Forest
from snakeforest.sim.grid import AXIS_DIRECTIONS, ArenaSize, Cell, Direction, chebyshev, manhattan
from snakeforest.sim.placement import RandomPlacer, interior_bounds
from snakeforest.sim.snake import Snake

logger = logging.getLogger(__name__)

SPAWN_ATTEMPTS = 150
DEFAULT_MIN_HUMAN_DISTANCE = 14
SNAKE_SAFE_ZONE = 6
INITIAL_COOLDOWN_SPREAD = 8
DEFAULT_MOVE_SPEED = 6


def movement_threshold(day: int, is_night: bool) -> int:
    if is_night:
        return 12
    if day >= 5:
        return 5
    if day >= 3:
        return 6
    return 8


def perception_jitter(perception: int | None) -> int:
    if perception is None:
        return 0
    if perception % 3 == 0:
        return -1
    if perception % 4 == 0:
        return 1
    return 0


def effective_perception(perception: int | None, is_night: bool) -> int | None:
    if perception is None or not is_night:
        return perception
    return perception // 2


@dataclass
class Human:
    """Roaming agent; ``perception=None`` means it always senses the snake."""

    cell: Cell
    perception: int | None
    move_cooldown: int = 0
    move_speed: int = DEFAULT_MOVE_SPEED
    prev_cell: Cell = field(init=False)

    def __post_init__(self) -> None:
        self.prev_cell = self.cell

    def valid_moves(self, forest: Forest, arena: ArenaSize) -> list[Direction]:
        moves: list[Direction] = []
        for direction in AXIS_DIRECTIONS:
            target = self.cell.step(direction)
            if arena.in_interior(target) and not forest.is_obstacle(target):
                moves.append(direction)
        return moves

    def step(
        self,
        rng: random.Random,
        *,
        snake_head: Cell,
        forest: Forest,
        arena: ArenaSize,
        day: int,
        is_night: bool,
        fleeing: bool = False,
    ) -> bool:
        self.prev_cell = self.cell
        self.move_cooldown += 1
        self.move_speed = movement_threshold(day, is_night)
        if self.move_cooldown < self.move_speed + perception_jitter(self.perception):
            return False
        self.move_cooldown = int(rng.random() * 2)

        moves = self.valid_moves(forest, arena)
        if not moves:
            return False

        sensed = effective_perception(self.perception, is_night)
        if sensed is None or manhattan(self.cell, snake_head) <= sensed:
            # Stable sort keeps candidate order for ties.
            moves.sort(
                key=lambda direction: manhattan(self.cell.step(direction), snake_head),
                reverse=fleeing,
            )
            chosen = moves[0]
        else:
            chosen = moves[int(rng.random() * len(moves))]
        self.cell = self.cell.step(chosen)
        return True


def spawn_humans(
    rng: random.Random,
    humans: list[Human],
    count: int,
    perception: int | None,
    *,
    forest: Forest,
    snake: Snake,
    arena: ArenaSize,
    min_distance: int = DEFAULT_MIN_HUMAN_DISTANCE,
) -> list[Human]:
    """Append up to ``count`` humans to ``humans``; cells that cannot be found are skipped."""
    placer = RandomPlacer(rng)
    spawned: list[Human] = []

    def is_valid(cell: Cell) -> bool:
        if forest.is_obstacle(cell):
            return False
        if any(manhattan(other.cell, cell) < min_distance for other in humans):
            return False
        if chebyshev(cell, snake.head) < SNAKE_SAFE_ZONE:
            return False
        return not snake.occupies(cell)

    for _ in range(count):
        cell = placer.find_cell(label="human", attempts=SPAWN_ATTEMPTS, bounds=interior_bounds(arena), is_valid=is_valid)
        if cell is None:
            continue
        human = Human(cell=cell, perception=perception, move_cooldown=int(rng.random() * INITIAL_COOLDOWN_SPREAD))
        humans.append(human)
        spawned.append(human)

    if len(spawned) < count:
        logger.warning("spawned %d of %d humans (min_distance=%d)", len(spawned), count, min_distance)
    return spawned
