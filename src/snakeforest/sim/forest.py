from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

from snakeforest.sim.grid import ArenaSize, Cell, chebyshev, manhattan
from snakeforest.sim.placement import RandomPlacer, full_bounds
from snakeforest.sim.rng import shuffle_in_place

logger = logging.getLogger(__name__)

SAFE_ZONE_RADIUS = 5
MIN_OBSTACLE_SPACING = 4
TREE_ATTEMPTS = 100
LOG_ATTEMPTS = 200
LONG_LOG_MIN_LENGTH = 4
OBSTACLE_FLASH_MS = 500.0
BORDER_FLASH_MS = 250.0


class ObstacleKind(Enum):
    TREE = "tree"
    LOG = "log"


class PlacementCategory(Enum):
    TREE = "tree"
    LONG_LOG = "log_long"
    SHORT_LOG = "log_short"


class BorderSide(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass
class Tree:
    cell: Cell
    scale: float
    flash_ms: float = 0.0


@dataclass
class LogRecord:
    """One log; every covered cell maps to this shared record."""

    origin: Cell
    length: int
    horizontal: bool
    flash_ms: float = 0.0

    @property
    def is_long(self) -> bool:
        return self.length >= LONG_LOG_MIN_LENGTH

    def cells(self) -> list[Cell]:
        if self.horizontal:
            return [self.origin.offset(k, 0) for k in range(self.length)]
        return [self.origin.offset(0, k) for k in range(self.length)]


@dataclass
class BorderFlash:
    side: BorderSide
    remaining_ms: float = BORDER_FLASH_MS


@dataclass(frozen=True)
class PopulateReport:
    requested: dict[PlacementCategory, int]
    placed: dict[PlacementCategory, int]

    @property
    def dropped(self) -> int:
        return sum(self.requested.values()) - sum(self.placed.values())


class Forest:
    def __init__(self, arena: ArenaSize) -> None:
        self.arena = arena
        self._trees: dict[Cell, Tree] = {}
        self._logs: dict[Cell, LogRecord] = {}
        self.border_flashes: list[BorderFlash] = []

    def clear(self) -> None:
        self._trees.clear()
        self._logs.clear()
        self.border_flashes.clear()

    def is_obstacle(self, cell: Cell) -> bool:
        return cell in self._trees or cell in self._logs

    def obstacle_kind(self, cell: Cell) -> ObstacleKind | None:
        if cell in self._trees:
            return ObstacleKind.TREE
        if cell in self._logs:
            return ObstacleKind.LOG
        return None

    def trees(self) -> list[Tree]:
        return list(self._trees.values())

    def log_records(self) -> list[LogRecord]:
        return [record for cell, record in self._logs.items() if cell == record.origin]

    def count(self, category: PlacementCategory) -> int:
        if category is PlacementCategory.TREE:
            return len(self._trees)
        want_long = category is PlacementCategory.LONG_LOG
        return sum(1 for record in self.log_records() if record.is_long == want_long)

    def add_tree(self, cell: Cell, scale: float = 1.4) -> Tree:
        tree = Tree(cell=cell, scale=scale)
        self._trees[cell] = tree
        return tree

    def add_log(self, origin: Cell, length: int, horizontal: bool) -> LogRecord:
        record = LogRecord(origin=origin, length=length, horizontal=horizontal)
        for cell in record.cells():
            self._logs[cell] = record
        return record

    def populate(
        self,
        rng: random.Random,
        target_trees: int,
        target_long_logs: int,
        target_short_logs: int,
    ) -> PopulateReport:
        """Top up each category to its target without touching existing obstacles."""
        requested = {
            PlacementCategory.TREE: max(0, target_trees - self.count(PlacementCategory.TREE)),
            PlacementCategory.LONG_LOG: max(0, target_long_logs - self.count(PlacementCategory.LONG_LOG)),
            PlacementCategory.SHORT_LOG: max(0, target_short_logs - self.count(PlacementCategory.SHORT_LOG)),
        }
        queue: list[PlacementCategory] = []
        for category in PlacementCategory:
            queue.extend([category] * requested[category])
        shuffle_in_place(rng, queue)

        placer = RandomPlacer(rng)
        placed = {category: 0 for category in PlacementCategory}
        for category in queue:
            attempts = TREE_ATTEMPTS if category is PlacementCategory.TREE else LOG_ATTEMPTS
            result = placer.find(
                label=category.value,
                attempts=attempts,
                bounds=full_bounds(self.arena),
                accept=lambda cell, category=category: self._try_place(rng, category, cell),
            )
            if result is not None:
                placed[category] += 1

        report = PopulateReport(requested=requested, placed=placed)
        if report.dropped:
            logger.warning(
                "forest population dropped %d of %d obstacles (placed=%s)",
                report.dropped,
                sum(requested.values()),
                {category.value: count for category, count in placed.items()},
            )
        return report

    def _try_place(self, rng: random.Random, category: PlacementCategory, cell: Cell) -> Tree | LogRecord | None:
        if not self._origin_allowed(cell):
            return None
        if category is PlacementCategory.TREE:
            return self.add_tree(cell, scale=1.2 + rng.random() * 0.4)

        if category is PlacementCategory.LONG_LOG:
            length = 4 + int(rng.random() * 2)
        else:
            length = 2 + int(rng.random() * 2)
        horizontal = rng.random() > 0.5
        candidate = LogRecord(origin=cell, length=length, horizontal=horizontal)
        for covered in candidate.cells():
            if covered.x >= self.arena.cols - 1 or covered.y >= self.arena.rows - 1:
                return None
            if self.is_obstacle(covered) or self.in_safe_zone(covered):
                return None
        return self.add_log(cell, length, horizontal)

    def _origin_allowed(self, cell: Cell) -> bool:
        cols, rows = self.arena.cols, self.arena.rows
        if cell.x < 2 or cell.x >= cols - 2 or cell.y < 1 or cell.y >= rows - 2:
            return False
        if self.in_safe_zone(cell):
            return False
        for tree_cell in self._trees:
            if manhattan(cell, tree_cell) < MIN_OBSTACLE_SPACING:
                return False
        for record in self.log_records():
            if manhattan(cell, record.origin) < MIN_OBSTACLE_SPACING:
                return False
        return not self.is_obstacle(cell)

    def in_safe_zone(self, cell: Cell) -> bool:
        return chebyshev(cell, self.arena.center) < SAFE_ZONE_RADIUS

    def trigger_obstacle_flash(self, cell: Cell) -> None:
        tree = self._trees.get(cell)
        if tree is not None:
            tree.flash_ms = OBSTACLE_FLASH_MS
            return
        record = self._logs.get(cell)
        if record is not None:
            record.flash_ms = OBSTACLE_FLASH_MS

    def trigger_border_flash(self, side: BorderSide) -> None:
        self.border_flashes.append(BorderFlash(side=side))

    def update(self, dt: float) -> None:
        for tree in self._trees.values():
            if tree.flash_ms > 0:
                tree.flash_ms = max(0.0, tree.flash_ms - dt)
        for record in self.log_records():
            if record.flash_ms > 0:
                record.flash_ms = max(0.0, record.flash_ms - dt)
        for flash in self.border_flashes:
            flash.remaining_ms -= dt
        self.border_flashes = [flash for flash in self.border_flashes if flash.remaining_ms > 0]


def border_side_for(arena: ArenaSize, target: Cell) -> BorderSide | None:
    if target.x < 0:
        return BorderSide.LEFT
    if target.x >= arena.cols:
        return BorderSide.RIGHT
    if target.y < 0:
        return BorderSide.TOP
    if target.y >= arena.rows:
        return BorderSide.BOTTOM
    return None
