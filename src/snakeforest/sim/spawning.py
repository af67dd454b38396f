from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from snakeforest.sim.grid import ArenaSize, Cell
from snakeforest.sim.placement import RandomPlacer, interior_bounds

logger = logging.getLogger(__name__)

FOOD_ATTEMPTS = 100
FOOD_FALLBACK_CELL = Cell(1, 1)
SPECIAL_ATTEMPTS = 10
GLOBAL_COOLDOWN_MS = 30_000.0
LOCAL_COOLDOWN_MIN_MS = 10_000.0
LOCAL_COOLDOWN_SPREAD_MS = 10_000.0
DRAGON_FRUIT_CHANCE = 0.05
MEGA_APPLE_CHANCE = 0.025
MEGA_APPLE_MAX_PER_RUN = 5


class FruitType(Enum):
    LIFE = "LIFE"
    SHIELD = "SHIELD"
    RESET = "RESET"
    LITCHEE = "LITCHEE"


@dataclass(frozen=True)
class FruitRule:
    fruit_type: FruitType
    min_elapsed_ms: float
    max_per_run: int
    admission_chance: float = 1.0


DEFAULT_FRUIT_RULES: tuple[FruitRule, ...] = (
    FruitRule(FruitType.LIFE, min_elapsed_ms=45_000.0, max_per_run=2),
    FruitRule(FruitType.SHIELD, min_elapsed_ms=90_000.0, max_per_run=1, admission_chance=0.9),
    FruitRule(FruitType.RESET, min_elapsed_ms=150_000.0, max_per_run=3, admission_chance=0.9),
    FruitRule(FruitType.LITCHEE, min_elapsed_ms=300_000.0, max_per_run=1),
)


@dataclass
class Consumable:
    active: bool = False
    cell: Cell = FOOD_FALLBACK_CELL
    fruit_type: FruitType | None = None

    def deactivate(self) -> None:
        self.active = False

    def is_at(self, cell: Cell) -> bool:
        return self.active and self.cell == cell


CellBlocked = Callable[[Cell], bool]


def respawn_food(rng: random.Random, arena: ArenaSize, blocked: CellBlocked) -> Cell:
    placer = RandomPlacer(rng)
    cell = placer.find_cell(
        label="food",
        attempts=FOOD_ATTEMPTS,
        bounds=interior_bounds(arena),
        is_valid=lambda candidate: not blocked(candidate),
    )
    if cell is None:
        logger.warning("food placement exhausted; using fallback cell %s", FOOD_FALLBACK_CELL)
        return FOOD_FALLBACK_CELL
    return cell


@dataclass
class SpawnGate:
    """Time, count and probability gating for the typed special fruits."""

    rules: tuple[FruitRule, ...] = DEFAULT_FRUIT_RULES
    spawn_chance: float = DRAGON_FRUIT_CHANCE
    global_cooldown_ms: float = GLOBAL_COOLDOWN_MS
    last_spawn_ms: float = field(init=False)
    local_cooldown_ms: float = field(init=False)
    spawn_counts: dict[FruitType, int] = field(init=False)
    disabled: bool = field(init=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        # Allows the first special fruit as soon as its own time gate opens.
        self.last_spawn_ms = -self.global_cooldown_ms
        self.local_cooldown_ms = 0.0
        self.spawn_counts = {rule.fruit_type: 0 for rule in self.rules}
        self.disabled = False

    def disable(self) -> None:
        self.disabled = True

    def eligible_types(self, rng: random.Random, elapsed_ms: float) -> list[FruitType]:
        eligible: list[FruitType] = []
        for rule in self.rules:
            if elapsed_ms <= rule.min_elapsed_ms:
                continue
            if self.spawn_counts[rule.fruit_type] >= rule.max_per_run:
                continue
            if rule.admission_chance < 1.0 and rng.random() >= rule.admission_chance:
                continue
            eligible.append(rule.fruit_type)
        return eligible

    def evaluate(
        self,
        rng: random.Random,
        *,
        elapsed_ms: float,
        dt: float,
        fruit: Consumable,
        arena: ArenaSize,
        blocked: CellBlocked,
    ) -> bool:
        """Try to activate ``fruit``; returns True when a fruit was placed."""
        if self.disabled or fruit.active:
            return False
        if elapsed_ms < self.last_spawn_ms + self.global_cooldown_ms:
            return False
        if self.local_cooldown_ms > 0:
            self.local_cooldown_ms -= dt
            return False

        eligible = self.eligible_types(rng, elapsed_ms)
        if not eligible:
            return False
        if rng.random() > self.spawn_chance:
            return False
        fruit_type = eligible[int(rng.random() * len(eligible))]

        cell = RandomPlacer(rng).find_cell(
            label=f"fruit:{fruit_type.value}",
            attempts=SPECIAL_ATTEMPTS,
            bounds=interior_bounds(arena),
            is_valid=lambda candidate: not blocked(candidate),
        )
        if cell is None:
            return False
        fruit.active = True
        fruit.cell = cell
        fruit.fruit_type = fruit_type
        self.last_spawn_ms = elapsed_ms
        self.local_cooldown_ms = LOCAL_COOLDOWN_MIN_MS + rng.random() * LOCAL_COOLDOWN_SPREAD_MS
        self.spawn_counts[fruit_type] += 1
        logger.debug("special fruit spawned type=%s cell=%s elapsed_ms=%.0f", fruit_type.value, cell, elapsed_ms)
        return True


@dataclass
class MegaAppleGate:
    """Night-only full-heal item, at most one per night phase."""

    spawn_chance: float = MEGA_APPLE_CHANCE
    max_per_run: int = MEGA_APPLE_MAX_PER_RUN
    spawn_count: int = 0
    last_phase: int | None = None
    disabled: bool = False

    def reset(self) -> None:
        self.spawn_count = 0
        self.last_phase = None
        self.disabled = False

    def disable(self) -> None:
        self.disabled = True

    def evaluate(
        self,
        rng: random.Random,
        *,
        phase_count: int,
        is_night: bool,
        apple: Consumable,
        arena: ArenaSize,
        blocked: CellBlocked,
    ) -> bool:
        if self.disabled or apple.active or not is_night:
            return False
        if self.spawn_count >= self.max_per_run or self.last_phase == phase_count:
            return False
        if rng.random() > self.spawn_chance:
            return False
        cell = RandomPlacer(rng).find_cell(
            label="mega_apple",
            attempts=SPECIAL_ATTEMPTS,
            bounds=interior_bounds(arena),
            is_valid=lambda candidate: not blocked(candidate),
        )
        if cell is None:
            return False
        apple.active = True
        apple.cell = cell
        self.spawn_count += 1
        self.last_phase = phase_count
        return True
