from __future__ import annotations

import math
from dataclasses import dataclass

from snakeforest.sim.snake import Snake

DEFAULT_HUNGER_MS = 25_000.0
DEFAULT_STARVATION_MS = 25_000.0
DEFAULT_OVERFILL_MS = 10_000.0
SHIELD_HEALTH_FLOOR = 0.5


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass
class HealthPools:
    """Hunger drains first; starvation is the terminal pool."""

    hunger_max: float = DEFAULT_HUNGER_MS
    starvation_max: float = DEFAULT_STARVATION_MS
    overfill_ms: float = DEFAULT_OVERFILL_MS
    hunger_ms: float = DEFAULT_HUNGER_MS
    starvation_ms: float = DEFAULT_STARVATION_MS

    def __post_init__(self) -> None:
        if self.hunger_max <= 0 or self.starvation_max <= 0:
            raise ValueError("health pool maxima must be > 0")
        if self.overfill_ms < 0:
            raise ValueError("overfill_ms must be >= 0")

    @property
    def is_tired(self) -> bool:
        return self.hunger_ms <= 0

    @property
    def is_starving(self) -> bool:
        return self.is_tired and self.starvation_ms < self.starvation_max / 2

    @property
    def is_drained(self) -> bool:
        return self.starvation_ms <= 0

    def health_factor(self) -> float:
        total = self.hunger_max + self.starvation_max
        if self.hunger_ms > 0:
            current = self.starvation_max + self.hunger_ms
        else:
            current = self.starvation_ms
        return max(0.0, min(1.0, current / total))

    def restore_full(self) -> None:
        self.hunger_ms = self.hunger_max
        self.starvation_ms = self.starvation_max

    def deplete(self, dt: float) -> bool:
        """Passive drain for one step; returns True once starvation is exhausted."""
        if self.hunger_ms > 0:
            self.hunger_ms = max(0.0, self.hunger_ms - dt)
            return False
        self.starvation_ms = max(0.0, self.starvation_ms - dt)
        return self.is_drained

    def apply_damage(self, penalty: float) -> None:
        if self.hunger_ms >= penalty:
            self.hunger_ms -= penalty
            return
        overflow = penalty - max(0.0, self.hunger_ms)
        self.hunger_ms = 0.0
        self.starvation_ms = max(0.0, self.starvation_ms - overflow)

    def heal(self, amount: float) -> None:
        remaining = amount
        if self.starvation_ms < self.starvation_max:
            needed = self.starvation_max - self.starvation_ms
            if remaining > needed:
                self.starvation_ms = self.starvation_max
                remaining -= needed
            else:
                self.starvation_ms += remaining
                remaining = 0.0
        if remaining > 0:
            self.hunger_ms = min(self.hunger_ms + remaining, self.hunger_max + self.overfill_ms)


def target_length(snake: Snake) -> int:
    health = snake.health_factor
    if snake.shield_active:
        health = max(health, SHIELD_HEALTH_FLOOR)
    target = snake.base_length + round_half_up(health * (snake.max_length - snake.base_length))
    return max(snake.base_length, min(snake.max_length, target))


def enforce_health_length(snake: Snake, *, immediate: bool = False) -> int:
    """Shed segments toward the health-derived target length; returns segments shed."""
    target = target_length(snake)
    if immediate:
        shed = 0
        while len(snake.segments) > target and snake.shrink():
            shed += 1
        return shed

    deficit = len(snake.segments) - target
    if deficit >= 4:
        allowed = 3
    elif deficit >= 2:
        allowed = 2
    else:
        allowed = 1
    shed = 0
    while shed < allowed and len(snake.segments) > target and snake.shrink():
        shed += 1
    return shed
