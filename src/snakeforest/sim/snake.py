from __future__ import annotations

from collections import deque
from enum import Enum
from typing import TYPE_CHECKING

from snakeforest.sim.grid import ArenaSize, Cell, Direction

if TYPE_CHECKING:
    from snakeforest.sim.forest import Forest

DEFAULT_BASE_LENGTH = 3
DEFAULT_MAX_LENGTH = 12
DIGESTION_MS = 30_000.0


class MoveOutcome(Enum):
    ALIVE = "alive"
    BOUNCE_WALL = "bounce_wall"
    BOUNCE_OBSTACLE = "bounce_obstacle"
    DEAD = "dead"


class GlowKind(Enum):
    LIFE = "life"
    SHIELD = "shield"
    RESET = "reset"
    LITCHEE = "litchee"
    MEGA_APPLE = "mega_apple"


class Snake:
    """Player actor: segment chain, digestion queue and transient immunity timers.

    ``segments[0]`` is the head. ``prev_segments`` holds the positions from
    before the last step and is refilled in place so renderers can interpolate.
    """

    def __init__(
        self,
        arena: ArenaSize,
        *,
        base_length: int = DEFAULT_BASE_LENGTH,
        max_length: int = DEFAULT_MAX_LENGTH,
        digestion_ms: float = DIGESTION_MS,
    ) -> None:
        if base_length < 1 or max_length < base_length:
            raise ValueError("snake lengths must satisfy 1 <= base_length <= max_length")
        self.initial_base_length = base_length
        self.max_length = max_length
        self.digestion_ms = digestion_ms
        self.segments: list[Cell] = []
        self.prev_segments: list[Cell] = []
        self.digestion_queue: deque[float] = deque()
        self.reset(arena)

    def reset(self, arena: ArenaSize) -> None:
        center = arena.center
        self.base_length = self.initial_base_length
        self.segments[:] = [center.offset(-i, 0) for i in range(self.base_length)]
        self.sync_prev()
        self.grow_pending = 0
        self.digestion_queue.clear()
        self.health_factor = 1.0
        self.invincible_ticks = 0
        self.damage_glow_ms = 0.0
        self.glow_ms = 0.0
        self.glow_kind: GlowKind | None = None
        self.phase_through_ms = 0.0
        self.respawn_safety_ms = 0.0
        self.shield_active = False
        self.gold_mode = False

    def respawn(self, arena: ArenaSize, head: Cell | None = None) -> None:
        """New life at ``head`` (center when None); base length and shield persist."""
        start = arena.center if head is None else head
        body = [start.offset(-i, 0) for i in range(min(self.base_length, self.initial_base_length))]
        while len(body) < self.base_length:
            body.append(body[-1])
        self.segments[:] = body
        self.sync_prev()
        self.grow_pending = 0
        self.digestion_queue.clear()
        self.health_factor = 1.0
        self.invincible_ticks = 0
        self.damage_glow_ms = 0.0
        self.glow_ms = 0.0
        self.glow_kind = None
        self.phase_through_ms = 0.0
        self.respawn_safety_ms = 0.0
        self.gold_mode = False

    @property
    def head(self) -> Cell:
        return self.segments[0]

    @property
    def length(self) -> int:
        return len(self.segments)

    def sync_prev(self) -> None:
        self.prev_segments[:] = self.segments

    def place_at(self, head: Cell) -> None:
        """Lay the current body out leftwards from ``head``."""
        self.segments[:] = [head.offset(-i, 0) for i in range(len(self.segments))]
        self.sync_prev()

    def occupies(self, cell: Cell) -> bool:
        return cell in self.segments

    def immune_to_terrain(self) -> bool:
        return self.phase_through_ms > 0 or self.respawn_safety_ms > 0

    def fullness_penalty(self) -> float:
        if len(self.digestion_queue) > 10:
            return 0.25
        if len(self.digestion_queue) > 5:
            return 0.10
        return 0.0

    def step(self, direction: Direction, arena: ArenaSize, game_time: float, forest: Forest | None) -> MoveOutcome:
        target = self.head.step(direction)

        if not arena.contains(target):
            if not self.immune_to_terrain():
                return MoveOutcome.BOUNCE_WALL
            target = arena.clamp(target)
            if target == self.head:
                self.sync_prev()
                return MoveOutcome.ALIVE

        if forest is not None and forest.is_obstacle(target) and not self.immune_to_terrain():
            return MoveOutcome.BOUNCE_OBSTACLE

        # The tail cell is vacated by this move, so it never counts.
        for index in range(len(self.segments) - 1):
            if self.segments[index] == target:
                if self.invincible_ticks > 0:
                    return MoveOutcome.ALIVE
                return MoveOutcome.DEAD

        self.sync_prev()

        if self.digestion_queue and game_time >= self.digestion_queue[0]:
            self.digestion_queue.popleft()
            if len(self.segments) > self.base_length:
                self.segments.pop()
                del self.prev_segments[len(self.segments):]

        self.segments.insert(0, target)
        if self.grow_pending > 0:
            self.grow_pending -= 1
        else:
            self.segments.pop()
        return MoveOutcome.ALIVE

    def eat(self, game_time: float) -> None:
        if len(self.segments) + self.grow_pending < self.max_length:
            self.grow_pending += 1
        self.digestion_queue.append(game_time + self.digestion_ms)

    def permanent_grow(self) -> None:
        if self.base_length < self.max_length:
            self.base_length += 1
            if len(self.segments) + self.grow_pending < self.max_length:
                self.grow_pending += 1
        # Keep the floor invariant even before the pending segment lands.
        while len(self.segments) < self.base_length:
            self.segments.append(self.segments[-1])
            self.grow_pending = max(0, self.grow_pending - 1)

    def shrink(self) -> bool:
        if len(self.segments) <= self.base_length:
            return False
        self.segments.pop()
        del self.prev_segments[len(self.segments):]
        self.grow_pending = 0
        return True

    def reset_length(self) -> None:
        self.base_length = self.initial_base_length
        del self.segments[self.base_length:]
        while len(self.segments) < self.base_length:
            self.segments.append(self.segments[-1])
        self.digestion_queue.clear()
        self.grow_pending = 0
        self.sync_prev()

    def trigger_glow(self, kind: GlowKind, duration_ms: float) -> None:
        self.glow_kind = kind
        self.glow_ms = duration_ms

    def tick_timers(self, dt: float) -> None:
        """Count every transient timer down by one step."""
        if self.invincible_ticks > 0:
            self.invincible_ticks -= 1
        self.damage_glow_ms = max(0.0, self.damage_glow_ms - dt)
        self.glow_ms = max(0.0, self.glow_ms - dt)
        self.phase_through_ms = max(0.0, self.phase_through_ms - dt)
        self.respawn_safety_ms = max(0.0, self.respawn_safety_ms - dt)
