from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from snakeforest.sim.agents import spawn_humans
from snakeforest.sim.forest import BorderSide, border_side_for
from snakeforest.sim.health import enforce_health_length
from snakeforest.sim.grid import Direction
from snakeforest.sim.phase import MusicTrack, WeatherKind
from snakeforest.sim.snake import MoveOutcome
from snakeforest.sim.spawning import FruitType

if TYPE_CHECKING:
    from snakeforest.sim.core import Simulation

logger = logging.getLogger(__name__)

CLEANUP_MS = 13_000.0
DISSOLVE_FADE_MS = 1_500.0
DISSOLVE_GROUP_DELAY_MS = 1_800.0
DISSOLVE_JITTER_MS = 1_000.0
BG_TRANSITION_MS = 2_000.0
HUNT_HUMANS = 20
HUNT_SPAWN_INTERVAL_MS = 400.0
HUNT_PERCEPTION = 50
HUNT_MIN_HUMAN_DISTANCE = 6
HUNT_AI_DAY = 5
ANNOUNCE_MS = 3_000.0
ANNOUNCE_FADE_MS = 500.0
HUNT_COUNTDOWN_MS = 3_000.0
VICTORY_GLOW_MS = 1_500.0
VICTORY_GLOW_MAX = 0.75
VICTORY_TEXT_MS = 3_000.0
SURVIVOR_MSG_MS = 3_000.0
CONFETTI_MS = 8_000.0
THE_END_MS = 1_500.0
# Gold dust drift, in cells per 16 ms frame.
DUST_SPEED = 0.08


class EndgamePhase(Enum):
    CLEANUP = "CLEANUP"
    BG_TRANSITION = "BG_TRANSITION"
    HUMAN_SPAWN = "HUMAN_SPAWN"
    SNAKE_SPAWN = "SNAKE_SPAWN"
    ANNOUNCE = "ANNOUNCE"
    HUNT_COUNTDOWN = "HUNT_COUNTDOWN"
    HUNT = "HUNT"
    VICTORY_GLOW = "VICTORY_GLOW"
    VICTORY_TEXT = "VICTORY_TEXT"
    SURVIVOR_MSG = "SURVIVOR_MSG"
    CONFETTI = "CONFETTI"
    THE_END = "THE_END"


NEXT_PHASE: dict[EndgamePhase, EndgamePhase | None] = {
    EndgamePhase.CLEANUP: EndgamePhase.BG_TRANSITION,
    EndgamePhase.BG_TRANSITION: EndgamePhase.HUMAN_SPAWN,
    EndgamePhase.HUMAN_SPAWN: EndgamePhase.SNAKE_SPAWN,
    EndgamePhase.SNAKE_SPAWN: EndgamePhase.ANNOUNCE,
    EndgamePhase.ANNOUNCE: EndgamePhase.HUNT_COUNTDOWN,
    EndgamePhase.HUNT_COUNTDOWN: EndgamePhase.HUNT,
    EndgamePhase.HUNT: EndgamePhase.VICTORY_GLOW,
    EndgamePhase.VICTORY_GLOW: EndgamePhase.VICTORY_TEXT,
    EndgamePhase.VICTORY_TEXT: EndgamePhase.SURVIVOR_MSG,
    EndgamePhase.SURVIVOR_MSG: EndgamePhase.CONFETTI,
    EndgamePhase.CONFETTI: EndgamePhase.THE_END,
    EndgamePhase.THE_END: None,
}


class DissolveKind(Enum):
    TREE = "tree"
    LOG = "log"
    HUMAN = "human"
    FOOD = "food"
    FRUIT = "fruit"
    MEGA_APPLE = "mega_apple"
    SNAKE = "snake"
    SNAKE_SEGMENT = "snake_segment"


# Dissolve order groups: scenery first, the snake last.
DISSOLVE_GROUPS: dict[DissolveKind, int] = {
    DissolveKind.TREE: 0,
    DissolveKind.LOG: 1,
    DissolveKind.HUMAN: 2,
    DissolveKind.FOOD: 3,
    DissolveKind.FRUIT: 3,
    DissolveKind.MEGA_APPLE: 3,
    DissolveKind.SNAKE: 4,
}


@dataclass
class DissolveItem:
    kind: DissolveKind
    x: float
    y: float
    start_ms: float = 0.0
    alpha: float = 1.0
    vx: float = 0.0
    vy: float = 0.0
    scale: float = 1.0
    length: int = 1
    horizontal: bool = True
    fruit_type: FruitType | None = None


@dataclass
class EndgameState:
    phase: EndgamePhase | None = None
    timer_ms: float = 0.0
    start_darkness: float = 0.0
    darkness: float = 0.0
    start_weather_intensity: float = 0.0
    weather_intensity: float = 0.0
    weather: WeatherKind = WeatherKind.NORMAL
    hud_alpha: float = 1.0
    announce_alpha: float = 0.0
    countdown_value: int = 0
    glow_alpha: float = 0.0
    humans_eaten: int = 0
    spawn_queue: int = 0
    spawn_interval_ms: float = 0.0
    dissolve: list[DissolveItem] = field(default_factory=list)

    def reset(self) -> None:
        self.phase = None
        self.timer_ms = 0.0
        self.start_darkness = 0.0
        self.darkness = 0.0
        self.start_weather_intensity = 0.0
        self.weather_intensity = 0.0
        self.weather = WeatherKind.NORMAL
        self.hud_alpha = 1.0
        self.announce_alpha = 0.0
        self.countdown_value = 0
        self.glow_alpha = 0.0
        self.humans_eaten = 0
        self.spawn_queue = 0
        self.spawn_interval_ms = 0.0
        self.dissolve.clear()


PhaseHook = Callable[[], None]
PhaseTick = Callable[[float, float], "EndgamePhase | None"]


@dataclass(frozen=True)
class PhaseSpec:
    """``duration_ms=None`` means the phase only ends when ``on_tick`` asks."""

    duration_ms: float | None
    on_enter: PhaseHook | None = None
    on_tick: PhaseTick | None = None
    on_exit: PhaseHook | None = None


class EndgameSequencer:
    """Timed cinematic after the final day, driven from one phase table."""

    def __init__(self, sim: Simulation) -> None:
        self.sim = sim
        self.table: dict[EndgamePhase, PhaseSpec] = {
            EndgamePhase.CLEANUP: PhaseSpec(CLEANUP_MS, on_tick=self._cleanup_tick, on_exit=self._cleanup_exit),
            EndgamePhase.BG_TRANSITION: PhaseSpec(
                BG_TRANSITION_MS, on_tick=self._bg_transition_tick, on_exit=self._bg_transition_exit
            ),
            EndgamePhase.HUMAN_SPAWN: PhaseSpec(None, on_enter=self._human_spawn_enter, on_tick=self._human_spawn_tick),
            EndgamePhase.SNAKE_SPAWN: PhaseSpec(0.0, on_enter=self._snake_spawn_enter),
            EndgamePhase.ANNOUNCE: PhaseSpec(ANNOUNCE_MS, on_tick=self._announce_tick, on_exit=self._announce_exit),
            EndgamePhase.HUNT_COUNTDOWN: PhaseSpec(
                HUNT_COUNTDOWN_MS, on_tick=self._countdown_tick, on_exit=self._countdown_exit
            ),
            EndgamePhase.HUNT: PhaseSpec(None, on_tick=self._hunt_tick),
            EndgamePhase.VICTORY_GLOW: PhaseSpec(
                VICTORY_GLOW_MS, on_enter=self._victory_glow_enter, on_tick=self._victory_glow_tick
            ),
            EndgamePhase.VICTORY_TEXT: PhaseSpec(VICTORY_TEXT_MS),
            EndgamePhase.SURVIVOR_MSG: PhaseSpec(SURVIVOR_MSG_MS),
            EndgamePhase.CONFETTI: PhaseSpec(CONFETTI_MS),
            EndgamePhase.THE_END: PhaseSpec(THE_END_MS, on_exit=self._the_end_exit),
        }

    @property
    def state(self) -> EndgameState:
        return self.sim.state.endgame

    def progress(self) -> float:
        current = self.state.phase
        if current is None:
            return 0.0
        duration = self.table[current].duration_ms
        if not duration:
            return 1.0
        return min(1.0, self.state.timer_ms / duration)

    def start(self) -> None:
        sim = self.sim
        world = sim.state
        endgame = self.state
        endgame.reset()

        endgame.start_darkness = world.phase.darkness()
        endgame.darkness = endgame.start_darkness
        endgame.start_weather_intensity = world.phase.weather_intensity(world.phase.is_night)
        endgame.weather_intensity = endgame.start_weather_intensity
        endgame.weather = world.phase.weather_kind()
        endgame.dissolve = self._build_dissolve_list()

        world.forest.clear()
        world.food.deactivate()
        world.dragon_fruit.deactivate()
        world.mega_apple.deactivate()
        world.spawn_gate.disable()
        world.mega_apple_gate.disable()
        world.pools.restore_full()
        world.snake.health_factor = 1.0
        world.snake.gold_mode = False
        world.snake.sync_prev()
        world.input_cooldown_ms = 0.0
        sim.accumulator.reset()

        logger.info("endgame hunt started day=%d time_played_ms=%.0f", world.day, world.time_played_ms)
        self._enter(EndgamePhase.CLEANUP)

    def tick(self, dt: float, game_time: float) -> None:
        endgame = self.state
        if endgame.phase is None:
            return
        endgame.timer_ms += dt
        spec = self.table[endgame.phase]
        requested = spec.on_tick(dt, game_time) if spec.on_tick is not None else None
        if requested is None and spec.duration_ms is not None and endgame.timer_ms >= spec.duration_ms:
            requested = NEXT_PHASE[endgame.phase]
            if requested is None:
                self._finish()
                return
        if requested is not None:
            self._transition(requested)

    def _transition(self, next_phase: EndgamePhase) -> None:
        current = self.state.phase
        if current is not None:
            on_exit = self.table[current].on_exit
            if on_exit is not None:
                on_exit()
        self._enter(next_phase)

    def _enter(self, phase: EndgamePhase) -> None:
        self.state.phase = phase
        self.state.timer_ms = 0.0
        self.sim.trace("endgame_phase", {"phase": phase.value})
        on_enter = self.table[phase].on_enter
        if on_enter is not None:
            on_enter()

    def _finish(self) -> None:
        on_exit = self.table[EndgamePhase.THE_END].on_exit
        if on_exit is not None:
            on_exit()

    def _build_dissolve_list(self) -> list[DissolveItem]:
        world = self.sim.state
        items: list[DissolveItem] = []
        for tree in world.forest.trees():
            items.append(DissolveItem(DissolveKind.TREE, tree.cell.x, tree.cell.y, scale=tree.scale))
        for record in sorted(world.forest.log_records(), key=lambda current: current.length):
            items.append(
                DissolveItem(
                    DissolveKind.LOG,
                    record.origin.x,
                    record.origin.y,
                    length=record.length,
                    horizontal=record.horizontal,
                )
            )
        for human in world.humans:
            items.append(DissolveItem(DissolveKind.HUMAN, human.cell.x, human.cell.y))
        if world.food.active:
            items.append(DissolveItem(DissolveKind.FOOD, world.food.cell.x, world.food.cell.y))
        if world.dragon_fruit.active:
            items.append(
                DissolveItem(
                    DissolveKind.FRUIT,
                    world.dragon_fruit.cell.x,
                    world.dragon_fruit.cell.y,
                    fruit_type=world.dragon_fruit.fruit_type,
                )
            )
        if world.mega_apple.active:
            items.append(DissolveItem(DissolveKind.MEGA_APPLE, world.mega_apple.cell.x, world.mega_apple.cell.y))
        head = world.snake.head
        items.append(DissolveItem(DissolveKind.SNAKE, head.x, head.y, length=world.snake.length))

        latest_start = CLEANUP_MS - DISSOLVE_FADE_MS
        rng = self.sim.rng_sim
        for item in items:
            start = DISSOLVE_GROUPS[item.kind] * DISSOLVE_GROUP_DELAY_MS + rng.random() * DISSOLVE_JITTER_MS
            item.start_ms = min(start, latest_start)
        return items

    def _cleanup_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        endgame = self.state
        progress = min(1.0, endgame.timer_ms / CLEANUP_MS)
        endgame.weather_intensity = endgame.start_weather_intensity * (1.0 - progress)
        endgame.hud_alpha = max(0.0, 1.0 - progress)
        for item in endgame.dissolve:
            if endgame.timer_ms >= item.start_ms:
                item.alpha = max(0.0, 1.0 - (endgame.timer_ms - item.start_ms) / DISSOLVE_FADE_MS)
        return None

    def _cleanup_exit(self) -> None:
        self.state.dissolve.clear()
        self.sim.state.humans.clear()

    def _bg_transition_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        endgame = self.state
        progress = min(1.0, endgame.timer_ms / BG_TRANSITION_MS)
        endgame.darkness = endgame.start_darkness * (1.0 - progress)
        return None

    def _bg_transition_exit(self) -> None:
        self.state.darkness = 0.0
        self.sim.set_music(MusicTrack.ENDGAME)

    def _human_spawn_enter(self) -> None:
        self.sim.state.humans.clear()
        self.state.spawn_queue = HUNT_HUMANS
        self.state.spawn_interval_ms = 0.0

    def _human_spawn_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        endgame = self.state
        world = self.sim.state
        endgame.spawn_interval_ms += dt
        if endgame.spawn_interval_ms >= HUNT_SPAWN_INTERVAL_MS and endgame.spawn_queue > 0:
            spawn_humans(
                self.sim.rng_worldgen,
                world.humans,
                1,
                HUNT_PERCEPTION,
                forest=world.forest,
                snake=world.snake,
                arena=world.arena,
                min_distance=HUNT_MIN_HUMAN_DISTANCE,
            )
            endgame.spawn_interval_ms = 0.0
            endgame.spawn_queue -= 1
        if endgame.spawn_queue <= 0:
            return EndgamePhase.SNAKE_SPAWN
        return None

    def _snake_spawn_enter(self) -> None:
        world = self.sim.state
        world.snake.reset(world.arena)
        world.snake.gold_mode = True
        world.pools.restore_full()
        world.snake.health_factor = 1.0
        enforce_health_length(world.snake, immediate=True)
        world.direction = Direction.RIGHT
        world.next_direction = Direction.RIGHT

    def _announce_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        endgame = self.state
        elapsed = endgame.timer_ms
        if elapsed < ANNOUNCE_FADE_MS:
            endgame.announce_alpha = elapsed / ANNOUNCE_FADE_MS
        elif elapsed < ANNOUNCE_MS - ANNOUNCE_FADE_MS:
            endgame.announce_alpha = 1.0
        else:
            endgame.announce_alpha = max(0.0, 1.0 - (elapsed - (ANNOUNCE_MS - ANNOUNCE_FADE_MS)) / ANNOUNCE_FADE_MS)
        return None

    def _announce_exit(self) -> None:
        self.state.announce_alpha = 0.0

    def _countdown_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        self.state.countdown_value = max(0, 3 - math.floor(self.state.timer_ms / 1000.0))
        return None

    def _countdown_exit(self) -> None:
        self.state.countdown_value = 0

    def _hunt_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        sim = self.sim
        world = sim.state
        snake = world.snake
        world.direction = world.next_direction
        snake.invincible_ticks = 1
        outcome = snake.step(world.direction, world.arena, game_time, world.forest)
        if outcome is MoveOutcome.BOUNCE_WALL:
            side = border_side_for(world.arena, snake.head.step(world.direction))
            if isinstance(side, BorderSide):
                world.forest.trigger_border_flash(side)

        # Iterate a copy so eaten humans can be removed in place.
        for human in list(world.humans):
            human.step(
                sim.rng_sim,
                snake_head=snake.head,
                forest=world.forest,
                arena=world.arena,
                day=HUNT_AI_DAY,
                is_night=False,
                fleeing=True,
            )
            if snake.occupies(human.cell):
                world.humans.remove(human)
                self.state.humans_eaten += 1
                sim.trace("sfx", {"name": "eat"})
        world.forest.update(dt)

        if not world.humans:
            return EndgamePhase.VICTORY_GLOW
        return None

    def _victory_glow_enter(self) -> None:
        world = self.sim.state
        rng = self.sim.rng_sim
        self.state.dissolve = [
            DissolveItem(
                DissolveKind.SNAKE_SEGMENT,
                float(segment.x),
                float(segment.y),
                vx=(rng.random() - 0.5) * 2 * DUST_SPEED,
                vy=-rng.random() * 2 * DUST_SPEED,
            )
            for segment in world.snake.segments
        ]
        self.sim.record_victory()

    def _victory_glow_tick(self, dt: float, game_time: float) -> EndgamePhase | None:
        endgame = self.state
        endgame.glow_alpha = min(VICTORY_GLOW_MAX, endgame.timer_ms / VICTORY_GLOW_MS * VICTORY_GLOW_MAX)
        fade = max(0.0, 1.0 - endgame.timer_ms / VICTORY_GLOW_MS)
        frames = dt / 16.0
        for item in endgame.dissolve:
            item.x += item.vx * frames
            item.y += item.vy * frames
            item.alpha = fade
        return None

    def _the_end_exit(self) -> None:
        self.state.phase = None
        self.sim.quit_to_menu()
