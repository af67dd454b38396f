from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from snakeforest.content.levels import DEFAULT_LEVEL_TABLE_PATH, LevelTable, load_level_table_json
from snakeforest.content.tuning import TuningConfig
from snakeforest.sim.agents import Human, spawn_humans
from snakeforest.sim.clock import FixedStepAccumulator, clamp_frame_delta, effective_fps, step_size_ms
from snakeforest.sim.endgame import EndgameSequencer, EndgameState
from snakeforest.sim.forest import BorderSide, Forest, ObstacleKind, border_side_for
from snakeforest.sim.grid import ArenaSize, Cell, Direction, manhattan
from snakeforest.sim.health import HealthPools, enforce_health_length
from snakeforest.sim.phase import MusicTrack, PhaseController, PhaseSignal, PhaseVisuals, day_for_phase
from snakeforest.sim.placement import RandomPlacer
from snakeforest.sim.rng import RNG_SIM_STREAM_NAME, RNG_WORLDGEN_STREAM_NAME, build_stream
from snakeforest.sim.rules import RuleModule
from snakeforest.sim.snake import GlowKind, MoveOutcome, Snake
from snakeforest.sim.spawning import Consumable, FruitType, MegaAppleGate, SpawnGate, respawn_food

logger = logging.getLogger(__name__)

MAX_EVENT_TRACE = 256
RESPAWN_ATTEMPTS = 150
RESPAWN_CLEAR_CELLS = 3
RESPAWN_HUMAN_DISTANCE = 8
COUNTDOWN_UNIT_MS = 1000.0
MENU_PERCEPTION = 0

COMMAND_TYPES = {"start", "turn", "toggle_pause", "quit_to_menu", "toggle_mute"}


class GameMode(Enum):
    MENU = "MENU"
    COUNTDOWN = "COUNTDOWN"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    DEATH_EVENT = "DEATH_EVENT"
    GAME_OVER = "GAME_OVER"
    ENDGAME_HUNT = "ENDGAME_HUNT"


class EndReason(Enum):
    STARVED = "STARVED"
    SELF_HIT = "SELF_HIT"
    WALL_HIT = "WALL_HIT"
    LOG_HIT = "LOG_HIT"
    TREE_HIT = "TREE_HIT"
    HUMAN_CAUGHT = "HUMAN_CAUGHT"
    SURVIVED = "SURVIVED"


STEPPING_MODES = {GameMode.PLAYING, GameMode.ENDGAME_HUNT}


def _is_json_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def _validate_json_value(value: Any, *, field_name: str) -> None:
    if _is_json_primitive(value):
        return
    if isinstance(value, list):
        for item in value:
            _validate_json_value(item, field_name=field_name)
        return
    if isinstance(value, dict):
        for key, nested_value in value.items():
            if not isinstance(key, str):
                raise ValueError(f"{field_name} keys must be strings")
            _validate_json_value(nested_value, field_name=field_name)
        return
    raise ValueError(f"{field_name} must contain only canonical JSON primitives")


@dataclass
class SimCommand:
    tick: int
    command_type: str
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.tick, int) or self.tick < 0:
            raise ValueError("command tick must be a non-negative integer")
        if not isinstance(self.command_type, str) or not self.command_type:
            raise ValueError("command_type must be a non-empty string")
        if self.command_type not in COMMAND_TYPES:
            raise ValueError(f"unknown command_type: {self.command_type}")
        if not isinstance(self.params, dict):
            raise ValueError("params must be a dict")
        _validate_json_value(self.params, field_name="params")
        if self.command_type == "turn":
            raw = self.params.get("direction")
            if not isinstance(raw, str) or raw.upper() not in Direction.__members__:
                raise ValueError(f"params.direction must be one of up/down/left/right, got {raw!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"tick": self.tick, "command_type": self.command_type, "params": self.params}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimCommand":
        return cls(
            tick=int(data["tick"]),
            command_type=str(data["command_type"]),
            params=dict(data.get("params", {})),
        )


@dataclass
class SimulationState:
    arena: ArenaSize
    forest: Forest
    snake: Snake
    pools: HealthPools
    phase: PhaseController
    spawn_gate: SpawnGate
    mega_apple_gate: MegaAppleGate
    speed_fps: float
    mode: GameMode = GameMode.MENU
    tick: int = 0
    day: int = 1
    lives: int = 1
    time_played_ms: float = 0.0
    humans: list[Human] = field(default_factory=list)
    food: Consumable = field(default_factory=lambda: Consumable(active=True))
    dragon_fruit: Consumable = field(default_factory=Consumable)
    mega_apple: Consumable = field(default_factory=Consumable)
    direction: Direction = Direction.RIGHT
    next_direction: Direction = Direction.RIGHT
    input_cooldown_ms: float = 0.0
    countdown_value: int = 0
    countdown_ms: float = 0.0
    death_message: str | None = None
    death_message_ms: float = 0.0
    paused_visuals: PhaseVisuals | None = None
    end_reason: EndReason | None = None
    music: MusicTrack | None = None
    muted: bool = False
    alpha: float = 1.0
    endgame: EndgameState = field(default_factory=EndgameState)
    rules_state: dict[str, dict[str, Any]] = field(default_factory=dict)
    event_trace: list[dict[str, Any]] = field(default_factory=list)


class Simulation:
    """Owns the game state and drives it from real frame deltas in fixed steps."""

    def __init__(self, seed: int, *, tuning: TuningConfig | None = None, levels: LevelTable | None = None) -> None:
        self.seed = seed
        self.master_seed = seed
        self.tuning = tuning if tuning is not None else TuningConfig()
        self.levels = levels if levels is not None else load_level_table_json(DEFAULT_LEVEL_TABLE_PATH)
        self.rng_worldgen = build_stream(self.master_seed, RNG_WORLDGEN_STREAM_NAME)
        self.rng_sim = build_stream(self.master_seed, RNG_SIM_STREAM_NAME)
        self._rng_streams: dict[str, random.Random] = {
            RNG_WORLDGEN_STREAM_NAME: self.rng_worldgen,
            RNG_SIM_STREAM_NAME: self.rng_sim,
        }
        self.rule_modules: list[RuleModule] = []
        self.input_log: list[SimCommand] = []
        self.accumulator = FixedStepAccumulator()
        self.endgame = EndgameSequencer(self)

        tuning = self.tuning
        arena = ArenaSize(tuning.arena_cols, tuning.arena_rows)
        self.state = SimulationState(
            arena=arena,
            forest=Forest(arena),
            snake=Snake(
                arena,
                base_length=tuning.snake_base_length,
                max_length=tuning.snake_max_length,
                digestion_ms=tuning.digestion_ms,
            ),
            pools=HealthPools(
                hunger_max=tuning.hunger_ms,
                starvation_max=tuning.starvation_ms,
                overfill_ms=tuning.overfill_ms,
                hunger_ms=tuning.hunger_ms,
                starvation_ms=tuning.starvation_ms,
            ),
            phase=PhaseController(),
            spawn_gate=SpawnGate(rules=tuning.fruit_rules, spawn_chance=tuning.dragon_fruit_chance),
            mega_apple_gate=MegaAppleGate(
                spawn_chance=tuning.mega_apple_chance,
                max_per_run=tuning.mega_apple_max_per_run,
            ),
            speed_fps=tuning.base_speed_fps,
            lives=tuning.max_lives,
        )
        self._prepare_menu_arena()

    # -- rule modules and rng -------------------------------------------------

    def rng_stream(self, name: str) -> random.Random:
        if name not in self._rng_streams:
            self._rng_streams[name] = build_stream(self.master_seed, name)
        return self._rng_streams[name]

    def rng_state_payload(self) -> dict[str, Any]:
        return {
            "master_seed": self.master_seed,
            "rng_stream_states": {
                name: stream.getstate() for name, stream in sorted(self._rng_streams.items(), key=lambda item: item[0])
            },
        }

    def get_rule_module(self, module_name: str) -> RuleModule | None:
        for module in self.rule_modules:
            if module.name == module_name:
                return module
        return None

    def register_rule_module(self, module: RuleModule) -> None:
        if any(existing.name == module.name for existing in self.rule_modules):
            raise ValueError(f"duplicate rule module name: {module.name}")
        self.rule_modules.append(module)
        module.on_simulation_start(self)

    def get_rules_state(self, module_name: str) -> dict[str, Any]:
        existing = self.state.rules_state.get(module_name, {})
        return copy.deepcopy(existing)

    def set_rules_state(self, module_name: str, state: dict[str, Any]) -> None:
        if not isinstance(module_name, str) or not module_name:
            raise ValueError("module_name must be a non-empty string")
        if not isinstance(state, dict):
            raise ValueError("rules_state value must be a dict")
        _validate_json_value(state, field_name="rules_state")
        self.state.rules_state[module_name] = copy.deepcopy(state)

    # -- event trace ----------------------------------------------------------

    def trace(self, event_type: str, params: dict[str, Any] | None = None) -> None:
        payload = {} if params is None else params
        if not isinstance(event_type, str) or not event_type:
            raise ValueError("event_trace event_type must be a non-empty string")
        _validate_json_value(payload, field_name="event_trace.params")
        self.state.event_trace.append({"tick": self.state.tick, "event_type": event_type, "params": dict(payload)})
        if len(self.state.event_trace) > MAX_EVENT_TRACE:
            overflow = len(self.state.event_trace) - MAX_EVENT_TRACE
            del self.state.event_trace[:overflow]

    def get_event_trace(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self.state.event_trace)

    # -- commands -------------------------------------------------------------

    def append_command(self, command: SimCommand | dict[str, Any]) -> bool:
        """Validate, log and apply one input command; returns whether it took effect."""
        normalized = command if isinstance(command, SimCommand) else SimCommand.from_dict(command)
        self.input_log.append(normalized)
        mode = self.state.mode
        if normalized.command_type == "start":
            if mode not in (GameMode.MENU, GameMode.GAME_OVER):
                return False
            self.start_run()
            return True
        if normalized.command_type == "turn":
            return self.queue_direction(Direction[normalized.params["direction"].upper()])
        if normalized.command_type == "toggle_pause":
            return self.toggle_pause()
        if normalized.command_type == "quit_to_menu":
            if mode not in (GameMode.PAUSED, GameMode.GAME_OVER):
                return False
            self.quit_to_menu()
            return True
        self.state.muted = not self.state.muted
        return True

    def queue_direction(self, direction: Direction) -> bool:
        state = self.state
        if state.mode not in STEPPING_MODES or state.input_cooldown_ms > 0:
            return False
        # Only turns onto the perpendicular axis are accepted.
        if direction.is_horizontal == state.direction.is_horizontal:
            return False
        state.next_direction = direction
        return True

    def toggle_pause(self) -> bool:
        state = self.state
        if state.mode in (GameMode.PLAYING, GameMode.COUNTDOWN):
            state.paused_visuals = state.phase.visuals()
            self._set_mode(GameMode.PAUSED)
            return True
        if state.mode is GameMode.PAUSED:
            self.start_countdown(self.tuning.countdown_seconds)
            return True
        return False

    # -- run lifecycle --------------------------------------------------------

    def start_run(self) -> None:
        self.reset_game_data()
        self.start_countdown(self.tuning.countdown_seconds)

    def reset_game_data(self) -> None:
        state = self.state
        state.time_played_ms = 0.0
        state.phase.reset()
        state.day = 1
        state.lives = self.tuning.max_lives
        state.spawn_gate.reset()
        state.mega_apple_gate.reset()
        state.snake.reset(state.arena)
        state.dragon_fruit.deactivate()
        state.mega_apple.deactivate()
        state.direction = Direction.RIGHT
        state.next_direction = Direction.RIGHT
        state.input_cooldown_ms = 0.0
        state.end_reason = None
        state.death_message = None
        state.death_message_ms = 0.0
        state.paused_visuals = None
        state.endgame.reset()
        self.start_day()

    def start_day(self) -> None:
        state = self.state
        level = self.levels.for_day(state.day)
        state.forest.clear()
        state.forest.populate(self.rng_worldgen, level.trees, level.long_logs, level.short_logs)
        state.snake.reset(state.arena)
        state.food.active = True
        state.food.cell = respawn_food(self.rng_worldgen, state.arena, self._cell_blocked)
        state.humans.clear()
        spawn_humans(
            self.rng_worldgen,
            state.humans,
            level.humans,
            level.perception,
            forest=state.forest,
            snake=state.snake,
            arena=state.arena,
        )
        state.phase.set_day(state.day)
        self.set_music(MusicTrack.DAY)
        state.speed_fps = self.tuning.base_speed_fps
        state.pools.restore_full()
        state.spawn_gate.local_cooldown_ms = 0.0
        self.trace("day_started", {"day": state.day})
        logger.debug("day %d started humans=%d", state.day, len(state.humans))

    def start_countdown(self, seconds: int) -> None:
        self.state.countdown_value = seconds
        self.state.countdown_ms = COUNTDOWN_UNIT_MS
        self.accumulator.reset()
        self._set_mode(GameMode.COUNTDOWN)

    def quit_to_menu(self) -> None:
        self._prepare_menu_arena()
        self.set_music(None)
        self._set_mode(GameMode.MENU)

    def next_day(self, day: int) -> None:
        state = self.state
        state.day = day
        level = self.levels.for_day(day)
        state.snake.permanent_grow()
        state.forest.populate(self.rng_worldgen, level.trees, level.long_logs, level.short_logs)
        missing = level.humans - len(state.humans)
        if missing > 0:
            spawn_humans(
                self.rng_worldgen,
                state.humans,
                missing,
                level.perception,
                forest=state.forest,
                snake=state.snake,
                arena=state.arena,
            )
        for human in state.humans:
            human.perception = level.perception
        state.speed_fps = min(
            self.tuning.max_speed_fps,
            self.tuning.base_speed_fps + day * self.tuning.speed_per_day_fps,
        )
        self.trace("day_started", {"day": day})
        logger.debug("advanced to day %d speed_fps=%.2f", day, state.speed_fps)

    def start_endgame_hunt(self) -> None:
        self.endgame.start()
        self._set_mode(GameMode.ENDGAME_HUNT)

    def handle_death(self, reason: EndReason) -> None:
        state = self.state
        self.trace("death", {"reason": reason.value, "lives": state.lives})
        if state.lives > 1:
            state.lives -= 1
            logger.info("life lost reason=%s lives_left=%d", reason.value, state.lives)
            self.safe_respawn_snake()
            state.snake.respawn_safety_ms = self.tuning.respawn_safety_ms
            state.snake.invincible_ticks = self.tuning.respawn_invincible_ticks
            state.pools.restore_full()
            state.snake.health_factor = 1.0
            state.direction = Direction.RIGHT
            state.next_direction = Direction.RIGHT
            state.input_cooldown_ms = 0.0
            state.death_message = "HUNTED!" if reason is EndReason.HUMAN_CAUGHT else "CRASHED!"
            state.death_message_ms = self.tuning.death_message_ms
            self.accumulator.reset()
            self._set_mode(GameMode.DEATH_EVENT)
            return
        state.lives = 0
        self.game_over(reason)

    def game_over(self, reason: EndReason) -> None:
        state = self.state
        state.end_reason = reason
        logger.info(
            "run ended reason=%s day=%d time_played_ms=%.0f",
            reason.value,
            state.day,
            state.time_played_ms,
        )
        for module in self.rule_modules:
            module.on_run_end(self, reason)
        self._set_mode(GameMode.GAME_OVER)

    def record_victory(self) -> None:
        self.state.end_reason = EndReason.SURVIVED
        logger.info("run survived day=%d time_played_ms=%.0f", self.state.day, self.state.time_played_ms)
        for module in self.rule_modules:
            module.on_run_end(self, EndReason.SURVIVED)

    def safe_respawn_snake(self) -> Cell | None:
        state = self.state

        def is_valid(cell: Cell) -> bool:
            for offset in range(RESPAWN_CLEAR_CELLS):
                if state.forest.is_obstacle(cell.offset(-offset, 0)):
                    return False
            return all(manhattan(human.cell, cell) >= RESPAWN_HUMAN_DISTANCE for human in state.humans)

        cell = RandomPlacer(self.rng_sim).find_cell(
            label="respawn",
            attempts=RESPAWN_ATTEMPTS,
            bounds=(2, state.arena.cols - 2, 2, state.arena.rows - 2),
            is_valid=is_valid,
        )
        if cell is None:
            logger.warning("safe respawn exhausted; falling back to arena center")
        state.snake.respawn(state.arena, cell)
        return cell

    # -- pickups ----------------------------------------------------------------

    def eat_food(self, game_time: float) -> None:
        state = self.state
        state.snake.eat(game_time)
        state.food.cell = respawn_food(self.rng_sim, state.arena, self._cell_blocked)
        state.pools.heal(self.tuning.food_heal_ms)
        self.trace("pickup", {"item": "food"})
        self.trace("sfx", {"name": "eat"})

    def eat_mega_apple(self, game_time: float) -> None:
        state = self.state
        state.mega_apple.deactivate()
        state.pools.restore_full()
        state.snake.health_factor = 1.0
        state.snake.trigger_glow(GlowKind.MEGA_APPLE, self.tuning.mega_apple_glow_ms)
        state.snake.eat(game_time)
        self.trace("pickup", {"item": "mega_apple"})
        self.trace("sfx", {"name": "powerup"})

    def eat_dragon_fruit(self) -> None:
        state = self.state
        fruit = state.dragon_fruit
        fruit_type = fruit.fruit_type
        snake = state.snake
        if fruit_type is FruitType.LIFE:
            state.lives = min(self.tuning.life_cap, state.lives + 1)
            glow = GlowKind.LIFE
        elif fruit_type is FruitType.SHIELD:
            snake.shield_active = True
            state.pools.restore_full()
            snake.health_factor = 1.0
            enforce_health_length(snake, immediate=True)
            glow = GlowKind.SHIELD
        elif fruit_type is FruitType.RESET:
            snake.reset_length()
            state.pools.restore_full()
            snake.health_factor = 1.0
            glow = GlowKind.RESET
        elif fruit_type is FruitType.LITCHEE:
            snake.phase_through_ms = self.tuning.litchee_phase_through_ms
            glow = GlowKind.LITCHEE
        else:
            raise ValueError(f"active dragon fruit has no fruit_type: {fruit_type!r}")
        snake.trigger_glow(glow, self.tuning.fruit_glow_ms)
        fruit.deactivate()
        self.trace("pickup", {"item": "dragon_fruit", "fruit_type": fruit_type.value})
        self.trace("sfx", {"name": "powerup"})

    # -- frame and step driving --------------------------------------------------

    def effective_fps(self) -> float:
        state = self.state
        return effective_fps(
            state.speed_fps,
            health_factor=state.snake.health_factor,
            fullness_penalty=state.snake.fullness_penalty(),
            is_tired=state.pools.is_tired,
            tired_fps=self.tuning.tired_speed_fps,
        )

    def step_size_ms(self) -> float:
        return step_size_ms(self.effective_fps())

    def advance_frame(self, real_delta_ms: float) -> int:
        """Feed one display frame; returns the number of fixed steps taken."""
        state = self.state
        delta = clamp_frame_delta(real_delta_ms, self.tuning.max_frame_delta_ms)
        mode = state.mode

        if mode is GameMode.DEATH_EVENT:
            state.death_message_ms -= delta
            if state.death_message_ms <= 0:
                state.death_message = None
                self.start_countdown(self.tuning.countdown_seconds)
            return 0

        if mode is GameMode.COUNTDOWN:
            state.countdown_ms -= delta
            if state.countdown_ms <= 0:
                state.countdown_value -= 1
                state.countdown_ms = COUNTDOWN_UNIT_MS
                if state.countdown_value <= 0:
                    state.paused_visuals = None
                    state.input_cooldown_ms = 0.0
                    self.accumulator.reset()
                    self._set_mode(GameMode.PLAYING)
            return 0

        if mode not in STEPPING_MODES:
            return 0

        if state.input_cooldown_ms > 0:
            state.input_cooldown_ms = max(0.0, state.input_cooldown_ms - delta)
        self.accumulator.add(delta)
        steps = 0
        step_ms = self.step_size_ms()
        while state.mode in STEPPING_MODES and self.accumulator.consume(step_ms):
            self.step(step_ms)
            steps += 1
            step_ms = self.step_size_ms()
        state.alpha = self.accumulator.alpha(step_ms)
        return steps

    def step(self, dt: float) -> None:
        state = self.state
        if state.mode not in STEPPING_MODES:
            return
        tick = state.tick
        for module in self.rule_modules:
            module.on_step_start(self, tick)

        state.time_played_ms += dt
        if state.mode is GameMode.ENDGAME_HUNT:
            self.endgame.tick(dt, state.time_played_ms)
        else:
            self._play_step(dt, state.time_played_ms)

        for module in self.rule_modules:
            module.on_step_end(self, tick)
        state.tick += 1

    def _play_step(self, dt: float, game_time: float) -> None:
        state = self.state
        snake = state.snake
        pools = state.pools

        if self._advance_phase_clock(dt):
            return

        snake.health_factor = pools.health_factor()
        enforce_health_length(snake)
        if pools.deplete(dt):
            self.handle_death(EndReason.STARVED)
            return

        state.direction = state.next_direction
        outcome = snake.step(state.direction, state.arena, game_time, state.forest)
        if outcome is MoveOutcome.DEAD:
            self.handle_death(EndReason.SELF_HIT)
            return
        if outcome in (MoveOutcome.BOUNCE_WALL, MoveOutcome.BOUNCE_OBSTACLE):
            if self._resolve_bounce(outcome):
                return

        snake.tick_timers(dt)
        state.forest.update(dt)

        head = snake.head
        if state.food.is_at(head):
            self.eat_food(game_time)
        if state.mega_apple.is_at(head):
            self.eat_mega_apple(game_time)
        if state.dragon_fruit.is_at(head):
            self.eat_dragon_fruit()

        if self._step_humans():
            return

        blocked = self._cell_blocked
        state.spawn_gate.evaluate(
            self.rng_sim,
            elapsed_ms=state.time_played_ms,
            dt=dt,
            fruit=state.dragon_fruit,
            arena=state.arena,
            blocked=blocked,
        )
        state.mega_apple_gate.evaluate(
            self.rng_sim,
            phase_count=state.phase.phase_count,
            is_night=state.phase.is_night,
            apple=state.mega_apple,
            arena=state.arena,
            blocked=blocked,
        )

    def _advance_phase_clock(self, dt: float) -> bool:
        """Run the day/night clock; returns True when the endgame took over."""
        state = self.state
        signal = state.phase.update(dt)
        if signal is PhaseSignal.TRIGGER_AUDIO:
            self.set_music(state.phase.audio_state())
        elif signal is PhaseSignal.NEXT_DAY:
            phase_count = state.phase.advance_phase()
            new_day = day_for_phase(phase_count)
            if new_day > state.day:
                if new_day > self.levels.max_days:
                    self.start_endgame_hunt()
                    return True
                self.next_day(new_day)
            self.set_music(state.phase.audio_state())
        return False

    def _resolve_bounce(self, outcome: MoveOutcome) -> bool:
        """Knockback after a wall or obstacle hit; returns True when the hit was lethal."""
        state = self.state
        snake = state.snake
        pools = state.pools
        target = snake.head.step(state.direction)
        snake.invincible_ticks = self.tuning.bounce_invincible_ticks
        snake.damage_glow_ms = self.tuning.damage_glow_ms
        self.trace("sfx", {"name": "bounce"})

        if snake.respawn_safety_ms <= 0:
            penalty = self.tuning.shield_bounce_penalty_ms if snake.shield_active else self.tuning.bounce_penalty_ms
            pools.apply_damage(penalty)
            snake.health_factor = pools.health_factor()
            if enforce_health_length(snake) == 0:
                snake.shrink()
            if pools.is_drained:
                self.handle_death(self._bounce_reason(outcome, target))
                return True

        if outcome is MoveOutcome.BOUNCE_WALL:
            side = border_side_for(state.arena, target)
            if isinstance(side, BorderSide):
                state.forest.trigger_border_flash(side)
                self.trace("border_flash", {"side": side.value})
        else:
            state.forest.trigger_obstacle_flash(target)
            self.trace("obstacle_flash", target.to_dict())

        state.direction = state.direction.opposite()
        state.next_direction = state.direction
        state.input_cooldown_ms = self.tuning.input_lock_ms
        return False

    def _bounce_reason(self, outcome: MoveOutcome, target: Cell) -> EndReason:
        if outcome is MoveOutcome.BOUNCE_WALL:
            return EndReason.WALL_HIT
        if self.state.forest.obstacle_kind(target) is ObstacleKind.TREE:
            return EndReason.TREE_HIT
        return EndReason.LOG_HIT

    def _step_humans(self) -> bool:
        state = self.state
        snake = state.snake
        is_night = state.phase.is_night
        for human in state.humans:
            human.step(
                self.rng_sim,
                snake_head=snake.head,
                forest=state.forest,
                arena=state.arena,
                day=state.day,
                is_night=is_night,
            )
            if snake.occupies(human.cell) and snake.respawn_safety_ms <= 0:
                self.handle_death(EndReason.HUMAN_CAUGHT)
                return True
        return False

    # -- helpers ----------------------------------------------------------------

    def set_music(self, track: MusicTrack | None) -> None:
        if track is self.state.music:
            return
        self.state.music = track
        self.trace("music", {"track": None if track is None else track.value})

    def _set_mode(self, mode: GameMode) -> None:
        previous = self.state.mode
        self.state.mode = mode
        self.trace("mode_changed", {"from": previous.value, "to": mode.value})
        logger.debug("mode %s -> %s", previous.value, mode.value)
        for module in self.rule_modules:
            module.on_mode_changed(self, previous, mode)

    def _cell_blocked(self, cell: Cell) -> bool:
        return self.state.forest.is_obstacle(cell) or self.state.snake.occupies(cell)

    def _prepare_menu_arena(self) -> None:
        state = self.state
        state.forest.clear()
        state.snake.reset(state.arena)
        state.dragon_fruit.deactivate()
        state.mega_apple.deactivate()
        state.food.active = True
        state.food.cell = respawn_food(self.rng_worldgen, state.arena, self._cell_blocked)
        state.humans.clear()
        spawn_humans(
            self.rng_worldgen,
            state.humans,
            self.tuning.menu_humans,
            MENU_PERCEPTION,
            forest=state.forest,
            snake=state.snake,
            arena=state.arena,
        )
