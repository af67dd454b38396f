from __future__ import annotations

from dataclasses import dataclass

from snakeforest.sim.core import GameMode, Simulation
from snakeforest.sim.grid import Cell


@dataclass(frozen=True)
class TreeSnapshot:
    x: int
    y: int
    scale: float
    flash_ms: float


@dataclass(frozen=True)
class LogSnapshot:
    x: int
    y: int
    length: int
    horizontal: bool
    flash_ms: float


@dataclass(frozen=True)
class HumanSnapshot:
    x: int
    y: int
    prev_x: int
    prev_y: int


@dataclass(frozen=True)
class ConsumableSnapshot:
    x: int
    y: int
    fruit_type: str | None = None


@dataclass(frozen=True)
class DissolveSnapshot:
    kind: str
    x: float
    y: float
    alpha: float
    scale: float
    length: int
    horizontal: bool
    fruit_type: str | None


@dataclass(frozen=True)
class RenderSnapshot:
    """Everything a renderer needs for one frame, detached from live state."""

    cols: int
    rows: int
    mode: str
    tick: int
    alpha: float
    day: int
    phase_count: int
    is_night: bool
    darkness: float
    weather: str
    weather_intensity: float
    lives: int
    time_played_ms: float
    countdown_value: int
    death_message: str | None
    end_reason: str | None
    muted: bool
    music: str | None
    health_factor: float
    hunger_ms: float
    starvation_ms: float
    is_tired: bool
    is_starving: bool
    shield_active: bool
    gold_mode: bool
    damage_glow_ms: float
    glow_kind: str | None
    glow_ms: float
    phase_through_ms: float
    respawn_safety_ms: float
    segments: tuple[tuple[int, int], ...]
    prev_segments: tuple[tuple[int, int], ...]
    humans: tuple[HumanSnapshot, ...]
    trees: tuple[TreeSnapshot, ...]
    logs: tuple[LogSnapshot, ...]
    border_flashes: tuple[tuple[str, float], ...]
    food: ConsumableSnapshot | None
    dragon_fruit: ConsumableSnapshot | None
    mega_apple: ConsumableSnapshot | None
    endgame_phase: str | None = None
    endgame_progress: float = 0.0
    hud_alpha: float = 1.0
    announce_alpha: float = 0.0
    hunt_countdown: int = 0
    glow_alpha: float = 0.0
    humans_eaten: int = 0
    dissolve: tuple[DissolveSnapshot, ...] = ()


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def lerp(start: float, end: float, alpha: float) -> float:
    return start + (end - start) * alpha


def interpolate_cell(previous: tuple[int, int] | None, current: tuple[int, int], alpha: float) -> tuple[float, float]:
    if previous is None:
        return (float(current[0]), float(current[1]))
    # Wrapped or teleported segments snap instead of sliding across the arena.
    if abs(previous[0] - current[0]) + abs(previous[1] - current[1]) > 1:
        return (float(current[0]), float(current[1]))
    return (lerp(previous[0], current[0], alpha), lerp(previous[1], current[1], alpha))


def interpolate_segments(snapshot: RenderSnapshot) -> list[tuple[float, float]]:
    alpha = clamp01(snapshot.alpha)
    positions: list[tuple[float, float]] = []
    for index, current in enumerate(snapshot.segments):
        previous = snapshot.prev_segments[index] if index < len(snapshot.prev_segments) else None
        positions.append(interpolate_cell(previous, current, alpha))
    return positions


def _xy(cell: Cell) -> tuple[int, int]:
    return (cell.x, cell.y)


def extract_render_snapshot(sim: Simulation) -> RenderSnapshot:
    state = sim.state
    snake = state.snake
    pools = state.pools
    endgame = state.endgame

    if state.mode is GameMode.ENDGAME_HUNT:
        darkness = endgame.darkness
        weather = endgame.weather.value
        weather_intensity = endgame.weather_intensity
        is_night = False
    elif state.paused_visuals is not None:
        darkness = state.paused_visuals.darkness
        weather = state.paused_visuals.weather.value
        weather_intensity = state.paused_visuals.weather_intensity
        is_night = state.paused_visuals.is_night
    else:
        visuals = state.phase.visuals()
        darkness = visuals.darkness
        weather = visuals.weather.value
        weather_intensity = visuals.weather_intensity
        is_night = visuals.is_night

    def consumable(item) -> ConsumableSnapshot | None:
        if not item.active:
            return None
        fruit_type = item.fruit_type.value if item.fruit_type is not None else None
        return ConsumableSnapshot(x=item.cell.x, y=item.cell.y, fruit_type=fruit_type)

    return RenderSnapshot(
        cols=state.arena.cols,
        rows=state.arena.rows,
        mode=state.mode.value,
        tick=state.tick,
        alpha=state.alpha,
        day=state.day,
        phase_count=state.phase.phase_count,
        is_night=is_night,
        darkness=darkness,
        weather=weather,
        weather_intensity=weather_intensity,
        lives=state.lives,
        time_played_ms=state.time_played_ms,
        countdown_value=state.countdown_value,
        death_message=state.death_message,
        end_reason=state.end_reason.value if state.end_reason is not None else None,
        muted=state.muted,
        music=state.music.value if state.music is not None else None,
        health_factor=snake.health_factor,
        hunger_ms=pools.hunger_ms,
        starvation_ms=pools.starvation_ms,
        is_tired=pools.is_tired,
        is_starving=pools.is_starving,
        shield_active=snake.shield_active,
        gold_mode=snake.gold_mode,
        damage_glow_ms=snake.damage_glow_ms,
        glow_kind=snake.glow_kind.value if snake.glow_kind is not None and snake.glow_ms > 0 else None,
        glow_ms=snake.glow_ms,
        phase_through_ms=snake.phase_through_ms,
        respawn_safety_ms=snake.respawn_safety_ms,
        segments=tuple(_xy(cell) for cell in snake.segments),
        prev_segments=tuple(_xy(cell) for cell in snake.prev_segments),
        humans=tuple(
            HumanSnapshot(x=human.cell.x, y=human.cell.y, prev_x=human.prev_cell.x, prev_y=human.prev_cell.y)
            for human in state.humans
        ),
        trees=tuple(
            TreeSnapshot(x=tree.cell.x, y=tree.cell.y, scale=tree.scale, flash_ms=tree.flash_ms)
            for tree in sorted(state.forest.trees(), key=lambda tree: tree.cell)
        ),
        logs=tuple(
            LogSnapshot(
                x=record.origin.x,
                y=record.origin.y,
                length=record.length,
                horizontal=record.horizontal,
                flash_ms=record.flash_ms,
            )
            for record in sorted(state.forest.log_records(), key=lambda record: record.origin)
        ),
        border_flashes=tuple((flash.side.value, flash.remaining_ms) for flash in state.forest.border_flashes),
        food=consumable(state.food),
        dragon_fruit=consumable(state.dragon_fruit),
        mega_apple=consumable(state.mega_apple),
        endgame_phase=endgame.phase.value if endgame.phase is not None else None,
        endgame_progress=sim.endgame.progress(),
        hud_alpha=endgame.hud_alpha if endgame.phase is not None else 1.0,
        announce_alpha=endgame.announce_alpha,
        hunt_countdown=endgame.countdown_value,
        glow_alpha=endgame.glow_alpha,
        humans_eaten=endgame.humans_eaten,
        dissolve=tuple(
            DissolveSnapshot(
                kind=item.kind.value,
                x=item.x,
                y=item.y,
                alpha=item.alpha,
                scale=item.scale,
                length=item.length,
                horizontal=item.horizontal,
                fruit_type=item.fruit_type.value if item.fruit_type is not None else None,
            )
            for item in endgame.dissolve
        ),
    )
