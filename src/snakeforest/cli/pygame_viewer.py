from __future__ import annotations

import argparse
import importlib.metadata
import math
import os
import platform
import random
import sys
from typing import Any

from snakeforest.cli.logging_config import LOG_LEVEL_CHOICES, configure_logging
from snakeforest.content.io import DEFAULT_META_STATS_PATH
from snakeforest.content.levels import DEFAULT_LEVEL_TABLE_PATH, load_level_table_json
from snakeforest.content.tuning import DEFAULT_TUNING_PATH, load_tuning_json
from snakeforest.sim.core import GameMode, SimCommand, Simulation
from snakeforest.sim.hash import simulation_hash
from snakeforest.sim.meta_stats import MetaStatsModule
from snakeforest.sim.snapshot import RenderSnapshot, clamp01, extract_render_snapshot, interpolate_cell, interpolate_segments

CELL_SIZE = 25
HUD_HEIGHT = 40
FRAME_RATE = 60
DEFAULT_SEED = 7
MAX_FRAME_MS = 250

BACKGROUND_COLOR = (18, 38, 24)
GRID_COLOR = (24, 48, 30)
TREE_COLOR = (34, 110, 52)
TREE_FLASH_COLOR = (240, 70, 70)
LOG_COLOR = (120, 82, 46)
LOG_FLASH_COLOR = (240, 70, 70)
HUMAN_COLOR = (235, 196, 150)
FOOD_COLOR = (220, 40, 40)
MEGA_APPLE_COLOR = (255, 90, 60)
SNAKE_HEAD_COLOR = (140, 240, 90)
SNAKE_BODY_COLOR = (70, 190, 60)
SNAKE_GOLD_COLOR = (255, 200, 40)
SNAKE_DAMAGE_COLOR = (255, 80, 80)
SHIELD_COLOR = (90, 180, 255)
BORDER_FLASH_COLOR = (255, 60, 60)
HUD_COLOR = (240, 240, 240)
HUD_WARNING_COLOR = (255, 120, 80)
NIGHT_TINT = (4, 6, 28)
FIREFLY_COLOR = (210, 255, 120)
RAIN_COLOR = (150, 170, 200)
ANNOUNCE_COLOR = (255, 34, 51)
VICTORY_COLOR = (0, 255, 136)
GLOW_COLOR = (255, 180, 0)

FRUIT_COLORS: dict[str, tuple[int, int, int]] = {
    "LIFE": (255, 70, 160),
    "SHIELD": (80, 160, 255),
    "RESET": (200, 200, 200),
    "LITCHEE": (255, 120, 200),
}
GLOW_COLORS: dict[str, tuple[int, int, int]] = {
    "life": (255, 70, 160),
    "shield": (80, 160, 255),
    "reset": (255, 255, 255),
    "litchee": (255, 120, 200),
    "mega_apple": (255, 90, 60),
}

DEATH_MESSAGES: dict[str, tuple[str, ...]] = {
    "HUMAN_CAUGHT": (
        "Humans 1, Snakes 0.",
        "We don't take kindly to your kind.",
        "Step on snek? No, snek captured.",
        "Captured for science!",
    ),
    "LOG_HIT": ("Bark is worse than your bite.", "Logs are hard. You are soft.", "Splinters... ouch.", "Not a walkway."),
    "TREE_HIT": ("Tree 1, Snake 0. Nature wins.", "Bark is worse than your bite.", "Hugged the tree too hard.", "Timber!"),
    "SELF_HIT": ("Stop hitting yourself!", "Ouroboros exceeded.", "Tangled up in blue.", "You are your own worst enemy."),
    "WALL_HIT": ("Bricks don't negotiate.", "Claustrophobia setting in.", "Bonk!", "No exit that way."),
    "STARVED": ("Ran out of steam.", "Should have eaten more.", "The forest is cruel to the hungry."),
    "SURVIVED": ("Legendary Snake!", "Forest Master!", "You escaped!", "Nature bows to you."),
}
DEFAULT_DEATH_MESSAGE = "Game Over."

# Endgame phases where the snake is drawn from the dissolve list or not at all.
HIDDEN_SNAKE_PHASES = {
    "CLEANUP",
    "BG_TRANSITION",
    "HUMAN_SPAWN",
    "VICTORY_GLOW",
    "VICTORY_TEXT",
    "SURVIVOR_MSG",
    "CONFETTI",
    "THE_END",
}

TURN_KEYS: dict[str, str] = {
    "up": "up",
    "w": "up",
    "down": "down",
    "s": "down",
    "left": "left",
    "a": "left",
    "right": "right",
    "d": "right",
}

pygame: Any | None = None


def format_time(ms: float) -> str:
    seconds = max(0, int(ms // 1000))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def game_over_message(reason: str | None, rng: random.Random) -> str:
    messages = DEATH_MESSAGES.get(reason or "", ())
    if not messages:
        return DEFAULT_DEATH_MESSAGE
    return messages[int(rng.random() * len(messages))]


def command_for_key(key_name: str, mode: GameMode) -> tuple[str, dict[str, str]] | None:
    """Map a pygame key name to a simulation command for the current mode."""
    if key_name == "m":
        return ("toggle_mute", {})
    if key_name == "space" and mode in (GameMode.MENU, GameMode.GAME_OVER):
        return ("start", {})
    if mode in (GameMode.PLAYING, GameMode.COUNTDOWN) and key_name in ("escape", "p"):
        return ("toggle_pause", {})
    if mode is GameMode.PAUSED:
        if key_name in ("space", "p"):
            return ("toggle_pause", {})
        if key_name == "escape":
            return ("quit_to_menu", {})
    if mode in (GameMode.PLAYING, GameMode.ENDGAME_HUNT) and key_name in TURN_KEYS:
        return ("turn", {"direction": TURN_KEYS[key_name]})
    return None


def window_size(cols: int, rows: int) -> tuple[int, int]:
    return (cols * CELL_SIZE, rows * CELL_SIZE + HUD_HEIGHT)


def _cell_rect(x: float, y: float, inset: int = 0) -> pygame.Rect:
    return pygame.Rect(
        int(x * CELL_SIZE) + inset,
        int(y * CELL_SIZE) + HUD_HEIGHT + inset,
        CELL_SIZE - inset * 2,
        CELL_SIZE - inset * 2,
    )


def _cell_center(x: float, y: float) -> tuple[int, int]:
    return (int(x * CELL_SIZE + CELL_SIZE / 2), int(y * CELL_SIZE + CELL_SIZE / 2) + HUD_HEIGHT)


def _blit_alpha(screen: pygame.Surface, color: tuple[int, int, int], rect: pygame.Rect, alpha: float) -> None:
    overlay = pygame.Surface(rect.size, pygame.SRCALPHA)
    overlay.fill((*color, int(255 * clamp01(alpha))))
    screen.blit(overlay, rect.topleft)


def _draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    color: tuple[int, int, int],
    center: tuple[int, int],
    alpha: float = 1.0,
) -> None:
    surface = font.render(text, True, color)
    if alpha < 1.0:
        surface.set_alpha(int(255 * clamp01(alpha)))
    screen.blit(surface, surface.get_rect(center=center))


def _draw_arena(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    arena_rect = pygame.Rect(0, HUD_HEIGHT, snapshot.cols * CELL_SIZE, snapshot.rows * CELL_SIZE)
    pygame.draw.rect(screen, BACKGROUND_COLOR, arena_rect)
    for x in range(snapshot.cols + 1):
        pygame.draw.line(screen, GRID_COLOR, (x * CELL_SIZE, HUD_HEIGHT), (x * CELL_SIZE, arena_rect.bottom))
    for y in range(snapshot.rows + 1):
        pygame.draw.line(screen, GRID_COLOR, (0, HUD_HEIGHT + y * CELL_SIZE), (arena_rect.right, HUD_HEIGHT + y * CELL_SIZE))

    for side, remaining_ms in snapshot.border_flashes:
        thickness = 4
        if side == "left":
            rect = pygame.Rect(0, HUD_HEIGHT, thickness, arena_rect.height)
        elif side == "right":
            rect = pygame.Rect(arena_rect.right - thickness, HUD_HEIGHT, thickness, arena_rect.height)
        elif side == "top":
            rect = pygame.Rect(0, HUD_HEIGHT, arena_rect.width, thickness)
        else:
            rect = pygame.Rect(0, arena_rect.bottom - thickness, arena_rect.width, thickness)
        _blit_alpha(screen, BORDER_FLASH_COLOR, rect, remaining_ms / 250.0)


def _draw_obstacles(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    for record in snapshot.logs:
        color = LOG_FLASH_COLOR if record.flash_ms > 0 else LOG_COLOR
        width = record.length if record.horizontal else 1
        height = 1 if record.horizontal else record.length
        rect = pygame.Rect(
            record.x * CELL_SIZE + 3,
            record.y * CELL_SIZE + HUD_HEIGHT + 3,
            width * CELL_SIZE - 6,
            height * CELL_SIZE - 6,
        )
        pygame.draw.rect(screen, color, rect, border_radius=6)
    for tree in snapshot.trees:
        color = TREE_FLASH_COLOR if tree.flash_ms > 0 else TREE_COLOR
        radius = int(CELL_SIZE / 2 * tree.scale * 0.8)
        pygame.draw.circle(screen, color, _cell_center(tree.x, tree.y), radius)


def _draw_consumables(screen: pygame.Surface, snapshot: RenderSnapshot, now_ms: int) -> None:
    pulse = 0.5 + 0.5 * math.sin(now_ms / 200.0)
    if snapshot.food is not None:
        pygame.draw.circle(screen, FOOD_COLOR, _cell_center(snapshot.food.x, snapshot.food.y), CELL_SIZE // 3)
    if snapshot.dragon_fruit is not None:
        color = FRUIT_COLORS.get(snapshot.dragon_fruit.fruit_type or "", FOOD_COLOR)
        radius = int(CELL_SIZE / 3 + pulse * 3)
        pygame.draw.circle(screen, color, _cell_center(snapshot.dragon_fruit.x, snapshot.dragon_fruit.y), radius)
    if snapshot.mega_apple is not None:
        radius = int(CELL_SIZE / 2.4 + pulse * 3)
        pygame.draw.circle(screen, MEGA_APPLE_COLOR, _cell_center(snapshot.mega_apple.x, snapshot.mega_apple.y), radius)


def _draw_humans(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    alpha = clamp01(snapshot.alpha)
    for human in snapshot.humans:
        x, y = interpolate_cell((human.prev_x, human.prev_y), (human.x, human.y), alpha)
        pygame.draw.rect(screen, HUMAN_COLOR, _cell_rect(x, y, inset=6), border_radius=4)


def _draw_snake(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    positions = interpolate_segments(snapshot)
    if snapshot.gold_mode:
        body_color = SNAKE_GOLD_COLOR
        head_color = SNAKE_GOLD_COLOR
    elif snapshot.damage_glow_ms > 0:
        body_color = SNAKE_DAMAGE_COLOR
        head_color = SNAKE_DAMAGE_COLOR
    else:
        body_color = SNAKE_BODY_COLOR
        head_color = SNAKE_HEAD_COLOR
    for index in range(len(positions) - 1, -1, -1):
        x, y = positions[index]
        color = head_color if index == 0 else body_color
        pygame.draw.rect(screen, color, _cell_rect(x, y, inset=2), border_radius=6)
    if not positions:
        return
    head_x, head_y = positions[0]
    if snapshot.shield_active:
        pygame.draw.circle(screen, SHIELD_COLOR, _cell_center(head_x, head_y), CELL_SIZE // 2 + 2, 2)
    if snapshot.glow_kind is not None:
        glow = GLOW_COLORS.get(snapshot.glow_kind, HUD_COLOR)
        pygame.draw.circle(screen, glow, _cell_center(head_x, head_y), CELL_SIZE // 2 + 5, 2)


def _draw_dissolve(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    for item in snapshot.dissolve:
        if item.alpha <= 0:
            continue
        if item.kind == "log":
            width = item.length if item.horizontal else 1
            height = 1 if item.horizontal else item.length
            rect = pygame.Rect(
                int(item.x * CELL_SIZE),
                int(item.y * CELL_SIZE) + HUD_HEIGHT,
                width * CELL_SIZE,
                height * CELL_SIZE,
            )
            _blit_alpha(screen, LOG_COLOR, rect, item.alpha)
            continue
        if item.kind == "tree":
            color = TREE_COLOR
        elif item.kind == "human":
            color = HUMAN_COLOR
        elif item.kind in ("snake", "snake_segment"):
            color = SNAKE_GOLD_COLOR if item.kind == "snake_segment" else SNAKE_BODY_COLOR
        elif item.kind == "fruit":
            color = FRUIT_COLORS.get(item.fruit_type or "", FOOD_COLOR)
        else:
            color = FOOD_COLOR
        _blit_alpha(screen, color, _cell_rect(item.x, item.y, inset=3), item.alpha)


def _draw_weather(screen: pygame.Surface, snapshot: RenderSnapshot, now_ms: int) -> None:
    if snapshot.weather_intensity <= 0:
        return
    width = snapshot.cols * CELL_SIZE
    height = snapshot.rows * CELL_SIZE
    if snapshot.weather == "fireflies":
        count = int(30 * snapshot.weather_intensity)
        for index in range(count):
            x = (math.sin(index * 12.9898 + now_ms / 2100.0) * 0.5 + 0.5) * width
            y = (math.cos(index * 78.233 + now_ms / 2700.0) * 0.5 + 0.5) * height + HUD_HEIGHT
            pygame.draw.circle(screen, FIREFLY_COLOR, (int(x), int(y)), 2)
        return
    count = int(60 * snapshot.weather_intensity)
    for index in range(count):
        x = (index * 97 + now_ms // 4) % width
        y = (index * 53 + now_ms // 2) % height + HUD_HEIGHT
        pygame.draw.line(screen, RAIN_COLOR, (x, y), (x - 2, y + 8))


def _draw_darkness(screen: pygame.Surface, snapshot: RenderSnapshot) -> None:
    if snapshot.darkness <= 0:
        return
    rect = pygame.Rect(0, HUD_HEIGHT, snapshot.cols * CELL_SIZE, snapshot.rows * CELL_SIZE)
    _blit_alpha(screen, NIGHT_TINT, rect, snapshot.darkness)


def _draw_hud(screen: pygame.Surface, snapshot: RenderSnapshot, font: pygame.font.Font) -> None:
    if snapshot.mode == "MENU" or snapshot.hud_alpha <= 0:
        return
    phase = "NIGHT" if snapshot.is_night else "DAY"
    lines = [
        f"DAY {snapshot.day} {phase}",
        f"TIME {format_time(snapshot.time_played_ms)}",
        f"LIVES {snapshot.lives}",
        f"HEALTH {int(snapshot.health_factor * 100)}%",
    ]
    if snapshot.muted:
        lines.append("MUTED")
    color = HUD_WARNING_COLOR if snapshot.is_starving else HUD_COLOR
    x = 12
    for line in lines:
        surface = font.render(line, True, color)
        surface.set_alpha(int(255 * clamp01(snapshot.hud_alpha)))
        screen.blit(surface, (x, 10))
        x += surface.get_width() + 24


def _draw_overlays(
    screen: pygame.Surface,
    snapshot: RenderSnapshot,
    fonts: dict[str, pygame.font.Font],
    game_over_text: str | None,
) -> None:
    width, height = screen.get_size()
    center = (width // 2, height // 2)
    mode = snapshot.mode

    if mode == "MENU":
        _draw_text(screen, fonts["huge"], "SNAKE FOREST", VICTORY_COLOR, (center[0], center[1] - 60))
        _draw_text(screen, fonts["large"], "Press SPACE to start", HUD_COLOR, (center[0], center[1] + 20))
    elif mode == "COUNTDOWN":
        _draw_text(screen, fonts["huge"], str(max(1, snapshot.countdown_value)), HUD_COLOR, center)
    elif mode == "PAUSED":
        _draw_text(screen, fonts["huge"], "PAUSED", HUD_COLOR, (center[0], center[1] - 30))
        _draw_text(screen, fonts["small"], "SPACE/P resume | ESC menu", HUD_COLOR, (center[0], center[1] + 30))
    elif mode == "DEATH_EVENT" and snapshot.death_message:
        _draw_text(screen, fonts["huge"], snapshot.death_message, ANNOUNCE_COLOR, center)
    elif mode == "GAME_OVER":
        _draw_text(screen, fonts["huge"], "GAME OVER", ANNOUNCE_COLOR, (center[0], center[1] - 60))
        if game_over_text:
            _draw_text(screen, fonts["large"], game_over_text, HUD_COLOR, center)
        _draw_text(
            screen,
            fonts["small"],
            f"Time: {format_time(snapshot.time_played_ms)} | SPACE to restart",
            HUD_COLOR,
            (center[0], center[1] + 50),
        )
    elif mode == "ENDGAME_HUNT":
        _draw_endgame_overlay(screen, snapshot, fonts, center)


def _draw_endgame_overlay(
    screen: pygame.Surface,
    snapshot: RenderSnapshot,
    fonts: dict[str, pygame.font.Font],
    center: tuple[int, int],
) -> None:
    phase = snapshot.endgame_phase
    if snapshot.announce_alpha > 0:
        _draw_text(screen, fonts["huge"], "IT'S YOUR TIME TO HUNT!", ANNOUNCE_COLOR, center, snapshot.announce_alpha)
    if phase == "HUNT_COUNTDOWN" and snapshot.hunt_countdown > 0:
        _draw_text(screen, fonts["huge"], str(snapshot.hunt_countdown), HUD_COLOR, center)
    if phase in ("VICTORY_GLOW", "VICTORY_TEXT", "SURVIVOR_MSG", "CONFETTI", "THE_END") and snapshot.glow_alpha > 0:
        _blit_alpha(screen, GLOW_COLOR, screen.get_rect(), snapshot.glow_alpha * 0.45)
    if phase == "VICTORY_TEXT":
        _draw_text(screen, fonts["huge"], "YOU SURVIVED!", VICTORY_COLOR, (center[0], center[1] - 44))
        _draw_text(screen, fonts["large"], "YOU ARE NOW OFFICIALLY A SURVIVOR", VICTORY_COLOR, (center[0], center[1] + 24))
    elif phase in ("SURVIVOR_MSG", "CONFETTI"):
        _draw_text(screen, fonts["huge"], "THANK YOU FOR PLAYING!", HUD_COLOR, center)
    if phase == "CONFETTI":
        _draw_confetti(screen, snapshot.endgame_progress)
    if phase == "THE_END":
        _draw_text(
            screen,
            fonts["huge"],
            "THE END.",
            HUD_COLOR,
            (center[0], center[1] + 100),
            clamp01(snapshot.endgame_progress * 1500.0 / 800.0),
        )
    if phase == "HUNT":
        _draw_text(screen, fonts["small"], f"EATEN {snapshot.humans_eaten}", GLOW_COLOR, (center[0], HUD_HEIGHT // 2))


def _draw_confetti(screen: pygame.Surface, progress: float) -> None:
    width, height = screen.get_size()
    for index in range(80):
        x = (index * 131) % width
        y = int((index * 67 + progress * height * 2) % height)
        shimmer = 0.6 + 0.4 * math.sin(index + progress * 40)
        radius = 2 + index % 3
        color = (255, int(180 + 60 * shimmer), int(40 * shimmer))
        pygame.draw.circle(screen, color, (x, y), radius)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snakeforest",
        description="Run the Snake Forest pygame viewer.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Master seed for the simulation RNG streams.")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Force SDL dummy video driver for CI/testing and exit without opening a real window.",
    )
    parser.add_argument(
        "--stats-path",
        default=DEFAULT_META_STATS_PATH,
        help="JSON store for best time, furthest day and total runs.",
    )
    parser.add_argument("--tuning-path", default=DEFAULT_TUNING_PATH, help="Path to tuning JSON.")
    parser.add_argument("--level-path", default=DEFAULT_LEVEL_TABLE_PATH, help="Path to per-day level table JSON.")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        type=str.upper,
        help="Engine log level (defaults to SNAKEFOREST_LOG_LEVEL or WARNING).",
    )
    return parser


def _env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[snakeforest.viewer] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )
    for name in ("SDL_VIDEODRIVER", "SDL_AUDIODRIVER", "SDL_VIDEO_WINDOW_POS"):
        value = os.environ.get(name, "<unset>")
        print(f"[snakeforest.viewer] env {name}={value}")


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def _build_viewer_simulation(*, seed: int, stats_path: str, tuning_path: str, level_path: str) -> Simulation:
    sim = Simulation(
        seed=seed,
        tuning=load_tuning_json(tuning_path),
        levels=load_level_table_json(level_path),
    )
    sim.register_rule_module(MetaStatsModule(stats_path))
    return sim


def run_pygame_viewer(
    *,
    seed: int = DEFAULT_SEED,
    headless: bool = False,
    stats_path: str = DEFAULT_META_STATS_PATH,
    tuning_path: str = DEFAULT_TUNING_PATH,
    level_path: str = DEFAULT_LEVEL_TABLE_PATH,
) -> int:
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[snakeforest.viewer] warning: headless mode active; no window will open.")

    _print_startup_banner()
    pygame_module = _ensure_pygame_imported()

    try:
        pygame_module.init()
    except Exception as exc:
        print(
            "[snakeforest.viewer] failed during pygame.init(): "
            f"{exc}. Hint: verify a working SDL video driver (set SDL_VIDEODRIVER=dummy for headless mode).",
            file=sys.stderr,
        )
        return 1

    try:
        sim = _build_viewer_simulation(
            seed=seed,
            stats_path=stats_path,
            tuning_path=tuning_path,
            level_path=level_path,
        )
    except (OSError, ValueError) as exc:
        print(f"[snakeforest.viewer] failed to initialize simulation: {exc}", file=sys.stderr)
        pygame_module.quit()
        return 1

    size = window_size(sim.state.arena.cols, sim.state.arena.rows)
    try:
        pygame_module.display.set_caption("Snake Forest")
        screen = pygame_module.display.set_mode(size)
    except Exception as exc:
        print(
            "[snakeforest.viewer] failed during pygame.display.set_mode(...): "
            f"{exc}. Hint: GUI sessions require a valid display; in CI/WSL/remote shells use --headless or SNAKEFOREST_HEADLESS=1.",
            file=sys.stderr,
        )
        pygame_module.quit()
        return 1

    driver_name = pygame_module.display.get_driver()
    print(f"[snakeforest.viewer] display initialized: {driver_name}, window size={size}")

    if headless:
        sim.advance_frame(1000.0 / FRAME_RATE)
        print(f"[snakeforest.viewer] headless frame ok simulation_hash={simulation_hash(sim)}")
        pygame_module.quit()
        return 0

    clock = pygame_module.time.Clock()
    fonts = {
        "small": pygame_module.font.SysFont("consolas", 18),
        "large": pygame_module.font.SysFont("consolas", 30, bold=True),
        "huge": pygame_module.font.SysFont("consolas", 56, bold=True),
    }
    message_rng = random.Random()
    game_over_text: str | None = None
    previous_mode = sim.state.mode
    running = True

    while running:
        frame_ms = min(MAX_FRAME_MS, clock.tick(FRAME_RATE))

        for event in pygame_module.event.get():
            if event.type == pygame_module.QUIT:
                running = False
            elif event.type == pygame_module.KEYDOWN:
                key_name = pygame_module.key.name(event.key)
                if key_name == "escape" and sim.state.mode in (GameMode.MENU, GameMode.GAME_OVER):
                    running = False
                    continue
                command = command_for_key(key_name, sim.state.mode)
                if command is not None:
                    command_type, params = command
                    sim.append_command(SimCommand(tick=sim.state.tick, command_type=command_type, params=params))

        sim.advance_frame(float(frame_ms))

        if sim.state.mode is not previous_mode:
            if sim.state.mode is GameMode.GAME_OVER:
                reason = sim.state.end_reason.value if sim.state.end_reason is not None else None
                game_over_text = game_over_message(reason, message_rng)
            previous_mode = sim.state.mode

        snapshot = extract_render_snapshot(sim)
        now_ms = pygame_module.time.get_ticks()
        screen.fill((0, 0, 0))
        _draw_arena(screen, snapshot)
        _draw_obstacles(screen, snapshot)
        _draw_consumables(screen, snapshot, now_ms)
        if snapshot.endgame_phase != "CLEANUP":
            _draw_humans(screen, snapshot)
        if snapshot.endgame_phase not in HIDDEN_SNAKE_PHASES:
            _draw_snake(screen, snapshot)
        _draw_dissolve(screen, snapshot)
        _draw_weather(screen, snapshot, now_ms)
        _draw_darkness(screen, snapshot)
        _draw_hud(screen, snapshot, fonts["small"])
        _draw_overlays(screen, snapshot, fonts, game_over_text)
        pygame_module.display.flip()

    pygame_module.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    headless = args.headless or _env_flag_enabled("SNAKEFOREST_HEADLESS")
    raise SystemExit(
        run_pygame_viewer(
            seed=args.seed,
            headless=headless,
            stats_path=args.stats_path,
            tuning_path=args.tuning_path,
            level_path=args.level_path,
        )
    )


if __name__ == "__main__":
    main()
