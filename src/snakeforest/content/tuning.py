from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from snakeforest.sim.spawning import DEFAULT_FRUIT_RULES, FruitRule, FruitType

TUNING_SCHEMA_VERSION = 1
DEFAULT_TUNING_PATH = "content/tuning/tuning.json"

_INT_FIELDS = {
    "arena_cols",
    "arena_rows",
    "max_lives",
    "life_cap",
    "snake_base_length",
    "snake_max_length",
    "bounce_invincible_ticks",
    "respawn_invincible_ticks",
    "countdown_seconds",
    "mega_apple_max_per_run",
    "menu_humans",
}
_PROBABILITY_FIELDS = {"dragon_fruit_chance", "mega_apple_chance"}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TuningConfig:
    arena_cols: int = 40
    arena_rows: int = 25
    hunger_ms: float = 25_000.0
    starvation_ms: float = 25_000.0
    overfill_ms: float = 10_000.0
    food_heal_ms: float = 10_000.0
    base_speed_fps: float = 12.18
    tired_speed_fps: float = 8.0
    max_speed_fps: float = 22.0
    speed_per_day_fps: float = 0.5
    max_lives: int = 1
    life_cap: int = 3
    snake_base_length: int = 3
    snake_max_length: int = 12
    digestion_ms: float = 30_000.0
    bounce_penalty_ms: float = 15_000.0
    shield_bounce_penalty_ms: float = 3_000.0
    bounce_invincible_ticks: int = 15
    respawn_invincible_ticks: int = 30
    damage_glow_ms: float = 500.0
    input_lock_ms: float = 250.0
    respawn_safety_ms: float = 3_000.0
    death_message_ms: float = 1_500.0
    countdown_seconds: int = 3
    fruit_glow_ms: float = 3_000.0
    mega_apple_glow_ms: float = 4_000.0
    litchee_phase_through_ms: float = 90_000.0
    dragon_fruit_chance: float = 0.05
    mega_apple_chance: float = 0.025
    mega_apple_max_per_run: int = 5
    max_frame_delta_ms: float = 100.0
    menu_humans: int = 3
    fruit_rules: tuple[FruitRule, ...] = DEFAULT_FRUIT_RULES

    def __post_init__(self) -> None:
        if self.snake_max_length < self.snake_base_length:
            raise ValueError("tuning.snake_max_length must be >= snake_base_length")
        if self.tired_speed_fps <= 0 or self.base_speed_fps <= 0:
            raise ValueError("tuning speeds must be > 0")


def load_tuning_json(path: str | Path) -> TuningConfig:
    tuning_path = Path(path)
    if not tuning_path.exists():
        logger.warning("tuning file %s not found; using defaults", tuning_path)
        return TuningConfig()
    payload = json.loads(tuning_path.read_text(encoding="utf-8"))
    return _tuning_from_payload(payload)


def _tuning_from_payload(payload: dict[str, Any]) -> TuningConfig:
    if not isinstance(payload, dict):
        raise ValueError("tuning payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("tuning payload must contain integer field: schema_version")
    if schema_version != TUNING_SCHEMA_VERSION:
        raise ValueError(f"unsupported tuning schema_version: {schema_version}")

    values = payload.get("values", {})
    if not isinstance(values, dict):
        raise ValueError("tuning.values must be an object")

    known = {item.name for item in fields(TuningConfig)} - {"fruit_rules"}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"unknown tuning.values keys: {unknown}")

    kwargs: dict[str, Any] = {}
    for name, value in sorted(values.items()):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"tuning.values.{name} must be a number")
        if name in _INT_FIELDS:
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"tuning.values.{name} must be an integer >= 0")
            kwargs[name] = value
            continue
        if value < 0:
            raise ValueError(f"tuning.values.{name} must be >= 0")
        if name in _PROBABILITY_FIELDS and value > 1:
            raise ValueError(f"tuning.values.{name} must be within [0, 1]")
        kwargs[name] = float(value)

    if "fruit_rules" in payload:
        kwargs["fruit_rules"] = _fruit_rules_from_payload(payload["fruit_rules"])
    return TuningConfig(**kwargs)


def _fruit_rules_from_payload(rows: Any) -> tuple[FruitRule, ...]:
    if not isinstance(rows, list) or not rows:
        raise ValueError("tuning.fruit_rules must be a non-empty list")

    seen: set[FruitType] = set()
    rules: list[FruitRule] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"fruit_rules[{index}] must be an object")

        raw_type = row.get("fruit_type")
        try:
            fruit_type = FruitType(raw_type)
        except ValueError as exc:
            raise ValueError(f"fruit_rules[{index}].fruit_type is unknown: {raw_type!r}") from exc
        if fruit_type in seen:
            raise ValueError(f"duplicate fruit_rules fruit_type: {fruit_type.value}")
        seen.add(fruit_type)

        min_elapsed_ms = row.get("min_elapsed_ms")
        if isinstance(min_elapsed_ms, bool) or not isinstance(min_elapsed_ms, (int, float)) or min_elapsed_ms < 0:
            raise ValueError(f"fruit_rules[{index}].min_elapsed_ms must be a number >= 0")

        max_per_run = row.get("max_per_run")
        if not isinstance(max_per_run, int) or isinstance(max_per_run, bool) or max_per_run <= 0:
            raise ValueError(f"fruit_rules[{index}].max_per_run must be integer > 0")

        admission_chance = row.get("admission_chance", 1.0)
        if isinstance(admission_chance, bool) or not isinstance(admission_chance, (int, float)):
            raise ValueError(f"fruit_rules[{index}].admission_chance must be a number")
        if not 0.0 < admission_chance <= 1.0:
            raise ValueError(f"fruit_rules[{index}].admission_chance must be within (0, 1]")

        rules.append(
            FruitRule(
                fruit_type=fruit_type,
                min_elapsed_ms=float(min_elapsed_ms),
                max_per_run=max_per_run,
                admission_chance=float(admission_chance),
            )
        )

    # Declaration order of FruitType keeps the eligibility list stable.
    order = list(FruitType)
    rules.sort(key=lambda rule: order.index(rule.fruit_type))
    return tuple(rules)
