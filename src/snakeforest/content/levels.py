from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

LEVEL_TABLE_SCHEMA_VERSION = 1
DEFAULT_LEVEL_TABLE_PATH = "content/levels/level_table.json"

_COUNT_FIELDS = ("trees", "short_logs", "long_logs", "humans")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelDef:
    day: int
    trees: int
    short_logs: int
    long_logs: int
    humans: int
    perception: int | None


@dataclass(frozen=True)
class LevelTable:
    schema_version: int
    max_days: int
    levels: tuple[LevelDef, ...]

    def by_day(self) -> dict[int, LevelDef]:
        return {level.day: level for level in self.levels}

    def for_day(self, day: int) -> LevelDef:
        """Level for ``day``; days past the table reuse the last entry."""
        levels = self.by_day()
        if day in levels:
            return levels[day]
        return self.levels[-1]


DEFAULT_LEVELS = (
    LevelDef(day=1, trees=8, short_logs=4, long_logs=4, humans=2, perception=0),
    LevelDef(day=2, trees=10, short_logs=6, long_logs=6, humans=4, perception=15),
    LevelDef(day=3, trees=12, short_logs=7, long_logs=7, humans=6, perception=30),
    LevelDef(day=4, trees=13, short_logs=8, long_logs=8, humans=6, perception=45),
    LevelDef(day=5, trees=15, short_logs=10, long_logs=10, humans=8, perception=None),
)


def default_level_table() -> LevelTable:
    return LevelTable(schema_version=LEVEL_TABLE_SCHEMA_VERSION, max_days=len(DEFAULT_LEVELS), levels=DEFAULT_LEVELS)


def load_level_table_json(path: str | Path) -> LevelTable:
    """Load a level table; a missing file falls back to the built-in table."""
    level_path = Path(path)
    if not level_path.exists():
        logger.warning("level table %s not found; using built-in levels", level_path)
        return default_level_table()
    payload = json.loads(level_path.read_text(encoding="utf-8"))
    return _table_from_payload(payload)


def _table_from_payload(payload: dict[str, Any]) -> LevelTable:
    if not isinstance(payload, dict):
        raise ValueError("level table payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("level table payload must contain integer field: schema_version")
    if schema_version != LEVEL_TABLE_SCHEMA_VERSION:
        raise ValueError(f"unsupported level table schema_version: {schema_version}")

    levels_payload = payload.get("levels")
    if not isinstance(levels_payload, list) or not levels_payload:
        raise ValueError("level table payload must contain non-empty list field: levels")

    seen_days: set[int] = set()
    levels: list[LevelDef] = []
    for index, row in enumerate(levels_payload):
        if not isinstance(row, dict):
            raise ValueError(f"levels[{index}] must be an object")

        day = row.get("day")
        if not isinstance(day, int) or isinstance(day, bool) or day < 1:
            raise ValueError(f"levels[{index}].day must be integer >= 1")
        if day in seen_days:
            raise ValueError(f"duplicate level day: {day}")
        seen_days.add(day)

        counts: dict[str, int] = {}
        for field_name in _COUNT_FIELDS:
            value = row.get(field_name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"levels[{index}].{field_name} must be integer >= 0")
            counts[field_name] = value

        if "perception" not in row:
            raise ValueError(f"levels[{index}] must contain field: perception")
        perception = row["perception"]
        if perception is not None and (not isinstance(perception, int) or isinstance(perception, bool) or perception < 0):
            raise ValueError(f"levels[{index}].perception must be integer >= 0 or null")

        levels.append(LevelDef(day=day, perception=perception, **counts))

    levels.sort(key=lambda level: level.day)
    expected_days = list(range(1, len(levels) + 1))
    if [level.day for level in levels] != expected_days:
        raise ValueError("level days must be contiguous starting at 1")

    max_days = payload.get("max_days", len(levels))
    if not isinstance(max_days, int) or isinstance(max_days, bool) or max_days < 1:
        raise ValueError("level table max_days must be integer >= 1")

    return LevelTable(schema_version=schema_version, max_days=max_days, levels=tuple(levels))
