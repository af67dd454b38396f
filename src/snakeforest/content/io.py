from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

logger = logging.getLogger(__name__)

META_STATS_KEY = "snake_forest_stats"
DEFAULT_META_STATS_PATH = "saves/meta_stats.json"
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


@dataclass
class MetaStats:
    """Cross-run records; ``max_day`` starts at 1 like a fresh run."""

    best_time_ms: float = 0.0
    max_day: int = 1
    total_runs: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.best_time_ms, bool) or not isinstance(self.best_time_ms, (int, float)) or self.best_time_ms < 0:
            raise ValueError(f"{META_STATS_KEY}.best_time_ms must be a number >= 0")
        if isinstance(self.max_day, bool) or not isinstance(self.max_day, int) or self.max_day < 1:
            raise ValueError(f"{META_STATS_KEY}.max_day must be integer >= 1")
        if isinstance(self.total_runs, bool) or not isinstance(self.total_runs, int) or self.total_runs < 0:
            raise ValueError(f"{META_STATS_KEY}.total_runs must be integer >= 0")

    def record_run(self, *, time_played_ms: float, day: int) -> None:
        self.total_runs += 1
        self.best_time_ms = max(self.best_time_ms, float(time_played_ms))
        self.max_day = max(self.max_day, day)

    def to_dict(self) -> dict[str, Any]:
        return {
            "best_time_ms": self.best_time_ms,
            "max_day": self.max_day,
            "total_runs": self.total_runs,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "MetaStats":
        if not isinstance(data, dict):
            raise ValueError(f"{META_STATS_KEY} must be an object")
        return cls(
            best_time_ms=data.get("best_time_ms", 0.0),
            max_day=data.get("max_day", 1),
            total_runs=data.get("total_runs", 0),
        )


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _read_store(path: Path) -> dict[str, Any]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("meta stats store must be a JSON object")
    return payload


def load_meta_stats_json(path: str | Path) -> MetaStats:
    """Stats from ``path``; a missing store or missing key yields fresh stats."""
    store_path = Path(path)
    if not store_path.exists():
        logger.warning("meta stats store %s not found; starting fresh", store_path)
        return MetaStats()
    payload = _read_store(store_path)
    if META_STATS_KEY not in payload:
        return MetaStats()
    return MetaStats.from_dict(payload[META_STATS_KEY])


def save_meta_stats_json(path: str | Path, stats: MetaStats) -> None:
    """Write ``stats`` under its key, keeping any other keys in the store."""
    store_path = Path(path)
    payload = _read_store(store_path) if store_path.exists() else {}
    payload[META_STATS_KEY] = stats.to_dict()
    _write_atomic_json(store_path, payload)
