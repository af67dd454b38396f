import json
import logging
from pathlib import Path

import pytest

from snakeforest.content.levels import DEFAULT_LEVEL_TABLE_PATH, default_level_table, load_level_table_json
from snakeforest.sim.core import Simulation


def _write(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "levels.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _row(day: int, **overrides) -> dict:
    row = {"day": day, "trees": 8, "short_logs": 4, "long_logs": 4, "humans": 2, "perception": 0}
    row.update(overrides)
    return row


def test_default_level_table_loads_five_days() -> None:
    table = load_level_table_json(DEFAULT_LEVEL_TABLE_PATH)

    assert table.max_days == 5
    assert [level.day for level in table.levels] == [1, 2, 3, 4, 5]
    first = table.for_day(1)
    assert (first.trees, first.short_logs, first.long_logs, first.humans, first.perception) == (8, 4, 4, 2, 0)
    assert table.for_day(5).perception is None


def test_builtin_levels_match_the_default_file() -> None:
    assert load_level_table_json(DEFAULT_LEVEL_TABLE_PATH) == default_level_table()


def test_missing_level_file_falls_back_to_builtin_levels(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="snakeforest.content.levels"):
        table = load_level_table_json(tmp_path / "missing.json")

    assert table == default_level_table()
    assert "not found; using built-in levels" in caplog.text


def test_simulation_starts_outside_the_repository_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    sim = Simulation(seed=3)

    assert sim.levels.max_days == 5


def test_days_past_the_table_reuse_the_last_level() -> None:
    table = load_level_table_json(DEFAULT_LEVEL_TABLE_PATH)

    assert table.for_day(9) == table.levels[-1]


def test_schema_version_mismatch_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 2, "levels": [_row(1)]})

    with pytest.raises(ValueError, match="unsupported level table schema_version: 2"):
        load_level_table_json(path)


def test_days_must_be_contiguous(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 1, "levels": [_row(1), _row(3)]})

    with pytest.raises(ValueError, match="level days must be contiguous starting at 1"):
        load_level_table_json(path)


def test_duplicate_days_are_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 1, "levels": [_row(1), _row(1)]})

    with pytest.raises(ValueError, match="duplicate level day: 1"):
        load_level_table_json(path)


def test_negative_counts_and_bad_perception_are_rejected(tmp_path: Path) -> None:
    bad_count = _write(tmp_path, {"schema_version": 1, "levels": [_row(1, trees=-1)]})
    with pytest.raises(ValueError, match=r"levels\[0\]\.trees must be integer >= 0"):
        load_level_table_json(bad_count)

    bad_perception = _write(tmp_path, {"schema_version": 1, "levels": [_row(1, perception="far")]})
    with pytest.raises(ValueError, match=r"levels\[0\]\.perception must be integer >= 0 or null"):
        load_level_table_json(bad_perception)


def test_max_days_defaults_to_table_length(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 1, "levels": [_row(2), _row(1)]})

    table = load_level_table_json(path)

    assert table.max_days == 2
    assert [level.day for level in table.levels] == [1, 2]
