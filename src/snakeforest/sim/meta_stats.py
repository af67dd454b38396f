from __future__ import annotations

import logging
from pathlib import Path

from snakeforest.content.io import MetaStats, load_meta_stats_json, save_meta_stats_json
from snakeforest.sim.core import EndReason, GameMode, Simulation
from snakeforest.sim.rules import RuleModule

logger = logging.getLogger(__name__)


class MetaStatsModule(RuleModule):
    """Persists best time, furthest day and run count across runs."""

    name = "meta_stats"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.stats = MetaStats()

    def on_simulation_start(self, sim: Simulation) -> None:
        self._reload(sim)

    def on_mode_changed(self, sim: Simulation, previous: GameMode, current: GameMode) -> None:
        if current is GameMode.MENU:
            self._reload(sim)

    def on_run_end(self, sim: Simulation, reason: EndReason) -> None:
        self.stats.record_run(time_played_ms=sim.state.time_played_ms, day=sim.state.day)
        save_meta_stats_json(self.path, self.stats)
        sim.set_rules_state(self.name, self.stats.to_dict())
        logger.info(
            "meta stats saved reason=%s total_runs=%d best_time_ms=%.0f max_day=%d",
            reason.value,
            self.stats.total_runs,
            self.stats.best_time_ms,
            self.stats.max_day,
        )

    def _reload(self, sim: Simulation) -> None:
        self.stats = load_meta_stats_json(self.path)
        sim.set_rules_state(self.name, self.stats.to_dict())
