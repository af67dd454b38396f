from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snakeforest.sim.core import EndReason, GameMode, Simulation


class RuleModule:
    """Observer hooks around the simulation's fixed steps and mode changes.

    Rule modules are registered on a ``Simulation`` instance and are executed in
    stable registration order for every lifecycle hook.
    """

    name: str

    def on_simulation_start(self, sim: Simulation) -> None:
        """Called once, immediately when the module is registered."""

    def on_step_start(self, sim: Simulation, tick: int) -> None:
        """Called before each fixed simulation step."""

    def on_step_end(self, sim: Simulation, tick: int) -> None:
        """Called after each fixed simulation step."""

    def on_mode_changed(self, sim: Simulation, previous: GameMode, current: GameMode) -> None:
        """Called after every game mode transition."""

    def on_run_end(self, sim: Simulation, reason: EndReason) -> None:
        """Called once per run, on game over or endgame victory."""
