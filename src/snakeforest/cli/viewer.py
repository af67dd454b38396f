from __future__ import annotations

from snakeforest.sim.core import GameMode, SimCommand, Simulation
from snakeforest.sim.snapshot import extract_render_snapshot

FRAME_MS = 1000.0 / 60.0

GLYPH_EMPTY = "."
GLYPH_TREE = "T"
GLYPH_LOG = "="
GLYPH_HUMAN = "H"
GLYPH_FOOD = "o"
GLYPH_FRUIT = "*"
GLYPH_MEGA_APPLE = "@"
GLYPH_HEAD = "S"
GLYPH_BODY = "s"


class AsciiViewer:
    """Read-only projection of simulation state for terminal display."""

    def render(self, sim: Simulation) -> str:
        snapshot = extract_render_snapshot(sim)
        lines: list[str] = []
        header = (
            f"tick={snapshot.tick} mode={snapshot.mode} day={snapshot.day} lives={snapshot.lives} "
            f"health={snapshot.health_factor:.2f} time={snapshot.time_played_ms / 1000.0:.1f}s"
        )
        if snapshot.is_night:
            header += " night"
        if snapshot.endgame_phase is not None:
            header += f" endgame={snapshot.endgame_phase}"
        lines.append(header)

        grid = [[GLYPH_EMPTY] * snapshot.cols for _ in range(snapshot.rows)]

        def put(x: int, y: int, glyph: str) -> None:
            if 0 <= x < snapshot.cols and 0 <= y < snapshot.rows:
                grid[y][x] = glyph

        for tree in snapshot.trees:
            put(tree.x, tree.y, GLYPH_TREE)
        for record in snapshot.logs:
            for offset in range(record.length):
                if record.horizontal:
                    put(record.x + offset, record.y, GLYPH_LOG)
                else:
                    put(record.x, record.y + offset, GLYPH_LOG)
        if snapshot.food is not None:
            put(snapshot.food.x, snapshot.food.y, GLYPH_FOOD)
        if snapshot.dragon_fruit is not None:
            put(snapshot.dragon_fruit.x, snapshot.dragon_fruit.y, GLYPH_FRUIT)
        if snapshot.mega_apple is not None:
            put(snapshot.mega_apple.x, snapshot.mega_apple.y, GLYPH_MEGA_APPLE)
        for human in snapshot.humans:
            put(human.x, human.y, GLYPH_HUMAN)
        for index, (x, y) in reversed(list(enumerate(snapshot.segments))):
            put(x, y, GLYPH_HEAD if index == 0 else GLYPH_BODY)

        lines.extend("".join(row) for row in grid)
        if snapshot.death_message is not None:
            lines.append(snapshot.death_message)
        if snapshot.end_reason is not None:
            lines.append(f"end_reason={snapshot.end_reason}")
        return "\n".join(lines)


class SimulationController:
    """Small command adapter; issues commands to sim but does not own state."""

    def __init__(self, sim: Simulation) -> None:
        self.sim = sim

    def _issue(self, command_type: str, **params: str) -> bool:
        return self.sim.append_command(
            SimCommand(tick=self.sim.state.tick, command_type=command_type, params=dict(params))
        )

    def start(self) -> bool:
        return self._issue("start")

    def turn(self, direction: str) -> bool:
        return self._issue("turn", direction=direction)

    def toggle_pause(self) -> bool:
        return self._issue("toggle_pause")

    def quit_to_menu(self) -> bool:
        return self._issue("quit_to_menu")

    def toggle_mute(self) -> bool:
        return self._issue("toggle_mute")

    def advance_ms(self, total_ms: float, frame_ms: float = FRAME_MS) -> int:
        """Feed ``total_ms`` of wall time as fixed-size frames; returns steps taken."""
        steps = 0
        remaining = total_ms
        while remaining > 0:
            delta = min(frame_ms, remaining)
            steps += self.sim.advance_frame(delta)
            remaining -= delta
        return steps

    def skip_countdown(self) -> None:
        while self.sim.state.mode in (GameMode.COUNTDOWN, GameMode.DEATH_EVENT):
            self.sim.advance_frame(FRAME_MS)


def run_demo(seed: int = 7) -> None:
    sim = Simulation(seed=seed)
    view = AsciiViewer()
    controller = SimulationController(sim)

    print("Snake Forest demo. Commands: show | start | turn <up|down|left|right> | run <ms> | pause | quit")
    print(view.render(sim))

    while True:
        raw = input("> ").strip()
        if raw in {"quit", "exit"}:
            break
        if raw == "show":
            print(view.render(sim))
            continue
        if raw == "start":
            controller.start()
            controller.skip_countdown()
            print(view.render(sim))
            continue
        if raw == "pause":
            controller.toggle_pause()
            print(view.render(sim))
            continue

        parts = raw.split()
        if len(parts) == 2 and parts[0] == "turn" and parts[1] in {"up", "down", "left", "right"}:
            accepted = controller.turn(parts[1])
            print("turn queued" if accepted else "turn ignored")
            continue
        if len(parts) == 2 and parts[0] == "run":
            try:
                total_ms = float(parts[1])
            except ValueError:
                print("unknown command")
                continue
            controller.advance_ms(total_ms)
            print(view.render(sim))
            continue

        print("unknown command")


if __name__ == "__main__":
    run_demo()
