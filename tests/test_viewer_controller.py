import pytest

from snakeforest.cli.viewer import AsciiViewer, SimulationController, run_demo
from snakeforest.sim.core import GameMode, Simulation


def _build_sim(seed: int = 7) -> Simulation:
    return Simulation(seed=seed)


def test_controller_commands_are_logged_at_the_current_tick() -> None:
    sim = _build_sim()
    controller = SimulationController(sim)

    assert controller.start()
    controller.skip_countdown()
    assert sim.state.mode is GameMode.PLAYING
    assert controller.turn("up")
    assert sim.state.next_direction.name == "UP"

    assert [command.command_type for command in sim.input_log[:2]] == ["start", "turn"]
    assert sim.input_log[1].params == {"direction": "up"}
    assert sim.input_log[1].tick == sim.state.tick


def test_controller_pause_and_quit_to_menu() -> None:
    sim = _build_sim()
    controller = SimulationController(sim)
    controller.start()
    controller.skip_countdown()

    assert controller.toggle_pause()
    assert controller.quit_to_menu()
    assert sim.state.mode is GameMode.MENU
    assert controller.toggle_mute()
    assert sim.state.muted


def test_advance_ms_feeds_frames_and_counts_steps() -> None:
    sim = _build_sim()
    controller = SimulationController(sim)
    controller.start()
    controller.skip_countdown()

    steps = controller.advance_ms(1_000.0)

    assert steps == sim.state.tick
    assert steps > 0


def test_ascii_viewer_renders_header_and_grid() -> None:
    sim = _build_sim()

    lines = AsciiViewer().render(sim).splitlines()

    assert lines[0].startswith("tick=0 mode=MENU day=1 lives=1")
    assert len(lines) == 1 + sim.state.arena.rows
    assert all(len(line) == sim.state.arena.cols for line in lines[1:])
    head = sim.state.snake.head
    assert lines[1 + head.y][head.x] == "S"
    assert "H" in "".join(lines[1:])


def test_ascii_viewer_reports_the_end_reason() -> None:
    sim = _build_sim()
    controller = SimulationController(sim)
    controller.start()
    controller.skip_countdown()
    sim.state.pools.hunger_ms = 0.0
    sim.state.pools.starvation_ms = 1.0
    sim.step(2.0)

    output = AsciiViewer().render(sim)

    assert "mode=GAME_OVER" in output
    assert output.splitlines()[-1] == "end_reason=STARVED"


def test_demo_rejects_a_non_numeric_run_duration(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    commands = iter(["run abc", "run 200", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(commands))

    run_demo(seed=7)

    output = capsys.readouterr().out
    assert "unknown command" in output
    assert output.count("tick=0 mode=MENU") == 2
