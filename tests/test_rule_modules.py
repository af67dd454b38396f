import pytest

from snakeforest.sim.core import GameMode, Simulation
from snakeforest.sim.rules import RuleModule


class RecordingModule(RuleModule):
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def on_simulation_start(self, sim: Simulation) -> None:
        self.calls.append(f"{self.name}:simulation_start")

    def on_step_start(self, sim: Simulation, tick: int) -> None:
        self.calls.append(f"{self.name}:step_start:{tick}")

    def on_step_end(self, sim: Simulation, tick: int) -> None:
        self.calls.append(f"{self.name}:step_end:{tick}")

    def on_mode_changed(self, sim: Simulation, previous: GameMode, current: GameMode) -> None:
        self.calls.append(f"{self.name}:mode:{previous.value}->{current.value}")


def _build_sim(seed: int) -> Simulation:
    return Simulation(seed=seed)


def test_module_hooks_run_in_registration_order() -> None:
    sim = _build_sim(seed=100)
    calls: list[str] = []

    sim.register_rule_module(RecordingModule(name="A", calls=calls))
    sim.register_rule_module(RecordingModule(name="B", calls=calls))
    sim.start_run()
    while sim.state.mode is GameMode.COUNTDOWN:
        sim.advance_frame(100.0)
    sim.step(50.0)

    assert calls == [
        "A:simulation_start",
        "B:simulation_start",
        "A:mode:MENU->COUNTDOWN",
        "B:mode:MENU->COUNTDOWN",
        "A:mode:COUNTDOWN->PLAYING",
        "B:mode:COUNTDOWN->PLAYING",
        "A:step_start:0",
        "B:step_start:0",
        "A:step_end:0",
        "B:step_end:0",
    ]


def test_duplicate_module_names_are_rejected() -> None:
    sim = _build_sim(seed=1)
    sim.register_rule_module(RecordingModule(name="A", calls=[]))

    with pytest.raises(ValueError, match="duplicate rule module name: A"):
        sim.register_rule_module(RecordingModule(name="A", calls=[]))
    assert sim.get_rule_module("A") is not None
    assert sim.get_rule_module("missing") is None


def test_rules_state_is_copied_and_validated() -> None:
    sim = _build_sim(seed=1)
    payload = {"counts": [1, 2], "label": "x"}

    sim.set_rules_state("demo", payload)
    payload["counts"].append(3)
    fetched = sim.get_rules_state("demo")
    fetched["label"] = "changed"

    assert sim.get_rules_state("demo") == {"counts": [1, 2], "label": "x"}
    assert sim.get_rules_state("unknown") == {}
    with pytest.raises(ValueError, match="rules_state must contain only canonical JSON primitives"):
        sim.set_rules_state("demo", {"bad": object()})
    with pytest.raises(ValueError, match="module_name must be a non-empty string"):
        sim.set_rules_state("", {})
