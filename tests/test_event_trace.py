import pytest

from snakeforest.sim.core import MAX_EVENT_TRACE, GameMode, Simulation


def _build_sim(seed: int) -> Simulation:
    return Simulation(seed=seed)


def test_mode_changes_are_traced() -> None:
    sim = _build_sim(seed=11)

    sim.start_run()

    mode_events = [entry for entry in sim.get_event_trace() if entry["event_type"] == "mode_changed"]
    assert mode_events == [{"tick": 0, "event_type": "mode_changed", "params": {"from": "MENU", "to": "COUNTDOWN"}}]


def test_event_trace_bounded_eviction() -> None:
    sim = _build_sim(seed=12)
    sim.state.event_trace.clear()

    for index in range(MAX_EVENT_TRACE + 44):
        sim.trace("noop", {"index": index})

    trace = sim.get_event_trace()
    assert len(trace) == MAX_EVENT_TRACE
    assert trace[0]["params"] == {"index": 44}


def test_trace_rejects_non_json_params() -> None:
    sim = _build_sim(seed=13)

    with pytest.raises(ValueError, match="event_trace event_type must be a non-empty string"):
        sim.trace("", {})
    with pytest.raises(ValueError, match="event_trace.params must contain only canonical JSON primitives"):
        sim.trace("noop", {"value": {1, 2}})


def test_returned_trace_is_a_copy() -> None:
    sim = _build_sim(seed=14)
    sim.start_run()

    sim.get_event_trace().clear()

    assert sim.get_event_trace() != []
    assert sim.state.mode is GameMode.COUNTDOWN
