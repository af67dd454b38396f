import pytest

from snakeforest.sim.clock import FixedStepAccumulator, clamp_frame_delta, effective_fps, step_size_ms


def test_frame_delta_is_clamped() -> None:
    assert clamp_frame_delta(16.0) == 16.0
    assert clamp_frame_delta(5_000.0) == 100.0
    assert clamp_frame_delta(-3.0) == 0.0
    assert clamp_frame_delta(300.0, max_delta_ms=250.0) == 250.0


def test_effective_fps_combines_vitality_and_fullness() -> None:
    assert effective_fps(12.0, health_factor=1.0, fullness_penalty=0.0) == pytest.approx(12.0)
    assert effective_fps(12.0, health_factor=1.0, fullness_penalty=0.25) == pytest.approx(9.0)
    assert effective_fps(12.0, health_factor=0.5, fullness_penalty=0.0) == pytest.approx(9.6)


def test_critical_health_ignores_fullness() -> None:
    assert effective_fps(12.0, health_factor=0.2, fullness_penalty=0.25) == pytest.approx(12.0 * 0.68)


def test_tired_snake_is_capped() -> None:
    assert effective_fps(20.0, health_factor=1.0, fullness_penalty=0.0, is_tired=True, tired_fps=8.0) == pytest.approx(8.0)
    assert effective_fps(6.0, health_factor=1.0, fullness_penalty=0.0, is_tired=True, tired_fps=8.0) == pytest.approx(6.0)


def test_step_size_requires_positive_fps() -> None:
    assert step_size_ms(10.0) == 100.0
    with pytest.raises(ValueError, match="fps must be > 0"):
        step_size_ms(0.0)


def test_accumulator_consumes_only_full_steps_and_reports_alpha() -> None:
    accumulator = FixedStepAccumulator()

    accumulator.add(80.0)
    assert not accumulator.consume(80.0)
    assert accumulator.alpha(80.0) == 1.0

    accumulator.add(100.0)
    assert accumulator.consume(80.0)
    assert accumulator.consume(80.0)
    assert not accumulator.consume(80.0)
    assert accumulator.alpha(80.0) == pytest.approx(0.25)

    accumulator.reset()
    assert accumulator.accumulated_ms == 0.0
