import pytest

from snakeforest.sim.phase import (
    MAX_DARKNESS,
    MusicTrack,
    PhaseController,
    PhaseSignal,
    WeatherKind,
    day_for_phase,
    is_night_phase,
)


def _count_signals(controller: PhaseController, deltas: list[float]) -> dict[PhaseSignal, int]:
    counts = {signal: 0 for signal in PhaseSignal}
    for dt in deltas:
        signal = controller.update(dt)
        if signal is not None:
            counts[signal] += 1
    return counts


def test_one_rollover_per_sixty_seconds_regardless_of_step_size() -> None:
    uniform = PhaseController()
    mixed = PhaseController()

    uniform_counts = _count_signals(uniform, [16.0] * 11_250)
    mixed_counts = _count_signals(mixed, [7.0, 13.0] * 9_000)

    assert uniform_counts[PhaseSignal.NEXT_DAY] == 3
    assert uniform_counts[PhaseSignal.TRIGGER_AUDIO] == 3
    assert mixed_counts[PhaseSignal.NEXT_DAY] == 3
    assert mixed_counts[PhaseSignal.TRIGGER_AUDIO] == 3


def test_large_delta_reports_a_single_rollover_and_keeps_remainder() -> None:
    controller = PhaseController()

    assert controller.update(130_000.0) is PhaseSignal.NEXT_DAY
    assert controller.cycle_ms == pytest.approx(10_000.0)
    assert controller.phase_count == 1


def test_audio_cue_fires_once_at_fifty_seven_seconds() -> None:
    controller = PhaseController()

    assert controller.update(56_999.0) is None
    assert controller.update(1.0) is PhaseSignal.TRIGGER_AUDIO
    assert controller.update(1_000.0) is None


def test_darkness_is_continuous_across_the_day_to_night_rollover() -> None:
    controller = PhaseController()
    controller.cycle_ms = 59_990.0
    before = controller.darkness()

    assert controller.update(20.0) is PhaseSignal.NEXT_DAY
    controller.advance_phase()
    after = controller.darkness()

    assert controller.is_night
    assert after == pytest.approx(MAX_DARKNESS)
    assert abs(after - before) < 0.01


def test_darkness_ramps_during_the_last_five_seconds() -> None:
    controller = PhaseController()

    controller.cycle_ms = 30_000.0
    assert controller.darkness() == 0.0
    controller.cycle_ms = 57_500.0
    assert controller.darkness() == pytest.approx(MAX_DARKNESS / 2)

    controller.set_day(1)
    controller.advance_phase()
    controller.cycle_ms = 57_500.0
    assert controller.darkness() == pytest.approx(MAX_DARKNESS / 2)
    controller.cycle_ms = 10_000.0
    assert controller.darkness() == pytest.approx(MAX_DARKNESS)


def test_audio_state_flips_after_the_cue() -> None:
    controller = PhaseController()

    controller.cycle_ms = 56_000.0
    assert controller.audio_state() is MusicTrack.DAY
    controller.cycle_ms = 57_000.0
    assert controller.audio_state() is MusicTrack.NIGHT
    controller.cycle_ms = 0.0
    assert controller.audio_state(2) is MusicTrack.NIGHT


def test_set_day_starts_the_day_phase() -> None:
    controller = PhaseController()
    controller.cycle_ms = 12_345.0

    controller.set_day(3)

    assert controller.phase_count == 5
    assert controller.cycle_ms == 0.0
    assert not controller.is_night
    assert day_for_phase(controller.phase_count) == 3
    with pytest.raises(ValueError, match="day must be an integer >= 1"):
        controller.set_day(0)


def test_phase_parity_helpers() -> None:
    assert not is_night_phase(1)
    assert is_night_phase(2)
    assert day_for_phase(1) == 1
    assert day_for_phase(2) == 1
    assert day_for_phase(3) == 2


def test_weather_intensity_by_phase() -> None:
    controller = PhaseController()

    controller.cycle_ms = 10_000.0
    assert controller.weather_intensity(False) == pytest.approx(0.75)
    controller.cycle_ms = 58_000.0
    assert controller.weather_intensity(False) == 0.0
    controller.cycle_ms = 2_500.0
    assert controller.weather_intensity(True) == pytest.approx(0.5)
    controller.cycle_ms = 30_000.0
    assert controller.weather_intensity(True) == 1.0
    controller.cycle_ms = 57_500.0
    assert controller.weather_intensity(True) == pytest.approx(0.5)


def test_visuals_report_fireflies_at_night() -> None:
    controller = PhaseController()
    controller.advance_phase()

    visuals = controller.visuals()

    assert visuals.is_night
    assert visuals.weather is WeatherKind.FIREFLIES
    assert controller.visuals(1).weather is WeatherKind.NORMAL


def test_negative_delta_is_rejected() -> None:
    with pytest.raises(ValueError, match="dt must be non-negative"):
        PhaseController().update(-1.0)
