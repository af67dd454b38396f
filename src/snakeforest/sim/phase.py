from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CYCLE_MS = 60_000.0
AUDIO_CUE_MS = 57_000.0
TRANSITION_START_MS = 55_000.0
TRANSITION_MS = CYCLE_MS - TRANSITION_START_MS
NIGHT_FADE_IN_MS = 5_000.0
MAX_DARKNESS = 0.88
DAY_WEATHER_INTENSITY = 0.75


class PhaseSignal(Enum):
    TRIGGER_AUDIO = "trigger_audio"
    NEXT_DAY = "next_day"


class MusicTrack(Enum):
    DAY = "day"
    NIGHT = "night"
    ENDGAME = "endgame"


class WeatherKind(Enum):
    NORMAL = "normal"
    FIREFLIES = "fireflies"


def is_night_phase(phase_count: int) -> bool:
    return phase_count % 2 == 0


def day_for_phase(phase_count: int) -> int:
    return (phase_count + 1) // 2


@dataclass(frozen=True)
class PhaseVisuals:
    darkness: float
    weather: WeatherKind
    weather_intensity: float
    is_night: bool


class PhaseController:
    """Authoritative day/night clock for one 60 s half-cycle at a time.

    ``phase_count`` is odd during the day and even at night. The controller only
    reports signals; the simulation decides what a rollover means for the day
    counter and calls ``advance_phase``.
    """

    def __init__(self) -> None:
        self.cycle_ms = 0.0
        self.phase_count = 1
        self._audio_triggered = False

    def reset(self) -> None:
        self.cycle_ms = 0.0
        self.phase_count = 1
        self._audio_triggered = False

    def set_day(self, day: int) -> None:
        if not isinstance(day, int) or day < 1:
            raise ValueError("day must be an integer >= 1")
        self.phase_count = day * 2 - 1
        self.cycle_ms = 0.0
        self._audio_triggered = False

    def advance_phase(self) -> int:
        self.phase_count += 1
        return self.phase_count

    @property
    def is_night(self) -> bool:
        return is_night_phase(self.phase_count)

    def update(self, dt: float) -> PhaseSignal | None:
        if dt < 0:
            raise ValueError("dt must be non-negative")
        self.cycle_ms += dt
        if self.cycle_ms >= CYCLE_MS:
            # A single update reports at most one rollover; the remainder is kept.
            self.cycle_ms %= CYCLE_MS
            self._audio_triggered = False
            return PhaseSignal.NEXT_DAY
        if self.cycle_ms >= AUDIO_CUE_MS and not self._audio_triggered:
            self._audio_triggered = True
            return PhaseSignal.TRIGGER_AUDIO
        return None

    def darkness(self, phase_count: int | None = None) -> float:
        night = is_night_phase(self.phase_count if phase_count is None else phase_count)
        if self.cycle_ms < TRANSITION_START_MS:
            return MAX_DARKNESS if night else 0.0
        progress = min(1.0, (self.cycle_ms - TRANSITION_START_MS) / TRANSITION_MS)
        if night:
            return MAX_DARKNESS * (1.0 - progress)
        return MAX_DARKNESS * progress

    def audio_state(self, phase_count: int | None = None) -> MusicTrack:
        night = is_night_phase(self.phase_count if phase_count is None else phase_count)
        if self.cycle_ms >= AUDIO_CUE_MS:
            night = not night
        return MusicTrack.NIGHT if night else MusicTrack.DAY

    def weather_intensity(self, is_night: bool) -> float:
        if is_night:
            if self.cycle_ms <= NIGHT_FADE_IN_MS:
                return self.cycle_ms / NIGHT_FADE_IN_MS
            if self.cycle_ms >= TRANSITION_START_MS:
                return max(0.0, 1.0 - (self.cycle_ms - TRANSITION_START_MS) / TRANSITION_MS)
            return 1.0
        if self.cycle_ms <= AUDIO_CUE_MS:
            return DAY_WEATHER_INTENSITY
        return 0.0

    def weather_kind(self, phase_count: int | None = None) -> WeatherKind:
        night = is_night_phase(self.phase_count if phase_count is None else phase_count)
        return WeatherKind.FIREFLIES if night else WeatherKind.NORMAL

    def visuals(self, phase_count: int | None = None) -> PhaseVisuals:
        current = self.phase_count if phase_count is None else phase_count
        night = is_night_phase(current)
        return PhaseVisuals(
            darkness=self.darkness(current),
            weather=self.weather_kind(current),
            weather_intensity=self.weather_intensity(night),
            is_night=night,
        )
