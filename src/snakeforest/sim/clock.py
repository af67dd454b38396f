from __future__ import annotations

from dataclasses import dataclass

MAX_FRAME_DELTA_MS = 100.0
CRITICAL_HEALTH = 0.3


def clamp_frame_delta(real_delta_ms: float, max_delta_ms: float = MAX_FRAME_DELTA_MS) -> float:
    return max(0.0, min(max_delta_ms, real_delta_ms))


def effective_fps(
    base_fps: float,
    *,
    health_factor: float,
    fullness_penalty: float,
    is_tired: bool = False,
    tired_fps: float | None = None,
) -> float:
    """Steps per second after tiredness, vitality and fullness are applied."""
    fps = base_fps
    if is_tired and tired_fps is not None:
        fps = min(fps, tired_fps)
    vitality = 0.6 + 0.4 * health_factor
    # A critically hurt snake is not slowed down further by a full belly.
    fullness = 0.0 if health_factor < CRITICAL_HEALTH else fullness_penalty
    return fps * vitality * (1.0 - fullness)


def step_size_ms(fps: float) -> float:
    if fps <= 0:
        raise ValueError("fps must be > 0")
    return 1000.0 / fps


@dataclass
class FixedStepAccumulator:
    """Real time in, fixed steps out; the remainder becomes the render alpha."""

    accumulated_ms: float = 0.0

    def reset(self) -> None:
        self.accumulated_ms = 0.0

    def add(self, delta_ms: float) -> None:
        self.accumulated_ms += delta_ms

    def consume(self, step_ms: float) -> bool:
        if self.accumulated_ms > step_ms:
            self.accumulated_ms -= step_ms
            return True
        return False

    def alpha(self, step_ms: float) -> float:
        if step_ms <= 0:
            return 1.0
        return max(0.0, min(1.0, self.accumulated_ms / step_ms))
