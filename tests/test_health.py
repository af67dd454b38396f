import pytest

from snakeforest.sim.grid import ArenaSize, Cell
from snakeforest.sim.health import HealthPools, enforce_health_length, round_half_up, target_length
from snakeforest.sim.snake import Snake

ARENA = ArenaSize(40, 25)


def _long_snake(length: int) -> Snake:
    snake = Snake(ARENA)
    snake.segments[:] = [Cell(30 - index, 12) for index in range(length)]
    snake.sync_prev()
    return snake


def test_health_factor_spans_both_pools() -> None:
    pools = HealthPools()
    assert pools.health_factor() == 1.0

    pools.hunger_ms = 0.0
    pools.starvation_ms = 12_500.0
    assert pools.health_factor() == pytest.approx(0.25)

    pools.hunger_ms = 30_000.0
    pools.starvation_ms = 25_000.0
    assert pools.health_factor() == 1.0


def test_deplete_drains_hunger_before_starvation() -> None:
    pools = HealthPools(hunger_ms=100.0)

    assert not pools.deplete(150.0)
    assert pools.hunger_ms == 0.0
    assert pools.starvation_ms == 25_000.0
    assert pools.is_tired
    assert not pools.is_starving

    pools.starvation_ms = 1.0
    assert pools.deplete(2.0)
    assert pools.starvation_ms == 0.0
    assert pools.is_drained


def test_damage_spills_into_starvation() -> None:
    pools = HealthPools(hunger_ms=5_000.0)

    pools.apply_damage(15_000.0)

    assert pools.hunger_ms == 0.0
    assert pools.starvation_ms == 15_000.0
    assert pools.is_starving is False


def test_heal_refills_starvation_first_then_overfills_hunger() -> None:
    pools = HealthPools(hunger_ms=0.0, starvation_ms=20_000.0)

    pools.heal(10_000.0)
    assert pools.starvation_ms == 25_000.0
    assert pools.hunger_ms == 5_000.0

    pools.heal(100_000.0)
    assert pools.hunger_ms == 35_000.0


def test_pool_maxima_are_validated() -> None:
    with pytest.raises(ValueError, match="health pool maxima must be > 0"):
        HealthPools(hunger_max=0.0)
    with pytest.raises(ValueError, match="overfill_ms must be >= 0"):
        HealthPools(overfill_ms=-1.0)


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_target_length_tracks_health_and_shield_floor() -> None:
    snake = Snake(ARENA)
    assert target_length(snake) == 12

    snake.health_factor = 0.5
    assert target_length(snake) == 8

    snake.health_factor = 0.1
    assert target_length(snake) == 4
    snake.shield_active = True
    assert target_length(snake) == 8


def test_gradual_enforcement_sheds_at_most_three_segments() -> None:
    snake = _long_snake(12)
    snake.health_factor = 0.0

    assert enforce_health_length(snake) == 3
    assert snake.length == 9
    assert enforce_health_length(snake) == 3
    assert enforce_health_length(snake) == 2
    assert enforce_health_length(snake) == 1
    assert snake.length == 3
    assert enforce_health_length(snake) == 0


def test_small_deficits_shed_one_or_two() -> None:
    snake = _long_snake(12)
    snake.health_factor = 1.0 - 1.0 / 9.0
    assert enforce_health_length(snake) == 1

    snake = _long_snake(12)
    snake.health_factor = 1.0 - 3.0 / 9.0
    assert enforce_health_length(snake) == 2


def test_immediate_enforcement_reaches_target_in_one_call() -> None:
    snake = _long_snake(12)
    snake.health_factor = 0.0

    assert enforce_health_length(snake, immediate=True) == 9
    assert snake.length == 3
