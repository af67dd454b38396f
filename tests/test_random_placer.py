import random

import pytest

from snakeforest.sim.grid import ArenaSize, Cell
from snakeforest.sim.placement import RandomPlacer, full_bounds, interior_bounds


def test_sample_stays_inside_half_open_bounds() -> None:
    placer = RandomPlacer(random.Random(5))

    for _ in range(200):
        cell = placer.sample(1, 39, 1, 24)
        assert 1 <= cell.x < 39
        assert 1 <= cell.y < 24


def test_find_cell_returns_first_accepted_candidate() -> None:
    placer = RandomPlacer(random.Random(8))

    cell = placer.find_cell(
        label="even",
        attempts=50,
        bounds=(0, 10, 0, 10),
        is_valid=lambda candidate: candidate.x % 2 == 0,
    )

    assert cell is not None
    assert cell.x % 2 == 0
    assert placer.drops == {}


def test_exhausted_search_counts_a_drop() -> None:
    placer = RandomPlacer(random.Random(8))

    first = placer.find(label="never", attempts=5, bounds=(0, 4, 0, 4), accept=lambda candidate: None)
    second = placer.find(label="never", attempts=5, bounds=(0, 4, 0, 4), accept=lambda candidate: None)

    assert first is None
    assert second is None
    assert placer.drops == {"never": 2}


def test_invalid_attempts_or_bounds_raise() -> None:
    placer = RandomPlacer(random.Random(1))

    with pytest.raises(ValueError, match="attempts must be a positive integer"):
        placer.find(label="x", attempts=0, bounds=(0, 4, 0, 4), accept=lambda candidate: candidate)
    with pytest.raises(ValueError, match="empty placement bounds for x"):
        placer.find(label="x", attempts=3, bounds=(4, 4, 0, 4), accept=lambda candidate: candidate)


def test_arena_bound_helpers() -> None:
    arena = ArenaSize(40, 25)

    assert full_bounds(arena) == (0, 40, 0, 25)
    assert interior_bounds(arena) == (1, 39, 1, 24)
    assert arena.in_interior(Cell(1, 1))
    assert not arena.in_interior(Cell(39, 5))
