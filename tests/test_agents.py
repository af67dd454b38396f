import itertools
import logging
import random

import pytest

from snakeforest.sim.agents import (
    SNAKE_SAFE_ZONE,
    Human,
    effective_perception,
    movement_threshold,
    perception_jitter,
    spawn_humans,
)
from snakeforest.sim.forest import Forest
from snakeforest.sim.grid import ArenaSize, Cell, chebyshev, manhattan
from snakeforest.sim.snake import Snake

ARENA = ArenaSize(40, 25)


def _step(human: Human, forest: Forest, *, fleeing: bool = False, day: int = 1, is_night: bool = False) -> bool:
    return human.step(
        random.Random(0),
        snake_head=Cell(15, 10),
        forest=forest,
        arena=ARENA,
        day=day,
        is_night=is_night,
        fleeing=fleeing,
    )


def test_movement_threshold_by_day_and_night() -> None:
    assert movement_threshold(1, False) == 8
    assert movement_threshold(3, False) == 6
    assert movement_threshold(5, False) == 5
    assert movement_threshold(5, True) == 12


def test_perception_jitter_and_night_halving() -> None:
    assert perception_jitter(30) == -1
    assert perception_jitter(8) == 1
    assert perception_jitter(5) == 0
    assert perception_jitter(None) == 0

    assert effective_perception(45, True) == 22
    assert effective_perception(45, False) == 45
    assert effective_perception(None, True) is None


def test_human_waits_for_its_cooldown() -> None:
    human = Human(cell=Cell(10, 10), perception=None, move_cooldown=0)

    assert not _step(human, Forest(ARENA))
    assert human.cell == Cell(10, 10)
    assert human.prev_cell == Cell(10, 10)
    assert human.move_cooldown == 1


def test_aware_human_chases_the_snake_head() -> None:
    human = Human(cell=Cell(10, 10), perception=None, move_cooldown=7)

    assert _step(human, Forest(ARENA))

    assert human.cell == Cell(11, 10)
    assert human.prev_cell == Cell(10, 10)
    assert human.move_cooldown in (0, 1)


def test_fleeing_human_takes_the_first_farthest_move() -> None:
    human = Human(cell=Cell(10, 10), perception=None, move_cooldown=7)

    assert _step(human, Forest(ARENA), fleeing=True)

    # Up, down and left all end 6 away; up comes first.
    assert human.cell == Cell(10, 9)
    assert manhattan(human.cell, Cell(15, 10)) == 6


def test_fleeing_human_skips_blocked_moves() -> None:
    forest = Forest(ARENA)
    forest.add_tree(Cell(10, 9))
    forest.add_tree(Cell(10, 11))
    human = Human(cell=Cell(10, 10), perception=None, move_cooldown=7)

    assert _step(human, forest, fleeing=True)

    assert human.cell == Cell(9, 10)


def test_blocked_human_stays_put() -> None:
    forest = Forest(ARENA)
    forest.add_tree(Cell(2, 1))
    forest.add_tree(Cell(1, 2))
    human = Human(cell=Cell(1, 1), perception=None, move_cooldown=7)

    assert human.valid_moves(forest, ARENA) == []
    assert not _step(human, forest)
    assert human.cell == Cell(1, 1)


def test_unaware_human_wanders_to_an_adjacent_interior_cell() -> None:
    human = Human(cell=Cell(30, 20), perception=0, move_cooldown=7)

    assert _step(human, Forest(ARENA))

    assert manhattan(human.cell, Cell(30, 20)) == 1
    assert ARENA.in_interior(human.cell)


def test_spawn_humans_respects_distances() -> None:
    forest = Forest(ARENA)
    snake = Snake(ARENA)
    humans: list[Human] = []

    spawned = spawn_humans(random.Random(4), humans, 4, 15, forest=forest, snake=snake, arena=ARENA)

    assert spawned == humans
    assert 0 < len(humans) <= 4
    for human in humans:
        assert ARENA.in_interior(human.cell)
        assert chebyshev(human.cell, snake.head) >= SNAKE_SAFE_ZONE
        assert human.perception == 15
        assert 0 <= human.move_cooldown < 8
    for first, second in itertools.combinations(humans, 2):
        assert manhattan(first.cell, second.cell) >= 14


def test_spawn_humans_logs_a_shortfall(caplog: pytest.LogCaptureFixture) -> None:
    humans: list[Human] = []

    with caplog.at_level(logging.WARNING, logger="snakeforest.sim.agents"):
        spawned = spawn_humans(
            random.Random(2),
            humans,
            50,
            None,
            forest=Forest(ARENA),
            snake=Snake(ARENA),
            arena=ARENA,
        )

    assert len(spawned) < 50
    assert "of 50 humans" in caplog.text
