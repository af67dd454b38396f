from snakeforest.sim.forest import Forest
from snakeforest.sim.grid import ArenaSize, Cell, Direction
from snakeforest.sim.snake import MoveOutcome, Snake

ARENA = ArenaSize(40, 25)


def _snake() -> Snake:
    return Snake(ARENA)


def test_reset_lays_base_length_leftwards_from_center() -> None:
    snake = _snake()

    assert snake.segments == [Cell(20, 12), Cell(19, 12), Cell(18, 12)]
    assert snake.prev_segments == snake.segments
    assert snake.base_length == 3


def test_step_moves_head_and_keeps_previous_positions() -> None:
    snake = _snake()

    outcome = snake.step(Direction.RIGHT, ARENA, 0.0, None)

    assert outcome is MoveOutcome.ALIVE
    assert snake.segments == [Cell(21, 12), Cell(20, 12), Cell(19, 12)]
    assert snake.prev_segments == [Cell(20, 12), Cell(19, 12), Cell(18, 12)]


def test_wall_and_obstacle_targets_bounce_without_moving() -> None:
    snake = _snake()
    forest = Forest(ARENA)
    forest.add_tree(Cell(21, 12))

    assert snake.step(Direction.RIGHT, ARENA, 0.0, forest) is MoveOutcome.BOUNCE_OBSTACLE
    assert snake.head == Cell(20, 12)

    snake.place_at(Cell(39, 5))
    assert snake.step(Direction.RIGHT, ARENA, 0.0, forest) is MoveOutcome.BOUNCE_WALL
    assert snake.head == Cell(39, 5)


def test_phase_through_passes_obstacles_and_holds_at_the_border() -> None:
    snake = _snake()
    snake.phase_through_ms = 1_000.0
    forest = Forest(ARENA)
    forest.add_tree(Cell(21, 12))

    assert snake.step(Direction.RIGHT, ARENA, 0.0, forest) is MoveOutcome.ALIVE
    assert snake.head == Cell(21, 12)

    snake.place_at(Cell(39, 5))
    assert snake.step(Direction.RIGHT, ARENA, 0.0, forest) is MoveOutcome.ALIVE
    assert snake.head == Cell(39, 5)
    assert snake.length == 3


def test_self_collision_is_lethal_unless_invincible() -> None:
    snake = _snake()
    snake.segments[:] = [Cell(5, 5), Cell(6, 5), Cell(6, 6), Cell(5, 6), Cell(4, 6)]
    snake.sync_prev()

    snake.invincible_ticks = 1
    assert snake.step(Direction.DOWN, ARENA, 0.0, None) is MoveOutcome.ALIVE
    assert snake.head == Cell(5, 5)

    snake.invincible_ticks = 0
    assert snake.step(Direction.DOWN, ARENA, 0.0, None) is MoveOutcome.DEAD


def test_moving_into_the_vacating_tail_is_allowed() -> None:
    snake = _snake()
    snake.segments[:] = [Cell(5, 5), Cell(6, 5), Cell(6, 6), Cell(5, 6)]
    snake.sync_prev()

    assert snake.step(Direction.DOWN, ARENA, 0.0, None) is MoveOutcome.ALIVE
    assert snake.head == Cell(5, 6)


def test_eaten_segment_is_shed_when_digestion_finishes() -> None:
    snake = _snake()

    snake.eat(0.0)
    assert snake.grow_pending == 1
    assert list(snake.digestion_queue) == [30_000.0]

    snake.step(Direction.RIGHT, ARENA, 100.0, None)
    assert snake.length == 4

    snake.step(Direction.RIGHT, ARENA, 29_999.0, None)
    assert snake.length == 4

    snake.step(Direction.RIGHT, ARENA, 30_000.0, None)
    assert snake.length == 3
    assert list(snake.digestion_queue) == []


def test_eating_at_max_length_queues_digestion_without_growth() -> None:
    snake = _snake()
    snake.segments[:] = [Cell(30 - index, 12) for index in range(12)]
    snake.sync_prev()

    snake.eat(0.0)

    assert snake.grow_pending == 0
    assert len(snake.digestion_queue) == 1


def test_fullness_penalty_tiers() -> None:
    snake = _snake()
    for _ in range(6):
        snake.eat(0.0)
    assert snake.fullness_penalty() == 0.10

    for _ in range(5):
        snake.eat(0.0)
    assert snake.fullness_penalty() == 0.25


def test_permanent_grow_raises_the_floor_up_to_max() -> None:
    snake = _snake()

    snake.permanent_grow()

    assert snake.base_length == 4
    assert snake.length == 4

    for _ in range(20):
        snake.permanent_grow()
    assert snake.base_length == snake.max_length


def test_permanent_grow_at_max_length_queues_no_extra_segment() -> None:
    snake = _snake()
    snake.segments[:] = [Cell(30 - index, 12) for index in range(12)]
    snake.sync_prev()

    snake.permanent_grow()
    snake.step(Direction.RIGHT, ARENA, 0.0, None)

    assert snake.base_length == 4
    assert snake.grow_pending == 0
    assert snake.length == snake.max_length


def test_shrink_never_goes_below_base_length() -> None:
    snake = _snake()
    snake.segments.append(Cell(17, 12))
    snake.grow_pending = 2

    assert snake.shrink()
    assert snake.grow_pending == 0
    assert not snake.shrink()
    assert snake.length == 3


def test_reset_length_restores_initial_base_and_clears_digestion() -> None:
    snake = _snake()
    snake.permanent_grow()
    snake.permanent_grow()
    snake.eat(0.0)

    snake.reset_length()

    assert snake.base_length == 3
    assert snake.length == 3
    assert snake.grow_pending == 0
    assert list(snake.digestion_queue) == []


def test_respawn_keeps_base_length_and_shield() -> None:
    snake = _snake()
    snake.permanent_grow()
    snake.permanent_grow()
    snake.shield_active = True
    snake.phase_through_ms = 5_000.0

    snake.respawn(ARENA, Cell(10, 10))

    assert snake.base_length == 5
    assert snake.length == 5
    assert snake.segments[:3] == [Cell(10, 10), Cell(9, 10), Cell(8, 10)]
    assert snake.shield_active
    assert snake.phase_through_ms == 0.0


def test_tick_timers_counts_down_each_timer_once() -> None:
    snake = _snake()
    snake.invincible_ticks = 2
    snake.glow_ms = 50.0
    snake.respawn_safety_ms = 100.0

    snake.tick_timers(80.0)

    assert snake.invincible_ticks == 1
    assert snake.glow_ms == 0.0
    assert snake.respawn_safety_ms == 20.0
    assert snake.immune_to_terrain()
