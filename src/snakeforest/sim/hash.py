from __future__ import annotations

import hashlib
import json

from snakeforest.sim.core import Simulation


def _cell(cell) -> list[int]:
    return [cell.x, cell.y]


def simulation_hash(simulation: Simulation) -> str:
    state = simulation.state
    snake = state.snake
    payload = {
        "seed": simulation.seed,
        "master_seed": simulation.master_seed,
        "rng_state": simulation.rng_state_payload(),
        "tick": state.tick,
        "mode": state.mode.value,
        "day": state.day,
        "lives": state.lives,
        "time_played_ms": round(state.time_played_ms, 6),
        "speed_fps": round(state.speed_fps, 6),
        "phase": {"phase_count": state.phase.phase_count, "cycle_ms": round(state.phase.cycle_ms, 6)},
        "pools": {"hunger_ms": round(state.pools.hunger_ms, 6), "starvation_ms": round(state.pools.starvation_ms, 6)},
        "snake": {
            "segments": [_cell(cell) for cell in snake.segments],
            "base_length": snake.base_length,
            "grow_pending": snake.grow_pending,
            "digestion_queue": [round(deadline, 6) for deadline in snake.digestion_queue],
            "shield_active": snake.shield_active,
            "invincible_ticks": snake.invincible_ticks,
        },
        "direction": state.direction.name,
        "humans": [[*_cell(human.cell), human.perception, human.move_cooldown] for human in state.humans],
        "trees": sorted(_cell(tree.cell) for tree in state.forest.trees()),
        "logs": sorted(
            [*_cell(record.origin), record.length, record.horizontal] for record in state.forest.log_records()
        ),
        "food": _cell(state.food.cell) if state.food.active else None,
        "dragon_fruit": (
            [*_cell(state.dragon_fruit.cell), state.dragon_fruit.fruit_type.value]
            if state.dragon_fruit.active and state.dragon_fruit.fruit_type is not None
            else None
        ),
        "mega_apple": _cell(state.mega_apple.cell) if state.mega_apple.active else None,
        "endgame_phase": state.endgame.phase.value if state.endgame.phase is not None else None,
        "input_log": [command.to_dict() for command in simulation.input_log],
        "rules_state": dict(sorted(state.rules_state.items())),
        "event_trace": simulation.get_event_trace(),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
