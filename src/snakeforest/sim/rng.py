from __future__ import annotations

import hashlib
import random

RNG_SIM_STREAM_NAME = "rng_sim"
RNG_WORLDGEN_STREAM_NAME = "rng_worldgen"


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def build_stream(master_seed: int, stream_name: str) -> random.Random:
    return random.Random(derive_stream_seed(master_seed=master_seed, stream_name=stream_name))


def shuffle_in_place(rng: random.Random, items: list) -> None:
    """Fisher-Yates from the back, one ``rng.random()`` draw per swap."""
    for index in range(len(items) - 1, 0, -1):
        swap_index = int(rng.random() * (index + 1))
        items[index], items[swap_index] = items[swap_index], items[index]
