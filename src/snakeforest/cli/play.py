from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from snakeforest.cli.logging_config import LOG_LEVEL_CHOICES, configure_logging
from snakeforest.cli.pygame_viewer import run_pygame_viewer
from snakeforest.content.io import DEFAULT_META_STATS_PATH, MetaStats, save_meta_stats_json

DEFAULT_SEED = 7


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snakeforest-play", description="Canonical Snake Forest launcher.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Master seed for the simulation.")
    parser.add_argument("--stats-path", default=DEFAULT_META_STATS_PATH, help="Meta stats JSON store to create and use.")
    parser.add_argument("--headless", action="store_true", help="Run startup path in headless mode.")
    parser.add_argument("--log-level", choices=LOG_LEVEL_CHOICES, type=str.upper, help="Engine log level.")
    return parser


def _ensure_stats_file(stats_path: str) -> None:
    stats_file = Path(stats_path)
    if stats_file.exists():
        return
    save_meta_stats_json(stats_file, MetaStats())


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(level=args.log_level)
    _ensure_stats_file(args.stats_path)
    return run_pygame_viewer(
        seed=args.seed,
        headless=args.headless,
        stats_path=args.stats_path,
    )


if __name__ == "__main__":
    raise SystemExit(main())
