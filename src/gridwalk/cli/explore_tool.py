from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from gridwalk.content.io import load_grid_config_json, load_registry_json, save_registry_json
from gridwalk.sim.errors import ExhaustedError, OutOfBoundsError
from gridwalk.sim.grid import GridConfig
from gridwalk.sim.hash import registry_hash, walk_hash
from gridwalk.sim.moves import MOVE_NAMES, parse_move_buffer
from gridwalk.sim.registry import PlayerRegistry
from gridwalk.sim.walk import GridWalkSimulator, WalkStep

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_EXPLORE_FAILED = 2


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("time must be >= 0")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridwalk-explore",
        description=(
            "Replay one explore call: decode a 32-byte move buffer, walk it across the grid "
            "from the caller's seeded start tile, and commit rewards to the player registry."
        ),
    )
    parser.add_argument("caller_id", help="Caller identity")
    parser.add_argument("moves", help="Move buffer as 64 hex digits (optional 0x prefix)")
    parser.add_argument("--time", type=_non_negative_int, required=True, help="Current timestamp for the call")
    parser.add_argument("--config", help="Grid config JSON; defaults to the registry's config or built-in defaults")
    parser.add_argument("--registry", help="Registry save JSON to load (a missing file starts an empty registry)")
    parser.add_argument("--save", action="store_true", help="Write the updated registry back to --registry")
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Dry-run the caller's next walk without the cooldown check or any commit",
    )
    parser.add_argument("--print-trace", action="store_true", help="Print every step of the walk")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _load_state(args: argparse.Namespace) -> tuple[GridConfig, PlayerRegistry]:
    config: GridConfig | None = None
    registry = PlayerRegistry()
    if args.registry is not None and Path(args.registry).exists():
        config, registry = load_registry_json(args.registry)
    if args.config is not None:
        config = load_grid_config_json(args.config)
    return (config if config is not None else GridConfig()), registry


def _print_trace(start_position: int | None, steps: Sequence[WalkStep]) -> None:
    print(f"trace start_position={start_position}")
    for step in steps:
        print(
            "trace.step "
            f"index={step.step_index} "
            f"move={MOVE_NAMES[step.move]} "
            f"position={step.position} "
            f"reward={step.reward}"
        )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[gridwalk] %(levelname)s %(name)s: %(message)s")

    try:
        if args.save and args.registry is None:
            raise ValueError("--save requires --registry")
        move_buffer = parse_move_buffer(args.moves)
        config, registry = _load_state(args)
        simulator = GridWalkSimulator(registry, config)

        if args.preview:
            result = simulator.preview(args.caller_id, move_buffer, args.time)
            if args.print_trace:
                _print_trace(result.start_position, result.steps)
            print(
                "preview "
                f"caller={args.caller_id} "
                f"start_position={result.start_position} "
                f"end_position={result.end_position} "
                f"reward={result.reward_total} "
                f"walk_hash={walk_hash(result)}"
            )
            return EXIT_OK

        receipt, walk = simulator.explore_traced(args.caller_id, move_buffer, args.time)
        if args.print_trace:
            _print_trace(walk.start_position, walk.steps)
        if args.save:
            save_registry_json(args.registry, registry, config)
    except ExhaustedError as exc:
        print(f"exhausted caller={args.caller_id} retry_at={exc.retry_at}")
        return EXIT_EXPLORE_FAILED
    except OutOfBoundsError as exc:
        if args.print_trace:
            _print_trace(exc.start_position, exc.completed_steps)
        print(f"out_of_bounds caller={args.caller_id} step={exc.step_index} position={exc.position}")
        return EXIT_EXPLORE_FAILED
    except Exception as exc:
        print(f"error: {exc}")
        return EXIT_INVALID_INPUT

    print(
        "ok "
        f"caller={args.caller_id} "
        f"last_explore_time={receipt.last_explore_time} "
        f"reward={receipt.reward_earned} "
        f"nonce={receipt.nonce} "
        f"total_reward_count={receipt.total_reward_count} "
        f"registry_hash={registry_hash(registry)}"
    )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
