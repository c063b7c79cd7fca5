"""Command-line entry point for :mod:`balance_sim`.

Modes (first match wins, in this order):

--simulate-tune [seed] [runsPerEval] [iterations]
    Print the auto-tune summary only.
--simulate-autotune [seed] [runsPerEval] [iterations]
    Print the auto-tune summary, then the full report on the tuned catalog.
--simulate [seed]
    Print the full report on the untuned (or ``--enemies-json``) catalog.
--simulate-compact [archetypeIndex] [days] [runs]
    Print a condensed progression table for one archetype.

Malformed or missing positional values fall back to their defaults.

Example
-------
python -m balance_sim --simulate 42
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from . import constants
from .archetypes import default_archetypes
from .main import (
    build_auto_tune_options,
    configure_logging,
    load_catalog,
    resolve_log_level,
    run_auto_tune,
    run_compact,
    run_full_report,
)

logger = logging.getLogger(__name__)


def _positional_int(
    values: Sequence[str],
    position: int,
    *,
    name: str,
    accept: Callable[[int], bool] = lambda _: True,
) -> Optional[int]:
    """Parse ``values[position]`` as an int; None when missing, malformed or rejected."""

    if position >= len(values):
        return None
    raw = values[position]
    try:
        value = int(raw)
    except ValueError:
        logger.debug("Ignoring malformed %s %r", name, raw)
        return None
    if not accept(value):
        logger.debug("Ignoring out-of-range %s %d", name, value)
        return None
    return value


def _positive(value: int) -> bool:
    return value > 0


def _seed_from(values: Sequence[str]) -> int:
    seed = _positional_int(values, 0, name="seed")
    return time.time_ns() if seed is None else seed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="balance-sim",
        description="Headless balance simulator: Monte Carlo battles, progression runs and enemy auto-tuning.",
    )
    parser.add_argument(
        "--simulate",
        nargs="*",
        metavar="SEED",
        default=None,
        help="Print the full balance report (optional: seed)",
    )
    parser.add_argument(
        "--simulate-tune",
        nargs="*",
        metavar="N",
        default=None,
        help="Print the auto-tune summary (optional: seed runsPerEval iterations)",
    )
    parser.add_argument(
        "--simulate-autotune",
        nargs="*",
        metavar="N",
        default=None,
        help="Auto-tune, then print the full report on the tuned catalog (optional: seed runsPerEval iterations)",
    )
    parser.add_argument(
        "--simulate-compact",
        nargs="*",
        metavar="N",
        default=None,
        help="Print a condensed progression table (optional: archetypeIndex 0-4, days, runs)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for --simulate-compact (default: current time)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level name or number (default: $BALANCE_SIM_LOG_LEVEL, else WARNING)",
    )
    parser.add_argument(
        "--enemies-json",
        type=Path,
        default=None,
        help="Load the enemy catalog from this JSON file instead of the preset one (optional)",
    )
    parser.add_argument(
        "--out-json",
        type=Path,
        default=None,
        help="Write the tuned catalog to this JSON path after tuning (optional)",
    )
    parser.add_argument(
        "--tune-options-json",
        type=Path,
        default=None,
        help="JSON file with auto-tune overrides: runs_per_eval, iterations, min_power, max_power, workers",
    )
    return parser


def _run_tune(args: argparse.Namespace, values: Sequence[str], *, with_report: bool) -> None:
    seed = _seed_from(values)
    options = build_auto_tune_options(
        seed=seed,
        runs_per_eval=_positional_int(values, 1, name="runsPerEval", accept=_positive),
        iterations=_positional_int(values, 2, name="iterations", accept=_positive),
        options_json_path=args.tune_options_json,
    )
    base = load_catalog(args.enemies_json)
    tuned, _results, summary = run_auto_tune(options=options, base=base, out_json_path=args.out_json)
    print(summary)
    if args.out_json is not None:
        print(f"Wrote {len(tuned)} tuned enemies to {args.out_json}")
    if with_report:
        print(run_full_report(seed=seed, enemies=tuned))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(level=resolve_log_level(args.log_level))

    if args.simulate_tune is not None:
        _run_tune(args, args.simulate_tune, with_report=False)
        return 0

    if args.simulate_autotune is not None:
        _run_tune(args, args.simulate_autotune, with_report=True)
        return 0

    if args.simulate is not None:
        seed = _seed_from(args.simulate)
        print(run_full_report(seed=seed, enemies=load_catalog(args.enemies_json)))
        return 0

    if args.simulate_compact is not None:
        values = args.simulate_compact
        archetype_index = _positional_int(
            values,
            0,
            name="archetypeIndex",
            accept=lambda n: 0 <= n < len(default_archetypes()),
        )
        days = _positional_int(values, 1, name="days", accept=_positive)
        runs = _positional_int(values, 2, name="runs", accept=_positive)
        print(
            run_compact(
                seed=time.time_ns() if args.seed is None else args.seed,
                archetype_index=constants.DEFAULT_ARCHETYPE_INDEX if archetype_index is None else archetype_index,
                days=constants.DEFAULT_COMPACT_DAYS if days is None else days,
                runs=constants.DEFAULT_COMPACT_RUNS if runs is None else runs,
                enemies=load_catalog(args.enemies_json),
            )
        )
        return 0

    parser.print_usage()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
