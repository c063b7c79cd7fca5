from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from . import constants
from .archetypes import default_archetypes
from .data import AutoTuneOptions, EnemyDefinition, EnemyTuneResult, ReportOptions, SimConfig
from .enemies import get_preset_enemies
from .io import load_auto_tune_options_from_json, load_enemies_from_json, write_enemies_json
from .report import auto_tune_summary, compact_table, full_report
from .tuner import auto_tune_enemies, default_auto_tune_options

LOG_LEVEL_ENV_VAR = "BALANCE_SIM_LOG_LEVEL"


def configure_logging(*, level: int = logging.INFO) -> None:
    """Configure a simple root logger that writes to stderr.

    This is safe to call multiple times.
    """

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
    else:
        root.setLevel(level)


def resolve_log_level(value: Optional[str] = None) -> int:
    """Log level from ``value``, else ``$BALANCE_SIM_LOG_LEVEL``, else WARNING.

    Accepts level names (case-insensitive) or numbers; anything unrecognised
    falls back to WARNING.
    """

    raw = value if value is not None else os.environ.get(LOG_LEVEL_ENV_VAR, "")
    raw = raw.strip()
    if not raw:
        return logging.WARNING
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.WARNING


logger = logging.getLogger(__name__)


def load_catalog(enemies_json_path: str | Path | None = None) -> list[EnemyDefinition]:
    """The catalog stored at ``enemies_json_path``, or the preset one."""

    if enemies_json_path is None:
        return get_preset_enemies()
    enemies = load_enemies_from_json(enemies_json_path)
    logger.info("Loaded %d enemies from %s", len(enemies), enemies_json_path)
    return enemies


def build_auto_tune_options(
    *,
    seed: int,
    runs_per_eval: Optional[int] = None,
    iterations: Optional[int] = None,
    options_json_path: str | Path | None = None,
) -> AutoTuneOptions:
    """Defaults, then JSON overrides, then explicit CLI values (last wins)."""

    if options_json_path is not None:
        options = load_auto_tune_options_from_json(options_json_path, seed=seed)
    else:
        options = default_auto_tune_options(seed)

    overrides = {}
    if runs_per_eval is not None:
        overrides["runs_per_eval"] = runs_per_eval
    if iterations is not None:
        overrides["iterations"] = iterations
    return replace(options, **overrides)


def run_full_report(
    *,
    seed: int,
    enemies: Optional[Sequence[EnemyDefinition]] = None,
    options: ReportOptions = ReportOptions(),
) -> str:
    logger.info("Building full report (seed=%d)", seed)
    return full_report(seed, enemies, options)


def run_auto_tune(
    *,
    options: AutoTuneOptions,
    base: Optional[Sequence[EnemyDefinition]] = None,
    out_json_path: str | Path | None = None,
) -> tuple[list[EnemyDefinition], list[EnemyTuneResult], str]:
    """Tune a catalog and render its summary. Optionally save the tuned catalog."""

    tuned, results = auto_tune_enemies(base or (), options)
    if out_json_path is not None:
        count = write_enemies_json(out_json_path, tuned)
        logger.info("Wrote %d tuned enemies to %s", count, out_json_path)
    return tuned, results, auto_tune_summary(results)


def run_compact(
    *,
    seed: int,
    archetype_index: int = constants.DEFAULT_ARCHETYPE_INDEX,
    days: int = constants.DEFAULT_COMPACT_DAYS,
    runs: int = constants.DEFAULT_COMPACT_RUNS,
    enemies: Optional[Sequence[EnemyDefinition]] = None,
) -> str:
    archetypes = default_archetypes()
    if not 0 <= archetype_index < len(archetypes):
        raise ValueError(f"archetype_index must be in 0..{len(archetypes) - 1}, got {archetype_index}")

    config = SimConfig(
        days=days,
        seed=seed,
        archetype=archetypes[archetype_index],
        enemies=tuple(enemies or get_preset_enemies()),
    )
    logger.info("Compact run: %s, %d days, %d runs (seed=%d)", config.archetype.name, days, runs, seed)
    return compact_table(config, runs)
