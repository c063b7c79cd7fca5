"""Headless balance simulator for a gamified task tracker.

Real-life quests earn stat EXP and battle attempts; attempts are spent on a
fixed sequence of enemies split into zones. This package verifies the game's
numeric tuning offline: Monte Carlo battles, archetype-driven progression
runs, red-line balance checks and a binary-search auto-tuner that pulls every
enemy's win rate into its designer band.

The pure formulas in :mod:`balance_sim.formulas` are also what the live game
uses for quest rewards and level-ups.
"""

from .archetypes import default_archetypes
from .balance import evaluate_balance, evaluation_level, stats_from_level
from .battle import monte_carlo_analysis, simulate_battle, stat_sweep
from .data import (
    Archetype,
    AutoTuneOptions,
    BalanceVerdict,
    EnemyDefinition,
    EnemyRole,
    PlayerStats,
    ReportOptions,
    SimConfig,
    Stat,
)
from .enemies import get_preset_enemies
from .io import load_enemies_from_json, write_enemies_json
from .progression import check_progression_timeline, run_progression, run_progression_multiple
from .report import auto_tune_summary, compact_table, full_report
from .tuner import auto_tune_enemies, default_auto_tune_options

__all__ = [
    "Archetype",
    "AutoTuneOptions",
    "BalanceVerdict",
    "EnemyDefinition",
    "EnemyRole",
    "PlayerStats",
    "ReportOptions",
    "SimConfig",
    "Stat",
    "default_archetypes",
    "get_preset_enemies",
    "simulate_battle",
    "monte_carlo_analysis",
    "stat_sweep",
    "run_progression",
    "run_progression_multiple",
    "check_progression_timeline",
    "stats_from_level",
    "evaluation_level",
    "evaluate_balance",
    "default_auto_tune_options",
    "auto_tune_enemies",
    "full_report",
    "compact_table",
    "auto_tune_summary",
    "load_enemies_from_json",
    "write_enemies_json",
]
