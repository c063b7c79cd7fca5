"""Project-wide constants for :mod:`balance_sim`.

This module keeps literal values and default assumptions centralized so the
formula, catalog, tuner and report modules never hide magic numbers at their
call sites.
"""

from __future__ import annotations

from typing import Final

# Quest economy
MAX_ATTEMPTS: Final[int] = 8

QUEST_MIN_MINUTES: Final[int] = 5
QUEST_MAX_MINUTES: Final[int] = 120
MIN_EFFORT: Final[int] = 1
MAX_EFFORT: Final[int] = 5
MIN_FRICTION: Final[int] = 1
MAX_FRICTION: Final[int] = 3

# Combat
WEAPON_BASE_DAMAGE: Final[float] = 20.0
STR_DAMAGE_SCALE: Final[float] = 0.035
PLAYER_CRIT_CHANCE: Final[float] = 0.10
CRIT_MULTIPLIER_BASE: Final[float] = 1.20
CRIT_MULTIPLIER_PER_AGI: Final[float] = 0.010
CRIT_MULTIPLIER_MAX: Final[float] = 2.00

PLAYER_BASE_HP: Final[int] = 100
PLAYER_HP_PER_STA: Final[int] = 12

MIN_SIMULATED_ACCURACY: Final[float] = 0.61
MAX_SIMULATED_ACCURACY: Final[float] = 0.86
BASE_SIMULATED_ACCURACY: Final[float] = 0.64
ACCURACY_INT_SCALE: Final[float] = 45.0
ACCURACY_RANDOM_SPREAD: Final[float] = 0.02

PLAYER_DAMAGE_MIN_FACTOR: Final[float] = 0.90
PLAYER_DAMAGE_MAX_FACTOR: Final[float] = 1.10
ENEMY_DAMAGE_MIN_FACTOR: Final[float] = 0.90
ENEMY_DAMAGE_MAX_FACTOR: Final[float] = 1.10

MITIGATION_STA_PIVOT: Final[float] = 40.0
MIN_MITIGATION: Final[float] = 0.35
MAX_MITIGATION: Final[float] = 0.95

ENEMY_SCALE_MIN_FACTOR: Final[float] = 0.90
ENEMY_SCALE_MAX_FACTOR: Final[float] = 1.10
ENEMY_SCALE_LEVEL_BUFFER: Final[float] = 3.0

# Accuracy is reported against a fixed number of "shown" units per round.
SHOWN_UNITS_PER_ROUND: Final[int] = 100

# Memory grid (shared with the live mini-game)
REGULAR_GRID_SIZE: Final[int] = 6
BOSS_GRID_SIZE: Final[int] = 8
MIN_CELLS_TO_SHOW: Final[int] = 4
BASE_SHOW_SECONDS: Final[float] = 2.5
SHOW_SECONDS_PER_INT: Final[float] = 0.05
MIN_SHOW_SECONDS: Final[float] = 2.0
MAX_SHOW_SECONDS: Final[float] = 4.0

# Enemy catalog
SLOTS_PER_ZONE: Final[int] = 10
SLOT_LEVEL_OFFSETS: Final[tuple[int, ...]] = (0, 1, 1, 2, 2, 3, 4, 4, 5, 5)
SLOT_POWER_MULTIPLIERS: Final[tuple[float, ...]] = (1.15, 1.22, 1.00, 1.08, 0.90, 1.10, 1.20, 1.02, 1.30, 1.38)
SLOT_WIN_RATE_BANDS: Final[tuple[tuple[float, float], ...]] = (
    (15, 25),
    (12, 20),
    (30, 45),
    (20, 30),
    (45, 60),
    (20, 30),
    (12, 20),
    (30, 45),
    (8, 15),
    (5, 12),
)
TRANSITION_SLOTS: Final[int] = 2
ENEMY_BASE_HP: Final[int] = 120
ENEMY_HP_PER_LEVEL: Final[int] = 26
ENEMY_BASE_ATTACK: Final[int] = 8
ENEMY_ATTACK_PER_LEVEL: Final[float] = 0.9
DEFAULT_WIN_RATE_BAND: Final[tuple[float, float]] = (30.0, 45.0)

# Auto-tuner defaults
DEFAULT_RUNS_PER_EVAL: Final[int] = 240
DEFAULT_TUNE_ITERATIONS: Final[int] = 10
DEFAULT_MIN_POWER: Final[float] = 0.20
DEFAULT_MAX_POWER: Final[float] = 2.20
# Attack values either side of the power-pass pick that get their own HP bisection.
TUNE_ATTACK_SPAN: Final[int] = 2
BOSS_DOMINANCE_RATIO: Final[float] = 1.05
BOSS_DOMINANCE_MAX_SCALE: Final[float] = 1.12
BOSS_DOMINANCE_MIN_CHECK_RUNS: Final[int] = 120
# Percentage points a strengthened boss may dip below its band minimum.
BOSS_DOMINANCE_BAND_SLACK: Final[float] = 1.0
EFFECTIVE_POWER_HP_WEIGHT: Final[float] = 0.65
EFFECTIVE_POWER_ATTACK_WEIGHT: Final[float] = 11.0

# Balance red lines (percent)
MONTE_CARLO_TOLERANCE: Final[float] = 3.0
ORDINARY_WIN_RATE_FLOOR: Final[float] = 15.0
BOSS_WIN_RATE_FLOOR: Final[float] = 4.5
EASY_WIN_RATE_CEILING: Final[float] = 70.0
TRANSITION_WIN_RATE_FLOOR: Final[float] = 12.0

# (zone, by day) pairs checked against progression snapshots
PROGRESSION_TARGETS: Final[tuple[tuple[int, int], ...]] = ((1, 0), (2, 7), (3, 21))

# CLI defaults
DEFAULT_ARCHETYPE_INDEX: Final[int] = 0
DEFAULT_COMPACT_DAYS: Final[int] = 90
DEFAULT_COMPACT_RUNS: Final[int] = 10
FULL_CLEAR_MAX_DAYS: Final[int] = 365
