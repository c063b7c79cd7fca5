"""Pure balance formulas.

Every function here is deterministic given its explicit random source. A
random source is a zero-argument callable returning floats in ``[0, 1)``
(for example ``random.Random().random``); nothing in this module touches
global randomness.

The live game reads the quest-economy functions (quest EXP, rank, attempts,
EXP per level); the combat functions are the simulator's authoritative
balance formulas.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import replace
from typing import Optional

from . import constants
from .data import EnemyDefinition

RandomFloat = Callable[[], float]


def round_half_up(value: float) -> int:
    """Round halves away from zero (``round`` in Python rounds halves to even)."""

    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def clamp(x: float, min_val: float, max_val: float) -> float:
    if x < min_val:
        return min_val
    if x > max_val:
        return max_val
    return x


# --- Quest economy ---


def calculate_quest_exp(minutes: int, effort: int, friction: int) -> int:
    """round(minutes*0.6 + effort*4 + friction*3), minimum 1.

    Effort is clamped to [1, 5], friction to [1, 3] and minutes floored at 0.
    """

    minutes = max(0, minutes)
    effort = int(clamp(effort, constants.MIN_EFFORT, constants.MAX_EFFORT))
    friction = int(clamp(friction, constants.MIN_FRICTION, constants.MAX_FRICTION))
    exp = round_half_up(minutes * 0.6 + effort * 4 + friction * 3)
    return max(1, exp)


def rank_from_exp(exp: int) -> str:
    if exp <= 10:
        return "E"
    if exp <= 18:
        return "D"
    if exp <= 28:
        return "C"
    if exp <= 40:
        return "B"
    if exp <= 55:
        return "A"
    return "S"


_BASE_EXP_BY_RANK = {"E": 20, "D": 40, "C": 70, "B": 120, "A": 200, "S": 350}


def base_exp_for_rank(rank: str) -> int:
    """EXP a stat receives when a quest of this rank is completed."""

    return _BASE_EXP_BY_RANK.get(rank, 0)


def attempts_for_quest_exp(exp: int) -> int:
    if exp < 15:
        return 1
    if exp <= 30:
        return 2
    return 3


def exp_for_level(level: int) -> int:
    """EXP required to advance from ``level`` to ``level + 1``."""

    return 50 + (level - 1) * 30


# --- Combat ---


def player_hp(sta: int) -> int:
    return constants.PLAYER_BASE_HP + max(0, sta) * constants.PLAYER_HP_PER_STA


def simulated_accuracy(int_stat: int, rng_float: Optional[RandomFloat] = None) -> float:
    """Per-round accuracy in [0.61, 0.86]; INT is the only stat that moves it.

    Exponential saturation toward the cap plus a symmetric +-0.02 jitter
    drawn from ``rng_float`` (no jitter when it is None).
    """

    int_stat = max(0, int_stat)
    jitter = 0.0
    if rng_float is not None:
        jitter = (rng_float() * 2.0 - 1.0) * constants.ACCURACY_RANDOM_SPREAD
    progress = 1.0 - math.exp(-int_stat / constants.ACCURACY_INT_SCALE)
    acc = (
        constants.BASE_SIMULATED_ACCURACY
        + (constants.MAX_SIMULATED_ACCURACY - constants.BASE_SIMULATED_ACCURACY) * progress
        + jitter
    )
    return clamp(acc, constants.MIN_SIMULATED_ACCURACY, constants.MAX_SIMULATED_ACCURACY)


def crit_chance() -> float:
    """Fixed in simulation; AGI only moves the crit multiplier."""

    return constants.PLAYER_CRIT_CHANCE


def crit_damage_multiplier(agi: int) -> float:
    agi = max(0, agi)
    return clamp(
        constants.CRIT_MULTIPLIER_BASE + constants.CRIT_MULTIPLIER_PER_AGI * agi,
        constants.CRIT_MULTIPLIER_BASE,
        constants.CRIT_MULTIPLIER_MAX,
    )


def base_player_damage(str_stat: int) -> float:
    return constants.WEAPON_BASE_DAMAGE * (1 + constants.STR_DAMAGE_SCALE * str_stat)


def compute_player_damage(str_stat: int, agi: int, accuracy: float, rng_float: RandomFloat) -> tuple[int, bool]:
    """Return ``(damage, is_crit)``.

    Draws the variance factor first, then the crit roll, from ``rng_float``.
    """

    accuracy = clamp(accuracy, 0.0, 1.0)
    variance = constants.PLAYER_DAMAGE_MIN_FACTOR + rng_float() * (
        constants.PLAYER_DAMAGE_MAX_FACTOR - constants.PLAYER_DAMAGE_MIN_FACTOR
    )
    raw = base_player_damage(str_stat) * accuracy * variance

    is_crit = False
    if raw > 0 and rng_float() < crit_chance():
        raw *= crit_damage_multiplier(agi)
        is_crit = True

    return max(1, round_half_up(raw)), is_crit


def damage_mitigation(sta: int) -> float:
    """Diminishing-returns damage multiplier from STA, clamped to [0.35, 0.95]."""

    sta = max(0, sta)
    mit = 1.0 - (sta / (sta + constants.MITIGATION_STA_PIVOT))
    return clamp(mit, constants.MIN_MITIGATION, constants.MAX_MITIGATION)


def compute_enemy_damage(enemy_attack: int, sta: int, rng_float: RandomFloat) -> int:
    factor = constants.ENEMY_DAMAGE_MIN_FACTOR + rng_float() * (
        constants.ENEMY_DAMAGE_MAX_FACTOR - constants.ENEMY_DAMAGE_MIN_FACTOR
    )
    raw = enemy_attack * damage_mitigation(sta) * factor
    return max(1, round_half_up(raw))


def player_combat_level(str_stat: int, sta: int) -> float:
    """STR/STA backbone used to interpolate enemy scaling (floored at 1)."""

    level = (max(0, str_stat) + max(0, sta)) / 2.0
    return max(1.0, level)


def enemy_scale_factor(enemy: EnemyDefinition, player_level: float) -> float:
    """Interpolate enemy power inside its expected-level window.

    The window is widened by three levels on each side; outside it the factor
    is clamped to 0.90 / 1.10. Enemies without a window are not scaled.
    """

    min_lvl = enemy.expected_min_level
    max_lvl = enemy.expected_max_level
    if min_lvl <= 0 or max_lvl <= 0:
        return 1.0
    max_lvl = max(max_lvl, min_lvl)

    low = min_lvl - constants.ENEMY_SCALE_LEVEL_BUFFER
    high = max_lvl + constants.ENEMY_SCALE_LEVEL_BUFFER
    if high <= low:
        return 1.0

    pos = clamp((player_level - low) / (high - low), 0.0, 1.0)
    return constants.ENEMY_SCALE_MIN_FACTOR + pos * (
        constants.ENEMY_SCALE_MAX_FACTOR - constants.ENEMY_SCALE_MIN_FACTOR
    )


def scale_enemy_power(enemy: EnemyDefinition, scale: float) -> EnemyDefinition:
    """Return a copy with HP and attack multiplied by ``scale`` (both floored at 1)."""

    return replace(
        enemy,
        hp=max(1, round_half_up(enemy.hp * scale)),
        attack=max(1, round_half_up(enemy.attack * scale)),
    )


# --- Memory grid ---


def grid_size(is_boss: bool) -> int:
    return constants.BOSS_GRID_SIZE if is_boss else constants.REGULAR_GRID_SIZE


_BASE_CELLS_BY_RANK = {"E": 6, "D": 8, "C": 10, "B": 12, "A": 14, "S": 16}


def base_cells_by_rank(rank: str) -> int:
    return _BASE_CELLS_BY_RANK.get(rank, 8)


def cells_to_show(rank: str, is_boss: bool, int_level: int) -> int:
    """Highlighted cells for one round; INT reduces the count smoothly."""

    base = base_cells_by_rank(rank)
    if is_boss:
        base += 2

    reduction = max(0, int_level) / 3.0
    cells = max(constants.MIN_CELLS_TO_SHOW, round_half_up(base - reduction))
    if is_boss:
        cells += 3

    size = grid_size(is_boss)
    return min(cells, size * size)


def time_to_show_ms(int_level: int) -> int:
    seconds = clamp(
        constants.BASE_SHOW_SECONDS + int_level * constants.SHOW_SECONDS_PER_INT,
        constants.MIN_SHOW_SECONDS,
        constants.MAX_SHOW_SECONDS,
    )
    return round_half_up(seconds * 1000)


def generate_shown_cells(grid: int, count: int, rng: random.Random) -> list[int]:
    """Pick ``count`` unique cell indices from a ``grid`` x ``grid`` field.

    Raises
    ------
    ValueError
        If ``grid`` or ``count`` is not positive, or ``count`` exceeds the
        number of cells.
    """

    if grid <= 0:
        raise ValueError(f"grid must be positive, got {grid}")
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    total = grid * grid
    if count > total:
        raise ValueError(f"count {count} exceeds cell count {total}")

    return rng.sample(range(total), count)
