"""Balance targets: evaluation levels, win-rate bands and red lines.

Each enemy is calibrated for a player-level window. This module decides at
which equalized level an enemy is judged, which band its win rate must land
in, and which hard floors/ceilings ("red lines") must never be crossed.
"""

from __future__ import annotations

import random
from typing import Iterable, Mapping

from . import constants
from .battle import monte_carlo_analysis
from .data import BalanceVerdict, EnemyDefinition, EnemyRole, PlayerStats, WinRateBand

ROLE_LABELS: Mapping[EnemyRole, str] = {
    EnemyRole.TRANSITION: "Переход",
    EnemyRole.TRANSITION_ELITE: "Переход (элитка)",
    EnemyRole.NORMAL: "Нормальный",
    EnemyRole.HARD: "Сложный",
    EnemyRole.EASY: "Лёгкий",
    EnemyRole.ELITE: "Элитка",
    EnemyRole.MINIBOSS: "Мини-босс",
    EnemyRole.BOSS: "Босс зоны",
}

# Lower fights first when the progression agent picks a target.
ROLE_PRIORITIES: Mapping[EnemyRole, int] = {
    EnemyRole.EASY: 0,
    EnemyRole.NORMAL: 1,
    EnemyRole.HARD: 2,
    EnemyRole.ELITE: 3,
    EnemyRole.MINIBOSS: 4,
    EnemyRole.TRANSITION: 5,
    EnemyRole.TRANSITION_ELITE: 5,
    EnemyRole.BOSS: 6,
}

ORDINARY_ROLES: frozenset[EnemyRole] = frozenset(
    {
        EnemyRole.TRANSITION,
        EnemyRole.TRANSITION_ELITE,
        EnemyRole.NORMAL,
        EnemyRole.HARD,
        EnemyRole.EASY,
    }
)


def role_label(role: EnemyRole) -> str:
    return ROLE_LABELS.get(role, ROLE_LABELS[EnemyRole.NORMAL])


def role_priority(role: EnemyRole) -> int:
    return ROLE_PRIORITIES.get(role, ROLE_PRIORITIES[EnemyRole.HARD])


def stats_from_level(level: int) -> PlayerStats:
    """Equalized player stats for one synthetic level (floored at 1)."""

    level = max(1, level)
    return PlayerStats(strength=level, agility=level, intellect=level, endurance=level)


def enemy_mid_expected_level(enemy: EnemyDefinition) -> int:
    """Midpoint of the enemy's expected-level window.

    Falls back to the enemy's static level, then to 1, when it has no window.
    """

    min_lvl = enemy.expected_min_level
    max_lvl = enemy.expected_max_level
    if min_lvl <= 0 and max_lvl <= 0:
        return enemy.level if enemy.level > 0 else 1
    if min_lvl <= 0:
        min_lvl = max_lvl
    if max_lvl <= 0:
        max_lvl = min_lvl
    max_lvl = max(max_lvl, min_lvl)
    return int((min_lvl + max_lvl) / 2.0)


def enemy_win_rate_band(enemy: EnemyDefinition) -> WinRateBand:
    """The enemy's stored band, or the default 30-45% band if it has none."""

    low, high = enemy.target_win_rate_min, enemy.target_win_rate_max
    if low > 0 and high > 0 and low < high:
        return WinRateBand(label=role_label(enemy.role), min=low, max=high)

    default_low, default_high = constants.DEFAULT_WIN_RATE_BAND
    return WinRateBand(label=role_label(enemy.role), min=default_low, max=default_high)


def is_zone_transition_enemy(enemy: EnemyDefinition) -> bool:
    """The zone-opening enemy, judged at the level a player enters the zone with."""

    return enemy.role is EnemyRole.TRANSITION


def transition_entry_level(enemy: EnemyDefinition) -> int:
    """Level a player is expected to have just before engaging a zone opener.

    Zone 1 has no previous zone, so the window midpoint is used there.
    """

    if enemy.zone <= 1:
        return enemy_mid_expected_level(enemy)
    if enemy.expected_min_level <= 0:
        return enemy_mid_expected_level(enemy)
    return max(1, enemy.expected_min_level - 1)


def evaluation_level(enemy: EnemyDefinition) -> int:
    if is_zone_transition_enemy(enemy):
        return transition_entry_level(enemy)
    return enemy_mid_expected_level(enemy)


def band_status(band: WinRateBand, win_rate: float) -> str:
    if band.contains(win_rate):
        return "OK"
    return "TOO HARD" if win_rate < band.min else "TOO EASY"


def red_line_violations(
    enemy: EnemyDefinition,
    win_rate: float,
    *,
    tolerance: float = constants.MONTE_CARLO_TOLERANCE,
) -> list[str]:
    """Return human-readable red-line violations (empty when the enemy passes)."""

    band = enemy_win_rate_band(enemy)
    violations: list[str] = []

    if win_rate < band.min - tolerance or win_rate > band.max + tolerance:
        violations.append(f"outside band {band.min:.0f}-{band.max:.0f}% (±{tolerance:.1f})")
    if enemy.role in ORDINARY_ROLES and win_rate < constants.ORDINARY_WIN_RATE_FLOOR - tolerance:
        violations.append(f"ordinary role below {constants.ORDINARY_WIN_RATE_FLOOR:.0f}%")
    if enemy.role is EnemyRole.EASY and win_rate > constants.EASY_WIN_RATE_CEILING + tolerance:
        violations.append(f"easy role above {constants.EASY_WIN_RATE_CEILING:.0f}%")
    if enemy.is_boss and win_rate < constants.BOSS_WIN_RATE_FLOOR - tolerance:
        violations.append(f"boss below {constants.BOSS_WIN_RATE_FLOOR:.1f}%")
    if is_zone_transition_enemy(enemy) and win_rate < constants.TRANSITION_WIN_RATE_FLOOR - tolerance:
        violations.append(f"zone transition below {constants.TRANSITION_WIN_RATE_FLOOR:.0f}%")

    return violations


def evaluate_balance(
    enemy: EnemyDefinition,
    win_rate: float,
    *,
    eval_level: int | None = None,
    tolerance: float = constants.MONTE_CARLO_TOLERANCE,
) -> BalanceVerdict:
    band = enemy_win_rate_band(enemy)
    return BalanceVerdict(
        enemy_index=enemy.index,
        enemy_name=enemy.name,
        eval_level=evaluation_level(enemy) if eval_level is None else eval_level,
        win_rate=win_rate,
        band=band,
        status=band_status(band, win_rate),
        violations=tuple(red_line_violations(enemy, win_rate, tolerance=tolerance)),
    )


def check_catalog_balance(
    enemies: Iterable[EnemyDefinition],
    *,
    runs: int,
    seed: int,
    tolerance: float = constants.MONTE_CARLO_TOLERANCE,
) -> list[BalanceVerdict]:
    """Simulate every enemy at its evaluation level and judge the result.

    Each enemy gets its own stream seeded from ``seed + 10000 + index``.
    """

    verdicts: list[BalanceVerdict] = []
    for enemy in enemies:
        level = evaluation_level(enemy)
        mc = monte_carlo_analysis(
            stats_from_level(level),
            enemy,
            runs,
            random.Random(seed + 10_000 + enemy.index),
        )
        verdicts.append(evaluate_balance(enemy, mc.win_rate, eval_level=level, tolerance=tolerance))
    return verdicts
