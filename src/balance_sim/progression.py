"""Day-by-day progression of an archetype-driven virtual player.

Each simulated day the agent completes its quests, then (if the archetype
fights when possible) spends every battle attempt against the enemy chosen by
:func:`pick_next_enemy`. Defeating a zone's boss moves the agent to the next
zone, as long as that zone has any enemies.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

import numpy as np

from . import constants
from .balance import is_zone_transition_enemy, role_priority
from .battle import simulate_battle
from .data import (
    Archetype,
    DaySnapshot,
    EnemyDefinition,
    FullClearEstimate,
    PlayerState,
    ProgressionCheck,
    SimConfig,
)
from .enemies import get_preset_enemies
from .quest import simulate_quest

logger = logging.getLogger(__name__)

# DaySnapshot fields averaged across trials (integers are truncated afterwards).
_AVERAGED_INT_FIELDS: tuple[str, ...] = (
    "level",
    "strength",
    "agility",
    "intellect",
    "endurance",
    "zone",
    "quests_today",
    "exp_today",
    "battles_today",
    "wins_today",
    "attempts",
    "enemies_defeated",
)


def _catalog(config: SimConfig) -> list[EnemyDefinition]:
    if config.enemies:
        return list(config.enemies)
    return get_preset_enemies()


def pick_next_enemy(player: PlayerState, enemies: Sequence[EnemyDefinition]) -> Optional[EnemyDefinition]:
    """Choose the next enemy to fight in the player's current zone.

    Policy (no randomness):

    1. an undefeated zone-transition enemy, lowest expected-min-level first;
    2. otherwise the undefeated regular enemy with the lowest role priority,
       ties broken by expected-min-level and then catalog index;
    3. the zone boss only once every non-boss enemy of the zone is defeated.

    Returns None when the zone has nothing left to fight.
    """

    regulars: list[EnemyDefinition] = []
    boss: Optional[EnemyDefinition] = None
    for enemy in enemies:
        if enemy.zone != player.current_zone or enemy.index in player.defeated_enemy_ids:
            continue
        if enemy.is_boss:
            boss = enemy
            continue
        regulars.append(enemy)

    if not regulars:
        return boss

    transitions = [e for e in regulars if is_zone_transition_enemy(e)]
    if transitions:
        return min(transitions, key=lambda e: (e.expected_min_level, e.index))

    return min(regulars, key=lambda e: (role_priority(e.role), e.expected_min_level, e.index))


def update_zone(player: PlayerState, enemies: Sequence[EnemyDefinition]) -> bool:
    """Advance to the next zone once the current zone's boss is defeated.

    The zone only changes if the next zone has any enemies. Returns True when
    the player moved.
    """

    boss_defeated = any(
        e.zone == player.current_zone and e.is_boss and e.index in player.defeated_enemy_ids for e in enemies
    )
    if not boss_defeated:
        return False

    next_zone = player.current_zone + 1
    if not any(e.zone == next_zone for e in enemies):
        return False

    player.current_zone = next_zone
    return True


def simulate_day(
    player: PlayerState,
    archetype: Archetype,
    enemies: Sequence[EnemyDefinition],
    rng: random.Random,
) -> DaySnapshot:
    """Play one day (quests, then battles) and snapshot the end-of-day state."""

    player.day_number += 1
    quests_today = 0
    exp_today = 0
    battles_today = 0
    wins_today = 0

    for _ in range(archetype.quests_per_day):
        quest_exp, _stat = simulate_quest(player, archetype, rng)
        quests_today += 1
        exp_today += quest_exp

    if quests_today > 0:
        player.current_streak += 1
    else:
        player.current_streak = 0

    if archetype.fights_when_possible:
        while player.attempts > 0:
            enemy = pick_next_enemy(player, enemies)
            if enemy is None:
                break

            player.attempts -= 1
            player.total_battles += 1
            battles_today += 1

            outcome = simulate_battle(player.stats, enemy, rng)
            if outcome.win:
                player.total_battle_wins += 1
                wins_today += 1
                player.defeated_enemy_ids.add(enemy.index)
                if update_zone(player, enemies):
                    logger.debug("Day %d: advanced to zone %d", player.day_number, player.current_zone)
            else:
                player.total_battle_losses += 1

    stats = player.stats
    return DaySnapshot(
        day=player.day_number,
        level=player.overall_level,
        strength=stats.strength,
        agility=stats.agility,
        intellect=stats.intellect,
        endurance=stats.endurance,
        zone=player.current_zone,
        quests_today=quests_today,
        exp_today=exp_today,
        battles_today=battles_today,
        wins_today=wins_today,
        total_win_rate=player.total_win_rate,
        attempts=player.attempts,
        enemies_defeated=len(player.defeated_enemy_ids),
    )


def run_progression(config: SimConfig) -> tuple[list[DaySnapshot], PlayerState]:
    """Simulate ``config.days`` days for a fresh player on one seeded stream."""

    rng = random.Random(config.seed)
    player = PlayerState()
    enemies = _catalog(config)

    snapshots = [simulate_day(player, config.archetype, enemies, rng) for _ in range(config.days)]
    return snapshots, player


def run_progression_multiple(config: SimConfig, runs: int) -> list[DaySnapshot]:
    """Average ``runs`` independent trials day by day.

    Trial ``i`` uses seed ``config.seed + i``. Integer fields are truncated
    after averaging; the running win rate stays a float.
    """

    if runs <= 0:
        raise ValueError("runs must be >= 1")
    if config.days == 0:
        return []

    ints = np.zeros((len(_AVERAGED_INT_FIELDS), config.days), dtype=float)
    win_rates = np.zeros(config.days, dtype=float)

    enemies = tuple(_catalog(config))
    for trial in range(runs):
        trial_config = SimConfig(
            days=config.days,
            seed=config.seed + trial,
            archetype=config.archetype,
            enemies=enemies,
        )
        snapshots, _ = run_progression(trial_config)
        for day, snap in enumerate(snapshots):
            for row, name in enumerate(_AVERAGED_INT_FIELDS):
                ints[row, day] += getattr(snap, name)
            win_rates[day] += snap.total_win_rate

    ints /= runs
    win_rates /= runs

    averaged: list[DaySnapshot] = []
    for day in range(config.days):
        values = {name: int(ints[row, day]) for row, name in enumerate(_AVERAGED_INT_FIELDS)}
        averaged.append(DaySnapshot(day=day + 1, total_win_rate=float(win_rates[day]), **values))

    logger.debug(
        "Averaged %d trials of %d days for %s",
        runs,
        config.days,
        config.archetype.name,
    )
    return averaged


def check_progression_timeline(
    snapshots: Sequence[DaySnapshot],
    targets: Sequence[tuple[int, int]] = constants.PROGRESSION_TARGETS,
) -> list[ProgressionCheck]:
    """Compare the first day each target zone was reached with its target day.

    A target day of 0 is met as soon as the zone is reached at all.
    """

    checks: list[ProgressionCheck] = []
    for zone, target_days in targets:
        first = next((s for s in snapshots if s.zone >= zone), None)
        if first is None:
            checks.append(ProgressionCheck(target_zone=zone, target_days=target_days, actual_day=None, met=False))
            continue
        checks.append(
            ProgressionCheck(
                target_zone=zone,
                target_days=target_days,
                actual_day=first.day,
                met=target_days == 0 or first.day <= target_days,
            )
        )
    return checks


def estimate_full_clear(
    config: SimConfig,
    runs: int,
    max_days: int = constants.FULL_CLEAR_MAX_DAYS,
) -> FullClearEstimate:
    """Estimate the day on which every catalog enemy has been defeated.

    Trial ``i`` plays with seed ``config.seed + i`` until the catalog is clear
    or ``max_days`` pass; ``config.days`` is ignored.
    """

    if runs <= 0:
        raise ValueError("runs must be >= 1")
    if max_days <= 0:
        raise ValueError("max_days must be >= 1")

    enemies = _catalog(config)
    clear_days: list[int] = []
    for trial in range(runs):
        rng = random.Random(config.seed + trial)
        player = PlayerState()
        for _ in range(max_days):
            simulate_day(player, config.archetype, enemies, rng)
            if len(player.defeated_enemy_ids) >= len(enemies):
                clear_days.append(player.day_number)
                break

    logger.info(
        "%s: cleared %d/%d runs within %d days",
        config.archetype.name,
        len(clear_days),
        runs,
        max_days,
    )

    if not clear_days:
        return FullClearEstimate(
            archetype_name=config.archetype.name,
            runs=runs,
            cleared_runs=0,
            max_days=max_days,
        )

    days = np.asarray(clear_days, dtype=float)
    return FullClearEstimate(
        archetype_name=config.archetype.name,
        runs=runs,
        cleared_runs=len(clear_days),
        max_days=max_days,
        avg_days=float(days.mean()),
        min_days=int(days.min()),
        max_days_observed=int(days.max()),
    )
