"""Battle engine: single battles, Monte Carlo aggregation and stat sweeps."""

from __future__ import annotations

import random
from dataclasses import replace

import numpy as np

from . import constants
from .data import BattleMonteCarloResult, BattleOutcome, EnemyDefinition, PlayerStats, Stat, StatSweepPoint
from .formulas import (
    compute_enemy_damage,
    compute_player_damage,
    enemy_scale_factor,
    player_combat_level,
    player_hp,
    round_half_up,
    scale_enemy_power,
    simulated_accuracy,
)


def _clamped(stats: PlayerStats) -> PlayerStats:
    return PlayerStats(
        strength=max(0, stats.strength),
        agility=max(0, stats.agility),
        intellect=max(0, stats.intellect),
        endurance=max(0, stats.endurance),
    )


def simulate_battle(stats: PlayerStats, enemy: EnemyDefinition, rng: random.Random) -> BattleOutcome:
    """Run one battle to completion.

    Enemy HP/attack are scaled once by the player's combat level. Each round
    the player strikes first; the enemy answers only if it survived. There is
    no round cap: both sides always deal at least 1 damage.
    """

    stats = _clamped(stats)
    scale = enemy_scale_factor(enemy, player_combat_level(stats.strength, stats.endurance))

    hp = player_hp(stats.endurance)
    enemy_hp = max(1, round_half_up(enemy.hp * scale))
    enemy_attack = max(1, round_half_up(enemy.attack * scale))

    rng_float = rng.random
    damage_dealt = 0
    damage_taken = 0
    crits = 0
    hits = 0
    shown = 0
    rounds = 0

    while hp > 0 and enemy_hp > 0:
        rounds += 1
        accuracy = simulated_accuracy(stats.intellect, rng_float)
        shown += constants.SHOWN_UNITS_PER_ROUND
        hits += round_half_up(accuracy * constants.SHOWN_UNITS_PER_ROUND)

        damage, is_crit = compute_player_damage(stats.strength, stats.agility, accuracy, rng_float)
        if is_crit:
            crits += 1
        enemy_hp -= damage
        damage_dealt += damage

        if enemy_hp <= 0:
            break

        incoming = compute_enemy_damage(enemy_attack, stats.endurance, rng_float)
        hp -= incoming
        damage_taken += incoming

    return BattleOutcome(
        win=enemy_hp <= 0,
        rounds=rounds,
        damage_dealt=damage_dealt,
        damage_taken=damage_taken,
        crits=crits,
        accuracy=hits / shown if shown else 0.0,
    )


def monte_carlo_analysis(
    stats: PlayerStats,
    enemy: EnemyDefinition,
    runs: int,
    rng: random.Random,
) -> BattleMonteCarloResult:
    """Run ``runs`` battles on one shared random stream and aggregate them.

    The stream is not reseeded per battle; callers control reproducibility
    through the ``rng`` they pass in. Damage std-dev is the population one.
    """

    if runs <= 0:
        raise ValueError("runs must be >= 1")

    wins = np.zeros(runs, dtype=bool)
    damages = np.zeros(runs, dtype=float)
    rounds = np.zeros(runs, dtype=float)
    accuracies = np.zeros(runs, dtype=float)

    for i in range(runs):
        outcome = simulate_battle(stats, enemy, rng)
        wins[i] = outcome.win
        damages[i] = outcome.damage_dealt
        rounds[i] = outcome.rounds
        accuracies[i] = outcome.accuracy

    n_wins = int(wins.sum())
    return BattleMonteCarloResult(
        enemy_name=enemy.name,
        runs=runs,
        wins=n_wins,
        losses=runs - n_wins,
        win_rate=n_wins / runs * 100.0,
        avg_damage=float(damages.mean()),
        std_dev_damage=float(damages.std()),
        avg_rounds=float(rounds.mean()),
        avg_accuracy=float(accuracies.mean()) * 100.0,
    )


def stat_sweep(
    stat: Stat,
    max_value: int,
    fixed: PlayerStats,
    enemy: EnemyDefinition,
    runs_per_point: int,
    rng: random.Random,
) -> list[StatSweepPoint]:
    """Vary one stat over 0..max_value (inclusive), keeping the others fixed.

    The enemy is frozen at the scale implied by the *fixed* stats so that the
    sweep isolates the stat's own effect instead of also drifting enemy power.
    """

    baseline = enemy_scale_factor(enemy, player_combat_level(fixed.strength, fixed.endurance))
    sweep_enemy = replace(
        scale_enemy_power(enemy, baseline),
        expected_min_level=0,
        expected_max_level=0,
    )

    points: list[StatSweepPoint] = []
    for value in range(max_value + 1):
        mc = monte_carlo_analysis(fixed.with_value(stat, value), sweep_enemy, runs_per_point, rng)
        points.append(
            StatSweepPoint(
                stat=stat,
                value=value,
                win_rate=mc.win_rate,
                avg_damage=mc.avg_damage,
                avg_rounds=mc.avg_rounds,
            )
        )
    return points
