"""Quest generation for simulated players.

Quest parameters are drawn from the archetype's normal distributions. The
quest EXP decides the quest rank and the battle attempts awarded; the rank
decides how much EXP the chosen stat receives.
"""

from __future__ import annotations

import random
from collections import Counter

import numpy as np

from . import constants
from .data import RANKS, Archetype, ExpEconomyResult, PlayerState, Stat
from .formulas import (
    attempts_for_quest_exp,
    base_exp_for_rank,
    calculate_quest_exp,
    clamp,
    exp_for_level,
    rank_from_exp,
    round_half_up,
)


def _draw(mean: float, std_dev: float, low: int, high: int, rng: random.Random) -> int:
    return int(clamp(round_half_up(mean + rng.gauss(0.0, 1.0) * std_dev), low, high))


def draw_quest(archetype: Archetype, rng: random.Random) -> tuple[int, int, int]:
    """Return ``(minutes, effort, friction)`` for one quest."""

    minutes = _draw(
        archetype.avg_minutes,
        archetype.minutes_std_dev,
        constants.QUEST_MIN_MINUTES,
        constants.QUEST_MAX_MINUTES,
        rng,
    )
    effort = _draw(archetype.avg_effort, archetype.effort_std_dev, constants.MIN_EFFORT, constants.MAX_EFFORT, rng)
    friction = _draw(
        archetype.avg_friction,
        archetype.friction_std_dev,
        constants.MIN_FRICTION,
        constants.MAX_FRICTION,
        rng,
    )
    return minutes, effort, friction


def pick_stat(archetype: Archetype, rng: random.Random) -> Stat:
    """Weighted stat draw over the cumulative partition STR, AGI, INT, STA."""

    total = sum(archetype.stat_weights.values())
    roll = rng.random() * total
    cumulative = 0.0
    for stat in (Stat.STR, Stat.AGI, Stat.INT):
        cumulative += archetype.stat_weights[stat]
        if roll < cumulative:
            return stat
    return Stat.STA


def add_stat_exp(player: PlayerState, stat: Stat, exp: int) -> int:
    """Add EXP to one stat and roll over level-ups. Returns levels gained."""

    player.exp[stat] += exp
    gained = 0
    while player.exp[stat] >= exp_for_level(player.levels[stat]):
        player.exp[stat] -= exp_for_level(player.levels[stat])
        player.levels[stat] += 1
        gained += 1
    return gained


def simulate_quest(player: PlayerState, archetype: Archetype, rng: random.Random) -> tuple[int, Stat]:
    """Complete one quest: award stat EXP and battle attempts.

    Returns the quest EXP and the stat that received the reward.
    """

    minutes, effort, friction = draw_quest(archetype, rng)
    quest_exp = calculate_quest_exp(minutes, effort, friction)
    stat_exp = base_exp_for_rank(rank_from_exp(quest_exp))

    stat = pick_stat(archetype, rng)
    add_stat_exp(player, stat, stat_exp)

    player.attempts = min(constants.MAX_ATTEMPTS, player.attempts + attempts_for_quest_exp(quest_exp))

    player.total_quests_completed += 1
    player.total_exp_earned += stat_exp
    return quest_exp, stat


def exp_economy_analysis(archetype: Archetype, n: int, rng: random.Random) -> ExpEconomyResult:
    """Draw ``n`` quests and describe their EXP, rank and attempt distribution."""

    if n <= 0:
        raise ValueError("n must be >= 1")

    exps = np.zeros(n, dtype=int)
    attempts = np.zeros(n, dtype=int)
    ranks: Counter[str] = Counter()
    for i in range(n):
        exp = calculate_quest_exp(*draw_quest(archetype, rng))
        exps[i] = exp
        attempts[i] = attempts_for_quest_exp(exp)
        ranks[rank_from_exp(exp)] += 1

    return ExpEconomyResult(
        total_quests=n,
        avg_exp=float(exps.mean()),
        min_exp=int(exps.min()),
        max_exp=int(exps.max()),
        rank_distribution={rank: ranks.get(rank, 0) for rank in RANKS},
        avg_attempts=float(attempts.mean()),
        total_attempts=int(attempts.sum()),
    )
