from __future__ import annotations

import math
import random

import pytest

from balance_sim.balance import stats_from_level
from balance_sim.battle import monte_carlo_analysis, simulate_battle, stat_sweep
from balance_sim.data import EnemyDefinition, EnemyRole, PlayerStats, Stat
from balance_sim.enemies import get_preset_enemies


def _enemy(**kwargs) -> EnemyDefinition:
    base = dict(index=0, name="Dummy", rank="C", role=EnemyRole.NORMAL, hp=300, attack=25)
    base.update(kwargs)
    return EnemyDefinition(**base)


def test_simulate_battle_terminates_with_consistent_outcome() -> None:
    rng = random.Random(7)
    stats = PlayerStats(10, 10, 10, 10)
    enemy = _enemy()
    for _ in range(50):
        outcome = simulate_battle(stats, enemy, rng)
        assert outcome.rounds >= 1
        assert 0.61 <= outcome.accuracy <= 0.86
        if outcome.win:
            assert outcome.damage_dealt >= enemy.hp
        else:
            assert outcome.damage_taken >= 100 + 10 * 12
        assert 0 <= outcome.crits <= outcome.rounds


def test_simulate_battle_with_negative_stats_is_clamped() -> None:
    outcome = simulate_battle(PlayerStats(-5, -5, -5, -5), _enemy(hp=1, attack=1), random.Random(0))
    assert outcome.win
    assert outcome.rounds == 1


def test_simulate_battle_is_reproducible_for_a_seed() -> None:
    stats = PlayerStats(8, 8, 8, 8)
    enemy = get_preset_enemies()[12]
    a = simulate_battle(stats, enemy, random.Random(123))
    b = simulate_battle(stats, enemy, random.Random(123))
    assert a == b


def test_monte_carlo_analysis_aggregates() -> None:
    mc = monte_carlo_analysis(PlayerStats(10, 10, 10, 10), _enemy(), 200, random.Random(5))
    assert mc.runs == 200
    assert mc.wins + mc.losses == 200
    assert math.isclose(mc.win_rate, mc.wins / 200 * 100)
    assert 0 <= mc.win_rate <= 100
    assert mc.avg_rounds >= 1
    assert mc.std_dev_damage >= 0
    assert 61 <= mc.avg_accuracy <= 86
    assert mc.enemy_name == "Dummy"


def test_monte_carlo_analysis_rejects_non_positive_runs() -> None:
    with pytest.raises(ValueError):
        monte_carlo_analysis(PlayerStats(1, 1, 1, 1), _enemy(), 0, random.Random(0))


def test_trivial_enemy_is_always_beaten() -> None:
    mc = monte_carlo_analysis(PlayerStats(20, 20, 20, 20), _enemy(hp=1, attack=1), 100, random.Random(1))
    assert mc.win_rate == 100.0


def test_overwhelming_enemy_is_never_beaten() -> None:
    mc = monte_carlo_analysis(PlayerStats(1, 1, 1, 1), _enemy(hp=100_000, attack=500), 50, random.Random(1))
    assert mc.win_rate == 0.0


def test_higher_int_improves_win_rate() -> None:
    enemy = _enemy(hp=170, attack=30)
    low = monte_carlo_analysis(PlayerStats(10, 10, 0, 10), enemy, 3000, random.Random(42))
    high = monte_carlo_analysis(PlayerStats(10, 10, 60, 10), enemy, 3000, random.Random(42))
    assert high.win_rate > low.win_rate
    assert high.avg_accuracy > low.avg_accuracy


def test_stat_sweep_covers_range_inclusive() -> None:
    points = stat_sweep(Stat.STR, 10, stats_from_level(5), _enemy(), 20, random.Random(2))
    assert [p.value for p in points] == list(range(11))
    assert all(p.stat is Stat.STR for p in points)


def test_stat_sweep_strength_raises_win_rate_overall() -> None:
    enemy = get_preset_enemies()[17]
    points = stat_sweep(Stat.STR, 50, stats_from_level(10), enemy, 300, random.Random(9))
    assert points[-1].win_rate > points[0].win_rate
    assert points[-1].avg_damage > points[0].avg_damage
