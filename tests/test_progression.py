from __future__ import annotations

import random

import pytest

from balance_sim.archetypes import balanced, low_effort_casual
from balance_sim.data import Archetype, DaySnapshot, EnemyDefinition, EnemyRole, PlayerState, SimConfig
from balance_sim.enemies import get_preset_enemies
from balance_sim.progression import (
    check_progression_timeline,
    estimate_full_clear,
    pick_next_enemy,
    run_progression,
    run_progression_multiple,
    simulate_day,
    update_zone,
)


def _enemy(index: int, role: EnemyRole, *, zone: int = 1, min_level: int = 1, **kwargs) -> EnemyDefinition:
    return EnemyDefinition(
        index=index,
        name=f"E{index}",
        rank="E",
        role=role,
        hp=kwargs.pop("hp", 1),
        attack=kwargs.pop("attack", 1),
        zone=zone,
        expected_min_level=min_level,
        expected_max_level=min_level + 2,
        is_boss=role is EnemyRole.BOSS,
        **kwargs,
    )


def _snapshot(day: int, zone: int) -> DaySnapshot:
    return DaySnapshot(
        day=day,
        level=1,
        strength=1,
        agility=1,
        intellect=1,
        endurance=1,
        zone=zone,
        quests_today=0,
        exp_today=0,
        battles_today=0,
        wins_today=0,
        total_win_rate=0.0,
        attempts=0,
    )


def _weak_catalog() -> tuple[EnemyDefinition, ...]:
    return (
        _enemy(0, EnemyRole.TRANSITION),
        _enemy(1, EnemyRole.NORMAL),
        _enemy(2, EnemyRole.BOSS),
        _enemy(3, EnemyRole.TRANSITION, zone=2),
        _enemy(4, EnemyRole.BOSS, zone=2),
    )


def test_pick_next_enemy_prefers_transition_then_priority_then_boss() -> None:
    enemies = [
        _enemy(0, EnemyRole.HARD, min_level=1),
        _enemy(1, EnemyRole.EASY, min_level=3),
        _enemy(2, EnemyRole.TRANSITION, min_level=5),
        _enemy(3, EnemyRole.TRANSITION, min_level=2),
        _enemy(4, EnemyRole.BOSS, min_level=1),
        _enemy(5, EnemyRole.EASY, zone=2),
    ]
    player = PlayerState()

    order = []
    while (enemy := pick_next_enemy(player, enemies)) is not None:
        order.append(enemy.index)
        player.defeated_enemy_ids.add(enemy.index)

    assert order == [3, 2, 1, 0, 4]


def test_pick_next_enemy_breaks_ties_by_level_then_index() -> None:
    enemies = [
        _enemy(0, EnemyRole.NORMAL, min_level=4),
        _enemy(1, EnemyRole.NORMAL, min_level=2),
        _enemy(2, EnemyRole.NORMAL, min_level=2),
    ]
    assert pick_next_enemy(PlayerState(), enemies).index == 1


def test_pick_next_enemy_returns_none_for_cleared_zone() -> None:
    player = PlayerState(defeated_enemy_ids={0, 1, 2})
    assert pick_next_enemy(player, _weak_catalog()[:3]) is None


def test_update_zone_requires_boss_and_next_zone() -> None:
    enemies = _weak_catalog()
    player = PlayerState(defeated_enemy_ids={0, 1})
    assert not update_zone(player, enemies)

    player.defeated_enemy_ids.add(2)
    assert update_zone(player, enemies)
    assert player.current_zone == 2

    player.defeated_enemy_ids.add(4)
    assert not update_zone(player, enemies)
    assert player.current_zone == 2


def test_simulate_day_counts_quests_battles_and_streak() -> None:
    player = PlayerState()
    enemies = _weak_catalog()
    rng = random.Random(3)

    snap = simulate_day(player, balanced(), enemies, rng)

    assert snap.day == 1
    assert snap.quests_today == 3
    assert player.current_streak == 1
    assert snap.battles_today >= 3
    assert snap.wins_today == snap.battles_today
    assert snap.zone == 2
    assert snap.enemies_defeated == snap.wins_today
    assert snap.total_win_rate == 100.0


def test_simulate_day_without_quests_resets_streak() -> None:
    idle = Archetype(
        name="Idle",
        quests_per_day=0,
        avg_minutes=30,
        avg_effort=3,
        avg_friction=2,
        minutes_std_dev=0,
        effort_std_dev=0,
        friction_std_dev=0,
        stat_weights=balanced().stat_weights,
    )
    player = PlayerState(current_streak=4)
    snap = simulate_day(player, idle, _weak_catalog(), random.Random(0))
    assert player.current_streak == 0
    assert snap.battles_today == 0


def test_run_progression_is_reproducible() -> None:
    config = SimConfig(days=20, seed=11, archetype=balanced())
    first, _ = run_progression(config)
    second, _ = run_progression(config)
    assert first == second


def test_run_progression_zone_never_decreases() -> None:
    snapshots, player = run_progression(SimConfig(days=60, seed=42, archetype=balanced()))
    zones = [s.zone for s in snapshots]
    assert zones == sorted(zones)
    assert player.day_number == 60
    assert player.total_battles == player.total_battle_wins + player.total_battle_losses


def test_run_progression_multiple_averages_daily_snapshots() -> None:
    config = SimConfig(days=90, seed=42, archetype=balanced())
    averaged = run_progression_multiple(config, 10)
    assert [s.day for s in averaged] == list(range(1, 91))
    assert all(1 <= s.zone <= 5 for s in averaged)
    zones = [s.zone for s in averaged]
    assert zones == sorted(zones)
    assert all(0.0 <= s.total_win_rate <= 100.0 for s in averaged)
    assert averaged[-1].level >= averaged[0].level


def test_run_progression_multiple_edge_cases() -> None:
    assert run_progression_multiple(SimConfig(days=0, seed=1, archetype=balanced()), 3) == []
    with pytest.raises(ValueError):
        run_progression_multiple(SimConfig(days=5, seed=1, archetype=balanced()), 0)


def test_run_progression_multiple_single_run_matches_run_progression() -> None:
    config = SimConfig(days=15, seed=9, archetype=low_effort_casual(), enemies=tuple(get_preset_enemies()))
    single, _ = run_progression(config)
    averaged = run_progression_multiple(config, 1)
    assert [s.zone for s in averaged] == [s.zone for s in single]
    assert [s.level for s in averaged] == [s.level for s in single]


def test_check_progression_timeline() -> None:
    snapshots = [_snapshot(1, 1), _snapshot(2, 1), _snapshot(9, 2), _snapshot(10, 2)]
    checks = check_progression_timeline(snapshots, targets=((1, 0), (2, 7), (3, 21)))

    zone1, zone2, zone3 = checks
    assert zone1.met and zone1.actual_day == 1
    assert not zone2.met and zone2.actual_day == 9
    assert not zone3.met and zone3.actual_day is None


def test_check_progression_timeline_met_on_target_day() -> None:
    checks = check_progression_timeline([_snapshot(7, 2)], targets=((2, 7),))
    assert checks[0].met


def test_estimate_full_clear_on_weak_catalog() -> None:
    config = SimConfig(days=0, seed=5, archetype=balanced(), enemies=_weak_catalog())
    estimate = estimate_full_clear(config, runs=4, max_days=30)
    assert estimate.cleared_runs == 4
    assert 1 <= estimate.min_days <= estimate.max_days_observed
    assert estimate.avg_days is not None and estimate.avg_days >= 1
    assert estimate.archetype_name == "Balanced"


def test_estimate_full_clear_reports_no_clear() -> None:
    wall = (_enemy(0, EnemyRole.BOSS, hp=1_000_000, attack=10_000),)
    config = SimConfig(days=0, seed=5, archetype=balanced(), enemies=wall)
    estimate = estimate_full_clear(config, runs=2, max_days=3)
    assert estimate.cleared_runs == 0
    assert estimate.avg_days is None


@pytest.mark.parametrize("runs, max_days", [(0, 10), (3, 0)])
def test_estimate_full_clear_rejects_bad_arguments(runs: int, max_days: int) -> None:
    with pytest.raises(ValueError):
        estimate_full_clear(SimConfig(days=0, seed=1, archetype=balanced()), runs=runs, max_days=max_days)
