from __future__ import annotations

import pytest

from balance_sim.archetypes import balanced
from balance_sim.data import EnemyTuneResult, ReportOptions, SimConfig
from balance_sim.enemies import enemies_in_zone, get_preset_enemies
from balance_sim.report import (
    auto_tune_summary,
    compact_table,
    full_report,
    milestone_days,
    sweep_target,
    zone_mid_level,
)

_TINY = ReportOptions(
    economy_quests=20,
    monte_carlo_runs=10,
    sweep_max_value=5,
    sweep_fixed_value=3,
    sweep_runs=5,
    progression_days=(5,),
    progression_runs=1,
    full_clear_runs=1,
    full_clear_max_days=5,
    balance_runs=10,
)


@pytest.mark.parametrize(
    "days, expected",
    [
        (0, []),
        (1, [1]),
        (10, [1, 6, 10]),
        (30, [1, 6, 11, 16, 21, 26, 30]),
        (31, [1, 7, 14, 21, 30, 31]),
        (90, [1, 7, 14, 21, 30, 60, 90]),
        (100, [1, 7, 14, 21, 30, 60, 90, 100]),
    ],
)
def test_milestone_days(days: int, expected: list[int]) -> None:
    assert milestone_days(days) == expected


def test_sweep_target_picks_normal_enemy_covering_level() -> None:
    enemies = get_preset_enemies()
    target = sweep_target(enemies, 10)
    assert target.index == 17
    assert target.zone == 2 and target.slot == 8


def test_sweep_target_falls_back_to_first_normal() -> None:
    enemies = get_preset_enemies()
    assert sweep_target(enemies, 500).index == 2


def test_zone_mid_level() -> None:
    zone1 = enemies_in_zone(get_preset_enemies(), 1)
    lows = min(e.expected_min_level for e in zone1)
    highs = max(e.expected_max_level for e in zone1)
    assert zone_mid_level(zone1) == (lows + highs) // 2


def test_compact_table_header_and_rows() -> None:
    config = SimConfig(days=30, seed=1, archetype=balanced())
    table = compact_table(config, 2)
    lines = table.splitlines()
    assert lines[0] == "Archetype: Balanced | 30 days | 2 runs averaged"
    assert "WinRate" in lines[2]
    # One row per milestone day.
    assert len(lines) == 4 + len(milestone_days(30))


def test_auto_tune_summary_counts_in_band_results() -> None:
    results = [
        EnemyTuneResult(
            enemy_index=0,
            enemy_name="Alpha",
            target_label="Нормальный",
            target_min=30,
            target_max=45,
            eval_level=5,
            old_hp=200,
            old_attack=20,
            new_hp=220,
            new_attack=22,
            power=1.1,
            base_win_rate=55.0,
            final_win_rate=38.0,
        ),
        EnemyTuneResult(
            enemy_index=1,
            enemy_name="Beta",
            target_label="Босс зоны",
            target_min=5,
            target_max=12,
            eval_level=6,
            old_hp=400,
            old_attack=30,
            new_hp=300,
            new_attack=22,
            power=0.75,
            base_win_rate=0.0,
            final_win_rate=2.0,
        ),
    ]
    summary = auto_tune_summary(results)
    assert "AUTO-TUNE SUMMARY" in summary
    assert "Alpha" in summary and "Beta" in summary
    assert "In band after tuning: 1/2" in summary


def test_full_report_contains_every_section_and_is_deterministic() -> None:
    zone1 = enemies_in_zone(get_preset_enemies(), 1)
    first = full_report(7, zone1, _TINY)
    second = full_report(7, zone1, _TINY)

    assert first == second
    assert "QUEST BALANCE SIMULATOR" in first
    for title in (
        "1. EXP ECONOMY ANALYSIS",
        "2. MONTE CARLO BATTLE ANALYSIS",
        "3. STAT SWEEP ANALYSIS",
        "4. PROGRESSION RUNS",
        "5. FULL CLEAR ESTIMATE",
        "6. BALANCE SUMMARY",
    ):
        assert title in first
    assert "In band: " in first
    assert zone1[0].name in first


def test_full_report_depends_on_seed() -> None:
    zone1 = enemies_in_zone(get_preset_enemies(), 1)
    assert full_report(1, zone1, _TINY) != full_report(2, zone1, _TINY)
