"""Plain-text reports.

Every report is a pure function of its seed and options, so two calls with
the same inputs produce identical text.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence

from .archetypes import default_archetypes
from .balance import check_catalog_balance, is_zone_transition_enemy, stats_from_level
from .battle import monte_carlo_analysis, stat_sweep
from .data import (
    RANKS,
    DaySnapshot,
    EnemyDefinition,
    EnemyRole,
    EnemyTuneResult,
    ReportOptions,
    SimConfig,
    Stat,
)
from .enemies import enemies_in_zone, get_preset_enemies, zone_numbers
from .progression import check_progression_timeline, estimate_full_clear, run_progression_multiple
from .quest import exp_economy_analysis

logger = logging.getLogger(__name__)

_RULE = "━" * 62
_SWEEP_STEP = 5


def _section(lines: List[str], title: str) -> None:
    lines.append(_RULE)
    lines.append(f"  {title}")
    lines.append(_RULE)
    lines.append("")


def milestone_days(days: int) -> list[int]:
    """Days (1-based) shown in progression tables.

    Up to 30 days: every 5th day plus the last one. Longer runs: days 1, 7,
    14, 21 and 30, then every 30 days, plus the last one.
    """

    if days <= 0:
        return []
    if days <= 30:
        milestones = list(range(1, days + 1, 5))
    else:
        milestones = [1, 7, 14, 21, 30]
        milestones.extend(range(60, days + 1, 30))
    if milestones[-1] != days:
        milestones.append(days)
    return milestones


def zone_mid_level(enemies: Sequence[EnemyDefinition]) -> int:
    """Midpoint of the level range covered by a zone's enemy windows."""

    lows = [e.expected_min_level for e in enemies if e.expected_min_level > 0]
    highs = [e.expected_max_level for e in enemies if e.expected_max_level > 0]
    if not lows or not highs:
        levels = [e.level for e in enemies if e.level > 0]
        return max(1, sum(levels) // len(levels)) if levels else 1
    return max(1, (min(lows) + max(highs)) // 2)


def sweep_target(enemies: Sequence[EnemyDefinition], level: int) -> EnemyDefinition:
    """The NORMAL enemy whose level window contains ``level``.

    Falls back to the first NORMAL enemy, then to the middle of the catalog.
    """

    normals = [e for e in enemies if e.role is EnemyRole.NORMAL]
    for enemy in normals:
        if enemy.has_level_window and enemy.expected_min_level <= level <= enemy.expected_max_level:
            return enemy
    if normals:
        return normals[0]
    return enemies[len(enemies) // 2]


def _economy_section(lines: List[str], options: ReportOptions, rng: random.Random) -> None:
    _section(lines, f"1. EXP ECONOMY ANALYSIS ({options.economy_quests} random quests per archetype)")
    for archetype in default_archetypes():
        econ = exp_economy_analysis(archetype, options.economy_quests, rng)
        lines.append(f"  ▸ {archetype.name}")
        lines.append(f"    Avg EXP: {econ.avg_exp:.1f} | Min: {econ.min_exp} | Max: {econ.max_exp}")
        lines.append(f"    Avg Attempts/quest: {econ.avg_attempts:.2f} | Total Attempts: {econ.total_attempts}")
        parts = []
        for rank in RANKS:
            count = econ.rank_distribution[rank]
            parts.append(f"{rank}={count}({count / econ.total_quests * 100:.0f}%)")
        lines.append("    Rank distribution: " + " ".join(parts))
        lines.append("")


def _monte_carlo_section(
    lines: List[str],
    enemies: Sequence[EnemyDefinition],
    options: ReportOptions,
    rng: random.Random,
) -> None:
    _section(lines, f"2. MONTE CARLO BATTLE ANALYSIS ({options.monte_carlo_runs} runs each)")
    for zone in zone_numbers(enemies):
        zone_enemies = enemies_in_zone(enemies, zone)
        level = zone_mid_level(zone_enemies)
        stats = stats_from_level(level)
        lines.append(
            f"  ▸ Zone {zone}: STR={stats.strength} AGI={stats.agility} "
            f"INT={stats.intellect} STA={stats.endurance} (Lv{level})"
        )
        lines.append(f"    {'Enemy':<30} {'WinRate':>8} {'AvgDmg':>8} {'StdDev':>8} {'AvgRnds':>8} {'AvgAcc':>8}")
        lines.append("    " + "-" * 80)
        for enemy in zone_enemies:
            mc = monte_carlo_analysis(stats, enemy, options.monte_carlo_runs, rng)
            lines.append(
                f"    {mc.enemy_name:<30} {mc.win_rate:7.1f}% {mc.avg_damage:8.0f} "
                f"{mc.std_dev_damage:8.0f} {mc.avg_rounds:8.1f} {mc.avg_accuracy:7.1f}%"
            )
        lines.append("")


def _sweep_section(
    lines: List[str],
    enemies: Sequence[EnemyDefinition],
    options: ReportOptions,
    rng: random.Random,
) -> None:
    fixed_value = options.sweep_fixed_value
    _section(
        lines,
        f"3. STAT SWEEP ANALYSIS (vary one stat 0-{options.sweep_max_value}, others fixed at {fixed_value})",
    )
    target = sweep_target(enemies, fixed_value)
    lines.append(f"  Target enemy: {target.name} (Rank {target.rank}, HP {target.hp}, ATK {target.attack})")
    lines.append("")

    fixed = stats_from_level(fixed_value)
    for stat in Stat:
        points = stat_sweep(stat, options.sweep_max_value, fixed, target, options.sweep_runs, rng)
        lines.append(f"  ▸ Sweep: {stat.value} ({stat.display_name}, others fixed at {fixed_value})")
        lines.append(f"    {'Value':>5} {'WinRate':>8} {'AvgDmg':>8} {'AvgRnds':>8}")
        lines.append("    " + "-" * 35)
        for point in points:
            if point.value % _SWEEP_STEP == 0 or point.value == options.sweep_max_value:
                lines.append(
                    f"    {point.value:5d} {point.win_rate:7.1f}% {point.avg_damage:8.0f} {point.avg_rounds:8.1f}"
                )
        lines.append("")


def _snapshot_rows(snapshots: Sequence[DaySnapshot], days: int) -> Iterable[DaySnapshot]:
    for day in milestone_days(days):
        if day <= len(snapshots):
            yield snapshots[day - 1]


def _progression_section(
    lines: List[str],
    enemies: Sequence[EnemyDefinition],
    seed: int,
    options: ReportOptions,
) -> None:
    day_list = "/".join(str(d) for d in options.progression_days)
    _section(lines, f"4. PROGRESSION RUNS ({day_list} days, averaged over {options.progression_runs} runs)")

    catalog = tuple(enemies)
    for archetype in default_archetypes():
        lines.append(f"  ═══ {archetype.name} ═══")
        lines.append("")
        for days in options.progression_days:
            config = SimConfig(days=days, seed=seed, archetype=archetype, enemies=catalog)
            snapshots = run_progression_multiple(config, options.progression_runs)

            lines.append(f"  ▸ {days}-day run:")
            lines.append(
                f"    {'Day':>5} {'Lvl':>5} {'STR':>5} {'AGI':>5} {'INT':>5} {'STA':>5} {'Zone':>5} {'WinRate':>8}"
            )
            lines.append("    " + "-" * 55)
            for s in _snapshot_rows(snapshots, days):
                lines.append(
                    f"    {s.day:5d} {s.level:5d} {s.strength:5d} {s.agility:5d} {s.intellect:5d} "
                    f"{s.endurance:5d} {s.zone:5d} {s.total_win_rate:7.1f}%"
                )
            lines.append("")

            lines.append("    Timeline targets:")
            for check in check_progression_timeline(snapshots):
                if check.actual_day is None:
                    lines.append(f"      Zone {check.target_zone} by day {check.target_days}: ✗ NOT REACHED")
                    continue
                status = "✓ MET" if check.met else "✗ MISSED"
                lines.append(
                    f"      Zone {check.target_zone} by day {check.target_days}: "
                    f"actual day {check.actual_day} {status}"
                )
            lines.append("")


def _full_clear_section(
    lines: List[str],
    enemies: Sequence[EnemyDefinition],
    seed: int,
    options: ReportOptions,
) -> None:
    _section(
        lines,
        f"5. FULL CLEAR ESTIMATE ({options.full_clear_runs} runs, cap {options.full_clear_max_days} days)",
    )
    catalog = tuple(enemies)
    for archetype in default_archetypes():
        config = SimConfig(days=options.full_clear_max_days, seed=seed, archetype=archetype, enemies=catalog)
        est = estimate_full_clear(config, options.full_clear_runs, options.full_clear_max_days)
        if est.cleared_runs == 0:
            lines.append(f"  ▸ {archetype.name}: not cleared within {est.max_days} days (0/{est.runs} runs)")
            continue
        lines.append(
            f"  ▸ {archetype.name}: avg {est.avg_days:.1f} days "
            f"(min {est.min_days}, max {est.max_days_observed}; {est.cleared_runs}/{est.runs} runs cleared)"
        )
    lines.append("")


def _balance_section(
    lines: List[str],
    enemies: Sequence[EnemyDefinition],
    seed: int,
    options: ReportOptions,
) -> None:
    _section(lines, "6. BALANCE SUMMARY")
    lines.append("  Balance Criteria:")
    lines.append("    • Лёгкий враг: 45-60%")
    lines.append("    • Нормальный враг: 30-45%")
    lines.append("    • Сложный враг: 20-30%")
    lines.append("    • Элитка / мини-босс: 12-20% / 8-15%")
    lines.append("    • Босс зоны: 5-12%")
    lines.append("    • Переход зоны (первые 1-2 врага): 15-25% / 12-20%")
    lines.append("")

    verdicts = check_catalog_balance(enemies, runs=options.balance_runs, seed=seed)
    by_index = {v.enemy_index: v for v in verdicts}

    for zone in zone_numbers(enemies):
        lines.append(f"  ▸ Zone {zone} (enemy expected-level interpolation)")
        for enemy in enemies_in_zone(enemies, zone):
            verdict = by_index[enemy.index]
            marker = "✓" if verdict.status == "OK" else "⚠"
            tag = " [TRANSITION]" if is_zone_transition_enemy(enemy) else ""
            lines.append(
                f"    {enemy.name:<30} L{verdict.eval_level:<2}  {verdict.win_rate:7.1f}% "
                f"(target {verdict.band.min:.0f}-{verdict.band.max:.0f}%, {verdict.band.label}) "
                f"{marker} {verdict.status}{tag}"
            )
            for violation in verdict.violations:
                lines.append(f"      ✗ {violation}")
        lines.append("")

    in_band = sum(1 for v in verdicts if v.status == "OK")
    passed = sum(1 for v in verdicts if v.passed)
    lines.append(f"  In band: {in_band}/{len(verdicts)} | Red lines passed: {passed}/{len(verdicts)}")
    lines.append("")


def full_report(
    seed: int,
    enemies: Optional[Sequence[EnemyDefinition]] = None,
    options: ReportOptions = ReportOptions(),
) -> str:
    """Render the full balance report for a catalog (preset when empty)."""

    catalog = list(enemies) if enemies else get_preset_enemies()
    rng = random.Random(seed)
    lines: List[str] = []

    lines.append("╔" + "═" * 62 + "╗")
    lines.append("║" + "QUEST BALANCE SIMULATOR".center(62) + "║")
    lines.append("╚" + "═" * 62 + "╝")
    lines.append("")

    logger.info("Report: EXP economy")
    _economy_section(lines, options, rng)
    logger.info("Report: Monte Carlo tables")
    _monte_carlo_section(lines, catalog, options, rng)
    logger.info("Report: stat sweeps")
    _sweep_section(lines, catalog, options, rng)
    logger.info("Report: progression runs")
    _progression_section(lines, catalog, seed, options)
    logger.info("Report: full clear estimate")
    _full_clear_section(lines, catalog, seed, options)
    logger.info("Report: balance summary")
    _balance_section(lines, catalog, seed, options)

    return "\n".join(lines)


def compact_table(config: SimConfig, runs: int) -> str:
    """Condensed Day | Level | Zone | stats | win-rate table for one archetype."""

    snapshots = run_progression_multiple(config, runs)
    lines = [
        f"Archetype: {config.archetype.name} | {config.days} days | {runs} runs averaged",
        "",
        f"{'Day':>5} │ {'Level':>5} │ {'Zone':>5} │ {'STR':>5} │ {'AGI':>5} │ {'INT':>5} │ {'STA':>5} │ {'WinRate':>8}",
        "─" * 65,
    ]
    for s in _snapshot_rows(snapshots, config.days):
        lines.append(
            f"{s.day:5d} │ {s.level:5d} │ {s.zone:5d} │ {s.strength:5d} │ {s.agility:5d} │ "
            f"{s.intellect:5d} │ {s.endurance:5d} │ {s.total_win_rate:7.1f}%"
        )
    return "\n".join(lines)


def auto_tune_summary(results: Sequence[EnemyTuneResult]) -> str:
    """Table of old/new HP and attack, target band and win rates per enemy."""

    lines = [
        _RULE,
        "  AUTO-TUNE SUMMARY",
        _RULE,
        "",
        f"  {'Enemy':<30} {'Lvl':>4} {'HP/ATK old→new':>20} {'Power':>6} {'Target':>14} "
        f"{'BaseWR':>8} {'FinalWR':>8}",
        "  " + "-" * 100,
    ]
    for r in results:
        lines.append(
            f"  {r.enemy_name:<30} {r.eval_level:4d} {r.old_hp:9d}/{r.old_attack:<4d}→{r.new_hp:5d}/{r.new_attack:<4d}"
            f" {r.power:6.3f} {r.target_min:6.0f}-{r.target_max:.0f}% {'(' + r.target_label + ')':<18}"
            f" {r.base_win_rate:6.1f}% {r.final_win_rate:7.1f}%"
        )
    in_band = sum(1 for r in results if r.band.contains(r.final_win_rate))
    lines.append("")
    lines.append(f"  In band after tuning: {in_band}/{len(results)}")
    lines.append("")
    return "\n".join(lines)
