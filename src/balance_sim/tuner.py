"""Binary-search auto-tuner for enemy HP/attack.

Every enemy is tuned independently in two passes. First a single power
multiplier, applied to HP and attack alike, is searched over
``[min_power, max_power]``. Attack is a small integer, so one attack point
can flip a battle from a near-certain win to a near-certain loss; the second
pass therefore fixes attack at each value close to the one the power pass
chose and bisects HP alone, which moves the win rate in much finer steps.

Notes
-----
The fitness signal is noisy, so the search keeps the best candidate seen over
*all* evaluations of both passes (the untuned enemy included) instead of
trusting the final bisection point. Each evaluation draws from its own stream
seeded by ``seed + enemy_index * 1000 + iteration * 17``; results therefore do
not depend on the order in which enemies are tuned, nor on ``workers``.
"""

from __future__ import annotations

import logging
import multiprocessing
import random
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from . import constants
from .balance import enemy_mid_expected_level, enemy_win_rate_band, evaluation_level, stats_from_level
from .battle import monte_carlo_analysis
from .data import AutoTuneOptions, EnemyDefinition, EnemyTuneResult, PlayerStats
from .enemies import ensure_one_boss_per_zone, get_preset_enemies
from .formulas import round_half_up, scale_enemy_power

logger = logging.getLogger(__name__)


def default_auto_tune_options(seed: int) -> AutoTuneOptions:
    return AutoTuneOptions(seed=seed)


def evaluation_seed(seed: int, enemy_index: int, iteration: int) -> int:
    return seed + enemy_index * 1000 + iteration * 17


def evaluate_candidate(
    enemy: EnemyDefinition,
    hp: int,
    attack: int,
    stats: PlayerStats,
    *,
    options: AutoTuneOptions,
    iteration: int,
) -> float:
    """Win rate (percent) of ``stats`` against ``enemy`` with the given HP/attack."""

    candidate = replace(enemy, hp=hp, attack=attack)
    mc = monte_carlo_analysis(
        stats,
        candidate,
        options.runs_per_eval,
        random.Random(evaluation_seed(options.seed, enemy.index, iteration)),
    )
    return mc.win_rate


def hp_search_range(enemy: EnemyDefinition, options: AutoTuneOptions) -> tuple[int, int]:
    low = max(1, round_half_up(enemy.hp * options.min_power))
    high = max(low, round_half_up(enemy.hp * options.max_power))
    return low, high


def attack_candidates(enemy: EnemyDefinition, pivot: int, options: AutoTuneOptions) -> range:
    """Attack values within ``TUNE_ATTACK_SPAN`` of ``pivot``, kept inside the power range."""

    low = max(1, round_half_up(enemy.attack * options.min_power))
    high = max(low, round_half_up(enemy.attack * options.max_power))
    span = constants.TUNE_ATTACK_SPAN
    return range(max(low, pivot - span), min(high, pivot + span) + 1)


def tune_one_enemy(
    enemy: EnemyDefinition,
    options: AutoTuneOptions,
) -> tuple[EnemyDefinition, EnemyTuneResult]:
    """Search HP/attack for one enemy.

    Higher power (or HP) means a stronger enemy and therefore a lower win
    rate. The untuned enemy is evaluated first and seeds the best-seen
    candidate; after every bisection both interval ends are evaluated once
    more. ``result.power`` is the multiplier picked by the power pass, or 1.0
    when no scaled candidate beat the untuned enemy.
    """

    band = enemy_win_rate_band(enemy)
    eval_level = evaluation_level(enemy)
    stats = stats_from_level(eval_level)
    target_mid = band.midpoint

    iteration = 0
    base_win_rate = evaluate_candidate(enemy, enemy.hp, enemy.attack, stats, options=options, iteration=iteration)
    best_hp, best_attack = enemy.hp, enemy.attack
    best_power = 1.0
    best_win_rate = base_win_rate
    best_score = abs(base_win_rate - target_mid)

    def consider(hp: int, attack: int) -> float:
        nonlocal iteration, best_hp, best_attack, best_win_rate, best_score
        iteration += 1
        win_rate = evaluate_candidate(enemy, hp, attack, stats, options=options, iteration=iteration)
        score = abs(win_rate - target_mid)
        if score < best_score:
            best_hp, best_attack, best_win_rate, best_score = hp, attack, win_rate, score
        return win_rate

    def consider_power(power: float) -> float:
        nonlocal best_power
        previous = best_score
        scaled = scale_enemy_power(enemy, power)
        win_rate = consider(scaled.hp, scaled.attack)
        if best_score < previous:
            best_power = power
        return win_rate

    low, high = options.min_power, options.max_power
    for _ in range(options.iterations):
        mid = (low + high) / 2.0
        if consider_power(mid) > target_mid:
            low = mid
        else:
            high = mid

    for edge in (low, high):
        consider_power(edge)

    min_hp, max_hp = hp_search_range(enemy, options)
    for attack in attack_candidates(enemy, best_attack, options):
        hp_low, hp_high = min_hp, max_hp
        for _ in range(options.iterations):
            hp_mid = (hp_low + hp_high) // 2
            if consider(hp_mid, attack) > target_mid:
                hp_low = hp_mid + 1
            else:
                hp_high = hp_mid - 1
            if hp_low > hp_high:
                break

        for hp in (hp_low, hp_high):
            if min_hp <= hp <= max_hp:
                consider(hp, attack)

    tuned = replace(enemy, hp=best_hp, attack=best_attack)
    result = EnemyTuneResult(
        enemy_index=enemy.index,
        enemy_name=enemy.name,
        target_label=band.label,
        target_min=band.min,
        target_max=band.max,
        eval_level=eval_level,
        old_hp=enemy.hp,
        old_attack=enemy.attack,
        new_hp=tuned.hp,
        new_attack=tuned.attack,
        power=best_power,
        base_win_rate=base_win_rate,
        final_win_rate=best_win_rate,
    )
    logger.info(
        "Tuned %s (L%d): power=%.3f HP %d->%d ATK %d->%d WR %.1f%% -> %.1f%% (target %.0f-%.0f%%, %d evals)",
        enemy.name,
        eval_level,
        best_power,
        enemy.hp,
        tuned.hp,
        enemy.attack,
        tuned.attack,
        base_win_rate,
        best_win_rate,
        band.min,
        band.max,
        iteration + 1,
    )
    return tuned, result


def _tune_worker(args: tuple[EnemyDefinition, AutoTuneOptions]) -> tuple[EnemyDefinition, EnemyTuneResult]:
    """Top-level worker for the process pool (must be picklable)."""

    enemy, options = args
    return tune_one_enemy(enemy, options)


def _tune_all(
    enemies: Sequence[EnemyDefinition],
    options: AutoTuneOptions,
) -> list[tuple[EnemyDefinition, EnemyTuneResult]]:
    work_items = [(enemy, options) for enemy in enemies]
    if options.workers <= 1 or len(work_items) <= 1:
        return [_tune_worker(item) for item in work_items]

    n_workers = min(options.workers, len(work_items))
    logger.info("Tuning %d enemies on %d worker processes", len(work_items), n_workers)
    with multiprocessing.Pool(processes=n_workers) as pool:
        return pool.map(_tune_worker, work_items)


def effective_power(enemy: EnemyDefinition) -> float:
    """Rough threat score used to compare enemies of one zone."""

    return (
        enemy.hp * constants.EFFECTIVE_POWER_HP_WEIGHT
        + enemy.attack * constants.EFFECTIVE_POWER_ATTACK_WEIGHT
    )


def enforce_zone_boss_dominance(
    enemies: Sequence[EnemyDefinition],
    options: AutoTuneOptions,
) -> list[EnemyDefinition]:
    """Return a copy in which each zone boss out-powers its zone's other enemies.

    A boss weaker than ``BOSS_DOMINANCE_RATIO`` times the strongest non-boss
    of its zone is scaled up (by at most ``BOSS_DOMINANCE_MAX_SCALE``). The
    change is kept only if the boss's win rate does not fall more than
    ``BOSS_DOMINANCE_BAND_SLACK`` below its band minimum.
    """

    result = list(enemies)
    zones: dict[int, list[int]] = {}
    for pos, enemy in enumerate(result):
        zones.setdefault(enemy.zone, []).append(pos)

    check_runs = max(constants.BOSS_DOMINANCE_MIN_CHECK_RUNS, options.runs_per_eval // 2)
    for zone, positions in sorted(zones.items()):
        boss_pos: Optional[int] = None
        strongest_other = 0.0
        for pos in sorted(positions, key=lambda p: result[p].floor):
            if result[pos].is_boss:
                boss_pos = pos
                continue
            strongest_other = max(strongest_other, effective_power(result[pos]))

        if boss_pos is None:
            continue

        boss = result[boss_pos]
        boss_power = effective_power(boss)
        target = strongest_other * constants.BOSS_DOMINANCE_RATIO
        if target <= 0 or boss_power >= target:
            continue

        scale = min(target / boss_power, constants.BOSS_DOMINANCE_MAX_SCALE)
        candidate = scale_enemy_power(boss, scale)

        band = enemy_win_rate_band(candidate)
        check = monte_carlo_analysis(
            stats_from_level(enemy_mid_expected_level(candidate)),
            candidate,
            check_runs,
            random.Random(options.seed + candidate.index * 77 + 999),
        )
        if check.win_rate >= band.min - constants.BOSS_DOMINANCE_BAND_SLACK:
            result[boss_pos] = candidate
            logger.info("Zone %d: boss %s scaled by %.3f (WR %.1f%%)", zone, boss.name, scale, check.win_rate)
        else:
            logger.info(
                "Zone %d: boss %s left as is, scaling would drop WR to %.1f%%",
                zone,
                boss.name,
                check.win_rate,
            )

    return result


def sync_tune_results(
    results: Sequence[EnemyTuneResult],
    enemies: Sequence[EnemyDefinition],
) -> list[EnemyTuneResult]:
    """Copy the final HP/attack of ``enemies`` into the matching ``results``.

    Both sequences are in catalog order. Results whose enemy was not changed
    after tuning are returned as they are.
    """

    synced: list[EnemyTuneResult] = []
    for result, enemy in zip(results, enemies):
        if (result.new_hp, result.new_attack) != (enemy.hp, enemy.attack):
            result = replace(result, new_hp=enemy.hp, new_attack=enemy.attack)
        synced.append(result)
    return synced


def auto_tune_enemies(
    base: Iterable[EnemyDefinition] = (),
    options: Optional[AutoTuneOptions] = None,
) -> tuple[list[EnemyDefinition], list[EnemyTuneResult]]:
    """Tune every enemy of ``base`` (the preset catalog when empty).

    Returns the tuned catalog (input order) and one result per enemy. The
    results describe the catalog as returned, boss dominance included. The
    input enemies are never modified.
    """

    enemies = list(base) or get_preset_enemies()
    options = (options or default_auto_tune_options(seed=0)).normalized()

    logger.info(
        "Auto-tuning %d enemies (seed=%d, runs/eval=%d, iterations=%d, power %.2f-%.2f)",
        len(enemies),
        options.seed,
        options.runs_per_eval,
        options.iterations,
        options.min_power,
        options.max_power,
    )

    pairs = _tune_all(enemies, options)
    tuned = [enemy for enemy, _ in pairs]
    results = [result for _, result in pairs]

    if options.enforce_boss_dominance:
        tuned = enforce_zone_boss_dominance(tuned, options)
        results = sync_tune_results(results, tuned)
    tuned = ensure_one_boss_per_zone(tuned)
    return tuned, results
