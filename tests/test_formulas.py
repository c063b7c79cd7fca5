from __future__ import annotations

import math
import random

import pytest

from balance_sim.data import EnemyDefinition, EnemyRole
from balance_sim.formulas import (
    attempts_for_quest_exp,
    base_exp_for_rank,
    calculate_quest_exp,
    cells_to_show,
    compute_enemy_damage,
    compute_player_damage,
    crit_damage_multiplier,
    damage_mitigation,
    enemy_scale_factor,
    exp_for_level,
    generate_shown_cells,
    grid_size,
    player_combat_level,
    player_hp,
    rank_from_exp,
    round_half_up,
    scale_enemy_power,
    simulated_accuracy,
    time_to_show_ms,
)


def _seq(*values: float):
    it = iter(values)

    def _next() -> float:
        return next(it)

    return _next


def _enemy(**kwargs) -> EnemyDefinition:
    base = dict(index=0, name="Test", rank="C", role=EnemyRole.NORMAL, hp=200, attack=20)
    base.update(kwargs)
    return EnemyDefinition(**base)


def test_round_half_up_rounds_halves_away_from_zero() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -3
    assert round_half_up(2.49) == 2


def test_calculate_quest_exp_matches_formula() -> None:
    # 25*0.6 + 3*4 + 2*3 = 33
    assert calculate_quest_exp(25, 3, 2) == 33


def test_calculate_quest_exp_clamps_inputs_and_has_minimum_one() -> None:
    assert calculate_quest_exp(0, 99, 99) == calculate_quest_exp(0, 5, 3)
    assert calculate_quest_exp(-10, 1, 1) == calculate_quest_exp(0, 1, 1)
    assert calculate_quest_exp(0, 0, 0) >= 1


def test_calculate_quest_exp_is_at_least_one_for_all_valid_inputs() -> None:
    for minutes in (0, 1, 5, 30, 120):
        for effort in range(1, 6):
            for friction in range(1, 4):
                assert calculate_quest_exp(minutes, effort, friction) >= 1


@pytest.mark.parametrize(
    "exp, rank",
    [(1, "E"), (10, "E"), (11, "D"), (18, "D"), (19, "C"), (28, "C"), (29, "B"), (40, "B"), (41, "A"), (55, "A"), (56, "S")],
)
def test_rank_from_exp_breakpoints(exp: int, rank: str) -> None:
    assert rank_from_exp(exp) == rank


def test_base_exp_for_rank() -> None:
    assert [base_exp_for_rank(r) for r in "EDCBAS"] == [20, 40, 70, 120, 200, 350]
    assert base_exp_for_rank("?") == 0


@pytest.mark.parametrize("exp, attempts", [(1, 1), (14, 1), (15, 2), (30, 2), (31, 3), (200, 3)])
def test_attempts_for_quest_exp(exp: int, attempts: int) -> None:
    assert attempts_for_quest_exp(exp) == attempts


def test_exp_for_level() -> None:
    assert exp_for_level(1) == 50
    assert exp_for_level(2) == 80
    assert exp_for_level(10) == 320


def test_player_hp_floors_sta_at_zero() -> None:
    assert player_hp(0) == 100
    assert player_hp(10) == 220
    assert player_hp(-5) == 100


def test_simulated_accuracy_stays_in_bounds() -> None:
    rng = random.Random(1)
    for int_stat in range(0, 201):
        for _ in range(5):
            acc = simulated_accuracy(int_stat, rng.random)
            assert 0.61 <= acc <= 0.86


def test_simulated_accuracy_extreme_jitter_is_clamped() -> None:
    assert simulated_accuracy(0, lambda: 0.0) >= 0.61
    assert simulated_accuracy(1000, lambda: 0.999999) <= 0.86


def test_simulated_accuracy_increases_with_int_without_jitter() -> None:
    values = [simulated_accuracy(i) for i in range(0, 101)]
    assert all(b >= a for a, b in zip(values, values[1:]))
    assert values[-1] > values[0]


def test_compute_player_damage_scales_with_accuracy() -> None:
    # Same draws: variance 0.5 (mid), crit roll 0.99 (no crit).
    low, _ = compute_player_damage(10, 10, 0.61, _seq(0.5, 0.99))
    high, _ = compute_player_damage(10, 10, 0.90, _seq(0.5, 0.99))
    assert high > low


def test_compute_player_damage_crit_applies_multiplier() -> None:
    normal, normal_crit = compute_player_damage(10, 10, 0.8, _seq(0.5, 0.99))
    crit, is_crit = compute_player_damage(10, 10, 0.8, _seq(0.5, 0.0))
    assert not normal_crit
    assert is_crit
    assert crit > normal


def test_crit_damage_multiplier_bounds() -> None:
    assert math.isclose(crit_damage_multiplier(0), 1.2)
    assert math.isclose(crit_damage_multiplier(30), 1.5)
    assert math.isclose(crit_damage_multiplier(500), 2.0)
    assert math.isclose(crit_damage_multiplier(-10), 1.2)


def test_damage_mitigation_expected_values() -> None:
    assert math.isclose(damage_mitigation(0), 0.95)
    assert math.isclose(damage_mitigation(40), 0.50)
    assert math.isclose(damage_mitigation(999), 0.35)


def test_higher_sta_never_increases_enemy_damage() -> None:
    previous = None
    for sta in range(0, 120, 5):
        dmg = compute_enemy_damage(50, sta, lambda: 0.5)
        if previous is not None:
            assert dmg <= previous
        previous = dmg


def test_compute_enemy_damage_has_minimum_one() -> None:
    assert compute_enemy_damage(1, 999, lambda: 0.0) == 1


def test_player_combat_level_floors_at_one() -> None:
    assert player_combat_level(0, 0) == 1.0
    assert player_combat_level(10, 20) == 15.0


def test_enemy_scale_factor_interpolates_inside_widened_window() -> None:
    enemy = _enemy(expected_min_level=10, expected_max_level=12)
    # Widened window is [7, 15].
    assert math.isclose(enemy_scale_factor(enemy, 7), 0.90)
    assert math.isclose(enemy_scale_factor(enemy, 15), 1.10)
    assert math.isclose(enemy_scale_factor(enemy, 11), 1.00)
    assert math.isclose(enemy_scale_factor(enemy, 1), 0.90)
    assert math.isclose(enemy_scale_factor(enemy, 40), 1.10)


def test_enemy_scale_factor_without_window_is_one() -> None:
    assert enemy_scale_factor(_enemy(), 25) == 1.0


def test_scale_enemy_power_floors_at_one() -> None:
    scaled = scale_enemy_power(_enemy(hp=10, attack=2), 0.01)
    assert scaled.hp == 1
    assert scaled.attack == 1


def test_cells_to_show_has_no_integer_division_step() -> None:
    # INT 1 and 2 must already shave cells off smoothly (6 - 2/3 rounds to 5).
    assert cells_to_show("E", False, 0) == 6
    assert cells_to_show("E", False, 2) == 5


def test_cells_to_show_boss_bonus_and_floor() -> None:
    assert cells_to_show("S", True, 0) == 16 + 2 + 3
    assert cells_to_show("E", False, 300) == 4
    assert cells_to_show("E", True, 300) == 4 + 3


def test_grid_size_and_time_to_show() -> None:
    assert grid_size(False) == 6
    assert grid_size(True) == 8
    assert time_to_show_ms(0) == 2500
    assert time_to_show_ms(10) == 3000
    assert time_to_show_ms(100) == 4000


def test_generate_shown_cells_unique_and_in_range() -> None:
    cells = generate_shown_cells(6, 10, random.Random(3))
    assert len(cells) == 10
    assert len(set(cells)) == 10
    assert all(0 <= c < 36 for c in cells)


@pytest.mark.parametrize("grid, count", [(0, 1), (6, 0), (6, 37), (-1, 3)])
def test_generate_shown_cells_rejects_invalid_bounds(grid: int, count: int) -> None:
    with pytest.raises(ValueError):
        generate_shown_cells(grid, count, random.Random(0))
