"""Domain data model for the balance simulator.

This module is intentionally *pure*: it defines the core enums and dataclasses
shared by the formula, battle, progression and tuning modules, with no
simulation logic and no file-format knowledge.

- formulas live in :mod:`balance_sim.formulas`
- JSON import/export lives in :mod:`balance_sim.io`
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Set

from . import constants

RANKS: tuple[str, ...] = ("E", "D", "C", "B", "A", "S")


class Stat(str, Enum):
    """The four player stats. Every stat-keyed lookup goes through this enum."""

    STR = "STR"
    AGI = "AGI"
    INT = "INT"
    STA = "STA"

    @property
    def display_name(self) -> str:
        return _STAT_DISPLAY_NAMES[self]


_STAT_DISPLAY_NAMES: Mapping[Stat, str] = {
    Stat.STR: "Сила",
    Stat.AGI: "Ловкость",
    Stat.INT: "Интеллект",
    Stat.STA: "Выносливость",
}


class EnemyRole(str, Enum):
    """Slot role of an enemy inside its zone."""

    TRANSITION = "TRANSITION"
    TRANSITION_ELITE = "TRANSITION_ELITE"
    NORMAL = "NORMAL"
    HARD = "HARD"
    EASY = "EASY"
    ELITE = "ELITE"
    MINIBOSS = "MINIBOSS"
    BOSS = "BOSS"


@dataclass(frozen=True, slots=True)
class PlayerStats:
    """Immutable stat snapshot consumed by the combat formulas."""

    strength: int
    agility: int
    intellect: int
    endurance: int

    def with_value(self, stat: Stat, value: int) -> PlayerStats:
        """Return a copy with one stat replaced."""

        return replace(self, **{_STAT_FIELDS[stat]: value})


_STAT_FIELDS: Mapping[Stat, str] = {
    Stat.STR: "strength",
    Stat.AGI: "agility",
    Stat.INT: "intellect",
    Stat.STA: "endurance",
}


@dataclass(frozen=True, slots=True)
class WinRateBand:
    """Designer-specified acceptable win-rate range (percent)."""

    label: str
    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min >= self.max:
            raise ValueError("WinRateBand.min must be < WinRateBand.max")

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2.0

    def contains(self, win_rate: float) -> bool:
        return self.min <= win_rate <= self.max


@dataclass(frozen=True, slots=True)
class EnemyDefinition:
    """One enemy of the catalog.

    ``expected_min_level``/``expected_max_level`` define the player-level
    window the enemy is calibrated for. A window of zeros means "no window":
    such an enemy is never rescaled by the player's level.
    """

    index: int
    name: str
    rank: str
    role: EnemyRole
    hp: int
    attack: int
    agility: int = 0
    intellect: int = 0

    level: int = 0
    expected_min_level: int = 0
    expected_max_level: int = 0

    zone: int = 1
    floor: int = 1
    slot: int = 0
    is_boss: bool = False
    is_transition: bool = False

    target_win_rate_min: float = 0.0
    target_win_rate_max: float = 0.0

    description: str = ""

    def __post_init__(self) -> None:
        if self.hp < 1:
            raise ValueError("EnemyDefinition.hp must be >= 1")
        if self.attack < 1:
            raise ValueError("EnemyDefinition.attack must be >= 1")
        if self.zone < 1:
            raise ValueError("EnemyDefinition.zone must be >= 1")
        if self.target_win_rate_min > 0 and self.target_win_rate_max > 0:
            if self.target_win_rate_min >= self.target_win_rate_max:
                raise ValueError(
                    f"Enemy {self.name!r}: target_win_rate_min must be < target_win_rate_max"
                )
        if self.has_level_window and self.expected_min_level > self.expected_max_level:
            raise ValueError(
                f"Enemy {self.name!r}: expected_min_level must be <= expected_max_level"
            )

    @property
    def has_level_window(self) -> bool:
        return self.expected_min_level > 0 and self.expected_max_level > 0


@dataclass(frozen=True, slots=True)
class BattleOutcome:
    """Result of one simulated battle."""

    win: bool
    rounds: int
    damage_dealt: int
    damage_taken: int
    crits: int
    accuracy: float


@dataclass(frozen=True, slots=True)
class BattleMonteCarloResult:
    """Aggregated Monte Carlo statistics for one (stats, enemy) pair."""

    enemy_name: str
    runs: int
    wins: int
    losses: int
    win_rate: float
    avg_damage: float
    std_dev_damage: float
    avg_rounds: float
    avg_accuracy: float


@dataclass(frozen=True, slots=True)
class StatSweepPoint:
    """One data point of a stat sweep."""

    stat: Stat
    value: int
    win_rate: float
    avg_damage: float
    avg_rounds: float


@dataclass(frozen=True, slots=True)
class Archetype:
    """Behavioural profile of a simulated player."""

    name: str
    quests_per_day: int
    avg_minutes: int
    avg_effort: int
    avg_friction: int
    minutes_std_dev: float
    effort_std_dev: float
    friction_std_dev: float

    # Selection weights in Stat order (STR, AGI, INT, STA); used as a
    # cumulative probability partition.
    stat_weights: Mapping[Stat, float]

    fights_when_possible: bool = True

    def __post_init__(self) -> None:
        if self.quests_per_day < 0:
            raise ValueError("Archetype.quests_per_day must be >= 0")
        missing = set(Stat) - set(self.stat_weights)
        if missing:
            raise ValueError(f"Archetype.stat_weights missing stats: {sorted(s.value for s in missing)}")
        if any(w < 0 for w in self.stat_weights.values()):
            raise ValueError("Archetype.stat_weights must be >= 0")
        if sum(self.stat_weights.values()) <= 0:
            raise ValueError("Archetype.stat_weights must have a positive sum")


def _initial_levels() -> Dict[Stat, int]:
    return {stat: 1 for stat in Stat}


def _initial_exp() -> Dict[Stat, int]:
    return {stat: 0 for stat in Stat}


@dataclass(slots=True)
class PlayerState:
    """Mutable state of one simulated player. Created fresh per run."""

    levels: Dict[Stat, int] = field(default_factory=_initial_levels)
    # EXP accumulated toward the next level of each stat.
    exp: Dict[Stat, int] = field(default_factory=_initial_exp)

    attempts: int = 0

    current_zone: int = 1
    defeated_enemy_ids: Set[int] = field(default_factory=set)

    total_quests_completed: int = 0
    total_exp_earned: int = 0
    total_battles: int = 0
    total_battle_wins: int = 0
    total_battle_losses: int = 0
    current_streak: int = 0
    day_number: int = 0

    @property
    def overall_level(self) -> int:
        """Average of the four stat levels (integer division)."""

        return sum(self.levels.values()) // 4

    @property
    def stats(self) -> PlayerStats:
        return PlayerStats(
            strength=self.levels[Stat.STR],
            agility=self.levels[Stat.AGI],
            intellect=self.levels[Stat.INT],
            endurance=self.levels[Stat.STA],
        )

    @property
    def total_win_rate(self) -> float:
        if self.total_battles <= 0:
            return 0.0
        return self.total_battle_wins / self.total_battles * 100.0


@dataclass(frozen=True, slots=True)
class DaySnapshot:
    """State of the simulated player at the end of one day."""

    day: int
    level: int
    strength: int
    agility: int
    intellect: int
    endurance: int
    zone: int
    quests_today: int
    exp_today: int
    battles_today: int
    wins_today: int
    total_win_rate: float
    attempts: int
    enemies_defeated: int = 0


@dataclass(frozen=True, slots=True)
class SimConfig:
    """Progression run settings.

    An empty ``enemies`` tuple means "use the preset catalog".
    """

    days: int
    seed: int
    archetype: Archetype
    enemies: tuple[EnemyDefinition, ...] = ()

    def __post_init__(self) -> None:
        if self.days < 0:
            raise ValueError("SimConfig.days must be >= 0")


@dataclass(frozen=True, slots=True)
class ExpEconomyResult:
    """Quest EXP distribution drawn from one archetype."""

    total_quests: int
    avg_exp: float
    min_exp: int
    max_exp: int
    rank_distribution: Mapping[str, int]
    avg_attempts: float
    total_attempts: int


@dataclass(frozen=True, slots=True)
class ProgressionCheck:
    """Zone arrival compared with its target day. ``actual_day`` is None if never reached."""

    target_zone: int
    target_days: int
    actual_day: Optional[int]
    met: bool


@dataclass(frozen=True, slots=True)
class FullClearEstimate:
    """How long it takes an archetype to defeat every enemy of a catalog."""

    archetype_name: str
    runs: int
    cleared_runs: int
    max_days: int
    avg_days: Optional[float] = None
    min_days: Optional[int] = None
    max_days_observed: Optional[int] = None


@dataclass(frozen=True, slots=True)
class AutoTuneOptions:
    """Binary-search auto-tuning settings."""

    seed: int
    runs_per_eval: int = constants.DEFAULT_RUNS_PER_EVAL
    iterations: int = constants.DEFAULT_TUNE_ITERATIONS
    min_power: float = constants.DEFAULT_MIN_POWER
    max_power: float = constants.DEFAULT_MAX_POWER
    enforce_boss_dominance: bool = True
    workers: int = 1

    def normalized(self) -> AutoTuneOptions:
        """Return a copy with invalid values replaced by usable defaults."""

        runs = self.runs_per_eval if self.runs_per_eval > 0 else constants.DEFAULT_RUNS_PER_EVAL
        iterations = self.iterations if self.iterations > 0 else constants.DEFAULT_TUNE_ITERATIONS
        min_power = self.min_power if self.min_power > 0 else constants.DEFAULT_MIN_POWER
        max_power = self.max_power if self.max_power > min_power else min_power + 1.0
        return replace(
            self,
            runs_per_eval=runs,
            iterations=iterations,
            min_power=min_power,
            max_power=max_power,
            workers=max(1, self.workers),
        )


@dataclass(frozen=True, slots=True)
class EnemyTuneResult:
    """Outcome of tuning one enemy."""

    enemy_index: int
    enemy_name: str
    target_label: str
    target_min: float
    target_max: float
    eval_level: int
    old_hp: int
    old_attack: int
    new_hp: int
    new_attack: int
    power: float
    base_win_rate: float
    final_win_rate: float

    @property
    def target_mid(self) -> float:
        return (self.target_min + self.target_max) / 2.0

    @property
    def band(self) -> WinRateBand:
        return WinRateBand(label=self.target_label, min=self.target_min, max=self.target_max)


@dataclass(frozen=True, slots=True)
class BalanceVerdict:
    """Band status and red-line violations of one enemy at its evaluation level."""

    enemy_index: int
    enemy_name: str
    eval_level: int
    win_rate: float
    band: WinRateBand
    status: str
    violations: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.violations


@dataclass(frozen=True, slots=True)
class ReportOptions:
    """Run counts used by the full report. Lower them for quick looks."""

    economy_quests: int = 1000
    monte_carlo_runs: int = 1000
    sweep_max_value: int = 50
    sweep_fixed_value: int = 10
    sweep_runs: int = 500
    progression_days: tuple[int, ...] = (30, 90, 180)
    progression_runs: int = 10
    full_clear_runs: int = 10
    full_clear_max_days: int = constants.FULL_CLEAR_MAX_DAYS
    balance_runs: int = 1000
