"""The five canonical player archetypes."""

from __future__ import annotations

from .data import Archetype, Stat


def _weights(strength: float, agility: float, intellect: float, endurance: float) -> dict[Stat, float]:
    return {Stat.STR: strength, Stat.AGI: agility, Stat.INT: intellect, Stat.STA: endurance}


def balanced() -> Archetype:
    """Equal stat distribution, moderate effort."""

    return Archetype(
        name="Balanced",
        quests_per_day=3,
        avg_minutes=30,
        avg_effort=3,
        avg_friction=2,
        minutes_std_dev=10,
        effort_std_dev=0.8,
        friction_std_dev=0.5,
        stat_weights=_weights(0.25, 0.25, 0.25, 0.25),
    )


def int_build() -> Archetype:
    """Intellect-focused: good memory, fewer strong hits."""

    return Archetype(
        name="INT-build",
        quests_per_day=3,
        avg_minutes=35,
        avg_effort=4,
        avg_friction=2,
        minutes_std_dev=12,
        effort_std_dev=0.7,
        friction_std_dev=0.5,
        stat_weights=_weights(0.10, 0.15, 0.55, 0.20),
    )


def str_build() -> Archetype:
    """Strength-focused, aggressive fighter."""

    return Archetype(
        name="STR-build",
        quests_per_day=4,
        avg_minutes=25,
        avg_effort=3,
        avg_friction=2,
        minutes_std_dev=8,
        effort_std_dev=0.8,
        friction_std_dev=0.6,
        stat_weights=_weights(0.50, 0.20, 0.10, 0.20),
    )


def high_effort_grinder() -> Archetype:
    return Archetype(
        name="High-effort Grinder",
        quests_per_day=6,
        avg_minutes=40,
        avg_effort=4,
        avg_friction=2,
        minutes_std_dev=15,
        effort_std_dev=0.6,
        friction_std_dev=0.5,
        stat_weights=_weights(0.25, 0.25, 0.25, 0.25),
    )


def low_effort_casual() -> Archetype:
    """Minimal engagement: one short quest a day."""

    return Archetype(
        name="Low-effort Casual",
        quests_per_day=1,
        avg_minutes=15,
        avg_effort=2,
        avg_friction=1,
        minutes_std_dev=5,
        effort_std_dev=0.5,
        friction_std_dev=0.3,
        stat_weights=_weights(0.25, 0.25, 0.25, 0.25),
    )


def default_archetypes() -> list[Archetype]:
    """All five archetypes in CLI index order (0 = Balanced)."""

    return [
        balanced(),
        int_build(),
        str_build(),
        high_effort_grinder(),
        low_effort_casual(),
    ]
