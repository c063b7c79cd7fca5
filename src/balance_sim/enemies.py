"""Deterministic enemy catalog.

The catalog is five sequential zones of ten slots. Each slot position has a
fixed role, level offset, power multiplier and win-rate band (see
:mod:`balance_sim.constants`). :func:`get_preset_enemies` builds a fresh list
on every call; nothing is cached at module level so tuning and tests stay
hermetic.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from . import constants
from .data import EnemyDefinition, EnemyRole
from .formulas import round_half_up


@dataclass(frozen=True, slots=True)
class ZoneTemplate:
    zone: int
    biome: str
    min_level: int
    max_level: int
    lore_label: str
    names: tuple[str, ...]


ZONE_TEMPLATES: tuple[ZoneTemplate, ...] = (
    ZoneTemplate(
        zone=1,
        biome="swamp",
        min_level=2,
        max_level=6,
        lore_label="Туманные Болота",
        names=(
            "Квакающий Разведчик",
            "Болотный Пиявочник",
            "Гнилотный Шаман",
            "Трясинный Волк",
            "Моховой Голем",
            "Токсичный Удильщик",
            "Ведьмин Грибник",
            "Слизень-Разъедатель",
            "Пасть Топи",
            "Хозяйка Туманов Морра",
        ),
    ),
    ZoneTemplate(
        zone=2,
        biome="ruins",
        min_level=7,
        max_level=12,
        lore_label="Забытые Руины",
        names=(
            "Ржавый Страж Портала",
            "Пыльный Скелет-Рыцарь",
            "Летучая Моль Проклятий",
            "Крипт-Охотник",
            "Костяной Арбалетчик",
            "Каменный Идол",
            "Тень Архива",
            "Пожиратель Реликвий",
            "Жрец Разломанных Печатей",
            "Архонт Руин Кальдрос",
        ),
    ),
    ZoneTemplate(
        zone=3,
        biome="frost",
        min_level=13,
        max_level=18,
        lore_label="Ледяные Пики",
        names=(
            "Снежный Падальщик",
            "Морозный Пехотинец",
            "Ледяная Гарпия",
            "Вьюжный Волк",
            "Осколочный Голем",
            "Северный Берсерк",
            "Хрустальный Охотник",
            "Ледяной Колдун",
            "Белый Йети",
            "Король Вьюги Хельгрим",
        ),
    ),
    ZoneTemplate(
        zone=4,
        biome="volcanic",
        min_level=19,
        max_level=24,
        lore_label="Пепельные Разломы",
        names=(
            "Пепельный Разбойник",
            "Обугленный Скелет",
            "Лавовый Плевун",
            "Огненный Гончий",
            "Шлаковый Голем",
            "Жрец Пепла",
            "Крылатый Угольник",
            "Демон Искр",
            "Плавильщик Костей",
            "Владыка Разломов Азгар",
        ),
    ),
    ZoneTemplate(
        zone=5,
        biome="void",
        min_level=25,
        max_level=30,
        lore_label="Цитадель Бездны",
        names=(
            "Безликий Смотритель",
            "Паразит Пустоты",
            "Теневой Дуэлянт",
            "Пожиратель Света",
            "Хор Бездны",
            "Клеймённый Инквизитор",
            "Рыцарь Нулевой Тени",
            "Коготь Монарха",
            "Оракул Тишины",
            "Монарх Бездны Ноктэрн",
        ),
    ),
)

_SLOT_ROLES: tuple[EnemyRole, ...] = (
    EnemyRole.TRANSITION,
    EnemyRole.TRANSITION_ELITE,
    EnemyRole.NORMAL,
    EnemyRole.HARD,
    EnemyRole.EASY,
    EnemyRole.HARD,
    EnemyRole.ELITE,
    EnemyRole.NORMAL,
    EnemyRole.MINIBOSS,
    EnemyRole.BOSS,
)

_ROLE_LORE = {
    EnemyRole.TRANSITION: "входной страж зоны: опасен с первых секунд.",
    EnemyRole.TRANSITION_ELITE: "пограничный элитный противник, проверяет базу билда.",
    EnemyRole.HARD: "усиливает давление и наказывает ошибки.",
    EnemyRole.EASY: "тактическая передышка, но не бесплатная.",
    EnemyRole.ELITE: "элитный враг с усиленной выживаемостью.",
    EnemyRole.MINIBOSS: "мини-босс, близок к порогу зоны.",
    EnemyRole.BOSS: "властитель зоны и ключ к следующему этапу.",
}


def _slot_entry(table: Sequence, slot: int):
    slot = min(max(slot, 1), len(table))
    return table[slot - 1]


def level_for_slot(min_level: int, max_level: int, slot: int) -> int:
    return min(min_level + _slot_entry(constants.SLOT_LEVEL_OFFSETS, slot), max_level)


def role_for_slot(slot: int) -> EnemyRole:
    return _slot_entry(_SLOT_ROLES, slot)


def role_power_multiplier(slot: int) -> float:
    return _slot_entry(constants.SLOT_POWER_MULTIPLIERS, slot)


def target_win_rate_for_slot(slot: int) -> tuple[float, float]:
    low, high = _slot_entry(constants.SLOT_WIN_RATE_BANDS, slot)
    return float(low), float(high)


def rank_for_zone_and_slot(zone: int, slot: int) -> str:
    if zone == 1:
        return "E" if slot <= 5 else "D"
    if zone == 2:
        return "C" if slot <= 5 else "B"
    if zone == 3:
        if slot <= 4:
            return "B"
        if slot <= 8:
            return "A"
        return "S"
    if zone == 4:
        return "A" if slot <= 5 else "S"
    return "S"


def role_lore(role: EnemyRole) -> str:
    return _ROLE_LORE.get(role, "боевой противник башни.")


def _build_enemy(template: ZoneTemplate, slot: int, index: int, floor: int) -> EnemyDefinition:
    name = template.names[slot - 1]
    level = level_for_slot(template.min_level, template.max_level, slot)
    role = role_for_slot(slot)
    power = role_power_multiplier(slot)
    target_min, target_max = target_win_rate_for_slot(slot)

    base_hp = constants.ENEMY_BASE_HP + level * constants.ENEMY_HP_PER_LEVEL
    base_attack = constants.ENEMY_BASE_ATTACK + round_half_up(level * constants.ENEMY_ATTACK_PER_LEVEL)

    return EnemyDefinition(
        index=index,
        name=name,
        rank=rank_for_zone_and_slot(template.zone, slot),
        role=role,
        hp=round_half_up(base_hp * power),
        attack=round_half_up(base_attack * (0.8 + power * 0.35)),
        agility=level + 2,
        intellect=level // 2 + template.zone,
        level=level,
        expected_min_level=max(1, level - 1),
        expected_max_level=level + 1,
        zone=template.zone,
        floor=floor,
        slot=slot,
        is_boss=role is EnemyRole.BOSS,
        is_transition=slot <= constants.TRANSITION_SLOTS,
        target_win_rate_min=target_min,
        target_win_rate_max=target_max,
        description=f"{template.lore_label}: {role_lore(role)}",
    )


def get_preset_enemies(zones: Iterable[ZoneTemplate] = ZONE_TEMPLATES) -> list[EnemyDefinition]:
    """Build the preset catalog: one enemy per (zone, slot), in floor order."""

    enemies: list[EnemyDefinition] = []
    floor = 1
    for template in zones:
        if len(template.names) != constants.SLOTS_PER_ZONE:
            raise ValueError(
                f"Zone {template.zone} needs {constants.SLOTS_PER_ZONE} names, got {len(template.names)}"
            )
        for slot in range(1, constants.SLOTS_PER_ZONE + 1):
            enemies.append(_build_enemy(template, slot, index=len(enemies), floor=floor))
            floor += 1

    return ensure_one_boss_per_zone(enemies)


def ensure_one_boss_per_zone(enemies: Sequence[EnemyDefinition]) -> list[EnemyDefinition]:
    """Return a copy where every zone has exactly one boss.

    A zone with exactly one boss keeps it. Otherwise the boss flag goes to the
    BOSS-role enemy (or, lacking one, the highest slot/floor) and is cleared
    on every other enemy of the zone.
    """

    by_zone: dict[int, list[int]] = {}
    for pos, enemy in enumerate(enemies):
        by_zone.setdefault(enemy.zone, []).append(pos)

    result = list(enemies)
    for positions in by_zone.values():
        bosses = [p for p in positions if result[p].is_boss]
        if len(bosses) == 1:
            continue

        role_bosses = [p for p in positions if result[p].role is EnemyRole.BOSS]
        candidates = role_bosses or positions
        chosen = max(candidates, key=lambda p: (result[p].slot, result[p].floor, result[p].index))
        for p in positions:
            should_be_boss = p == chosen
            if result[p].is_boss != should_be_boss:
                result[p] = replace(result[p], is_boss=should_be_boss)

    return result


def enemies_in_zone(enemies: Iterable[EnemyDefinition], zone: int) -> list[EnemyDefinition]:
    return [e for e in enemies if e.zone == zone]


def zone_numbers(enemies: Iterable[EnemyDefinition]) -> list[int]:
    return sorted({e.zone for e in enemies})
