"""JSON import/export for enemy catalogs and auto-tune options.

This module owns:
- file format knowledge (JSON)
- parsing and validation
- construction of domain objects from :mod:`balance_sim.data`

Catalog files are a JSON list of enemy records, one per enemy, in catalog
order. :func:`load_enemies_from_json` reads back exactly what
:func:`build_enemy_records` writes, so a tuned catalog can be saved after
``--simulate-tune`` and reused with ``--simulate`` later.
"""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from .data import AutoTuneOptions, EnemyDefinition, EnemyRole
from .enemies import ensure_one_boss_per_zone
from .tuner import default_auto_tune_options

_REQUIRED_ENEMY_KEYS: tuple[str, ...] = ("index", "name", "rank", "role", "hp", "attack")

_INT_FIELDS = frozenset(
    {
        "index",
        "hp",
        "attack",
        "agility",
        "intellect",
        "level",
        "expected_min_level",
        "expected_max_level",
        "zone",
        "floor",
        "slot",
    }
)
_FLOAT_FIELDS = frozenset({"target_win_rate_min", "target_win_rate_max"})
_BOOL_FIELDS = frozenset({"is_boss", "is_transition"})


def _json_bool(value: Any) -> bool:
    # JSON booleans only; bool("false") is True.
    if not isinstance(value, bool):
        raise TypeError(f"expected a JSON boolean, got {type(value).__name__}")
    return value


_TUNE_OPTION_KEYS: Mapping[str, Callable[[Any], Any]] = {
    "runs_per_eval": int,
    "iterations": int,
    "min_power": float,
    "max_power": float,
    "workers": int,
    "enforce_boss_dominance": _json_bool,
}


def parse_enemy_role(value: str) -> EnemyRole:
    """Parse a role name, case-insensitively."""

    try:
        return EnemyRole(value.strip().upper())
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Unknown enemy role: {value!r}") from e


def build_enemy_records(enemies: Iterable[EnemyDefinition]) -> list[dict[str, Any]]:
    """Build a JSON-serialisable record list for a catalog (input order kept)."""

    records: list[dict[str, Any]] = []
    for enemy in enemies:
        record: dict[str, Any] = {}
        for f in fields(EnemyDefinition):
            value = getattr(enemy, f.name)
            record[f.name] = value.value if isinstance(value, EnemyRole) else value
        records.append(record)
    return records


def write_enemies_json(path: str | Path, enemies: Iterable[EnemyDefinition]) -> int:
    """Write a catalog to ``path`` (parent directories are created). Returns the count."""

    path = Path(path)
    records = build_enemy_records(enemies)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    return len(records)


def _enemy_from_record(rec: Mapping[str, Any], position: int) -> EnemyDefinition:
    missing = [k for k in _REQUIRED_ENEMY_KEYS if k not in rec]
    if missing:
        raise ValueError(f"Enemy record {position} missing keys: {missing}")

    kwargs: dict[str, Any] = {}
    for f in fields(EnemyDefinition):
        if f.name not in rec:
            continue
        raw = rec[f.name]
        try:
            if f.name == "role":
                kwargs[f.name] = parse_enemy_role(raw)
            elif f.name in _INT_FIELDS:
                kwargs[f.name] = int(raw)
            elif f.name in _FLOAT_FIELDS:
                kwargs[f.name] = float(raw)
            elif f.name in _BOOL_FIELDS:
                kwargs[f.name] = _json_bool(raw)
            else:
                kwargs[f.name] = str(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Enemy record {position}: invalid {f.name!r} value {raw!r}") from e

    return EnemyDefinition(**kwargs)


def load_enemies_from_json(path: str | Path) -> list[EnemyDefinition]:
    """Load a catalog written by :func:`write_enemies_json`.

    Raises
    ------
    ValueError
        If the file is not a JSON list of enemy objects, a record is missing a
        required key or carries an invalid value, or indices repeat.
    """

    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path.name} is not valid JSON") from e

    if not isinstance(raw, list):
        raise ValueError(f"{path.name} must be a JSON list")

    enemies: list[EnemyDefinition] = []
    for position, rec in enumerate(raw):
        if not isinstance(rec, dict):
            raise ValueError(f"Enemy record {position} must be a JSON object")
        enemies.append(_enemy_from_record(rec, position))

    if not enemies:
        raise ValueError(f"No enemies loaded from {path.name}")

    indices = [e.index for e in enemies]
    if len(set(indices)) != len(indices):
        raise ValueError(f"{path.name} contains duplicate enemy indices")

    return ensure_one_boss_per_zone(enemies)


def load_auto_tune_options_from_json(path: str | Path, *, seed: int) -> AutoTuneOptions:
    """Load auto-tune overrides from a JSON object.

    Recognised keys: ``runs_per_eval``, ``iterations``, ``min_power``,
    ``max_power``, ``workers`` and ``enforce_boss_dominance``. Missing keys
    keep their defaults; unknown keys are rejected.
    """

    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path.name} is not valid JSON") from e

    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} must be a JSON object")

    unknown = sorted(set(raw) - set(_TUNE_OPTION_KEYS))
    if unknown:
        raise ValueError(f"Unknown auto-tune option(s): {unknown}")

    overrides: dict[str, Any] = {}
    for key, cast in _TUNE_OPTION_KEYS.items():
        if key not in raw:
            continue
        try:
            overrides[key] = cast(raw[key])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Auto-tune option {key!r} has invalid value {raw[key]!r}") from e

    return replace(default_auto_tune_options(seed), **overrides)
