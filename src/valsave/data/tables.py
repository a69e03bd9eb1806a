"""
valsave — Lookup Tables

Static id -> name tables used to label decoded values:
- prefab ids      (stable hash of the prefab name, from prefabs.json)
- biome flags     (Biome)
- object kinds    (ObjectType)
- map pin kinds   (PinType)
- skill kinds     (SkillType)

Tables are built once and never mutated. A missing id is not an error:
callers keep the raw number and record an UnresolvedReference.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from valsave.protocol.errors import UnresolvedReference
from valsave.protocol.primitives import stable_hash

log = logging.getLogger(__name__)

PREFABS_JSON = Path(__file__).parent / "prefabs.json"


class Biome(IntEnum):
    None_ = 0
    Meadows = 1
    Swamp = 2
    Mountain = 4
    BlackForest = 8
    Plains = 16
    AshLands = 32
    DeepNorth = 64
    Ocean = 256
    Mistlands = 512


class ObjectType(IntEnum):
    Default = 0
    Prioritized = 1
    Solid = 2


class PinType(IntEnum):
    Icon0 = 0
    Icon1 = 1
    Icon2 = 2
    Icon3 = 3
    Death = 4
    Bed = 5
    Icon4 = 6
    Shout = 7
    None_ = 8
    Boss = 9
    Player = 10
    RandomEvent = 11
    Ping = 12
    EventArea = 13


class SkillType(IntEnum):
    None_ = 0
    Swords = 1
    Knives = 2
    Clubs = 3
    Polearms = 4
    Spears = 5
    Blocking = 6
    Axes = 7
    Bows = 8
    FireMagic = 9
    FrostMagic = 10
    Unarmed = 11
    Pickaxes = 12
    WoodCutting = 13
    Jump = 100
    Sneak = 101
    Run = 102
    Swim = 103
    All = 999


def _enum_names(enum_cls: type[IntEnum]) -> Mapping[int, str]:
    return MappingProxyType({int(m): m.name.rstrip("_") for m in enum_cls})


def prefab_names(names: Iterable[str]) -> dict[int, str]:
    """Map each prefab name to its id (the stable hash of the name)."""
    return {stable_hash(n): n for n in names}


@dataclass(frozen=True)
class LookupTables:
    """Read-only name tables shared by every decode call."""
    prefabs: Mapping[int, str]
    biomes: Mapping[int, str]
    object_kinds: Mapping[int, str]
    pin_kinds: Mapping[int, str]
    skills: Mapping[int, str]

    def _table(self, table: str) -> Mapping[int, str]:
        match table:
            case "prefab":
                return self.prefabs
            case "biome":
                return self.biomes
            case "object_kind":
                return self.object_kinds
            case "pin_kind":
                return self.pin_kinds
            case "skill":
                return self.skills
            case _:
                raise KeyError(table)

    def name(self, table: str, value: int | None) -> str | None:
        if value is None:
            return None
        return self._table(table).get(value)

    def resolve(
        self,
        table: str,
        value: int | None,
        unresolved: list[UnresolvedReference],
    ) -> str | None:
        """Name for `value`, or None with an UnresolvedReference appended."""
        name = self.name(table, value)
        if name is None and value is not None:
            log.debug("no %s name for %d", table, value)
            unresolved.append(UnresolvedReference(table, value))
        return name

    def with_prefabs(self, names: Iterable[str]) -> LookupTables:
        """Copy of these tables with extra prefab names added."""
        merged = dict(self.prefabs)
        merged.update(prefab_names(names))
        return LookupTables(
            prefabs=MappingProxyType(merged),
            biomes=self.biomes,
            object_kinds=self.object_kinds,
            pin_kinds=self.pin_kinds,
            skills=self.skills,
        )


def load_prefab_list(path: Path) -> list[str]:
    """Read a prefab name list: {"prefabs": [...]} or a bare JSON list."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("prefabs", [])
    return [str(n) for n in data]


def load_tables(extra_prefabs: Path | None = None) -> LookupTables:
    """Build the tables from the bundled prefab list (+ an optional user list)."""
    names = load_prefab_list(PREFABS_JSON) if PREFABS_JSON.exists() else []
    if extra_prefabs is not None:
        names.extend(load_prefab_list(extra_prefabs))
    log.debug("loaded %d prefab names", len(names))
    return LookupTables(
        prefabs=MappingProxyType(prefab_names(names)),
        biomes=_enum_names(Biome),
        object_kinds=_enum_names(ObjectType),
        pin_kinds=_enum_names(PinType),
        skills=_enum_names(SkillType),
    )


_default: LookupTables | None = None


def default_tables() -> LookupTables:
    """Process-wide tables, built on first use."""
    global _default
    if _default is None:
        _default = load_tables()
    return _default
