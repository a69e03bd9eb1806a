"""
Player payload — the embedded profile blob inside a character file.

Layout is driven entirely by the field tables below; each nested record
(inventory, skills) carries its own version number. Fields gated off for an
old version keep the default given in the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from valsave.config import DecoderConfig
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.errors import UnresolvedReference
from valsave.protocol.primitives import ZERO3, Vector2, Vector3
from valsave.protocol.records import (
    CONFIG, FieldDef, before, between, build, counted, decode_versioned,
    frozen_map, list_of, map_of, nested, only, since,
)

log = logging.getLogger(__name__)


# ---- Data classes ----

@dataclass(frozen=True)
class Item:
    """One inventory slot."""
    name: str
    stack: int
    durability: float
    pos: Vector2  # grid slot, integer pair
    equipped: bool
    quality: int = 1
    variant: int = 0
    crafter_id: int = 0
    crafter_name: str = ""


@dataclass(frozen=True)
class Inventory:
    version: int
    items: tuple[Item, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def equipped(self) -> list[Item]:
        return [i for i in self.items if i.equipped]


@dataclass(frozen=True)
class Food:
    name: str
    health: float
    stamina: float = 0.0


@dataclass(frozen=True)
class Skill:
    kind: int
    name: str | None  # None if the kind has no table entry
    level: float
    accumulator: float = 0.0


@dataclass(frozen=True)
class Player:
    """Embedded player payload."""
    version: int
    max_health: float
    health: float
    stamina: float
    first_spawn: bool
    time_since_death: float
    guardian_power: str
    guardian_power_cooldown: float
    inventory: Inventory
    known_recipes: tuple[str, ...]
    known_stations: Mapping[str, int]
    known_materials: tuple[str, ...]
    shown_tutorials: tuple[str, ...]
    uniques: tuple[str, ...]
    trophies: tuple[str, ...]
    known_biomes: tuple[int, ...]
    known_biome_names: tuple[str | None, ...]
    known_texts: Mapping[str, str]
    beard: str
    hair: str
    skin_color: Vector3
    hair_color: Vector3
    player_model: int
    foods: tuple[Food, ...]
    skills: Mapping[int, Skill] = field(default_factory=frozen_map)
    unresolved: tuple[UnresolvedReference, ...] = ()

    def skill(self, name: str) -> Skill | None:
        """Look up a skill by its resolved name (case-insensitive)."""
        key = name.lower()
        for s in self.skills.values():
            if s.name and s.name.lower() == key:
                return s
        return None


# ---- Inventory (own version) ----

ITEM_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("name", "str"),
    FieldDef("stack", "i32"),
    FieldDef("durability", "f32"),
    FieldDef("pos", "vec2i"),
    FieldDef("equipped", "bool"),
    FieldDef("quality", "i32", since(101), default=1),
    FieldDef("variant", "i32", since(102), default=0),
    FieldDef("crafter_id", "i64", since(103), default=0),
    FieldDef("crafter_name", "str", since(103), default=""),
)

INVENTORY_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("items", list_of(nested(ITEM_FIELDS, lambda v: build(Item, v)))),
)


def decode_inventory(cur: ByteCursor, config: DecoderConfig | None = None) -> Inventory:
    values = decode_versioned(cur, INVENTORY_FIELDS, config)
    return build(Inventory, values)


# ---- Skills (own version) ----

SKILL_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("kind", "i32"),
    FieldDef("level", "f32"),
    FieldDef("accumulator", "f32", since(2), default=0.0),
)

SKILLS_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("entries", list_of(nested(SKILL_FIELDS, dict))),
)


def decode_skills(
    cur: ByteCursor,
    config: DecoderConfig | None = None,
    unresolved: list[UnresolvedReference] | None = None,
) -> dict[int, Skill]:
    """Skill table keyed by kind; a repeated kind overwrites the earlier one."""
    config = config or DecoderConfig()
    sink = unresolved if unresolved is not None else []
    values = decode_versioned(cur, SKILLS_FIELDS, config)
    skills: dict[int, Skill] = {}
    for entry in values["entries"]:
        kind = entry["kind"]
        skills[kind] = Skill(
            kind=kind,
            name=config.tables.resolve("skill", kind, sink),
            level=entry["level"],
            accumulator=entry["accumulator"],
        )
    return skills


# ---- Food ----
# From v14 a food is (name, health[, stamina]); older files stored a fixed
# block of 7 floats (8 from v13) that no longer maps to anything.

def _floats(n: int):
    def read(cur: ByteCursor, values: dict) -> None:
        cur.skip(4 * n)
    return read


FOOD_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("name", "str", since(14), default=""),
    FieldDef("health", "f32", since(14), default=0.0),
    FieldDef("stamina", "f32", since(16), default=0.0),
    FieldDef("legacy_food", _floats(7), before(14), discard=True),
    FieldDef("legacy_food_extra", "f32", between(13, 14), discard=True),
)


def _make_food(values: dict) -> Food | None:
    if values["version"] < 14:
        return None
    return build(Food, values)


# ---- Player ----

def _inventory(cur: ByteCursor, values: dict) -> Inventory:
    return decode_inventory(cur, values[CONFIG])


def _skills(cur: ByteCursor, values: dict) -> dict[int, Skill]:
    return decode_skills(cur, values[CONFIG], values.setdefault("_unresolved", []))


PLAYER_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("max_health", "f32", since(7), default=0.0),
    FieldDef("health", "f32"),
    FieldDef("stamina", "f32", since(10), default=0.0),
    FieldDef("first_spawn", "bool", since(8), default=False),
    FieldDef("time_since_death", "f32", since(20), default=0.0),
    FieldDef("guardian_power", "str", since(23), default=""),
    FieldDef("guardian_power_cooldown", "f32", since(24), default=0.0),
    FieldDef("legacy_zdoid", "zdoid", only(2), discard=True),
    FieldDef("inventory", _inventory),
    FieldDef("known_recipes", list_of("str")),
    FieldDef("legacy_stations", counted("str"), before(15), discard=True),
    FieldDef("known_stations", map_of("str", "i32"), since(15), factory=dict),
    FieldDef("known_materials", list_of("str")),
    FieldDef("shown_tutorials", list_of("str"), before(19) | since(21), default=()),
    FieldDef("uniques", list_of("str"), since(6), default=()),
    FieldDef("trophies", list_of("str"), since(9), default=()),
    FieldDef("known_biomes", list_of("i32"), since(18), default=()),
    FieldDef("known_texts", map_of("str", "str"), since(22), factory=dict),
    FieldDef("beard", "str", since(4), default=""),
    FieldDef("hair", "str", since(4), default=""),
    FieldDef("skin_color", "vec3", since(5), default=ZERO3),
    FieldDef("hair_color", "vec3", since(5), default=ZERO3),
    FieldDef("player_model", "i32", since(11), default=0),
    FieldDef("foods", list_of(nested(FOOD_FIELDS, _make_food)), since(12), default=()),
    FieldDef("skills", _skills, since(17), factory=dict),
)


def decode_player(cur: ByteCursor, config: DecoderConfig | None = None) -> Player:
    """Decode the player payload blob."""
    config = config or DecoderConfig()
    values = decode_versioned(cur, PLAYER_FIELDS, config)
    unresolved: list[UnresolvedReference] = values.get("_unresolved", [])
    biome_names = tuple(
        config.tables.resolve("biome", b, unresolved) for b in values["known_biomes"]
    )
    player = build(
        Player,
        values,
        foods=tuple(f for f in values["foods"] if f is not None),
        known_biome_names=biome_names,
        unresolved=tuple(unresolved),
    )
    log.debug(
        "player v%d: %d items, %d recipes, %d skills",
        player.version, len(player.inventory), len(player.known_recipes), len(player.skills),
    )
    return player
