"""
Character file — a player's persistent profile.

File layout:
    [i32 len][character record]
    [i32 len][checksum bytes]

The checksum is carried through untouched. The character record holds
per-world spawn/logout/death/home points, each optionally followed by a
map-data blob, and ends with an optional player payload blob.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Mapping

from valsave.config import DecoderConfig
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.errors import DecodeError, MalformedLength, UnresolvedReference
from valsave.protocol.primitives import ZERO3, Vector3
from valsave.protocol.records import (
    FieldDef, build, decode_versioned, list_of, nested,
    optional_blob, since,
)
from valsave.save.player import Player, decode_player

log = logging.getLogger(__name__)


# ---- Data classes ----

@dataclass(frozen=True)
class PlayerStats:
    kills: int = 0
    deaths: int = 0
    crafts: int = 0
    builds: int = 0


@dataclass(frozen=True)
class Pin:
    """A map marker."""
    name: str
    position: Vector3
    kind: int
    kind_name: str | None
    checked: bool


@dataclass(frozen=True)
class MapData:
    """Explored-area mask (texture_size x texture_size) plus map pins."""
    version: int
    texture_size: int
    explored: bytes  # one byte per cell, 0/1, row-major
    pins: tuple[Pin, ...] = ()
    unresolved: tuple[UnresolvedReference, ...] = ()

    def is_explored(self, x: int, y: int) -> bool:
        if not (0 <= x < self.texture_size and 0 <= y < self.texture_size):
            raise IndexError(f"cell ({x}, {y}) outside {self.texture_size}x{self.texture_size} map")
        return self.explored[y * self.texture_size + x] != 0

    @property
    def explored_count(self) -> int:
        return len(self.explored) - self.explored.count(0)


@dataclass(frozen=True)
class WorldPlayerData:
    """Per-world points for one character."""
    have_custom_spawn_point: bool
    spawn_point: Vector3
    have_logout_point: bool
    logout_point: Vector3
    home_point: Vector3
    have_death_point: bool = False
    death_point: Vector3 = ZERO3
    map_data: MapData | None = None


@dataclass(frozen=True)
class Character:
    version: int
    stats: PlayerStats
    worlds: Mapping[int, WorldPlayerData]
    player_name: str
    player_id: int
    start_seed: str
    player: Player | None = None
    checksum: bytes = b""


# ---- Map data (own version, stored as a blob) ----

def _explored(cur: ByteCursor, values: dict) -> bytes:
    size = values["texture_size"]
    if size < 0:
        raise MalformedLength(f"negative texture size {size}", offset=cur.absolute_offset)
    raw = cur.read_bytes(size * size)
    return bytes(1 if b else 0 for b in raw)


PIN_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("name", "str"),
    FieldDef("position", "vec3"),
    FieldDef("kind", "i32"),
    FieldDef("checked", "bool"),
)

MAP_DATA_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("texture_size", "i32"),
    FieldDef("explored", _explored),
    FieldDef("pins", list_of(nested(PIN_FIELDS, dict)), since(2), default=()),
)


def decode_map_data(cur: ByteCursor, config: DecoderConfig | None = None) -> MapData:
    config = config or DecoderConfig()
    values = decode_versioned(cur, MAP_DATA_FIELDS, config)
    unresolved: list[UnresolvedReference] = []
    pins = tuple(
        build(Pin, p, kind_name=config.tables.resolve("pin_kind", p["kind"], unresolved))
        for p in values["pins"]
    )
    return build(MapData, values, pins=pins, unresolved=tuple(unresolved))


# ---- Character record ----

STATS_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("kills", "i32"),
    FieldDef("deaths", "i32"),
    FieldDef("crafts", "i32"),
    FieldDef("builds", "i32"),
)

# Shares the character record's version
WORLD_PLAYER_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("have_custom_spawn_point", "bool"),
    FieldDef("spawn_point", "vec3"),
    FieldDef("have_logout_point", "bool"),
    FieldDef("logout_point", "vec3"),
    FieldDef("have_death_point", "bool", since(30), default=False),
    FieldDef("death_point", "vec3", since(30), default=ZERO3),
    FieldDef("home_point", "vec3"),
    FieldDef("map_data", optional_blob(decode_map_data), since(29), default=None),
)


def _worlds(cur: ByteCursor, values: dict) -> dict[int, WorldPlayerData]:
    read_entry = nested(WORLD_PLAYER_FIELDS, lambda v: build(WorldPlayerData, v))
    worlds: dict[int, WorldPlayerData] = {}
    count = cur.read_i32()
    for i in range(count):
        try:
            key = cur.read_i64()
            worlds[key] = read_entry(cur, values)
        except DecodeError as e:
            e.annotate(f"[{i}]")
            raise
    return worlds


CHARACTER_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("stats", nested(STATS_FIELDS, lambda v: build(PlayerStats, v)), since(28), default=PlayerStats()),
    FieldDef("worlds", _worlds),
    FieldDef("player_name", "str"),
    FieldDef("player_id", "i64"),
    FieldDef("start_seed", "str"),
    FieldDef("player", optional_blob(decode_player)),
)


def decode_character_record(cur: ByteCursor, config: DecoderConfig | None = None) -> Character:
    """Decode the inner character record (without the outer file framing)."""
    values = decode_versioned(cur, CHARACTER_FIELDS, config or DecoderConfig())
    return build(Character, values)


def decode_character(data: bytes | bytearray | memoryview, config: DecoderConfig | None = None) -> Character:
    """Decode a whole character file: record blob followed by checksum blob."""
    config = config or DecoderConfig()
    cur = config.cursor(data)
    try:
        record = cur.read_blob()
    except DecodeError as e:
        e.annotate("character")
        raise
    try:
        checksum = bytes(cur.read_bytes(cur.read_i32()))
    except DecodeError as e:
        e.annotate("checksum")
        raise
    try:
        character = decode_character_record(record, config)
    except DecodeError as e:
        e.annotate("character")
        raise
    log.debug(
        "character %r v%d: %d worlds, player payload %s",
        character.player_name, character.version, len(character.worlds),
        "present" if character.player else "absent",
    )
    return replace(character, checksum=checksum)
