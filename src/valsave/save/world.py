"""
World files — the world database (.db) and its metadata (.fwl).

World database: one versioned record, no outer wrapper.
    net time          f64             v4+
    object registry                   always (see zdo.py)
    zone system                       v12+
    random events                     v15+

World metadata: [i32 len][record] with name, seed and world id.

The zone system and random-event state share the world record's version.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Mapping

from valsave.config import DecoderConfig
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.errors import DecodeError
from valsave.protocol.primitives import ZERO3, Vector2, Vector3
from valsave.protocol.records import (
    CONFIG, FieldDef, build, decode_fields, decode_versioned, frozen_map, list_of,
    nested, since,
)
from valsave.save.zdo import ZdoRegistry, decode_registry

log = logging.getLogger(__name__)

ZONE_SIZE = 64


def zone_of(point: Vector3) -> Vector2 | None:
    """Zone coordinate containing a world position (x/z plane).

    None when x or z is NaN or infinite; such a position lies in no zone.
    """
    if not (math.isfinite(point.x) and math.isfinite(point.z)):
        return None
    half = ZONE_SIZE / 2
    return Vector2(
        math.floor((point.x + half) / ZONE_SIZE),
        math.floor((point.z + half) / ZONE_SIZE),
    )


# ---- Data classes ----

@dataclass(frozen=True)
class LocationInstance:
    name: str
    position: Vector3
    placed: bool = False

    @property
    def zone(self) -> Vector2 | None:
        return zone_of(self.position)


@dataclass(frozen=True)
class ZoneSystem:
    generated_zones: frozenset[Vector2] = frozenset()
    pgw_version: int = 0
    location_version: int = 0
    global_keys: frozenset[str] = frozenset()
    locations_generated: bool = False
    locations: Mapping[Vector2 | None, LocationInstance] = field(default_factory=frozen_map)

    def location_at(self, point: Vector3) -> LocationInstance | None:
        zone = zone_of(point)
        return None if zone is None else self.locations.get(zone)


@dataclass(frozen=True)
class RandEventSystem:
    event_timer: float = 0.0
    event_name: str = ""
    event_time: float = 0.0
    event_position: Vector3 = ZERO3

    @property
    def active(self) -> bool:
        return bool(self.event_name)


@dataclass(frozen=True)
class World:
    version: int
    net_time: float
    zdos: ZdoRegistry
    zone_system: ZoneSystem
    rand_event_system: RandEventSystem


@dataclass(frozen=True)
class WorldMeta:
    version: int
    name: str
    seed_name: str
    seed: int
    uid: int
    world_gen_version: int = 0


# ---- Zone system ----

LOCATION_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("name", "str"),
    FieldDef("position", "vec3"),
    FieldDef("placed", "bool", since(19), default=False),
)


def _locations(cur: ByteCursor, values: dict) -> dict[Vector2 | None, LocationInstance]:
    """Location instances keyed by the zone their position falls in.

    Locations at non-finite positions share the None key.
    """
    read = list_of(nested(LOCATION_FIELDS, lambda v: build(LocationInstance, v)))
    return {loc.zone: loc for loc in read(cur, values)}


ZONE_SYSTEM_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("generated_zones", list_of("vec2i")),
    FieldDef("pgw_version", "i32", since(13), default=0),
    FieldDef("location_version", "i32", since(21), default=0),
    FieldDef("global_keys", list_of("str"), since(14), default=()),
    FieldDef("locations_generated", "bool", since(20), default=False),
    FieldDef("locations", _locations, since(18), factory=dict),
)


def _zone_system(cur: ByteCursor, values: dict) -> ZoneSystem:
    zs = decode_fields(cur, ZONE_SYSTEM_FIELDS, values["version"], values[CONFIG])
    return build(
        ZoneSystem,
        zs,
        generated_zones=frozenset(zs["generated_zones"]),
        global_keys=frozenset(zs["global_keys"]),
    )


# ---- Random events ----

RAND_EVENT_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("event_timer", "f32"),
    FieldDef("event_name", "str", since(25), default=""),
    FieldDef("event_time", "f32", since(25), default=0.0),
    FieldDef("event_position", "vec3", since(25), default=ZERO3),
)


# ---- World record ----

def _registry(cur: ByteCursor, values: dict) -> ZdoRegistry:
    return decode_registry(cur, values["version"], values[CONFIG])


WORLD_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("net_time", "f64", since(4), default=0.0),
    FieldDef("zdos", _registry),
    FieldDef("zone_system", _zone_system, since(12), default=ZoneSystem()),
    FieldDef(
        "rand_event_system",
        nested(RAND_EVENT_FIELDS, lambda v: build(RandEventSystem, v)),
        since(15),
        default=RandEventSystem(),
    ),
)


def decode_world(data: bytes | bytearray | memoryview, config: DecoderConfig | None = None) -> World:
    """Decode a world database file."""
    config = config or DecoderConfig()
    cur = config.cursor(data)
    values = decode_versioned(cur, WORLD_FIELDS, config)
    world = build(World, values)
    log.debug(
        "world v%d: %d objects, %d generated zones, %d locations",
        world.version, len(world.zdos.objects),
        len(world.zone_system.generated_zones), len(world.zone_system.locations),
    )
    if not cur.at_end:
        log.debug("world: %d trailing bytes ignored", cur.remaining)
    return world


# ---- World metadata ----

WORLD_META_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("name", "str"),
    FieldDef("seed_name", "str"),
    FieldDef("seed", "i32"),
    FieldDef("uid", "i64"),
    FieldDef("world_gen_version", "i32", since(26), default=0),
)


def decode_world_meta(data: bytes | bytearray | memoryview, config: DecoderConfig | None = None) -> WorldMeta:
    """Decode a world metadata file: [i32 len][record]."""
    config = config or DecoderConfig()
    cur = config.cursor(data)
    try:
        values = decode_versioned(cur.read_blob(), WORLD_META_FIELDS, config)
    except DecodeError as e:
        e.annotate("meta")
        raise
    meta = build(WorldMeta, values)
    log.debug("world meta %r v%d seed %r", meta.name, meta.version, meta.seed_name)
    return meta
