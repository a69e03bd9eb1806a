"""
World objects (ZDOs) — the generic entity behind every placed or spawned
thing in a world.

Each object has a fixed header plus six typed property maps keyed by i32
(usually the stable hash of a property name):

    floats   f32          ints     i32
    vec3s    Vector3      longs    i64
    quats    Quaternion   strings  str

Registry layout inside the world record:

    i64   legacy (ignored)
    u32   next_uid
    i32   count, then count x (ZdoId, [i32 len][object record])
    i32   dead count, then count x (ZdoId, i64 time of death)

Object records use the world file's version, not one of their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from valsave.config import DecoderConfig
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.errors import DecodeError, UnresolvedReference
from valsave.protocol.primitives import Quaternion, Vector2, Vector3, ZdoId, stable_hash
from valsave.protocol.records import (
    CONFIG, FieldDef, before, between, build, char_map_of, decode_fields,
    frozen_map, map_of, since,
)

log = logging.getLogger(__name__)

# Before v17 the prefab id lived in the int properties under this key
PREFAB_KEY = stable_hash("prefab")
PREFAB_FIELD_VERSION = 17


def prefab_reference(version: int, prefab_field: int | None, ints: Mapping[int, int]) -> int | None:
    """Prefab id of an object, wherever its format version stored it."""
    if version >= PREFAB_FIELD_VERSION:
        return prefab_field
    return ints.get(PREFAB_KEY)


# ---- Data classes ----

@dataclass(frozen=True)
class WorldObject:
    """One decoded ZDO."""
    uid: ZdoId
    version: int
    owner_revision: int
    data_revision: int
    persistent: bool
    owner: int
    time_created: int
    pgw_version: int
    kind: int
    distant: bool
    prefab_field: int | None  # dedicated field, v17+
    sector: Vector2
    position: Vector3
    rotation: Quaternion
    floats: Mapping[int, float] = field(default_factory=frozen_map)
    vec3s: Mapping[int, Vector3] = field(default_factory=frozen_map)
    quats: Mapping[int, Quaternion] = field(default_factory=frozen_map)
    ints: Mapping[int, int] = field(default_factory=frozen_map)
    longs: Mapping[int, int] = field(default_factory=frozen_map)
    strings: Mapping[int, str] = field(default_factory=frozen_map)
    kind_name: str | None = None
    prefab_name: str | None = None
    unresolved: tuple[UnresolvedReference, ...] = ()

    @property
    def prefab(self) -> int | None:
        return prefab_reference(self.version, self.prefab_field, self.ints)

    def __hash__(self) -> int:
        return hash((self.uid, self.version, self.data_revision))

    def property_count(self) -> int:
        return (
            len(self.floats) + len(self.vec3s) + len(self.quats)
            + len(self.ints) + len(self.longs) + len(self.strings)
        )

    def get(self, name: str, default=None):
        """Look a property up by name across all six maps."""
        key = stable_hash(name)
        for table in (self.floats, self.vec3s, self.quats, self.ints, self.longs, self.strings):
            if key in table:
                return table[key]
        return default


@dataclass(frozen=True)
class ZdoRegistry:
    next_uid: int = 0
    objects: Mapping[ZdoId, WorldObject] = field(default_factory=frozen_map)
    dead: Mapping[ZdoId, int] = field(default_factory=frozen_map)  # id -> time of death

    def __len__(self) -> int:
        return len(self.objects)

    def by_prefab(self, name: str) -> list[WorldObject]:
        prefab = stable_hash(name)
        return [o for o in self.objects.values() if o.prefab == prefab]

    def prefab_counts(self) -> dict[str, int]:
        """Object count per prefab name (raw id as text when unresolved)."""
        counts: dict[str, int] = {}
        for o in self.objects.values():
            label = o.prefab_name or str(o.prefab)
            counts[label] = counts.get(label, 0) + 1
        return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


# ---- Object record ----

ZDO_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("owner_revision", "u32"),
    FieldDef("data_revision", "u32"),
    FieldDef("persistent", "bool"),
    FieldDef("owner", "i64"),
    FieldDef("time_created", "i64"),
    FieldDef("pgw_version", "i32"),
    FieldDef("legacy_i32", "i32", between(16, 24), discard=True),
    FieldDef("kind", "i8", since(23), default=0),
    FieldDef("distant", "bool", since(22), default=False),
    FieldDef("legacy_char_a", "char", before(13), discard=True),
    FieldDef("legacy_char_b", "char", before(13), discard=True),
    FieldDef("prefab_field", "i32", since(PREFAB_FIELD_VERSION), default=None),
    FieldDef("sector", "vec2i"),
    FieldDef("position", "vec3"),
    FieldDef("rotation", "quat"),
    FieldDef("floats", char_map_of("f32")),
    FieldDef("vec3s", char_map_of("vec3")),
    FieldDef("quats", char_map_of("quat")),
    FieldDef("ints", char_map_of("i32")),
    FieldDef("longs", char_map_of("i64")),
    FieldDef("strings", char_map_of("str")),
)


def decode_zdo(
    cur: ByteCursor,
    uid: ZdoId,
    version: int,
    config: DecoderConfig | None = None,
) -> WorldObject:
    """Decode one object record (the contents of its blob)."""
    config = config or DecoderConfig()
    values = decode_fields(cur, ZDO_FIELDS, version, config)
    unresolved: list[UnresolvedReference] = []
    prefab = prefab_reference(version, values["prefab_field"], values["ints"])
    return build(
        WorldObject,
        values,
        uid=uid,
        kind_name=config.tables.resolve("object_kind", values["kind"], unresolved),
        prefab_name=config.tables.resolve("prefab", prefab, unresolved),
        unresolved=tuple(unresolved),
    )


# ---- Registry ----

def _objects(cur: ByteCursor, values: dict) -> dict[ZdoId, WorldObject]:
    """Later entries with the same id replace earlier ones."""
    objects: dict[ZdoId, WorldObject] = {}
    count = cur.read_i32()
    for i in range(count):
        try:
            uid = ZdoId.read(cur)
            objects[uid] = decode_zdo(cur.read_blob(), uid, values["version"], values[CONFIG])
        except DecodeError as e:
            e.annotate(f"[{i}]")
            raise
    return objects


REGISTRY_FIELDS: tuple[FieldDef, ...] = (
    FieldDef("legacy_i64", "i64", discard=True),
    FieldDef("next_uid", "u32"),
    FieldDef("objects", _objects),
    FieldDef("dead", map_of("zdoid", "i64")),
)


def decode_registry(cur: ByteCursor, version: int, config: DecoderConfig | None = None) -> ZdoRegistry:
    values = decode_fields(cur, REGISTRY_FIELDS, version, config or DecoderConfig())
    registry = build(ZdoRegistry, values)
    log.debug(
        "registry: %d objects, %d dead, next uid %d",
        len(registry.objects), len(registry.dead), registry.next_uid,
    )
    return registry
