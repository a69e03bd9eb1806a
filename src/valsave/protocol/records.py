"""
Versioned records — declarative field tables for every save structure.

Each structure starts with an i32 format version. Every later field is
present only when a predicate over that version holds, and fields are read
in the order they are declared. A table is a tuple of FieldDef:

    FieldDef("stamina", "f32", since(10), default=0.0)
    FieldDef("legacy_owner", "zdoid", only(2), discard=True)

`kind` is either a primitive type tag (see read_value) or a reader callable
`(cursor, values) -> value`, where `values` holds everything decoded so far
in the current record (including "version").

Legacy fields marked discard=True are still consumed when their gate holds,
so the cursor stays aligned, but never appear in the result.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

from .cursor import ByteCursor
from .errors import DecodeError
from .primitives import Quaternion, Vector2, Vector3, ZdoId

Reader = Callable[[ByteCursor, dict], Any]
Kind = Union[str, Reader]

# Reserved key carrying the DecoderConfig through a record's values
CONFIG = "_config"


# ---- Version gates ----

@dataclass(frozen=True)
class Gate:
    """Predicate over a record's format version."""
    label: str
    test: Callable[[int], bool]

    def __call__(self, version: int) -> bool:
        return self.test(version)

    def __or__(self, other: Gate) -> Gate:
        return Gate(
            f"{self.label} | {other.label}",
            lambda v, a=self.test, b=other.test: a(v) or b(v),
        )

    def __repr__(self) -> str:
        return f"Gate({self.label})"


ALWAYS = Gate("always", lambda v: True)


def since(n: int) -> Gate:
    return Gate(f">= {n}", lambda v: v >= n)


def before(n: int) -> Gate:
    return Gate(f"< {n}", lambda v: v < n)


def between(lo: int, hi: int) -> Gate:
    """lo <= version < hi"""
    return Gate(f"{lo}..{hi - 1}", lambda v: lo <= v < hi)


def only(n: int) -> Gate:
    return Gate(f"== {n}", lambda v: v == n)


# ---- Field definitions ----

@dataclass(frozen=True)
class FieldDef:
    """A field within a versioned record."""
    name: str
    kind: Kind
    gate: Gate = ALWAYS
    default: Any = None
    factory: Callable[[], Any] | None = None  # for mutable defaults (dicts)
    discard: bool = False  # legacy bytes: consume, don't keep

    def default_value(self) -> Any:
        return self.factory() if self.factory is not None else self.default


def read_value(cur: ByteCursor, kind: Kind, values: dict) -> Any:
    """Decode a single value of the given kind at the cursor."""
    if callable(kind):
        return kind(cur, values)
    match kind:
        case "u8":
            return cur.read_u8()
        case "i8":
            return cur.read_i8()
        case "i16":
            return cur.read_i16()
        case "u16":
            return cur.read_u16()
        case "i32":
            return cur.read_i32()
        case "u32":
            return cur.read_u32()
        case "i64":
            return cur.read_i64()
        case "u64":
            return cur.read_u64()
        case "f32":
            return cur.read_f32()
        case "f64":
            return cur.read_f64()
        case "bool":
            return cur.read_bool()
        case "char":
            return cur.read_char()
        case "str":
            return cur.read_string()
        case "vec2":
            return Vector2.read_single(cur)
        case "vec2i":
            return Vector2.read_int32(cur)
        case "vec3":
            return Vector3.read_single(cur)
        case "quat":
            return Quaternion.read_single(cur)
        case "zdoid":
            return ZdoId.read(cur)
        case _:
            raise ValueError(f"unknown field kind {kind!r}")


def decode_fields(
    cur: ByteCursor,
    fields: tuple[FieldDef, ...],
    version: int,
    config: Any = None,
) -> dict:
    """Walk a field table in declaration order.

    Returns a dict of kept field values; fields whose gate fails get their
    default. Errors are annotated with the failing field's name.
    """
    out = {"version": version, CONFIG: config}
    for f in fields:
        if not f.gate(version):
            if not f.discard:
                out[f.name] = f.default_value()
            continue
        try:
            value = read_value(cur, f.kind, out)
        except DecodeError as e:
            e.annotate(f.name)
            raise
        if not f.discard:
            out[f.name] = value
    return out


def decode_versioned(cur: ByteCursor, fields: tuple[FieldDef, ...], config: Any = None) -> dict:
    """Read the leading i32 version, then the field table."""
    try:
        version = cur.read_i32()
    except DecodeError as e:
        e.annotate("version")
        raise
    return decode_fields(cur, fields, version, config)


def frozen_map(items: Any = ()) -> Mapping:
    """Read-only view over a fresh dict."""
    return MappingProxyType(dict(items))


def build(cls: type, values: dict, **extra: Any) -> Any:
    """Construct a dataclass from decoded values, ignoring bookkeeping keys.

    Dict values are handed over as read-only mapping views.
    """
    names = {f.name for f in dataclasses.fields(cls)}
    kwargs = {k: v for k, v in values.items() if k in names}
    kwargs.update(extra)
    for k, v in kwargs.items():
        if isinstance(v, dict):
            kwargs[k] = frozen_map(v)
    return cls(**kwargs)


# ---- Composite readers ----
# Building blocks for tables: counted lists, maps and nested blobs.

def _indexed(reader: Callable[[], Any], index: int) -> Any:
    try:
        return reader()
    except DecodeError as e:
        e.annotate(f"[{index}]")
        raise


def list_of(kind: Kind) -> Reader:
    """i32 count, then count values."""
    def read(cur: ByteCursor, values: dict) -> tuple:
        count = cur.read_i32()
        return tuple(
            _indexed(lambda: read_value(cur, kind, values), i)
            for i in range(count)
        )
    return read


def map_of(key: Kind, value: Kind) -> Reader:
    """i32 count, then count (key, value) pairs. Later keys overwrite."""
    def read(cur: ByteCursor, values: dict) -> dict:
        count = cur.read_i32()
        out = {}
        for i in range(count):
            k = _indexed(lambda: read_value(cur, key, values), i)
            out[k] = _indexed(lambda: read_value(cur, value, values), i)
        return out
    return read


def char_map_of(value: Kind) -> Reader:
    """char-encoded count, then (i32 key, value) pairs — world-object properties."""
    def read(cur: ByteCursor, values: dict) -> dict:
        count = cur.read_char()
        out = {}
        for i in range(count):
            k = _indexed(cur.read_i32, i)
            out[k] = _indexed(lambda: read_value(cur, value, values), i)
        return out
    return read


def optional_blob(decoder: Callable[[ByteCursor, Any], Any]) -> Reader:
    """bool flag, then a blob only when the flag is set."""
    def read(cur: ByteCursor, values: dict) -> Any:
        if not cur.read_bool():
            return None
        return decoder(cur.read_blob(), values.get(CONFIG))
    return read


def nested(fields: tuple[FieldDef, ...], make: Callable[[dict], Any]) -> Reader:
    """Inline sub-record that shares the enclosing record's version."""
    def read(cur: ByteCursor, values: dict) -> Any:
        return make(decode_fields(cur, fields, values["version"], values.get(CONFIG)))
    return read


def counted(kind: Kind) -> Reader:
    """i32 count of values that are read and dropped (legacy lists)."""
    def read(cur: ByteCursor, values: dict) -> int:
        count = cur.read_i32()
        for i in range(count):
            _indexed(lambda: read_value(cur, kind, values), i)
        return count
    return read
