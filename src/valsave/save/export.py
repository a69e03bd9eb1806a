"""
JSON export — turn a decoded save tree into plain dicts/lists.

Dataclasses and mappings become dicts, tuples and frozensets become lists,
and mapping keys become strings:
    ZdoId     -> "user:id"
    Vector2   -> "x,y"
    None      -> "-"  (locations at non-finite positions)
    int       -> str(int)

Byte strings are written as hex. Explored-area masks are large (a 2048x2048
map is 4 MiB), so they are summarised unless full=True.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

from valsave.protocol.primitives import Vector2, ZdoId

# Explored masks above this size are summarised
MAX_INLINE_BYTES = 4096


def _key(k: Any) -> str:
    if isinstance(k, ZdoId):
        return str(k)
    if isinstance(k, Vector2):
        return f"{k.x},{k.y}"
    if k is None:
        return "-"
    if isinstance(k, Enum):
        return k.name
    return str(k)


def _bytes(raw: bytes, full: bool) -> Any:
    if full or len(raw) <= MAX_INLINE_BYTES:
        return raw.hex()
    return {"size": len(raw), "nonzero": len(raw) - raw.count(0)}


def to_jsonable(obj: Any, full: bool = False) -> Any:
    """Recursively convert a decoded object into JSON-safe primitives."""
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return _bytes(bytes(obj), full)
    if isinstance(obj, ZdoId):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.name
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_jsonable(getattr(obj, f.name), full)
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, Mapping):
        return {_key(k): to_jsonable(v, full) for k, v in obj.items()}
    if isinstance(obj, (frozenset, set)):
        items = [to_jsonable(v, full) for v in obj]
        return sorted(items, key=repr)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v, full) for v in obj]
    return str(obj)
