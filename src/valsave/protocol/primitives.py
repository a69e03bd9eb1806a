"""
Primitive value types — coordinates, rotations and world-object ids.

All are frozen and hashable so they can key dicts (zone coordinates,
registry ids).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .cursor import ByteCursor


@dataclass(frozen=True)
class Vector2:
    x: float
    y: float

    @classmethod
    def read_single(cls, cur: ByteCursor) -> Vector2:
        return cls(cur.read_f32(), cur.read_f32())

    @classmethod
    def read_int32(cls, cur: ByteCursor) -> Vector2:
        """Integer pair — zone coordinates and inventory grid slots."""
        return cls(cur.read_i32(), cur.read_i32())

    def __str__(self) -> str:
        if isinstance(self.x, int) and isinstance(self.y, int):
            return f"({self.x}, {self.y})"
        return f"({self.x:.1f}, {self.y:.1f})"


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    @classmethod
    def read_single(cls, cur: ByteCursor) -> Vector3:
        return cls(cur.read_f32(), cur.read_f32(), cur.read_f32())

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f}, {self.z:.1f})"


ZERO3 = Vector3(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Quaternion:
    x: float
    y: float
    z: float
    w: float

    @classmethod
    def read_single(cls, cur: ByteCursor) -> Quaternion:
        return cls(cur.read_f32(), cur.read_f32(), cur.read_f32(), cur.read_f32())

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f}, {self.z:.1f}, {self.w:.1f})"


@dataclass(frozen=True, order=True)
class ZdoId:
    """World-object id: owning session (i64) + sequence number (u32)."""
    user_id: int
    id: int

    @classmethod
    def read(cls, cur: ByteCursor) -> ZdoId:
        return cls(cur.read_i64(), cur.read_u32())

    def __str__(self) -> str:
        return f"{self.user_id}:{self.id}"


# ---- Stable string hash ----
# Ids that predate dedicated fields (e.g. a world object's prefab) are stored
# under the hash of a literal key. The hash runs two interleaved djb2-style
# accumulators over even/odd characters with 32-bit wraparound.

def _i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def stable_hash(text: str) -> int:
    """Signed 32-bit hash matching the game's GetStableHashCode.

    Runs over UTF-16 code units, so characters above U+FFFF count as a
    surrogate pair.
    """
    raw = text.encode("utf-16-le", "surrogatepass")
    units = struct.unpack(f"<{len(raw) // 2}H", raw)
    a = 5381
    b = a
    n = len(units)
    i = 0
    while i < n and units[i] != 0:
        a = _i32(_i32(a << 5) + a) ^ units[i]
        if i == n - 1 or units[i + 1] == 0:
            break
        b = _i32(_i32(b << 5) + b) ^ units[i + 1]
        i += 2
    return _i32(a + b * 1566083941)
