"""
Decode errors — typed failures raised while walking a save buffer.

Every failure carries the absolute byte offset where it happened and the
dotted path of the field being decoded, so version mismatches can be
located in a hex dump.
"""

from __future__ import annotations

from dataclasses import dataclass


class DecodeError(Exception):
    """Base class for structural decode failures."""

    def __init__(self, message: str, offset: int | None = None, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.field = field

    def annotate(self, name: str) -> None:
        """Prefix the field path with the enclosing field name."""
        if not self.field:
            self.field = name
        elif self.field.startswith("["):
            self.field = f"{name}{self.field}"
        else:
            self.field = f"{name}.{self.field}"

    def __str__(self) -> str:
        parts = [self.message]
        if self.field:
            parts.append(f"field={self.field}")
        if self.offset is not None:
            parts.append(f"offset={self.offset} (0x{self.offset:x})")
        return " | ".join(parts)


class TruncatedInput(DecodeError):
    """Buffer exhausted mid-read."""


class MalformedLength(TruncatedInput):
    """A length prefix points past the end of the buffer (or is negative)."""


class InvalidEncoding(DecodeError):
    """String or char bytes are not valid in the configured text encoding."""


@dataclass(frozen=True)
class UnresolvedReference:
    """A numeric tag with no entry in its lookup table.

    Never raised: the raw value stays on the entity, the symbolic name is
    left as None, and one of these is recorded next to it.
    """
    table: str   # "prefab", "biome", "object_kind", "pin_kind", "skill"
    value: int

    def __str__(self) -> str:
        return f"unresolved {self.table} {self.value}"
