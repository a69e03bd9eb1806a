"""
valsave — Decoder configuration.

One frozen object handed to every decode entry point: the text encoding for
strings/chars and the lookup tables used to label numeric tags.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field
from pathlib import Path

from valsave.data.tables import LookupTables, default_tables, load_tables
from valsave.protocol.cursor import DEFAULT_ENCODING, ByteCursor


@dataclass(frozen=True)
class DecoderConfig:
    """Settings shared by all decoders."""
    encoding: str = DEFAULT_ENCODING
    tables: LookupTables = field(default_factory=default_tables)

    @classmethod
    def from_options(
        cls,
        encoding: str | None = None,
        extra_prefabs: Path | None = None,
    ) -> DecoderConfig:
        """Build a config from CLI-style options. Unknown encodings raise LookupError."""
        encoding = codecs.lookup(encoding or DEFAULT_ENCODING).name
        tables = load_tables(extra_prefabs) if extra_prefabs else default_tables()
        return cls(encoding=encoding, tables=tables)

    def cursor(self, data: bytes | bytearray | memoryview) -> ByteCursor:
        return ByteCursor(data, encoding=self.encoding)
