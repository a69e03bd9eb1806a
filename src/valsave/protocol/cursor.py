"""
ByteCursor — forward-only typed reader over an immutable byte buffer.

Byte order:
- 16-bit integers are read big-endian
- everything wider (i32/u32/i64/u64/f32/f64) is little-endian

The 16-bit asymmetry matches captured save files and is kept as-is.

Strings are .NET BinaryWriter style: a 7-bit varint byte count followed by
the encoded bytes. Length-prefixed blobs ([i32 len][bytes]) are handed out
as nested cursors, so a broken sub-record can never move the outer offset.
"""

from __future__ import annotations

import codecs
import struct

from .errors import InvalidEncoding, MalformedLength, TruncatedInput

_I16 = struct.Struct(">h")
_U16 = struct.Struct(">H")
_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_I64 = struct.Struct("<q")
_U64 = struct.Struct("<Q")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")

# 7-bit groups needed for a 32-bit length
MAX_VARINT_BYTES = 5

DEFAULT_ENCODING = "utf-8"


class ByteCursor:
    """Typed reads over a borrowed buffer with a moving offset.

    `base` is the absolute position of this view inside the top-level
    buffer; it only affects the offsets reported in errors.
    """

    __slots__ = ("_view", "_pos", "_base", "encoding")

    def __init__(self, data: bytes | bytearray | memoryview, encoding: str = DEFAULT_ENCODING, base: int = 0):
        self._view = data if isinstance(data, memoryview) else memoryview(data)
        self._pos = 0
        self._base = base
        self.encoding = encoding

    # ---- bookkeeping ----

    @property
    def offset(self) -> int:
        """Read position relative to this cursor's own buffer."""
        return self._pos

    @property
    def absolute_offset(self) -> int:
        return self._base + self._pos

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._view)

    def __len__(self) -> int:
        return len(self._view)

    def __repr__(self) -> str:
        return f"ByteCursor(offset={self._pos}, size={len(self._view)}, base={self._base})"

    def _take(self, n: int) -> memoryview:
        if n > len(self._view) - self._pos:
            raise TruncatedInput(
                f"need {n} bytes, {self.remaining} left",
                offset=self.absolute_offset,
            )
        chunk = self._view[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def skip(self, n: int) -> None:
        self._take(n)

    # ---- integers ----

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_i8(self) -> int:
        b = self._take(1)[0]
        return b - 0x100 if b & 0x80 else b

    def read_i16(self) -> int:
        return _I16.unpack(self._take(2))[0]

    def read_u16(self) -> int:
        return _U16.unpack(self._take(2))[0]

    def read_i32(self) -> int:
        return _I32.unpack(self._take(4))[0]

    def read_u32(self) -> int:
        return _U32.unpack(self._take(4))[0]

    def read_i64(self) -> int:
        return _I64.unpack(self._take(8))[0]

    def read_u64(self) -> int:
        return _U64.unpack(self._take(8))[0]

    # ---- floats ----

    def read_f32(self) -> float:
        return _F32.unpack(self._take(4))[0]

    def read_f64(self) -> float:
        return _F64.unpack(self._take(8))[0]

    # ---- raw / bool ----

    def read_bytes(self, n: int) -> memoryview:
        """Borrowed view of the next n bytes (no copy)."""
        if n < 0:
            raise MalformedLength(f"negative byte count {n}", offset=self.absolute_offset)
        return self._take(n)

    def read_bool(self) -> bool:
        return self._take(1)[0] != 0

    # ---- text ----

    def read_char(self) -> int:
        """Decode one character, returning its code point.

        Consumes single bytes until the decoder yields output, so a UTF-8
        char takes 1-4 bytes.
        """
        start = self.absolute_offset
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="strict")
        while True:
            b = self._take(1)
            try:
                text = decoder.decode(bytes(b))
            except UnicodeDecodeError as e:
                raise InvalidEncoding(f"invalid {self.encoding} char: {e.reason}", offset=start) from e
            if text:
                return ord(text[0])

    def read_varint(self) -> int:
        """7-bit little-endian groups, high bit = more bytes follow."""
        start = self.absolute_offset
        value = 0
        shift = 0
        for _ in range(MAX_VARINT_BYTES):
            b = self.read_u8()
            value |= (b & 0x7F) << shift
            if not b & 0x80:
                return value
            shift += 7
        raise MalformedLength(f"varint longer than {MAX_VARINT_BYTES} bytes", offset=start)

    def read_string(self) -> str:
        start = self.absolute_offset
        n = self.read_varint()
        if n > self.remaining:
            raise MalformedLength(
                f"string length {n} exceeds {self.remaining} remaining bytes",
                offset=start,
            )
        raw = self._take(n)
        try:
            return bytes(raw).decode(self.encoding, errors="strict")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"invalid {self.encoding} string: {e.reason}", offset=start) from e

    # ---- nested blobs ----

    def read_blob(self) -> ByteCursor:
        """Read [i32 len][bytes] and return a cursor bounded to those bytes."""
        start = self.absolute_offset
        n = self.read_i32()
        if n < 0 or n > self.remaining:
            raise MalformedLength(
                f"blob length {n} with {self.remaining} bytes remaining",
                offset=start,
            )
        base = self.absolute_offset
        return ByteCursor(self._take(n), encoding=self.encoding, base=base)
