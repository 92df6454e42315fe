"""
Byte Cursor
============

Seekable, endianness-aware reader over an in-memory ELF image.

The cursor is the only object in NoteScope that tracks a stream position.
Decoders consume it sequentially and copy whatever they read into owned
``bytes`` objects, so nothing they return refers back to the cursor.

Byte order uses :mod:`struct` prefixes: ``"<"`` for ELFDATA2LSB and ``">"``
for ELFDATA2MSB.
"""

from __future__ import annotations

import struct

from notescope.core.errors import TruncatedRead


_VALID_BYTE_ORDERS: frozenset[str] = frozenset({"<", ">"})


class ByteCursor:
    """Sequential reader with absolute seek and relative skip.

    Usage::

        cursor = ByteCursor(data, byte_order="<")
        cursor.seek(0x2c0)
        namesz = cursor.read_u32()
        name = cursor.read(namesz)

    Args:
        data:       Complete image contents.
        byte_order: ``"<"`` (little-endian) or ``">"`` (big-endian).
    """

    def __init__(self, data: bytes, byte_order: str = "<") -> None:
        if byte_order not in _VALID_BYTE_ORDERS:
            raise ValueError(f"unsupported byte order: {byte_order!r}")
        self._data: bytes = bytes(data)
        self._byte_order: str = byte_order
        self._pos: int = 0

    # ------------------------------------------------------------------ #
    #  Position
    # ------------------------------------------------------------------ #

    @property
    def byte_order(self) -> str:
        """The :mod:`struct` byte-order prefix used for integer reads."""
        return self._byte_order

    @property
    def size(self) -> int:
        """Total number of bytes in the image."""
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Bytes left between the current position and the end of data."""
        return max(len(self._data) - self._pos, 0)

    def tell(self) -> int:
        """Return the current absolute position."""
        return self._pos

    def seek(self, offset: int) -> None:
        """Move to an absolute *offset*.

        Seeking past the end is allowed; subsequent reads come back short.
        """
        if offset < 0:
            raise ValueError(f"negative seek offset: {offset}")
        self._pos = offset

    def skip(self, count: int) -> None:
        """Advance the position by *count* bytes without reading."""
        if count < 0:
            raise ValueError(f"negative skip: {count}")
        self._pos += count

    # ------------------------------------------------------------------ #
    #  Reads
    # ------------------------------------------------------------------ #

    def read(self, count: int) -> bytes:
        """Read up to *count* bytes; fewer are returned at end of data."""
        if count < 0:
            raise ValueError(f"negative read size: {count}")
        chunk = self._data[self._pos:self._pos + count]
        self._pos += len(chunk)
        return chunk

    def read_exact(self, count: int) -> bytes:
        """Read exactly *count* bytes.

        Raises:
            TruncatedRead: If fewer than *count* bytes remain.  The
                position is left unchanged in that case.
        """
        start = self._pos
        chunk = self._data[start:start + count]
        if len(chunk) != count:
            raise TruncatedRead(count, len(chunk), start)
        self._pos += count
        return chunk

    def _unpack(self, code: str) -> int:
        fmt = self._byte_order + code
        raw = self.read_exact(struct.calcsize(fmt))
        return struct.unpack(fmt, raw)[0]

    def read_u16(self) -> int:
        """Read an unsigned 16-bit integer."""
        return self._unpack("H")

    def read_u32(self) -> int:
        """Read an unsigned 32-bit integer."""
        return self._unpack("I")

    def read_u64(self) -> int:
        """Read an unsigned 64-bit integer."""
        return self._unpack("Q")
