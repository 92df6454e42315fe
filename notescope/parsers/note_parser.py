"""
ELF Note Record Parser
=======================

Decodes note records from a byte cursor positioned over an ``SHT_NOTE``
section or ``PT_NOTE`` segment.

Record layout (all words in the file's byte order)::

    +0              namesz   (4 bytes)
    +4              descsz   (4 bytes)
    +8              type     (4 bytes)
    +12             name     (namesz bytes, NUL terminated)
    +12+namesz      padding to the next 4-byte boundary
    ...             desc     (descsz bytes)
    ...             padding to the next 4-byte boundary

Regions aligned to 8 bytes (``.note.gnu.property`` on 64-bit targets) use
the same layout with 8-byte boundaries, measured from the record start.

The name and descriptor are each read exactly once into owned buffers.
Vendor-specific views are derived afterwards from the captured descriptor
through a :class:`DescriptorRegistry`, never by reading the cursor again.

References:
    - System V Application Binary Interface, Edition 4.1, "Note Section".
    - Linux man page: elf(5), "Notes (Nhdr)".
"""

from __future__ import annotations

import logging
from typing import Optional

from notescope.core.errors import TruncatedRead, TruncatedRecord
from notescope.core.models import NoteEntry, note_type_name
from notescope.parsers.cursor import ByteCursor
from notescope.parsers.descriptors import DescriptorRegistry, default_registry


logger = logging.getLogger(__name__)

NOTE_HEADER_SIZE: int = 12


def padding(size: int, alignment: int = 4) -> int:
    """Bytes needed after a *size*-byte field to reach *alignment*."""
    return (alignment - size % alignment) % alignment


def align(size: int, alignment: int = 4) -> int:
    """Round *size* up to a multiple of *alignment*."""
    return size + padding(size, alignment)


class NoteRecordDecoder:
    """Single-pass decoder for note records.

    Usage::

        cursor = ByteCursor(image, byte_order="<")
        decoder = NoteRecordDecoder()
        entry = decoder.decode(cursor, section_offset)
        entries = decoder.decode_region(cursor, section_offset, section_size)

    Args:
        registry:  Vendor descriptor decoders.  Defaults to the built-in
                   registry (ABI tag only).
        alignment: Boundary the name and descriptor are padded to,
                   relative to the record start.  4 for standard notes,
                   8 for regions whose alignment is 8.
    """

    def __init__(
        self,
        registry: Optional[DescriptorRegistry] = None,
        alignment: int = 4,
    ) -> None:
        if alignment not in (4, 8):
            raise ValueError(f"unsupported note alignment: {alignment}")
        self._registry: DescriptorRegistry = (
            registry if registry is not None else default_registry()
        )
        self._alignment: int = alignment

    @property
    def alignment(self) -> int:
        return self._alignment

    @property
    def registry(self) -> DescriptorRegistry:
        return self._registry

    # ------------------------------------------------------------------ #
    #  Single record
    # ------------------------------------------------------------------ #

    def decode(self, cursor: ByteCursor, offset: int) -> NoteEntry:
        """Decode the record whose header starts at *offset*.

        On return the cursor sits after the descriptor padding, at the
        start of the following record.

        Raises:
            TruncatedRecord: The header, name or descriptor is shorter than
                declared.  No entry is produced.
        """
        cursor.seek(offset)
        try:
            name_size = cursor.read_u32()
            descriptor_size = cursor.read_u32()
            note_type = cursor.read_u32()
        except TruncatedRead as exc:
            raise TruncatedRecord(
                "header", NOTE_HEADER_SIZE, cursor.tell() - offset + exc.actual, offset
            ) from exc

        name_bytes = cursor.read(name_size)
        if len(name_bytes) != name_size:
            raise TruncatedRecord("name", name_size, len(name_bytes), offset)
        cursor.skip(padding(NOTE_HEADER_SIZE + name_size, self._alignment))

        descriptor = cursor.read(descriptor_size)
        if len(descriptor) != descriptor_size:
            raise TruncatedRecord(
                "descriptor", descriptor_size, len(descriptor), offset
            )
        cursor.skip(padding(descriptor_size, self._alignment))

        # Drop the mandated NUL terminator; ASCII-with-replacement keeps
        # one character per byte.
        name = name_bytes[:-1].decode("ascii", errors="replace") if name_size else ""

        structured = self._registry.decode(note_type, descriptor, cursor.byte_order)

        logger.debug(
            "note @0x%x: namesz=%d descsz=%d type=%s name=%r structured=%s",
            offset,
            name_size,
            descriptor_size,
            note_type_name(note_type),
            name,
            type(structured).__name__ if structured is not None else None,
        )

        return NoteEntry(
            offset=offset,
            name_size=name_size,
            descriptor_size=descriptor_size,
            type=note_type,
            name=name,
            descriptor=descriptor,
            structured=structured,
        )

    # ------------------------------------------------------------------ #
    #  Whole region
    # ------------------------------------------------------------------ #

    def record_size(self, name_size: int, descriptor_size: int) -> int:
        """Total padded size of a record with the given field lengths."""
        return (
            align(NOTE_HEADER_SIZE + name_size, self._alignment)
            + align(descriptor_size, self._alignment)
        )

    def decode_region(
        self,
        cursor: ByteCursor,
        offset: int,
        size: int,
    ) -> list[NoteEntry]:
        """Decode every record in ``[offset, offset + size)``.

        Records are laid out back to back.  Trailing bytes too short to
        hold a record header are ignored.

        Raises:
            TruncatedRecord: A record runs past the end of the region or
                of the image.  The region is abandoned.
        """
        end = offset + size
        entries: list[NoteEntry] = []
        pos = offset

        while pos + NOTE_HEADER_SIZE <= end:
            entry = self.decode(cursor, pos)

            name_start = pos + NOTE_HEADER_SIZE
            if name_start + entry.name_size > end:
                raise TruncatedRecord(
                    "name", entry.name_size, max(end - name_start, 0), pos
                )
            # Padding after the last descriptor may be omitted.
            desc_start = pos + align(NOTE_HEADER_SIZE + entry.name_size, self._alignment)
            if desc_start + entry.descriptor_size > end:
                raise TruncatedRecord(
                    "descriptor",
                    entry.descriptor_size,
                    max(end - desc_start, 0),
                    pos,
                )
            entries.append(entry)
            pos += self.record_size(entry.name_size, entry.descriptor_size)

        logger.debug(
            "decoded %d note record(s) from region 0x%x+0x%x",
            len(entries),
            offset,
            size,
        )
        return entries
