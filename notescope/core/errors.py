"""
NoteScope Errors
=================

Exception hierarchy raised while reading note-bearing regions of an ELF
image.

Only short reads are errors.  Unknown note types and descriptors that are
too small for their vendor decoder are reported as "no structured view"
instead, so the raw bytes stay available to the caller.
"""

from __future__ import annotations


class NoteScopeError(Exception):
    """Base class for every NoteScope error."""


class TruncatedRead(NoteScopeError):
    """The byte cursor had fewer bytes left than a fixed-size read asked for.

    Attributes:
        expected: Number of bytes requested.
        actual:   Number of bytes that were available.
        offset:   Absolute cursor position where the read started.
    """

    def __init__(self, expected: int, actual: int, offset: int) -> None:
        self.expected = expected
        self.actual = actual
        self.offset = offset
        super().__init__(
            f"short read at 0x{offset:x}: expected {expected} bytes, got {actual}"
        )


class TruncatedRecord(NoteScopeError):
    """A note record declares more bytes than the source provides.

    Fatal to the record being decoded (and the region that holds it), not
    to the whole image: callers decide whether to skip the region or abort.

    Attributes:
        field:    Record field being read (``"header"``, ``"name"`` or
                  ``"descriptor"``).
        expected: Declared length of the field.
        actual:   Bytes actually available.
        offset:   Absolute offset where the record header starts.
    """

    def __init__(
        self,
        field: str,
        expected: int,
        actual: int,
        offset: int = 0,
    ) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        self.offset = offset
        super().__init__(
            f"truncated note {field} at 0x{offset:x} "
            f"(read={actual}, expected={expected})"
        )


class NotAnElfFile(NoteScopeError):
    """The input does not carry a parseable ELF header."""
