"""
Vendor Descriptor Registry
===========================

Maps note type tags to pure decode functions over descriptor bytes that
have already been captured from the image.

A decoder has the signature ``(data: bytes, byte_order: str) ->
DescriptorView | None`` and must not perform I/O.  Returning ``None`` means
"no structured view" (too few bytes, unexpected layout); it is never an
error, the raw descriptor remains available on the entry.  A decoder that
trips over its own layout with :class:`struct.error` is treated the same
way.

New vendor formats are added by registering another decoder::

    registry = default_registry().copy()

    @registry.register(0x100)
    def decode_linux_salt(data, byte_order):
        ...
"""

from __future__ import annotations

import logging
import struct
from typing import Callable, Iterator, Optional

from notescope.core.models import (
    NT_GNU_ABI_TAG,
    AbiTag,
    DescriptorView,
    OperatingSystem,
    note_type_name,
)


logger = logging.getLogger(__name__)


DescriptorDecoder = Callable[[bytes, str], Optional[DescriptorView]]

# os, major, minor, subminor
ABI_TAG_SIZE: int = 16


# ---------------------------------------------------------------------------
# NT_GNU_ABI_TAG
# ---------------------------------------------------------------------------

def decode_abi_tag(data: bytes, byte_order: str = "<") -> Optional[AbiTag]:
    """Decode a GNU ABI tag descriptor.

    The descriptor is four 32-bit words in the file's byte order: operating
    system, then the major, minor and subminor version of the earliest
    compatible kernel ABI.  Codes outside the known set map to
    :attr:`OperatingSystem.UNKNOWN` with the raw word kept in ``os_code``.

    Args:
        data:       Descriptor bytes as captured from the record.
        byte_order: :mod:`struct` prefix, ``"<"`` or ``">"``.

    Returns:
        The decoded :class:`AbiTag`, or ``None`` if fewer than 16 bytes
        are available.
    """
    if len(data) < ABI_TAG_SIZE:
        return None
    os_code, major, minor, subminor = struct.unpack_from(
        f"{byte_order}IIII", data, 0
    )
    return AbiTag(
        operating_system=OperatingSystem.from_code(os_code),
        os_code=os_code,
        major_version=major,
        minor_version=minor,
        subminor_version=subminor,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class DescriptorRegistry:
    """Side table from note type tag to descriptor decoder.

    The note decoder only ever calls :meth:`decode`; it never branches on
    vendor types itself.
    """

    def __init__(self) -> None:
        self._decoders: dict[int, DescriptorDecoder] = {}

    def register(
        self,
        note_type: int,
        decoder: DescriptorDecoder | None = None,
    ) -> Callable[[DescriptorDecoder], DescriptorDecoder] | DescriptorDecoder:
        """Register *decoder* for *note_type*.

        Can be called directly or used as a decorator.  A later
        registration for the same type replaces the earlier one.
        """
        if decoder is not None:
            self._decoders[note_type] = decoder
            return decoder

        def _wrap(func: DescriptorDecoder) -> DescriptorDecoder:
            self._decoders[note_type] = func
            return func

        return _wrap

    def unregister(self, note_type: int) -> None:
        """Remove the decoder for *note_type* if there is one."""
        self._decoders.pop(note_type, None)

    def lookup(self, note_type: int) -> Optional[DescriptorDecoder]:
        """Return the decoder registered for *note_type*, if any."""
        return self._decoders.get(note_type)

    def decode(
        self,
        note_type: int,
        data: bytes,
        byte_order: str = "<",
    ) -> Optional[DescriptorView]:
        """Run the decoder for *note_type* over *data*.

        Returns ``None`` when no decoder is registered, the decoder
        produced no view, or the descriptor does not fit the layout the
        decoder unpacks.
        """
        decoder = self._decoders.get(note_type)
        if decoder is None:
            return None
        try:
            return decoder(data, byte_order)
        except struct.error as exc:
            logger.debug(
                "descriptor decoder for %s rejected %d byte(s): %s",
                note_type_name(note_type),
                len(data),
                exc,
            )
            return None

    def copy(self) -> DescriptorRegistry:
        """Return an independent registry with the same entries."""
        clone = DescriptorRegistry()
        clone._decoders.update(self._decoders)
        return clone

    def __contains__(self, note_type: object) -> bool:
        return note_type in self._decoders

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._decoders))

    def __len__(self) -> int:
        return len(self._decoders)

    def __repr__(self) -> str:
        names = ", ".join(note_type_name(t) for t in self)
        return f"DescriptorRegistry([{names}])"


_DEFAULT_REGISTRY = DescriptorRegistry()
_DEFAULT_REGISTRY.register(NT_GNU_ABI_TAG, decode_abi_tag)


def default_registry() -> DescriptorRegistry:
    """The process-wide registry holding the built-in decoders."""
    return _DEFAULT_REGISTRY
