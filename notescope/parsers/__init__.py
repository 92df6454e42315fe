"""
NoteScope Parsers
==================

- ``cursor``      -- endianness-aware byte cursor
- ``elf_parser``  -- ELF container walk to locate note regions
- ``note_parser`` -- note record decoding
- ``descriptors`` -- vendor descriptor registry and the ABI tag codec
"""

from notescope.parsers.cursor import ByteCursor
from notescope.parsers.descriptors import (
    DescriptorRegistry,
    decode_abi_tag,
    default_registry,
)
from notescope.parsers.elf_parser import ELFParser
from notescope.parsers.note_parser import NoteRecordDecoder

__all__ = [
    "ByteCursor",
    "DescriptorRegistry",
    "ELFParser",
    "NoteRecordDecoder",
    "decode_abi_tag",
    "default_registry",
]
