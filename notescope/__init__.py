"""
NoteScope -- ELF Note Record Decoder
=====================================

Decodes the note records held in ELF ``SHT_NOTE`` sections and ``PT_NOTE``
segments into immutable :class:`NoteEntry` values, with a structured view
of the GNU ABI tag and a registry for further vendor descriptor decoders.

References:
    - System V Application Binary Interface, Edition 4.1.
    - Linux Standard Base Core Specification, "ABI note tag".
"""

__version__ = "1.0.0"
__all__ = [
    "NoteEngine",
    "NoteEntry",
    "NoteRecordDecoder",
    "DescriptorRegistry",
    "ByteCursor",
]

from notescope.core.engine import NoteEngine
from notescope.core.models import NoteEntry
from notescope.parsers.cursor import ByteCursor
from notescope.parsers.descriptors import DescriptorRegistry
from notescope.parsers.note_parser import NoteRecordDecoder
