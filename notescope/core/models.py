"""
NoteScope Data Models
======================

Pydantic models for decoded ELF note records and the analysis results that
group them per note-bearing region.

A note record is a ``(name, type, descriptor)`` triple.  The ``type`` tag is
vendor defined and deliberately kept as a plain integer: a handful of GNU
values are known by name, every other value is still valid and round-trips
unchanged.

References:
    - System V Application Binary Interface, Edition 4.1, "Note Section".
    - Linux Standard Base Core Specification, "ABI note tag".
"""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializeAsAny,
    field_serializer,
    model_validator,
)


U32_MAX: int = 0xFFFFFFFF


# ---------------------------------------------------------------------------
# Well-known note types (owner "GNU")
# ---------------------------------------------------------------------------

NT_GNU_ABI_TAG: int = 1
NT_GNU_HWCAP: int = 2
NT_GNU_BUILD_ID: int = 3
NT_GNU_GOLD_VERSION: int = 4
NT_GNU_PROPERTY_TYPE_0: int = 5

_NT_NAMES: dict[int, str] = {
    NT_GNU_ABI_TAG: "NT_GNU_ABI_TAG",
    NT_GNU_HWCAP: "NT_GNU_HWCAP",
    NT_GNU_BUILD_ID: "NT_GNU_BUILD_ID",
    NT_GNU_GOLD_VERSION: "NT_GNU_GOLD_VERSION",
    NT_GNU_PROPERTY_TYPE_0: "NT_GNU_PROPERTY_TYPE_0",
}


def note_type_name(note_type: int) -> str:
    """Return the symbolic name of *note_type*, or its hex form."""
    return _NT_NAMES.get(note_type, f"0x{note_type:x}")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class OperatingSystem(str, enum.Enum):
    """Operating system word of an ``NT_GNU_ABI_TAG`` descriptor."""
    LINUX = "linux"
    GNU = "gnu"
    SOLARIS2 = "solaris2"
    FREEBSD = "freebsd"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int) -> OperatingSystem:
        """Map the raw descriptor word; unassigned codes become ``UNKNOWN``."""
        return _OS_CODES.get(code, cls.UNKNOWN)


_OS_CODES: dict[int, OperatingSystem] = {
    0: OperatingSystem.LINUX,
    1: OperatingSystem.GNU,
    2: OperatingSystem.SOLARIS2,
    3: OperatingSystem.FREEBSD,
}


class RegionSource(str, enum.Enum):
    """Where a note region was found in the image."""
    SECTION = "section"
    SEGMENT = "segment"


# ---------------------------------------------------------------------------
# Structured descriptor views
# ---------------------------------------------------------------------------

class DescriptorView(BaseModel):
    """Base class of every structured descriptor view.

    Vendor decoders registered in the descriptor registry return a
    subclass; ``kind`` tells the variants apart once serialised.
    """

    model_config = ConfigDict(frozen=True)

    kind: str = ""


class AbiTag(DescriptorView):
    """Decoded ``NT_GNU_ABI_TAG`` descriptor.

    Attributes:
        operating_system: Symbolic operating system.
        os_code:          Raw operating system word, kept so that
                          ``UNKNOWN`` values survive a round trip.
        major_version:    Major version of the earliest compatible ABI.
        minor_version:    Minor version.
        subminor_version: Subminor version.
    """

    kind: Literal["abi_tag"] = "abi_tag"
    operating_system: OperatingSystem = OperatingSystem.UNKNOWN
    os_code: int = Field(default=0, ge=0, le=U32_MAX)
    major_version: int = Field(default=0, ge=0, le=U32_MAX)
    minor_version: int = Field(default=0, ge=0, le=U32_MAX)
    subminor_version: int = Field(default=0, ge=0, le=U32_MAX)

    @property
    def kernel_version(self) -> str:
        """Dotted ``major.minor.subminor`` string."""
        return f"{self.major_version}.{self.minor_version}.{self.subminor_version}"


# ---------------------------------------------------------------------------
# Note entries
# ---------------------------------------------------------------------------

class NoteEntry(BaseModel):
    """One decoded note record.

    Instances are frozen and own copies of every byte they expose; they
    hold no reference to the cursor or image they were read from.

    Attributes:
        offset:          Absolute offset of the record header.
        name_size:       Declared name length, NUL terminator included.
        descriptor_size: Declared descriptor length.
        type:            Vendor-defined type tag.
        name:            Owner name without its trailing NUL.
        descriptor:      Exactly ``descriptor_size`` raw bytes.
        structured:      Vendor view derived from ``descriptor`` and ``type``.
    """

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    name_size: int = Field(..., ge=0, le=U32_MAX)
    descriptor_size: int = Field(..., ge=0, le=U32_MAX)
    type: int = Field(..., ge=0, le=U32_MAX)
    name: str = ""
    descriptor: bytes = b""
    structured: Optional[SerializeAsAny[DescriptorView]] = None

    @model_validator(mode="after")
    def _check_lengths(self) -> NoteEntry:
        if len(self.descriptor) != self.descriptor_size:
            raise ValueError(
                f"descriptor holds {len(self.descriptor)} bytes, "
                f"declared {self.descriptor_size}"
            )
        if len(self.name) != max(self.name_size - 1, 0):
            raise ValueError(
                f"name {self.name!r} does not match declared size {self.name_size}"
            )
        return self

    @field_serializer("descriptor", when_used="json")
    def _descriptor_hex(self, value: bytes) -> str:
        return value.hex()

    # ------------------------------------------------------------------ #
    #  Accessors
    # ------------------------------------------------------------------ #

    @property
    def type_name(self) -> str:
        """Symbolic type name (``NT_GNU_BUILD_ID``) or hex tag."""
        return note_type_name(self.type)

    def raw_descriptor(self) -> bytes:
        """Return the descriptor bytes exactly as stored in the image."""
        return self.descriptor

    def descriptor_as_text(self) -> str:
        """Reinterpret the descriptor as UTF-8 text.

        Meaningful for text-bearing notes such as ``NT_GNU_GOLD_VERSION``;
        binary descriptors come back with replacement characters.
        """
        return self.descriptor.decode("utf-8", errors="replace")

    def descriptor_as_hex(self) -> str:
        """Lower-case hex of the descriptor (build-id style display)."""
        return self.descriptor.hex()

    def descriptor_as_abi_tag(self) -> Optional[AbiTag]:
        """Return the ABI tag view if this record decoded as one."""
        if isinstance(self.structured, AbiTag):
            return self.structured
        return None


# ---------------------------------------------------------------------------
# Regions and aggregate results
# ---------------------------------------------------------------------------

class NoteRegion(BaseModel):
    """A byte range of the image holding a sequence of note records.

    Attributes:
        name:      Section name (``.note.ABI-tag``) or ``PT_NOTE[i]``.
        offset:    File offset of the first record.
        size:      Region size in bytes.
        alignment: Record field alignment (4, or 8 for 8-aligned notes).
        source:    Section header table or program header table.
    """
    name: str = ""
    offset: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)
    alignment: int = 4
    source: RegionSource = RegionSource.SECTION


class ImageInfo(BaseModel):
    """Top-level metadata about the analysed ELF image."""
    path: str = ""
    size: int = 0
    bits: int = 0
    endian: str = "little"
    machine: str = "unknown"
    elf_type: str = ""
    md5: str = ""
    sha256: str = ""


class NoteSectionResult(BaseModel):
    """Decoded records of one region.

    ``error`` is non-empty when decoding stopped on a truncated record;
    ``entries`` is then empty because the region was abandoned.
    """
    region: NoteRegion = Field(default_factory=NoteRegion)
    entries: list[NoteEntry] = Field(default_factory=list)
    error: str = ""


class NoteAnalysisResult(BaseModel):
    """Complete note analysis of one image.

    Attributes:
        info:     Image metadata.
        sections: One result per note region, in file order.
    """
    info: ImageInfo = Field(default_factory=ImageInfo)
    sections: list[NoteSectionResult] = Field(default_factory=list)

    @property
    def entries(self) -> list[NoteEntry]:
        """All decoded records across every region."""
        return [e for s in self.sections for e in s.entries]

    @property
    def note_count(self) -> int:
        return len(self.entries)

    @property
    def failed_sections(self) -> list[NoteSectionResult]:
        return [s for s in self.sections if s.error]

    def abi_tag(self) -> Optional[AbiTag]:
        """The first ABI tag found in the image, if any."""
        for entry in self.entries:
            tag = entry.descriptor_as_abi_tag()
            if tag is not None:
                return tag
        return None

    def build_id(self) -> str:
        """Hex build-id of the first GNU build-id note, or ``""``."""
        for entry in self.entries:
            if entry.type == NT_GNU_BUILD_ID and entry.name == "GNU":
                return entry.descriptor_as_hex()
        return ""
