"""
ELF Container Parser
=====================

Struct-based reader for the parts of an ELF image needed to locate note
records: the identification bytes, the file header, the section header
table (with names from the section header string table) and the program
header table.  Both ELF32 and ELF64 in either byte order are supported.

The parser does not decode notes itself.  It yields :class:`NoteRegion`
descriptors that :class:`~notescope.parsers.note_parser.NoteRecordDecoder`
consumes through a :class:`~notescope.parsers.cursor.ByteCursor`.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

from __future__ import annotations

import struct

from notescope.core.models import ImageInfo, NoteRegion, RegionSource


# ---------------------------------------------------------------------------
# ELF Constants
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"

ELFCLASS32: int = 1
ELFCLASS64: int = 2

ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

ET_NONE: int = 0
ET_REL: int = 1
ET_EXEC: int = 2
ET_DYN: int = 3
ET_CORE: int = 4

_ET_NAMES: dict[int, str] = {
    ET_NONE: "NONE",
    ET_REL: "REL (Relocatable)",
    ET_EXEC: "EXEC (Executable)",
    ET_DYN: "DYN (Shared object)",
    ET_CORE: "CORE (Core dump)",
}

EM_386: int = 3
EM_MIPS: int = 8
EM_PPC: int = 20
EM_PPC64: int = 21
EM_ARM: int = 40
EM_X86_64: int = 62
EM_AARCH64: int = 183
EM_RISCV: int = 243

_EM_NAMES: dict[int, str] = {
    EM_386: "x86",
    EM_MIPS: "MIPS",
    EM_PPC: "PowerPC",
    EM_PPC64: "PowerPC64",
    EM_ARM: "ARM",
    EM_X86_64: "x86_64",
    EM_AARCH64: "AArch64",
    EM_RISCV: "RISC-V",
}

SHT_NOTE: int = 7

PT_NOTE: int = 4


# ---------------------------------------------------------------------------
# Internal parsed structures
# ---------------------------------------------------------------------------

class _ELFHeader:
    """Parsed ELF header fields used for note discovery."""
    __slots__ = (
        "ei_class", "ei_data", "e_type", "e_machine",
        "e_phoff", "e_shoff", "e_phentsize", "e_phnum",
        "e_shentsize", "e_shnum", "e_shstrndx",
    )

    def __init__(self) -> None:
        self.ei_class: int = 0
        self.ei_data: int = 0
        self.e_type: int = 0
        self.e_machine: int = 0
        self.e_phoff: int = 0
        self.e_shoff: int = 0
        self.e_phentsize: int = 0
        self.e_phnum: int = 0
        self.e_shentsize: int = 0
        self.e_shnum: int = 0
        self.e_shstrndx: int = 0


class _SectionHeader:
    """Parsed section header entry."""
    __slots__ = (
        "sh_name", "sh_type", "sh_offset", "sh_size",
        "sh_addralign", "name",
    )

    def __init__(self) -> None:
        self.sh_name: int = 0
        self.sh_type: int = 0
        self.sh_offset: int = 0
        self.sh_size: int = 0
        self.sh_addralign: int = 0
        self.name: str = ""


class _ProgramHeader:
    """Parsed program header (segment) entry."""
    __slots__ = ("p_type", "p_offset", "p_filesz", "p_align")

    def __init__(self) -> None:
        self.p_type: int = 0
        self.p_offset: int = 0
        self.p_filesz: int = 0
        self.p_align: int = 0


# ---------------------------------------------------------------------------
# ELF Parser
# ---------------------------------------------------------------------------

class ELFParser:
    """Locate note-bearing regions in an ELF32 or ELF64 image.

    Usage::

        parser = ELFParser(raw_bytes)
        if parser.parse():
            cursor = ByteCursor(raw_bytes, parser.byte_order)
            for region in parser.get_note_regions():
                ...
    """

    def __init__(self, data: bytes) -> None:
        self._data: bytes = data
        self._header: _ELFHeader = _ELFHeader()
        self._sections: list[_SectionHeader] = []
        self._program_headers: list[_ProgramHeader] = []
        self._endian: str = "<"
        self._is_64bit: bool = False
        self._parsed: bool = False

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> bool:
        """Parse the ELF container.

        Returns:
            ``True`` if parsing succeeded, ``False`` on invalid data.
        """
        if len(self._data) < 16:
            return False
        if self._data[:4] != ELF_MAGIC:
            return False
        if self._data[4] not in (ELFCLASS32, ELFCLASS64):
            return False
        if self._data[5] not in (ELFDATA2LSB, ELFDATA2MSB):
            return False

        try:
            self._parse_elf_header()
            self._parse_section_headers()
            self._resolve_section_names()
            self._parse_program_headers()
        except (struct.error, IndexError, ValueError):
            return False
        self._parsed = True
        return True

    @property
    def parsed(self) -> bool:
        return self._parsed

    @property
    def byte_order(self) -> str:
        """:mod:`struct` prefix for the image's data encoding."""
        return self._endian

    @property
    def is_64bit(self) -> bool:
        return self._is_64bit

    def get_image_info(self) -> ImageInfo:
        """Build an :class:`ImageInfo` from the parsed ELF header."""
        h = self._header
        return ImageInfo(
            size=len(self._data),
            bits=64 if self._is_64bit else 32,
            endian="little" if self._endian == "<" else "big",
            machine=_EM_NAMES.get(h.e_machine, f"unknown({h.e_machine})"),
            elf_type=_ET_NAMES.get(h.e_type, f"0x{h.e_type:x}"),
        )

    def get_section_names(self) -> list[str]:
        return [sh.name for sh in self._sections]

    def get_note_regions(self, include_segments: bool = True) -> list[NoteRegion]:
        """Return the regions holding note records.

        ``SHT_NOTE`` sections are preferred.  When the image has none
        (stripped section table, core dumps) and *include_segments* is
        set, ``PT_NOTE`` segments are returned instead.
        """
        regions: list[NoteRegion] = []
        for sh in self._sections:
            if sh.sh_type != SHT_NOTE or sh.sh_size == 0:
                continue
            regions.append(NoteRegion(
                name=sh.name or f"section@0x{sh.sh_offset:x}",
                offset=sh.sh_offset,
                size=sh.sh_size,
                alignment=8 if sh.sh_addralign == 8 else 4,
                source=RegionSource.SECTION,
            ))

        if regions or not include_segments:
            return regions

        for index, ph in enumerate(self._program_headers):
            if ph.p_type != PT_NOTE or ph.p_filesz == 0:
                continue
            regions.append(NoteRegion(
                name=f"PT_NOTE[{index}]",
                offset=ph.p_offset,
                size=ph.p_filesz,
                alignment=8 if ph.p_align == 8 else 4,
                source=RegionSource.SEGMENT,
            ))
        return regions

    # ------------------------------------------------------------------ #
    #  ELF header parsing
    # ------------------------------------------------------------------ #

    def _parse_elf_header(self) -> None:
        """Parse the ELF identification and file header."""
        h = self._header
        h.ei_class = self._data[4]
        h.ei_data = self._data[5]

        self._is_64bit = h.ei_class == ELFCLASS64
        self._endian = "<" if h.ei_data == ELFDATA2LSB else ">"

        if self._is_64bit:
            # ELF64 header: offsets 16..63
            fmt = f"{self._endian}HHIQQQIHHHHHH"
        else:
            # ELF32 header: offsets 16..51
            fmt = f"{self._endian}HHIIIIIHHHHHH"
        (
            h.e_type, h.e_machine, _version, _entry,
            h.e_phoff, h.e_shoff, _flags, _ehsize,
            h.e_phentsize, h.e_phnum, h.e_shentsize, h.e_shnum,
            h.e_shstrndx,
        ) = struct.unpack_from(fmt, self._data, 16)

    # ------------------------------------------------------------------ #
    #  Section header parsing
    # ------------------------------------------------------------------ #

    def _parse_section_headers(self) -> None:
        """Parse all section headers from the section header table."""
        h = self._header
        if h.e_shoff == 0 or h.e_shnum == 0:
            return

        if self._is_64bit:
            # Elf64_Shdr: 64 bytes
            fmt = f"{self._endian}IIQQQQIIQQ"
        else:
            # Elf32_Shdr: 40 bytes
            fmt = f"{self._endian}IIIIIIIIII"
        entry_size = struct.calcsize(fmt)

        for i in range(h.e_shnum):
            offset = h.e_shoff + i * h.e_shentsize
            if offset + entry_size > len(self._data):
                break
            sh = _SectionHeader()
            (
                sh.sh_name, sh.sh_type, _flags, _addr,
                sh.sh_offset, sh.sh_size, _link, _info,
                sh.sh_addralign, _entsize,
            ) = struct.unpack_from(fmt, self._data, offset)
            self._sections.append(sh)

    def _resolve_section_names(self) -> None:
        """Resolve section names from the section header string table."""
        h = self._header
        if h.e_shstrndx == 0 or h.e_shstrndx >= len(self._sections):
            return

        strtab_sh = self._sections[h.e_shstrndx]
        strtab_start = strtab_sh.sh_offset
        strtab_end = strtab_start + strtab_sh.sh_size
        if strtab_end > len(self._data):
            return

        strtab_data = self._data[strtab_start:strtab_end]
        for sh in self._sections:
            sh.name = self._read_cstring(strtab_data, sh.sh_name)

    # ------------------------------------------------------------------ #
    #  Program header parsing
    # ------------------------------------------------------------------ #

    def _parse_program_headers(self) -> None:
        """Parse all program headers (segments)."""
        h = self._header
        if h.e_phoff == 0 or h.e_phnum == 0:
            return

        if self._is_64bit:
            # Elf64_Phdr: 56 bytes
            fmt = f"{self._endian}IIQQQQQQ"
        else:
            # Elf32_Phdr: 32 bytes
            fmt = f"{self._endian}IIIIIIII"
        entry_size = struct.calcsize(fmt)

        for i in range(h.e_phnum):
            offset = h.e_phoff + i * h.e_phentsize
            if offset + entry_size > len(self._data):
                break
            ph = _ProgramHeader()
            fields = struct.unpack_from(fmt, self._data, offset)
            if self._is_64bit:
                ph.p_type, _flags, ph.p_offset = fields[0:3]
                ph.p_filesz = fields[5]
                ph.p_align = fields[7]
            else:
                ph.p_type, ph.p_offset = fields[0:2]
                ph.p_filesz = fields[4]
                ph.p_align = fields[7]
            self._program_headers.append(ph)

    # ------------------------------------------------------------------ #
    #  Utility methods
    # ------------------------------------------------------------------ #

    @staticmethod
    def _read_cstring(data: bytes, offset: int) -> str:
        """Read a NUL-terminated string from a byte buffer."""
        if offset < 0 or offset >= len(data):
            return ""
        end = data.find(b"\x00", offset)
        if end == -1:
            end = len(data)
        return data[offset:end].decode("ascii", errors="replace")
