"""Synthetic note records and minimal ELF images for the test suite."""

from __future__ import annotations

import struct
from typing import Optional, Sequence

SHT_NOTE = 7
SHT_STRTAB = 3
PT_NOTE = 4

BUILD_ID = bytes.fromhex("5f2d1c7e9a0b44e3a1c2d3e4f5061728394a5b6c")


def pad_to(size: int, alignment: int = 4) -> int:
    return (alignment - size % alignment) % alignment


def make_note(
    name: Optional[str],
    note_type: int,
    desc: bytes,
    *,
    byte_order: str = "<",
    alignment: int = 4,
) -> bytes:
    """Encode one note record; ``name=None`` produces ``namesz == 0``."""
    name_bytes = b"" if name is None else name.encode("ascii") + b"\x00"
    header = struct.pack(f"{byte_order}III", len(name_bytes), len(desc), note_type)
    return (
        header
        + name_bytes
        + b"\x00" * pad_to(12 + len(name_bytes), alignment)
        + desc
        + b"\x00" * pad_to(len(desc), alignment)
    )


def abi_descriptor(
    os_code: int, major: int, minor: int, subminor: int, byte_order: str = "<"
) -> bytes:
    return struct.pack(f"{byte_order}IIII", os_code, major, minor, subminor)


def build_elf(
    sections: Sequence[tuple[str, bytes, int]] = (),
    segments: Sequence[bytes] = (),
    *,
    bits: int = 64,
    byte_order: str = "<",
    section_table: bool = True,
) -> bytes:
    """Build an ELF image holding the given note sections and segments.

    Args:
        sections: ``(name, payload, addralign)`` for each SHT_NOTE section.
        segments: Payloads placed in PT_NOTE segments.
        section_table: Emit the section header table (and ``.shstrtab``).
    """
    is64 = bits == 64
    ehsize = 64 if is64 else 52
    phentsize = 56 if is64 else 32
    shentsize = 64 if is64 else 40

    data_start = ehsize + phentsize * len(segments)
    body = bytearray()

    def place(payload: bytes) -> int:
        while (data_start + len(body)) % 8:
            body.append(0)
        offset = data_start + len(body)
        body.extend(payload)
        return offset

    section_offsets = [place(payload) for _, payload, _ in sections]
    segment_offsets = [place(payload) for payload in segments]

    shstrtab = bytearray(b"\x00")
    name_offsets = []
    for name, _, _ in sections:
        name_offsets.append(len(shstrtab))
        shstrtab += name.encode("ascii") + b"\x00"
    shstrtab_name = len(shstrtab)
    shstrtab += b".shstrtab\x00"
    shstrtab_offset = place(bytes(shstrtab))

    shdr_fmt = f"{byte_order}IIQQQQIIQQ" if is64 else f"{byte_order}IIIIIIIIII"
    shdrs = bytearray()
    if section_table:
        shdrs += struct.pack(shdr_fmt, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)
        for (_, payload, addralign), name_off, offset in zip(
            sections, name_offsets, section_offsets
        ):
            shdrs += struct.pack(
                shdr_fmt, name_off, SHT_NOTE, 0x2, 0, offset, len(payload),
                0, 0, addralign, 0,
            )
        shdrs += struct.pack(
            shdr_fmt, shstrtab_name, SHT_STRTAB, 0, 0, shstrtab_offset,
            len(shstrtab), 0, 0, 1, 0,
        )
        shoff = place(b"")
        shnum = len(sections) + 2
        shstrndx = len(sections) + 1
    else:
        shoff = shnum = shstrndx = 0

    phdrs = bytearray()
    for payload, offset in zip(segments, segment_offsets):
        if is64:
            phdrs += struct.pack(
                f"{byte_order}IIQQQQQQ",
                PT_NOTE, 0x4, offset, 0, 0, len(payload), len(payload), 4,
            )
        else:
            phdrs += struct.pack(
                f"{byte_order}IIIIIIII",
                PT_NOTE, offset, 0, 0, len(payload), len(payload), 0x4, 4,
            )

    ident = (
        b"\x7fELF"
        + bytes([2 if is64 else 1, 1 if byte_order == "<" else 2, 1, 0])
        + bytes(8)
    )
    ehdr_fmt = f"{byte_order}HHIQQQIHHHHHH" if is64 else f"{byte_order}HHIIIIIHHHHHH"
    ehdr = ident + struct.pack(
        ehdr_fmt,
        2,                      # ET_EXEC
        62 if is64 else 3,      # EM_X86_64 / EM_386
        1,
        0,
        ehsize if segments else 0,
        shoff,
        0,
        ehsize,
        phentsize,
        len(segments),
        shentsize,
        shnum,
        shstrndx,
    )
    return bytes(ehdr + phdrs + body + shdrs)
