from __future__ import annotations

import struct

import pytest

from elf_builders import BUILD_ID, abi_descriptor, build_elf, make_note


@pytest.fixture
def abi_note() -> bytes:
    return make_note("GNU", 1, abi_descriptor(0, 2, 6, 32))


@pytest.fixture
def build_id_note() -> bytes:
    return make_note("GNU", 3, BUILD_ID)


@pytest.fixture
def sample_elf(abi_note: bytes, build_id_note: bytes) -> bytes:
    return build_elf([
        (".note.ABI-tag", abi_note, 4),
        (".note.gnu.build-id", build_id_note, 4),
    ])


@pytest.fixture
def sample_elf_path(tmp_path, sample_elf):
    path = tmp_path / "sample.elf"
    path.write_bytes(sample_elf)
    return path


@pytest.fixture
def truncated_note() -> bytes:
    # namesz claims 64 bytes but only "GNU\0" follows.
    return struct.pack("<III", 64, 4, 1) + b"GNU\x00"
