import pytest

from elf_builders import BUILD_ID, build_elf, make_note
from notescope.core.engine import NoteEngine
from notescope.core.errors import NotAnElfFile, TruncatedRecord
from notescope.core.models import OperatingSystem
from notescope.parsers.descriptors import DescriptorRegistry
from shared.config import ScopeConfig


@pytest.fixture
def engine():
    return NoteEngine()


def test_analyze_data(engine, sample_elf):
    result = engine.analyze_data(sample_elf, "sample.elf")
    assert result.info.path == "sample.elf"
    assert len(result.info.sha256) == 64
    assert result.note_count == 2
    assert result.failed_sections == []
    assert result.abi_tag().operating_system is OperatingSystem.LINUX
    assert result.abi_tag().kernel_version == "2.6.32"
    assert result.build_id() == BUILD_ID.hex()


def test_truncated_region_is_isolated(engine, abi_note, truncated_note):
    image = build_elf([
        (".note.broken", truncated_note, 4),
        (".note.ABI-tag", abi_note, 4),
    ])
    result = engine.analyze_data(image)
    broken, good = result.sections
    assert broken.entries == []
    assert "truncated note name" in broken.error
    assert len(good.entries) == 1
    assert result.abi_tag() is not None


def test_abort_on_truncated(truncated_note):
    config = ScopeConfig()
    config.notes.abort_on_truncated = True
    image = build_elf([(".note.broken", truncated_note, 4)])
    with pytest.raises(TruncatedRecord) as excinfo:
        NoteEngine(config=config).analyze_data(image)
    assert excinfo.value.field == "name"


def test_segment_fallback(engine, abi_note, build_id_note):
    image = build_elf(segments=[abi_note, build_id_note], section_table=False)
    result = engine.analyze_data(image)
    assert [s.region.name for s in result.sections] == ["PT_NOTE[0]", "PT_NOTE[1]"]
    assert result.note_count == 2

    config = ScopeConfig()
    config.notes.include_segments = False
    assert NoteEngine(config=config).analyze_data(image).sections == []


def test_eight_byte_region():
    first = make_note("GNU", 5, b"\x01" * 12, alignment=8)
    second = make_note("GNU", 3, BUILD_ID, alignment=8)
    image = build_elf([(".note.gnu.property", first + second, 8)])
    result = NoteEngine().analyze_data(image)
    assert [e.type for e in result.entries] == [5, 3]
    assert result.build_id() == BUILD_ID.hex()


def test_note_alignment_override():
    notes = make_note("GNU", 5, b"\x01" * 12, alignment=8) + make_note(
        "GNU", 3, BUILD_ID, alignment=8
    )
    image = build_elf([(".note.gnu.property", notes, 4)])
    assert NoteEngine().analyze_data(image).build_id() != BUILD_ID.hex()

    config = ScopeConfig()
    config.notes.note_alignment = 8
    result = NoteEngine(config=config).analyze_data(image)
    assert result.build_id() == BUILD_ID.hex()


def test_analyze_path(engine, sample_elf_path):
    result = engine.analyze(sample_elf_path)
    assert result.info.path == str(sample_elf_path.resolve())
    assert result.note_count == 2


def test_missing_file(engine, tmp_path):
    with pytest.raises(FileNotFoundError):
        engine.analyze(tmp_path / "missing.elf")


def test_file_too_large(sample_elf_path):
    config = ScopeConfig()
    config.notes.max_file_size = 16
    with pytest.raises(ValueError, match="too large"):
        NoteEngine(config=config).analyze(sample_elf_path)


def test_not_an_elf(engine, tmp_path):
    path = tmp_path / "script.sh"
    path.write_bytes(b"#!/bin/sh\necho hello\n")
    with pytest.raises(NotAnElfFile):
        engine.analyze(path)


def test_empty_registry_is_respected(sample_elf):
    result = NoteEngine(registry=DescriptorRegistry()).analyze_data(sample_elf)
    assert result.note_count == 2
    assert result.abi_tag() is None
    assert all(e.structured is None for e in result.entries)
