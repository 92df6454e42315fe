import json

import pytest
from click.testing import CliRunner

from elf_builders import BUILD_ID, build_elf
from notescope.cli import notescope_cli


@pytest.fixture
def runner():
    return CliRunner()


def test_json_output(runner, sample_elf_path):
    result = runner.invoke(notescope_cli, [str(sample_elf_path), "--json"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    summary = report["summary"]
    assert summary["note_count"] == 2
    assert summary["build_id"] == BUILD_ID.hex()
    assert summary["abi_tag"]["operating_system"] == "linux"
    assert report["regions"][0]["notes"][0]["type_name"] == "NT_GNU_ABI_TAG"


def test_console_output(runner, sample_elf_path):
    result = runner.invoke(notescope_cli, [str(sample_elf_path)])
    assert result.exit_code == 0, result.output
    assert ".note.ABI-tag" in result.output
    assert ".note.gnu.build-id" in result.output


def test_report_file(runner, sample_elf_path, tmp_path):
    out = tmp_path / "reports" / "notes.json"
    result = runner.invoke(
        notescope_cli, [str(sample_elf_path), "--json", "--output", str(out)]
    )
    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["summary"]["note_count"] == 2


def test_strict_flag_fails_on_truncated_note(runner, tmp_path, truncated_note):
    path = tmp_path / "broken.elf"
    path.write_bytes(build_elf([(".note.broken", truncated_note, 4)]))

    lenient = runner.invoke(notescope_cli, [str(path), "--json"])
    assert lenient.exit_code == 0
    assert json.loads(lenient.stdout)["summary"]["failed_regions"] == [".note.broken"]
    assert lenient.stderr == ""

    strict = runner.invoke(notescope_cli, [str(path), "--strict"])
    assert strict.exit_code == 1


def test_non_elf_exits_with_error(runner, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not an ELF image\n", encoding="utf-8")
    result = runner.invoke(notescope_cli, [str(path)])
    assert result.exit_code == 1


def test_config_option(runner, tmp_path, abi_note):
    path = tmp_path / "segments.elf"
    path.write_bytes(build_elf(segments=[abi_note], section_table=False))
    config = tmp_path / "notescope.toml"
    config.write_text("[notes]\ninclude_segments = false\n", encoding="utf-8")

    result = runner.invoke(
        notescope_cli, [str(path), "--json", "--config", str(config)]
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout)["summary"]["region_count"] == 0
