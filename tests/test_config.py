import pytest

from shared.config import ScopeConfig, get_config


def test_defaults():
    config = ScopeConfig()
    assert config.global_settings.log_level == "INFO"
    assert config.notes.include_segments is True
    assert config.notes.abort_on_truncated is False
    assert config.notes.note_alignment == 0
    assert config.notes.max_file_size == 256 * 1024 * 1024


def test_explicit_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ScopeConfig.load(tmp_path / "absent.toml")


def test_load_toml_ignores_unknown_keys(tmp_path):
    path = tmp_path / "notescope.toml"
    path.write_text(
        "[global]\n"
        'log_level = "DEBUG"\n'
        "log_json = true\n"
        "colour = true\n"
        "\n"
        "[notes]\n"
        "include_segments = false\n"
        "note_alignment = 8\n"
        "\n"
        "[plugins]\n"
        'enabled = ["go"]\n',
        encoding="utf-8",
    )
    config = ScopeConfig.load(path)
    assert config.global_settings.log_level == "DEBUG"
    assert config.global_settings.log_json is True
    assert config.notes.include_segments is False
    assert config.notes.note_alignment == 8
    assert config.notes.abort_on_truncated is False
    assert config.to_dict()["notes"]["note_alignment"] == 8


def test_get_config_reloads_explicit_path(tmp_path):
    path = tmp_path / "strict.toml"
    path.write_text("[notes]\nabort_on_truncated = true\n", encoding="utf-8")
    assert get_config(path).notes.abort_on_truncated is True
    assert get_config() is get_config()


def test_global_section_keys():
    assert set(ScopeConfig().to_dict()["global_settings"]) == {
        "log_level",
        "log_file",
        "log_json",
    }
