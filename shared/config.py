"""
NoteScope Configuration Management
===================================

Dataclass-based configuration with TOML persistence.

Missing keys fall back to the dataclass defaults and unknown keys are
ignored, so an older ``notescope.toml`` keeps working as options are added.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "notescope.toml"


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Settings shared by every NoteScope component."""

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False


@dataclass(frozen=False, slots=True)
class NotesConfig:
    """Note decoding settings.

    Attributes:
        max_file_size:      Largest image the engine will read.
        include_segments:   Fall back to ``PT_NOTE`` segments when the
                            image has no ``SHT_NOTE`` sections.
        abort_on_truncated: Propagate a truncated record instead of
                            recording it on the region and moving on.
        note_alignment:     Alignment forced on every region; ``0`` uses
                            the alignment declared by the image.
    """

    max_file_size: int = 268_435_456  # 256 MiB
    include_segments: bool = True
    abort_on_truncated: bool = False
    note_alignment: int = 0


@dataclass(frozen=False, slots=True)
class ScopeConfig:
    """Root configuration.

    Usage:
        >>> config = ScopeConfig.load()                  # from default path
        >>> config = ScopeConfig.load("custom.toml")     # from custom path
        >>> config.notes.include_segments
        True
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    notes: NotesConfig = field(default_factory=NotesConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ScopeConfig:
        """Load configuration from a TOML file.

        Args:
            path: Filesystem path to a TOML file.  Defaults to
                  ``<project_root>/notescope.toml``.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does not
                exist.  An absent default file yields pure defaults.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            notes=cls._build_section(NotesConfig, raw.get("notes", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* from the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def get_config(path: str | Path | None = None) -> ScopeConfig:
    """Cached wrapper around :meth:`ScopeConfig.load`."""
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = ScopeConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
