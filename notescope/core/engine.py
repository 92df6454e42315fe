"""
NoteScope Analysis Engine
==========================

Reads an ELF image, locates its note regions and decodes every record.

Pipeline:
    1. Read the file (bounded by ``notes.max_file_size``) and hash it.
    2. Parse the ELF container to find ``SHT_NOTE`` sections, or
       ``PT_NOTE`` segments when there are none.
    3. Decode each region with a :class:`NoteRecordDecoder` over a shared
       :class:`ByteCursor`.
    4. Collect the entries per region into a :class:`NoteAnalysisResult`.

A truncated record abandons its region only; the error is recorded on that
region's result and decoding moves on, unless ``abort_on_truncated`` is
set.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from notescope.core.errors import NotAnElfFile, TruncatedRecord
from notescope.core.models import (
    NoteAnalysisResult,
    NoteRegion,
    NoteSectionResult,
)
from notescope.parsers.cursor import ByteCursor
from notescope.parsers.descriptors import DescriptorRegistry, default_registry
from notescope.parsers.elf_parser import ELFParser
from notescope.parsers.note_parser import NoteRecordDecoder


class NoteEngine:
    """Orchestrates note discovery and decoding for one image at a time.

    Usage::

        engine = NoteEngine()
        result = engine.analyze("/usr/bin/ls")
        print(result.abi_tag(), result.build_id())

    Args:
        config:   NoteScope configuration.  Defaults are used if omitted.
        logger:   Logger facade.  A console-less one is created if omitted.
        registry: Descriptor decoders handed to every region decoder.
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        logger: ScopeLogger | None = None,
        registry: Optional[DescriptorRegistry] = None,
    ) -> None:
        self._config: ScopeConfig = config or ScopeConfig()
        self._logger: ScopeLogger = logger or ScopeLogger(
            "engine", console_output=False
        )
        self._registry: DescriptorRegistry = (
            registry if registry is not None else default_registry()
        )

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    def analyze(self, file_path: str | Path) -> NoteAnalysisResult:
        """Analyse the ELF file at *file_path*.

        Raises:
            FileNotFoundError: The path does not exist.
            ValueError: The file exceeds ``notes.max_file_size``.
            NotAnElfFile: The file has no parseable ELF header.
            TruncatedRecord: Only with ``abort_on_truncated`` enabled.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        file_size = path.stat().st_size
        max_size = self._config.notes.max_file_size
        if file_size > max_size:
            raise ValueError(
                f"File too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            )

        self._logger.info("Starting note analysis of %s", path)
        return self.analyze_data(path.read_bytes(), str(path.resolve()))

    def analyze_data(
        self,
        data: bytes,
        file_path: str = "<memory>",
    ) -> NoteAnalysisResult:
        """Analyse an in-memory ELF image."""
        parser = ELFParser(data)
        if not parser.parse():
            raise NotAnElfFile(f"{file_path}: not a parseable ELF image")

        result = NoteAnalysisResult(info=parser.get_image_info())
        result.info.path = file_path
        result.info.md5 = hashlib.md5(data).hexdigest()
        result.info.sha256 = hashlib.sha256(data).hexdigest()

        regions = parser.get_note_regions(
            include_segments=self._config.notes.include_segments
        )
        self._logger.debug(
            "%d note region(s) in %s", len(regions), file_path,
            byte_order=parser.byte_order,
        )

        cursor = ByteCursor(data, parser.byte_order)
        with self._logger.timed(f"note decoding ({file_path})"):
            for region in regions:
                result.sections.append(self._decode_region(cursor, region))

        self._logger.info(
            "Decoded %d note(s) from %d region(s), %d failed",
            result.note_count,
            len(result.sections),
            len(result.failed_sections),
        )
        return result

    # ------------------------------------------------------------------ #
    #  Region decoding
    # ------------------------------------------------------------------ #

    def _decode_region(
        self,
        cursor: ByteCursor,
        region: NoteRegion,
    ) -> NoteSectionResult:
        alignment = self._config.notes.note_alignment or region.alignment
        decoder = NoteRecordDecoder(self._registry, alignment=alignment)
        section = NoteSectionResult(region=region)

        with self._logger.operation(f"decode:{region.name}"):
            try:
                section.entries = decoder.decode_region(
                    cursor, region.offset, region.size
                )
            except TruncatedRecord as exc:
                if self._config.notes.abort_on_truncated:
                    raise
                section.error = str(exc)
                self._logger.warning(
                    "Skipping note region %s: %s",
                    region.name,
                    exc,
                    field=exc.field,
                    expected=exc.expected,
                    actual=exc.actual,
                )
        return section
