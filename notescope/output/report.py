"""
NoteScope Report Generation
============================

Structured JSON reports of decoded note records.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from notescope.core.models import NoteAnalysisResult


REPORT_TYPE: str = "notescope_note_analysis"
REPORT_VERSION: str = "1.0.0"


class NoteReportGenerator:
    """Build and write JSON reports.

    Usage::

        generator = NoteReportGenerator()
        generator.generate_json(result, "notes.json")
    """

    def build(self, result: NoteAnalysisResult) -> dict[str, Any]:
        """Return the report as a JSON-compatible dictionary."""
        abi = result.abi_tag()
        return {
            "report_type": REPORT_TYPE,
            "version": REPORT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "image": result.info.model_dump(mode="json"),
            "summary": {
                "note_count": result.note_count,
                "region_count": len(result.sections),
                "failed_regions": [s.region.name for s in result.failed_sections],
                "abi_tag": abi.model_dump(mode="json") if abi else None,
                "build_id": result.build_id() or None,
            },
            "regions": [
                {
                    **section.region.model_dump(mode="json"),
                    "error": section.error or None,
                    "notes": [
                        {
                            **entry.model_dump(mode="json"),
                            "type_name": entry.type_name,
                        }
                        for entry in section.entries
                    ],
                }
                for section in result.sections
            ],
        }

    def to_json(self, result: NoteAnalysisResult, indent: int = 2) -> str:
        return json.dumps(self.build(result), indent=indent, ensure_ascii=False)

    def generate_json(self, result: NoteAnalysisResult, output_path: str) -> str:
        """Write the report to *output_path*.

        Returns:
            The absolute path of the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.build(result), f, indent=2, ensure_ascii=False)
        return str(path.resolve())
