"""
NoteScope Output
=================

- ``console`` -- Rich-based console display
- ``report``  -- JSON report generation
"""

from notescope.output.console import NoteConsoleOutput
from notescope.output.report import NoteReportGenerator

__all__ = [
    "NoteConsoleOutput",
    "NoteReportGenerator",
]
