"""
NoteScope Core Module
======================

Data models, errors and the analysis engine.
"""

from notescope.core.errors import (
    NotAnElfFile,
    NoteScopeError,
    TruncatedRead,
    TruncatedRecord,
)
from notescope.core.models import (
    AbiTag,
    DescriptorView,
    NoteAnalysisResult,
    NoteEntry,
    NoteRegion,
    NoteSectionResult,
    OperatingSystem,
)

__all__ = [
    "AbiTag",
    "DescriptorView",
    "NotAnElfFile",
    "NoteAnalysisResult",
    "NoteEntry",
    "NoteRegion",
    "NoteScopeError",
    "NoteSectionResult",
    "OperatingSystem",
    "TruncatedRead",
    "TruncatedRecord",
]
