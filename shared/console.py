"""
NoteScope Console Interface
============================

Thin wrapper over :class:`rich.console.Console` with the NoteScope theme
and helpers for section rules and status messages.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.theme import Theme

_SCOPE_THEME = Theme(
    {
        "scope.section": "bold bright_magenta",
        "scope.success": "bold green",
        "scope.warning": "bold yellow",
        "scope.error": "bold red",
    }
)


class ScopeConsole:
    """Console used by the NoteScope CLI and output renderers.

    Args:
        quiet:  Suppress all output.
        record: Keep a record of output for :meth:`export_text`.
        width:  Fixed console width (``None`` detects the terminal).
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        width: int | None = None,
    ) -> None:
        self._console = Console(
            theme=_SCOPE_THEME,
            quiet=quiet,
            record=record,
            width=width,
            highlight=False,
        )

    def section(self, title: str) -> None:
        """Print a horizontal rule with *title*."""
        self._console.rule(f"  {title}  ", style="scope.section")

    def success(self, message: str) -> None:
        self._console.print(f"[scope.success][✔] SUCCESS:[/scope.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[scope.warning][⚠] WARNING:[/scope.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[scope.error][✘] ERROR:[/scope.error] {message}")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def export_text(self) -> str:
        """Recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
