"""
NoteScope Console Output
=========================

Rich terminal rendering of a :class:`NoteAnalysisResult`: an image panel
followed by one table per note region.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from shared.console import ScopeConsole

from notescope.core.models import (
    NT_GNU_BUILD_ID,
    NT_GNU_GOLD_VERSION,
    ImageInfo,
    NoteAnalysisResult,
    NoteEntry,
    NoteSectionResult,
)


_HEX_PREVIEW_BYTES: int = 32


def describe_entry(entry: NoteEntry) -> str:
    """One-line human description of a note's payload."""
    abi = entry.descriptor_as_abi_tag()
    if abi is not None:
        os_name = abi.operating_system.value
        if os_name == "unknown":
            os_name = f"unknown({abi.os_code})"
        return f"OS: {os_name}, ABI: {abi.kernel_version}"
    if entry.name == "GNU" and entry.type == NT_GNU_BUILD_ID:
        return f"Build ID: {entry.descriptor_as_hex()}"
    if entry.name == "GNU" and entry.type == NT_GNU_GOLD_VERSION:
        return f"Version: {entry.descriptor_as_text().rstrip(chr(0))}"
    if not entry.descriptor:
        return "-"
    preview = entry.descriptor[:_HEX_PREVIEW_BYTES].hex()
    if entry.descriptor_size > _HEX_PREVIEW_BYTES:
        preview += "..."
    return preview


class NoteConsoleOutput:
    """Render analysis results to a :class:`ScopeConsole`.

    Usage::

        output = NoteConsoleOutput()
        output.display(result)
    """

    def __init__(self, console: ScopeConsole | None = None) -> None:
        self._console: ScopeConsole = console or ScopeConsole()

    def display(self, result: NoteAnalysisResult) -> None:
        self.display_header(result.info)
        if not result.sections:
            self._console.warning("No note sections or segments found.")
            return
        for section in result.sections:
            self.display_section(section)

    def display_header(self, info: ImageInfo) -> None:
        lines: list[str] = [
            f"[bold]File:[/bold]    {info.path}",
            f"[bold]Size:[/bold]    {info.size:,} bytes",
            f"[bold]Type:[/bold]    {info.elf_type}",
            f"[bold]Arch:[/bold]    {info.machine} ({info.bits}-bit, {info.endian})",
        ]
        if info.sha256:
            lines.append(f"[bold]SHA-256:[/bold] {info.sha256}")
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Image[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def display_section(self, section: NoteSectionResult) -> None:
        region = section.region
        self._console.section(
            f"{region.name} ({region.source.value}, "
            f"offset 0x{region.offset:x}, size 0x{region.size:x})"
        )
        if section.error:
            self._console.error(section.error)
            return

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("Owner", style="bold")
        tbl.add_column("Type")
        tbl.add_column("Data size", justify="right")
        tbl.add_column("Description", overflow="fold")

        for entry in section.entries:
            tbl.add_row(
                entry.name or "-",
                entry.type_name,
                f"0x{entry.descriptor_size:08x}",
                describe_entry(entry),
            )
        self._console.print(tbl)
