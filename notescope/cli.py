"""
NoteScope CLI
==============

Click-based command line interface.

Usage::

    # Print every note in a binary
    notescope /usr/bin/ls

    # JSON to stdout
    notescope /usr/bin/ls --json

    # Write a JSON report, ignore PT_NOTE fallback
    notescope core.1234 --output notes.json --no-segments
"""

from __future__ import annotations

import sys

import click

from shared.config import ScopeConfig
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

from notescope.core.engine import NoteEngine
from notescope.core.errors import NoteScopeError
from notescope.output.console import NoteConsoleOutput
from notescope.output.report import NoteReportGenerator


@click.command("notescope")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the report as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path.",
)
@click.option(
    "--no-segments",
    is_flag=True,
    default=False,
    help="Do not fall back to PT_NOTE segments.",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail on the first truncated note instead of skipping its region.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def notescope_cli(
    path: str,
    json_output: bool,
    output_path: str | None,
    no_segments: bool,
    strict: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Decode the ELF note records of PATH.

    Lists every record of every SHT_NOTE section (or PT_NOTE segment) with
    its owner, type and decoded payload.
    """
    console = ScopeConsole(quiet=json_output)

    try:
        config = ScopeConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Cannot load configuration: {exc}")
        sys.exit(1)

    if no_segments:
        config.notes.include_segments = False
    if strict:
        config.notes.abort_on_truncated = True

    settings = config.global_settings
    logger = ScopeLogger(
        "cli",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
        console_output=verbose,
    )
    engine = NoteEngine(config=config, logger=logger)

    try:
        result = engine.analyze(path)
    except (NoteScopeError, OSError, ValueError) as exc:
        logger.error("Analysis failed: %s", exc)
        if json_output:
            click.echo(f"error: {exc}", err=True)
        console.error(f"Analysis failed: {exc}")
        sys.exit(1)

    report_gen = NoteReportGenerator()

    if json_output:
        click.echo(report_gen.to_json(result))
    else:
        NoteConsoleOutput(console=console).display(result)
        for section in result.failed_sections:
            console.warning(f"Region {section.region.name} skipped")

    if output_path:
        report_path = report_gen.generate_json(result, output_path)
        console.success(f"JSON report saved: {report_path}")


def main() -> None:
    """Entry point for the ``notescope`` script and ``python -m notescope``."""
    notescope_cli()


if __name__ == "__main__":
    main()
