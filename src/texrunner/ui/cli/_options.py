"""Shared Typer option definitions for the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from texrunner.version import get_version


INPUTS_PANEL = "Input Handling"
ENGINE_PANEL = "Engine"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

FilesArgument = Annotated[
    list[Path] | None,
    typer.Argument(
        metavar="FILES...",
        help="LaTeX sources (.tex) to build.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="YAML file with build settings; command-line options take precedence.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

EngineOption = Annotated[
    str | None,
    typer.Option(
        "--engine",
        help="LaTeX executable to use (must be on PATH). Defaults to pdflatex.",
        rich_help_panel=ENGINE_PANEL,
    ),
]

LatexFlagOption = Annotated[
    list[str] | None,
    typer.Option(
        "--latex-flag",
        help="Extra flag passed to the engine. Repeat to add more flags.",
        rich_help_panel=ENGINE_PANEL,
    ),
]

JobsOption = Annotated[
    int | None,
    typer.Option(
        "--jobs",
        "-j",
        min=1,
        help="Maximum number of engine processes running at once.",
        rich_help_panel=ENGINE_PANEL,
    ),
]

BuildDirOption = Annotated[
    Path | None,
    typer.Option(
        "--build-dir",
        help="Directory receiving the engine output (-output-directory).",
        file_okay=False,
        dir_okay=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CleanOption = Annotated[
    bool,
    typer.Option(
        "--clean",
        help="Remove auxiliary files and logs once the builds have finished.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Print every parsed diagnostic. Repeat for more error detail.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


def _print_version(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


VersionOption = Annotated[
    bool,
    typer.Option(
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show the texrunner version and exit.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
