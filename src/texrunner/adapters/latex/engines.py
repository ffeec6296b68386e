"""LaTeX engine helpers: command construction and artifact lookup."""

from __future__ import annotations

from collections.abc import Sequence
import os
from pathlib import Path

from texrunner.core.exceptions import UnknownEngineError


NONSTOP_FLAG = "-interaction=nonstopmode"
OUTPUT_DIRECTORY_FLAG = "-output-directory="

_ARTIFACT_EXTENSIONS: dict[str, str] = {
    "pdflatex": ".pdf",
    "pdftex": ".pdf",
    "lualatex": ".pdf",
    "luatex": ".pdf",
    "xelatex": ".pdf",
    "xetex": ".pdf",
    "latex": ".dvi",
    "tex": ".dvi",
}


def engine_name(engine: str) -> str:
    """Return the bare executable name for an engine given as name or path."""
    candidate = Path(engine.strip()).name
    if candidate.lower().endswith(".exe"):
        candidate = candidate[:-4]
    return candidate


def artifact_extension(engine: str) -> str:
    """Return the suffix of the primary artifact produced by ``engine``."""
    name = engine_name(engine)
    try:
        return _ARTIFACT_EXTENSIONS[name]
    except KeyError:
        raise UnknownEngineError(f"Unrecognised LaTeX engine: {engine}") from None


def build_engine_command(
    engine: str,
    source: Path,
    *,
    flags: Sequence[str] = (),
    nonstop_mode: bool = True,
    output_directory: Path | None = None,
) -> list[str]:
    """Construct the argv used to compile ``source``.

    Arguments are appended in a fixed order: configured flags, the nonstop
    interaction flag, the output directory, then the source path.
    """
    argv = [engine, *flags]
    if nonstop_mode:
        argv.append(NONSTOP_FLAG)
    if output_directory is not None:
        argv.append(f"{OUTPUT_DIRECTORY_FLAG}{os.fspath(output_directory)}")
    argv.append(os.fspath(source))
    return argv


__all__ = [
    "NONSTOP_FLAG",
    "OUTPUT_DIRECTORY_FLAG",
    "artifact_extension",
    "build_engine_command",
    "engine_name",
]
