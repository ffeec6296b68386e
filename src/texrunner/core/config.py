"""Configuration model used by the build runner.

BuildConfig

`engine` (`str`)
: LaTeX executable to use. Must be resolvable on `PATH` or given as a path.
  Defaults to `pdflatex`.

`flags` (`list[str]`)
: Extra flags passed to the engine ahead of the interaction flag.

`build_directory` (`Path | None`)
: Directory receiving the engine output. Forwarded as
  `-output-directory=<dir>`; byproduct cleanup scans it (or the current
  directory when unset).

`clean_build` (`bool`)
: Remove auxiliary files, logs, and other byproducts (everything except the
  source and the produced document) once the jobs have finished.

`max_concurrency` (`int`)
: Upper bound on engine processes running at the same time.

`verbose` (`bool`)
: Report every parsed diagnostic, not only the per-job summary.

`nonstop_mode` (`bool`)
: Pass `-interaction=nonstopmode` so the engine never waits for input.

`context_lines` (`int`)
: Number of raw log lines kept after each error or badbox.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
import yaml

from texrunner.adapters.latex.engines import build_engine_command

from .exceptions import ConfigError


class BuildConfig(BaseModel):
    """Resolved settings shared by every job of a run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    engine: str = "pdflatex"
    flags: list[str] = Field(default_factory=list)
    build_directory: Path | None = None
    clean_build: bool = False
    max_concurrency: int = Field(default=1, ge=1)
    verbose: bool = False
    nonstop_mode: bool = True
    context_lines: int = Field(default=2, ge=0)

    @property
    def output_directory(self) -> Path:
        """Directory holding the engine output for this run."""
        return self.build_directory if self.build_directory is not None else Path(".")

    def build_command(self, source: Path) -> list[str]:
        """Return the engine argv for ``source``."""
        return build_engine_command(
            self.engine,
            source,
            flags=self.flags,
            nonstop_mode=self.nonstop_mode,
            output_directory=self.build_directory,
        )

    def merged(self, **overrides: Any) -> BuildConfig:
        """Return a copy with the non-``None`` overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        data = self.model_dump()
        data.update(values)
        try:
            return BuildConfig.model_validate(data)
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid build configuration: {exc}") from exc


def load_config(path: Path) -> BuildConfig:
    """Load a ``BuildConfig`` from a YAML mapping stored at ``path``."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file '{path}': {exc}") from exc

    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Configuration file '{path}' is not valid YAML: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Configuration file '{path}' must contain a mapping.")

    try:
        return BuildConfig.model_validate(payload)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid configuration in '{path}': {exc}") from exc


__all__ = ["BuildConfig", "load_config"]
