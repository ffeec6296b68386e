"""Custom exception hierarchy for the LaTeX build runner."""

from __future__ import annotations


class TexRunnerError(RuntimeError):
    """Base exception for build runner failures."""


class ConfigError(TexRunnerError):
    """Raised when a build configuration cannot be loaded or validated."""


class ValidationError(TexRunnerError):
    """Raised when a submission is rejected before a job is created."""


class InputPathError(ValidationError):
    """Raised when a submitted source path does not exist."""


class UnknownEngineError(TexRunnerError):
    """Raised when no artifact extension is known for an engine."""


class SpawnError(TexRunnerError):
    """Raised when the engine process could not be started."""


class ProcessWaitError(TexRunnerError):
    """Raised when checking an engine process for completion fails."""


class CleanupError(TexRunnerError):
    """Raised when build byproducts cannot be removed."""


class AggregationInvariantError(TexRunnerError):
    """Raised when a retired job carries no terminal status."""


__all__ = [
    "AggregationInvariantError",
    "CleanupError",
    "ConfigError",
    "InputPathError",
    "ProcessWaitError",
    "SpawnError",
    "TexRunnerError",
    "UnknownEngineError",
    "ValidationError",
]
