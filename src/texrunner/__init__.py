"""Primary public API for texrunner."""

from __future__ import annotations

from texrunner.adapters.latex.log import (
    BuildReport,
    LatexLogParser,
    LatexMessage,
    MessageKind,
    parse_latex_log,
    parse_latex_log_file,
)
from texrunner.core.config import BuildConfig, load_config
from texrunner.core.diagnostics import LoggingReporter, NullReporter, RunReporter
from texrunner.core.exceptions import (
    AggregationInvariantError,
    CleanupError,
    ConfigError,
    InputPathError,
    ProcessWaitError,
    SpawnError,
    TexRunnerError,
    ValidationError,
)
from texrunner.core.jobs import Job, JobStatus
from texrunner.core.report import RunnerReport
from texrunner.core.runner import Runner, handle_interrupts
from texrunner.version import get_version


__version__ = get_version()

__all__ = [
    "AggregationInvariantError",
    "BuildConfig",
    "BuildReport",
    "CleanupError",
    "ConfigError",
    "InputPathError",
    "Job",
    "JobStatus",
    "LatexLogParser",
    "LatexMessage",
    "LoggingReporter",
    "MessageKind",
    "NullReporter",
    "ProcessWaitError",
    "RunReporter",
    "Runner",
    "RunnerReport",
    "SpawnError",
    "TexRunnerError",
    "ValidationError",
    "get_version",
    "__version__",
    "handle_interrupts",
    "load_config",
    "parse_latex_log",
    "parse_latex_log_file",
]
