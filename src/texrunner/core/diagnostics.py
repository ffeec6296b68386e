"""Reporting sinks notified as jobs complete."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .jobs import Job
    from .report import RunnerReport


logger = logging.getLogger(__name__)


@runtime_checkable
class RunReporter(Protocol):
    """Interface receiving per-job completions and the final summary."""

    def report_completed(self, job: Job) -> None: ...

    def finish(self, report: RunnerReport) -> None: ...


class NullReporter:
    """Reporter that ignores every event."""

    def report_completed(self, job: Job) -> None:
        return

    def finish(self, report: RunnerReport) -> None:
        return


class LoggingReporter:
    """Reporter that forwards events to the standard logging module."""

    def __init__(self, *, logger_obj: logging.Logger | None = None, verbose: bool = False) -> None:
        self._logger = logger_obj or logger
        self.verbose = verbose

    def report_completed(self, job: Job) -> None:
        self._logger.info("%s", job)
        if not self.verbose or job.report is None:
            return
        for message in job.report.messages:
            self._logger.info("[%s] %s", message.kind.value, message.full)

    def finish(self, report: RunnerReport) -> None:
        if report.cancelled:
            self._logger.warning("Build cancelled. %s", report)
        else:
            self._logger.info("%s", report)


__all__ = ["LoggingReporter", "NullReporter", "RunReporter"]
