from __future__ import annotations

import logging

import pytest

from texrunner.core.diagnostics import LoggingReporter, NullReporter, RunReporter
from texrunner.core.report import RunnerReport


def test_null_reporter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    reporter = NullReporter()
    with caplog.at_level(logging.DEBUG):
        reporter.finish(RunnerReport(num_files=1, success=1))
    assert not caplog.records
    assert isinstance(reporter, RunReporter)


def test_logging_reporter_warns_on_cancellation(caplog: pytest.LogCaptureFixture) -> None:
    reporter = LoggingReporter()
    with caplog.at_level(logging.INFO):
        reporter.finish(RunnerReport(num_files=2, success=1, fail=1, cancelled=True))

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Build cancelled. Build statistics: 2 jobs, 1 succeeded, 1 failed."


def test_runner_report_ok() -> None:
    assert RunnerReport(num_files=1, success=1).ok
    assert not RunnerReport(num_files=1, fail=1).ok
    assert not RunnerReport(cancelled=True).ok
