"""Bounded-concurrency scheduler driving build jobs to completion."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
import contextlib
import logging
from pathlib import Path
import signal
import threading
import time
from types import FrameType

from .config import BuildConfig
from .diagnostics import NullReporter, RunReporter
from .exceptions import AggregationInvariantError, InputPathError
from .jobs import Job, JobStatus
from .report import RunnerReport


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05


class Runner:
    """Launch, poll, and retire jobs while at most ``max_concurrency`` run.

    The runner is single-threaded: one drain loop sweeps the active window and
    polls each job without blocking. Jobs are launched in submission order
    and retired in completion order. Cancellation is requested through a
    :class:`threading.Event` that the drain loop checks once per sweep.
    """

    def __init__(
        self,
        config: BuildConfig,
        reporter: RunReporter | None = None,
        *,
        cancel_event: threading.Event | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.config = config
        self.reporter: RunReporter = reporter or NullReporter()
        self.cancel_event = cancel_event or threading.Event()
        self.poll_interval = poll_interval
        self.max_concurrency = max(1, config.max_concurrency)
        self.pending: deque[Job] = deque()
        self.active: list[Job] = []
        self.completed: list[Job] = []
        self.cancelled = False

    def submit(self, path: Path) -> Job:
        """Queue a build of ``path``; fail immediately when it does not exist."""
        source = Path(path)
        if not source.exists():
            raise InputPathError(f"Input file '{source}' does not exist.")
        job = Job(self.config, source)
        self.pending.append(job)
        logger.debug("Queued '%s'.", job.jobname)
        return job

    def cancel(self) -> None:
        """Request cancellation; the drain loop acts on it at its next sweep."""
        self.cancel_event.set()

    def run(self, paths: Iterable[Path]) -> RunnerReport:
        """Submit every path and build them all."""
        for path in paths:
            self.submit(path)
        return self.process_submissions()

    def process_submissions(self) -> RunnerReport:
        """Drain the queue, clean byproducts if requested, and summarise."""
        self._drain()
        self._do_cleanup()
        report = self.build_report()
        self.reporter.finish(report)
        return report

    def build_report(self) -> RunnerReport:
        report = RunnerReport(num_files=len(self.completed), cancelled=self.cancelled)
        for job in self.completed:
            if job.status is JobStatus.SUCCESS:
                report.success += 1
            elif job.status is JobStatus.FAILED:
                report.fail += 1
            else:
                raise AggregationInvariantError(
                    f"Job '{job.jobname}' was retired with status '{job.status.value}'."
                )
            if job.report is not None:
                report.build_reports[job.jobname] = job.report
        return report

    def _drain(self) -> None:
        try:
            while self.pending or self.active:
                if self.cancel_event.is_set():
                    self._cancel_outstanding()
                    return

                self._admit()
                progressed = False
                for job in list(self.active):
                    if job.poll():
                        self.active.remove(job)
                        self._retire(job)
                        self._admit()
                        progressed = True

                if not progressed and self.active:
                    time.sleep(self.poll_interval)
        except BaseException:
            # Engine processes must not outlive the runner.
            self._release_active()
            raise

    def _admit(self) -> None:
        while self.pending and len(self.active) < self.max_concurrency:
            job = self.pending.popleft()
            if job.poll():
                self._retire(job)
                continue
            self.active.append(job)
            logger.debug("Admitted '%s' (%d active).", job.jobname, len(self.active))

    def _retire(self, job: Job) -> None:
        self.completed.append(job)
        self.reporter.report_completed(job)

    def _cancel_outstanding(self) -> None:
        logger.warning(
            "Cancelling build: stopping %d running job(s), dropping %d queued job(s).",
            len(self.active),
            len(self.pending),
        )
        self._release_active()
        self.pending.clear()
        self.cancelled = True

    def _release_active(self) -> None:
        for job in self.active:
            if job.is_running:
                job.kill()
        for job in self.active:
            job.close()
        self.active.clear()

    def _do_cleanup(self) -> None:
        if not self.config.clean_build:
            return
        for job in self.completed:
            job.cleanup()


@contextlib.contextmanager
def handle_interrupts(runner: Runner) -> Iterator[None]:
    """Route SIGINT to :meth:`Runner.cancel` for the duration of the block.

    The handler only sets the cancellation event; teardown happens in the
    drain loop. Outside the main thread no handler can be installed and the
    block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _request_cancel(signum: int, frame: FrameType | None) -> None:
        runner.cancel()

    previous = signal.signal(signal.SIGINT, _request_cancel)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


__all__ = ["DEFAULT_POLL_INTERVAL", "Runner", "handle_interrupts"]
