"""Build jobs wrapping one engine process per source file."""

from __future__ import annotations

from enum import Enum
import logging
from pathlib import Path
import subprocess
import tempfile
from typing import IO

from texrunner.adapters.latex.engines import artifact_extension
from texrunner.adapters.latex.log import BuildReport, LatexLogParser

from .config import BuildConfig
from .exceptions import CleanupError, ProcessWaitError, SpawnError, UnknownEngineError


logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Lifecycle of a build job."""

    PENDING = "pending"
    ACTIVE = "active"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {JobStatus.SUCCESS, JobStatus.FAILED}


class Job:
    """One build attempt for one source file, spanning at most two engine runs.

    The job is driven by :meth:`poll`. The first call spawns the engine; later
    calls check the process without blocking. When a run finishes, its
    captured stdout is parsed into a :class:`BuildReport` which decides between
    success, failure, and a single rebuild to settle forward references.
    """

    def __init__(self, config: BuildConfig, path: Path) -> None:
        self.config = config
        self.source = Path(path)
        self.jobname = self.source.stem
        self.argv = config.build_command(self.source)
        self.run_count = 0
        self.report: BuildReport | None = None
        self.status = JobStatus.PENDING
        self.error: Exception | None = None
        self.returncode: int | None = None
        self._process: subprocess.Popen[bytes] | None = None
        self._output: IO[str] | None = None

    def __repr__(self) -> str:
        return f"Job(jobname={self.jobname!r}, status={self.status.value}, runs={self.run_count})"

    def __str__(self) -> str:
        if self.report is not None:
            detail = str(self.report)
        elif self.error is not None:
            detail = str(self.error)
        else:
            detail = "no report"
        return f"{self.jobname}: {self.status.value} ({detail})"

    @property
    def is_running(self) -> bool:
        return self._process is not None

    def poll(self) -> bool:
        """Advance the job and return ``True`` when it just became terminal."""
        if self.status is JobStatus.PENDING:
            self.status = JobStatus.ACTIVE
            return not self._spawn()

        if self.status is not JobStatus.ACTIVE or self._process is None:
            return False

        try:
            returncode = self._process.poll()
        except OSError as exc:
            error = ProcessWaitError(f"Unable to query engine process for '{self.jobname}': {exc}")
            self._fail(error)
            return True

        if returncode is None:
            return False
        return self._check_build_log(returncode)

    def kill(self) -> None:
        """Ask the running engine process to terminate immediately."""
        if self._process is None:
            return
        logger.debug("Killing engine process for '%s' (pid %s).", self.jobname, self._process.pid)
        try:
            self._process.kill()
        except OSError as exc:
            logger.debug("Could not kill engine process for '%s': %s", self.jobname, exc)

    def close(self) -> None:
        """Reap the engine process, if any, and release its captured output."""
        process, self._process = self._process, None
        if process is not None:
            try:
                process.wait()
            except OSError as exc:
                logger.debug("Could not reap engine process for '%s': %s", self.jobname, exc)
        self._close_output()

    def cleanup(self) -> list[Path]:
        """Remove byproducts of this job from the output directory.

        Every regular file named after the job (``<jobname>.*``) is deleted,
        except the source file and the engine artifact. Returns the removed
        paths.
        """
        directory = self.config.output_directory
        try:
            artifact = artifact_extension(self.config.engine)
        except UnknownEngineError as exc:
            raise CleanupError(f"Cannot tell which output of '{self.jobname}' to keep.") from exc
        keep = {self.source.suffix or ".tex", artifact}
        prefix = f"{self.jobname}."
        removed: list[Path] = []
        try:
            for entry in sorted(directory.iterdir()):
                if not entry.name.startswith(prefix) or not entry.is_file():
                    continue
                if entry.suffix in keep:
                    continue
                entry.unlink()
                removed.append(entry)
        except OSError as exc:
            raise CleanupError(f"Unable to clean byproducts of '{self.jobname}': {exc}") from exc
        if removed:
            logger.debug("Removed %d byproduct(s) of '%s'.", len(removed), self.jobname)
        return removed

    def _spawn(self) -> bool:
        output = tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace")
        try:
            self._process = subprocess.Popen(
                self.argv,
                stdout=output,
                stderr=None,
                stdin=subprocess.DEVNULL,
            )
        except OSError as exc:
            output.close()
            self._fail(SpawnError(f"Unable to start '{self.argv[0]}' for '{self.jobname}': {exc}"))
            return False
        self._output = output
        self.run_count += 1
        logger.debug("Started run %d of '%s': %s", self.run_count, self.jobname, " ".join(self.argv))
        return True

    def _check_build_log(self, returncode: int) -> bool:
        self._process = None
        self.returncode = returncode
        output = self._output
        try:
            if output is None:
                self.report = BuildReport()
            else:
                output.seek(0)
                parser = LatexLogParser(context_lines=self.config.context_lines)
                self.report = parser.feed(output)
        finally:
            self._close_output()

        report = self.report
        if report.errors > 0 or returncode != 0:
            logger.info(
                "'%s' failed on run %d (exit status %d, %d error(s)).",
                self.jobname,
                self.run_count,
                returncode,
                report.errors,
            )
            self.status = JobStatus.FAILED
            return True

        if self.run_count == 1 and report.needs_rerun:
            logger.info("'%s' has unresolved references, rebuilding.", self.jobname)
            return not self._spawn()

        self.status = JobStatus.SUCCESS
        return True

    def _fail(self, error: Exception) -> None:
        logger.warning("%s", error)
        self.error = error
        self.status = JobStatus.FAILED
        self._process = None
        self._close_output()

    def _close_output(self) -> None:
        output, self._output = self._output, None
        if output is not None:
            output.close()


__all__ = ["Job", "JobStatus"]
