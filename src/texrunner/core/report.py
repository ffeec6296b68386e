"""Run-level summary produced once all jobs have been retired."""

from __future__ import annotations

from dataclasses import dataclass, field

from texrunner.adapters.latex.log import BuildReport


@dataclass(slots=True)
class RunnerReport:
    """Aggregated outcome of a runner invocation."""

    num_files: int = 0
    success: int = 0
    fail: int = 0
    build_reports: dict[str, BuildReport] = field(default_factory=dict)
    cancelled: bool = False

    def __str__(self) -> str:
        return (
            f"Build statistics: {self.num_files} jobs, "
            f"{self.success} succeeded, {self.fail} failed."
        )

    @property
    def ok(self) -> bool:
        """Whether every retired job succeeded and the run was not cancelled."""
        return self.fail == 0 and not self.cancelled


__all__ = ["RunnerReport"]
