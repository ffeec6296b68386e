"""Rich-aware presenters for build progress and diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import ClassVar

from rich import box
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn
from rich.table import Table
from rich.text import Text

from texrunner.adapters.latex.log import BuildReport, LatexMessage, MessageKind
from texrunner.core.jobs import Job, JobStatus
from texrunner.core.report import RunnerReport

from .state import CLIState


class CliReporter:
    """Report job completions under a progress bar and print the final summary."""

    _KIND_STYLE: ClassVar[dict[MessageKind, str]] = {
        MessageKind.ERROR: "bold red",
        MessageKind.WARNING: "yellow",
        MessageKind.BADBOX: "magenta",
        MessageKind.INFO: "cyan",
    }
    _KIND_ICON: ClassVar[dict[MessageKind, str]] = {
        MessageKind.ERROR: "x",
        MessageKind.WARNING: "▲",
        MessageKind.BADBOX: "□",
        MessageKind.INFO: "·",
    }

    def __init__(self, state: CLIState, total: int, *, verbose: bool = False) -> None:
        self.state = state
        self.verbose = verbose
        self._progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=state.console,
            transient=True,
        )
        self._task: TaskID = self._progress.add_task("Building", total=total)

    def __enter__(self) -> CliReporter:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    @property
    def console(self) -> Console:
        return self._progress.console

    def report_completed(self, job: Job) -> None:
        self._progress.advance(self._task)
        style = "green" if job.status is JobStatus.SUCCESS else "bold red"
        self.console.print(Text(str(job), style=style))

        report = job.report
        if report is None:
            return
        if self.verbose:
            for message in report.messages:
                self._print_message(message)
            self._print_missing_labels(report)
        elif job.status is JobStatus.FAILED:
            errors = report.messages_of(MessageKind.ERROR)
            if errors:
                self._print_message(errors[0])

    def finish(self, report: RunnerReport) -> None:
        self._progress.stop()
        table = Table(box=box.SQUARE, show_header=True, header_style="bold cyan")
        table.add_column("Jobs")
        table.add_column("Succeeded")
        table.add_column("Failed")
        table.add_row(
            str(report.num_files),
            Text(str(report.success), style="green"),
            Text(str(report.fail), style="bold red" if report.fail else "green"),
        )
        self.console.print(table)
        if report.cancelled:
            self.console.print(Text("Build cancelled; unfinished jobs were dropped.", style="yellow"))
        style = "green" if report.ok else "bold red"
        self.console.print(Text(str(report), style=style))

    def _print_message(self, message: LatexMessage) -> None:
        style = self._KIND_STYLE.get(message.kind, "white")
        header = Text()
        header.append(f"  {self._KIND_ICON.get(message.kind, '')} ", style=style)
        header.append(message.full, style=style)
        self.console.print(header)
        self._print_context(message.context_lines)

    def _print_context(self, lines: Sequence[str]) -> None:
        for index, line in enumerate(lines):
            connector = "└" if index == len(lines) - 1 else "├"
            text = Text(f"    {connector}─ ", style="grey35")
            text.append(line, style="grey58")
            self.console.print(text)

    def _print_missing_labels(self, report: BuildReport) -> None:
        for label in report.missing_references:
            self.console.print(Text(f"  Missing label: {label}", style="yellow"))
        for label in report.missing_citations:
            self.console.print(Text(f"  Missing citation: {label}", style="yellow"))


__all__ = ["CliReporter"]
