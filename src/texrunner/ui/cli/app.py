"""Typer application wiring for the texrunner CLI."""

from __future__ import annotations

import typer

from texrunner.core.config import BuildConfig, load_config
from texrunner.core.exceptions import ConfigError, InputPathError, TexRunnerError
from texrunner.core.runner import Runner, handle_interrupts

from ._options import (
    BuildDirOption,
    CleanOption,
    ConfigOption,
    DebugOption,
    EngineOption,
    FilesArgument,
    JobsOption,
    LatexFlagOption,
    VerboseOption,
    VersionOption,
)
from .presenter import CliReporter
from .state import debug_enabled, emit_error, set_cli_state


app = typer.Typer(
    help="Build LaTeX documents in parallel and summarise their diagnostics.",
    context_settings={"help_option_names": ["--help", "-h"]},
)


@app.command()
def build(
    files: FilesArgument = None,
    config: ConfigOption = None,
    engine: EngineOption = None,
    latex_flag: LatexFlagOption = None,
    jobs: JobsOption = None,
    build_dir: BuildDirOption = None,
    clean: CleanOption = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    version: VersionOption = False,
) -> None:
    """Run the LaTeX engine over FILES, rerunning once to settle references."""
    state = set_cli_state(verbosity=verbose, debug=debug)

    try:
        base = load_config(config) if config is not None else BuildConfig()
        build_config = base.merged(
            engine=engine,
            flags=latex_flag or None,
            build_directory=build_dir,
            clean_build=True if clean else None,
            max_concurrency=jobs,
            verbose=True if verbose else None,
        )
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if not files:
        emit_error("No input files given.")
        raise typer.Exit(code=2)

    runner = Runner(build_config)
    rejected = 0
    for path in files:
        try:
            runner.submit(path)
        except InputPathError as exc:
            rejected += 1
            emit_error(str(exc), exception=exc)

    if not runner.pending:
        raise typer.Exit(code=1)

    reporter = CliReporter(state, len(runner.pending), verbose=build_config.verbose)
    runner.reporter = reporter
    try:
        with reporter, handle_interrupts(runner):
            report = runner.process_submissions()
    except TexRunnerError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if rejected or not report.ok:
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - defensive catch-all
        from .state import get_cli_state

        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "build", "main"]
