"""CLI state shared between the command and its presenters."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import TYPE_CHECKING

import click


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "get_cli_state",
    "set_cli_state",
]


@dataclass(slots=True)
class CLIState:
    """Verbosity, traceback switch and the Rich consoles of one invocation."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Console bound to the current ``sys.stdout``."""
        from rich.console import Console

        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Console bound to the current ``sys.stderr``."""
        from rich.console import Console

        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("texrunner_cli_state", default=None)


def get_cli_state(ctx: click.Context | None = None, *, create: bool = True) -> CLIState:
    """Return the state attached to the active click context.

    Outside a command (for instance in ``main`` once the command returned),
    the state of the last invocation is used.
    """
    if ctx is None:
        ctx = click.get_current_context(silent=True)

    state = ctx.find_object(CLIState) if ctx is not None else None
    if state is None and ctx is not None and create:
        state = ctx.ensure_object(CLIState)
    if state is None:
        state = _STATE_VAR.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised.")
        state = CLIState()

    _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    """Update the CLI state, returning the current instance."""
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def _exception_chain(exc: BaseException) -> list[str]:
    chain: list[str] = []
    visited: set[int] = set()
    current = exc.__cause__ or exc.__context__
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        chain.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return chain


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    """Print an error to stderr; ``-v`` adds the exception type, ``-vv`` its causes."""
    from rich.text import Text

    state = get_cli_state()
    text = Text.assemble(("error: ", "bold red"), (message, "red"))

    if exception is not None and state.verbosity >= 1:
        extra = [f"type: {type(exception).__name__}"]
        if state.verbosity >= 2:
            chain = _exception_chain(exception)
            if chain:
                extra.append("caused by:")
                extra.extend(f"  {entry}" for entry in chain)
        text.append("\n" + "\n".join(extra), style="red")

    state.err_console.print(text)


def debug_enabled() -> bool:
    """Return whether full tracebacks should be displayed."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
