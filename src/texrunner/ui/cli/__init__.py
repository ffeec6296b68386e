"""Public CLI exports for texrunner."""

from __future__ import annotations

from .app import app, build, main
from .state import debug_enabled, emit_error, get_cli_state


__all__ = [
    "app",
    "build",
    "debug_enabled",
    "emit_error",
    "get_cli_state",
    "main",
]
