"""
app_log.py
Global app log — forwards messages to whatever sink the front end registered.

The CLI calls set_app_log(log_fn) when verbose output is wanted.
writer/reader call app_log(msg) once per archive entry; with no sink
registered that is a no-op, so library callers stay quiet by default.
"""

from __future__ import annotations

from typing import Callable

_log_fn: Callable[[str], None] | None = None


def set_app_log(log_fn: Callable[[str], None] | None) -> None:
    """Register the log function (e.g. a stderr printer). Pass None to unregister."""
    global _log_fn
    _log_fn = log_fn


def app_log(message: str) -> None:
    """Write a message to the registered log sink. No-op if not set."""
    if _log_fn is None:
        return
    try:
        _log_fn(message)
    except Exception:
        pass
