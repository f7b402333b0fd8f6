"""Lightweight debug logging for qlspectrum.

Usage::

    from qlspectrumlib.log import dbg, timed

    dbg("zoom request 3 dispatched")
    with timed("render"):
        ...

Output is only emitted when the environment variable ``QLS_DEBUG`` is
set to ``1`` or ``true`` (case-insensitive).  Each message is
prefixed with a timestamp and the calling class/module for easy
grep filtering.
"""

from __future__ import annotations

import inspect
import os
import sys
import time
from contextlib import contextmanager

_ENABLED: bool | None = None


def _is_enabled() -> bool:
    global _ENABLED
    if _ENABLED is None:
        val = os.environ.get("QLS_DEBUG", "").strip().lower()
        _ENABLED = val in ("1", "true")
    return _ENABLED


def _frame_name(frame) -> str:
    """Class name of ``self`` in *frame*, else its module's short name."""
    if frame is None:
        return "?"
    self_obj = frame.f_locals.get("self")
    if self_obj is not None:
        return type(self_obj).__name__
    mod = frame.f_globals.get("__name__", "")
    return mod.rsplit(".", 1)[-1] if mod else "?"


def _caller_name() -> str:
    """Return the class name (or module name) of the caller's caller."""
    frame = inspect.currentframe()
    try:
        # Walk up: _caller_name -> dbg -> actual caller
        caller = frame.f_back.f_back if frame and frame.f_back else None
        return _frame_name(caller)
    finally:
        del frame


def _outer_caller_name() -> str:
    """Name of the first frame outside this module and ``contextlib``."""
    frame = inspect.currentframe()
    try:
        caller = frame
        while caller is not None and caller.f_globals.get("__name__") in (
                __name__, "contextlib"):
            caller = caller.f_back
        return _frame_name(caller)
    finally:
        del frame


def dbg(msg: str, *, name: str | None = None) -> None:
    """Print a timestamped debug line to stderr if ``QLS_DEBUG`` is active.

    Format: ``[HH:MM:SS.mmm CallerName] message``.  *name* overrides the
    caller lookup.
    """
    if not _is_enabled():
        return
    t = time.strftime("%H:%M:%S")
    ms = int((time.time() % 1) * 1000)
    if name is None:
        name = _caller_name()
    print(f"[{t}.{ms:03d} {name}] {msg}", file=sys.stderr, flush=True)


@contextmanager
def timed(label: str):
    """Emit ``<label>: N.N ms`` through :func:`dbg` when the block exits.

    The line is tagged with the code that opened the block.
    """
    name = _outer_caller_name() if _is_enabled() else None
    t0 = time.perf_counter()
    try:
        yield
    finally:
        if _is_enabled():
            dt = (time.perf_counter() - t0) * 1000
            dbg(f"{label}: {dt:.1f} ms", name=name or _outer_caller_name())
