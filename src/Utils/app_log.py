"""
app_log.py
Extension-wide log sink. Forwards messages to the host's log when set.

The extension facade calls set_app_log(log_fn, after_fn) once the host hands
over its logger. Utils/GitHub code calls app_log(msg, level) so messages
appear in the host's log alongside its own entries.

Thread safety: when app_log is called from a background thread (e.g. a
requirement download), messages are put on a queue and drained on the main
thread via a periodic after() callback. When called from the main thread,
the message is logged immediately.
"""

from __future__ import annotations

import queue
import threading

LEVELS = ("debug", "info", "warn", "error")

_log_fn: callable | None = None
_after_fn: callable | None = None
_main_thread_id: int | None = None
_log_queue: queue.Queue[str] = queue.Queue()


def _format(message: str, level: str) -> str:
    if level not in LEVELS:
        level = "info"
    return f"[{level}] {message}"


def _drain_log_queue() -> None:
    """Run on main thread: drain queued messages and log them. Reschedule to run again."""
    if _log_fn is None:
        return
    try:
        while True:
            msg = _log_queue.get_nowait()
            try:
                _log_fn(msg)
            except Exception:
                pass
    except queue.Empty:
        pass
    if _after_fn is not None:
        _after_fn(50, _drain_log_queue)


def set_app_log(log_fn: callable[[str], None], after_fn: callable | None = None) -> None:
    """Register the host log function and, optionally, a main-thread runner.

    Without *after_fn* every message is written straight to *log_fn*, which
    is what headless hosts and the test-suite want.
    """
    global _log_fn, _after_fn, _main_thread_id
    _log_fn = log_fn
    _after_fn = after_fn
    _main_thread_id = threading.current_thread().ident
    if after_fn is not None:
        after_fn(0, _drain_log_queue)


def clear_app_log() -> None:
    """Detach the sink. Subsequent app_log() calls become no-ops."""
    global _log_fn, _after_fn, _main_thread_id
    _log_fn = None
    _after_fn = None
    _main_thread_id = None


def app_log(message: str, level: str = "info") -> None:
    """Write a message to the host log (thread-safe). No-op if not set."""
    if _log_fn is None:
        return
    line = _format(message, level)
    try:
        if _after_fn is None or threading.current_thread().ident == _main_thread_id:
            _log_fn(line)
        else:
            _log_queue.put_nowait(line)
    except Exception:
        pass
