"""Logging utilities for concurrent enrichment.

Log lines are plain ``print`` calls tagged like ``[visual] [ok] ...``.
When several words are enriched at once, ``setup_thread_prefixed_stdout``
wraps stdout so every line also carries a short thread id and the word the
thread is working on.
"""

import sys
import threading
from typing import Dict


# Thread id -> small stable index (t00, t01, ...)
_THREAD_IDX_LOCK = threading.Lock()
_THREAD_IDX_MAP: Dict[int, int] = {}
_THREAD_IDX_NEXT = 0

# Thread-local log context (the word being enriched)
_LOG_CTX = threading.local()

_TAG_EMOJI = {
    "ok": "✅",
    "fail": "💥",
    "fetch": "🌐",
    "rank": "🧮",
    "file": "💾",
}


def set_thread_log_context(word: str) -> None:
    """Set the word shown in this thread's log prefix."""
    _LOG_CTX.word = word


def clear_thread_log_context() -> None:
    _LOG_CTX.word = ""


def log_debug(enabled: bool, message: str) -> None:
    """Print a debug message if debugging is enabled."""
    if enabled:
        print(f"[debug] {message}")


def _short_thread_id() -> str:
    global _THREAD_IDX_NEXT
    tid = threading.get_ident()
    with _THREAD_IDX_LOCK:
        idx = _THREAD_IDX_MAP.get(tid)
        if idx is None:
            idx = _THREAD_IDX_NEXT
            _THREAD_IDX_MAP[tid] = idx
            _THREAD_IDX_NEXT = (_THREAD_IDX_NEXT + 1) % 100
    return f"t{idx:02d}"


def _decorate(line: str) -> str:
    """Insert an emoji after the second tag of ``[module] [tag] text``."""
    if not line.startswith("["):
        return line
    first_end = line.find("]")
    if first_end == -1:
        return line
    rest = line[first_end + 1:].lstrip()
    if not rest.startswith("["):
        return line
    second_end = rest.find("]")
    if second_end == -1:
        return line
    emoji = _TAG_EMOJI.get(rest[1:second_end], "")
    if not emoji:
        return line
    return f"{line[:first_end + 1]} {rest[:second_end + 1]} {emoji} {rest[second_end + 1:].lstrip()}"


class _ThreadPrefixedWriter:
    """Wrapper for stdout that adds thread ids and word context to output."""

    def __init__(self, wrapped):
        self._wrapped = wrapped
        self._lock = threading.Lock()

    def write(self, s: str) -> int:
        if not isinstance(s, str):
            return 0
        # print() writes the trailing newline separately
        if s == "\n":
            with self._lock:
                self._wrapped.write("\n")
                self._wrapped.flush()
            return 1
        word = getattr(_LOG_CTX, "word", "")
        prefix = f"[{_short_thread_id()}] [{word or 'main'}] "
        with self._lock:
            parts = s.split("\n")
            for i, part in enumerate(parts):
                if part:
                    self._wrapped.write(prefix + _decorate(part))
                if i < len(parts) - 1:
                    self._wrapped.write("\n")
            self._wrapped.flush()
        return len(s)

    def flush(self) -> None:
        self._wrapped.flush()

    def isatty(self) -> bool:
        isatty = getattr(self._wrapped, "isatty", None)
        return bool(isatty()) if isatty else False


def setup_thread_prefixed_stdout() -> None:
    """Set up thread-prefixed stdout writer (idempotent)."""
    if isinstance(sys.stdout, _ThreadPrefixedWriter):
        return
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(line_buffering=True)
    sys.stdout = _ThreadPrefixedWriter(sys.stdout)  # type: ignore
