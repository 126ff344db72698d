"""Timestamped, level-filtered output shared by the wrapper and its drainers."""

import contextlib
import os
import sys
import threading
from datetime import datetime
from typing import TextIO

TRACE = 5
DEBUG = 10
INFO = 20
ERROR = 40
CRITICAL = 50

_LABELS = {
    TRACE: "TRACE: ",
    DEBUG: "DEBUG: ",
    INFO: "",
    ERROR: "ERROR: ",
    CRITICAL: "CRITICAL: ",
}

_LEVEL_NAMES = {TRACE: "TRACE", DEBUG: "DEBUG", INFO: "INFO", ERROR: "ERROR", CRITICAL: "CRITICAL"}


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _is_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def level_for(verbosity: int) -> int:
    if verbosity <= 0:
        return INFO
    if verbosity == 1:
        return DEBUG
    return TRACE


class Logger:
    """Writes one complete line per call; safe to share between threads.

    INFO goes to ``out`` (stdout by default), every other level to ``err``.
    Streams default to whatever ``sys.stdout`` / ``sys.stderr`` are at write
    time.
    """

    def __init__(self, level: int = INFO, out: TextIO | None = None, err: TextIO | None = None):
        self.level = level
        self._out = out
        self._err = err
        self._lock = threading.Lock()

    def enabled(self, level: int) -> bool:
        return level >= self.level

    def _write(self, level: int, msg: str, stream: str | None = None) -> None:
        if not self.enabled(level):
            return
        tag = f"{stream}: " if stream else ""
        line = f"[{_timestamp()}] {_LABELS[level]}{tag}{msg}\n"
        if level == INFO:
            target = self._out or sys.stdout
        else:
            target = self._err or sys.stderr
        with self._lock:
            target.write(line)
            target.flush()
            if level == CRITICAL and _is_github_actions():
                # Annotation only; the line above is the record
                with contextlib.suppress(OSError):
                    out = self._out or sys.stdout
                    out.write(f"::error::{msg}\n")
                    out.flush()

    def trace(self, msg: str, stream: str | None = None) -> None:
        self._write(TRACE, msg, stream)

    def debug(self, msg: str, stream: str | None = None) -> None:
        self._write(DEBUG, msg, stream)

    def info(self, msg: str, stream: str | None = None) -> None:
        self._write(INFO, msg, stream)

    def error(self, msg: str, stream: str | None = None) -> None:
        self._write(ERROR, msg, stream)

    def critical(self, msg: str, stream: str | None = None) -> None:
        self._write(CRITICAL, msg, stream)


def setup(verbosity: int, out: TextIO | None = None, err: TextIO | None = None) -> Logger:
    """Build the logger for a run from the -v count."""
    logger = Logger(level_for(verbosity), out=out, err=err)
    logger.trace(f"{_LEVEL_NAMES[logger.level]} logging enabled")
    return logger
