"""Drain piped child output line by line into the logger."""

import enum
import subprocess
from concurrent.futures import Executor, Future
from typing import BinaryIO

from bin_wrapper.log import Logger


class Origin(enum.Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class CaptureError(Exception):
    """A drainer stopped forwarding lines for its stream."""

    def __init__(self, origin: Origin, msg: str):
        self.origin = origin
        super().__init__(f"{origin.value} capture failed: {msg}")


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def drain(pipe: BinaryIO, origin: Origin, logger: Logger) -> None:
    """Read ``pipe`` to EOF, logging stdout lines at info and stderr lines at error.

    Once a line fails to decode as UTF-8 or cannot be written, nothing more is
    logged for this stream, but the pipe is still read to EOF so the child
    never blocks on a full pipe. The failure is raised after EOF.
    """
    emit = logger.info if origin is Origin.STDOUT else logger.error
    failure: CaptureError | None = None

    with pipe:
        try:
            for lineno, raw in enumerate(pipe, start=1):
                if failure is not None:
                    continue
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    failure = CaptureError(origin, f"line {lineno} is not valid UTF-8 ({e.reason})")
                    continue
                try:
                    emit(_strip_eol(line), stream=origin.value)
                except OSError as e:
                    failure = CaptureError(origin, f"could not write line {lineno}: {e}")
        except OSError as e:
            raise CaptureError(origin, f"read error: {e}") from e

    if failure is not None:
        raise failure
    try:
        logger.trace(f"{origin.value} reached EOF")
    except OSError as e:
        raise CaptureError(origin, f"could not write EOF trace: {e}") from e


def start_drains(pool: Executor, child: subprocess.Popen, logger: Logger) -> dict[Future, Origin]:
    """Submit one drainer per piped stream of ``child``."""
    drains = {}
    if child.stdout is not None:
        drains[pool.submit(drain, child.stdout, Origin.STDOUT, logger)] = Origin.STDOUT
    if child.stderr is not None:
        drains[pool.submit(drain, child.stderr, Origin.STDERR, logger)] = Origin.STDERR
    return drains
