"""Redirection modes and how they resolve to a concrete stdio disposition."""

import enum
from typing import TextIO


class RedirectionMode(enum.Enum):
    PROXY = "Proxy"
    CAPTURE = "Capture"
    CAPTURE_FOR_MACHINES = "CaptureForMachines"

    @classmethod
    def parse(cls, text: str) -> "RedirectionMode":
        """Look up a mode by name, ignoring case."""
        for mode in cls:
            if mode.value.lower() == text.lower():
                return mode
        raise ValueError(f"Unknown redirection mode: {text}")

    @classmethod
    def names(cls) -> list[str]:
        return [mode.value for mode in cls]


class StreamDisposition(enum.Enum):
    INHERIT = "inherit"
    PIPE = "pipe"


def resolve(mode: RedirectionMode, stream_is_terminal: bool) -> StreamDisposition:
    """Decide whether the child's stream is inherited or piped.

    CaptureForMachines passes through to a human at a terminal and captures
    everything else (files, pipes, CI logs).
    """
    if mode is RedirectionMode.PROXY:
        return StreamDisposition.INHERIT
    if mode is RedirectionMode.CAPTURE:
        return StreamDisposition.PIPE
    return StreamDisposition.INHERIT if stream_is_terminal else StreamDisposition.PIPE


def is_terminal(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        # Closed or replaced streams are not terminals
        return False
