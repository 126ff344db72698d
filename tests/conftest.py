"""Shared test fixtures."""

import io
import re

import pytest

_PREFIX = re.compile(r"^\[\d{2}:\d{2}:\d{2}\] ")


class RecordingLogger:
    """A real Logger at TRACE level whose output lands in StringIO buffers."""

    def __init__(self):
        from bin_wrapper.log import TRACE, Logger

        self.out = io.StringIO()
        self.err = io.StringIO()
        self.logger = Logger(TRACE, out=self.out, err=self.err)

    @staticmethod
    def _lines(buf):
        return [_PREFIX.sub("", line) for line in buf.getvalue().splitlines()]

    @property
    def out_lines(self):
        return self._lines(self.out)

    @property
    def err_lines(self):
        return self._lines(self.err)

    def captured(self, stream):
        """Messages forwarded by the drainer for one stream, prefixes removed."""
        if stream == "stdout":
            tag, lines = "stdout: ", self.out_lines
        else:
            tag, lines = "ERROR: stderr: ", self.err_lines
        return [line[len(tag):] for line in lines if line.startswith(tag)]


@pytest.fixture
def make_recorder():
    return RecordingLogger


@pytest.fixture
def recorder(make_recorder):
    return make_recorder()


@pytest.fixture
def logger(recorder):
    return recorder.logger
