"""Child process launcher, the single place a child is spawned."""

import shlex
import subprocess
from dataclasses import dataclass, field

from bin_wrapper.modes import StreamDisposition

EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


@dataclass
class ChildInvocation:
    program: str
    args: list[str] = field(default_factory=list)

    @classmethod
    def from_command(cls, command: list[str]) -> "ChildInvocation":
        if not command:
            raise ValueError("No command specified")
        return cls(program=command[0], args=list(command[1:]))

    @property
    def argv(self) -> list[str]:
        return [self.program] + self.args

    @property
    def display(self) -> str:
        return shlex.join(self.argv)


class SpawnError(Exception):
    """The executable could not be found or started."""

    def __init__(self, program: str, cause: OSError):
        self.program = program
        self.cause = cause
        if isinstance(cause, FileNotFoundError):
            self.exit_code = EXIT_NOT_FOUND
            reason = "command not found"
        else:
            self.exit_code = EXIT_NOT_EXECUTABLE
            reason = cause.strerror or str(cause)
        super().__init__(f"{program}: {reason}")


def _redirection(disposition: StreamDisposition) -> int | None:
    if disposition is StreamDisposition.PIPE:
        return subprocess.PIPE
    return None


def spawn(
    invocation: ChildInvocation,
    stdout: StreamDisposition,
    stderr: StreamDisposition,
) -> subprocess.Popen:
    """Start the child without waiting for it.

    stdin is always inherited. Piped streams are exposed as binary
    ``proc.stdout`` / ``proc.stderr``; inherited ones are ``None``.
    """
    try:
        return subprocess.Popen(
            invocation.argv,
            stdin=None,
            stdout=_redirection(stdout),
            stderr=_redirection(stderr),
        )
    except OSError as e:
        raise SpawnError(invocation.program, e) from e
