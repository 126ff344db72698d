"""Core wrapper flow: gate, spawn, drain, wait, report."""

import os
import signal
import subprocess
import sys
import time
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from bin_wrapper import capture, gate, modes, process
from bin_wrapper.gate import GateConfig
from bin_wrapper.log import Logger

EXIT_CAPTURE_FAILED = 124
EXIT_SIGNALED = 125

# At most one drainer per output stream
N_WORKERS = 2


@dataclass
class RunConfig:
    command: list[str]
    stdout: modes.RedirectionMode = modes.RedirectionMode.PROXY
    stderr: modes.RedirectionMode = modes.RedirectionMode.PROXY
    gate: GateConfig = field(default_factory=GateConfig)


@dataclass
class ExecutionResult:
    returncode: int
    wall_duration: float
    process_duration: float
    capture_errors: list[capture.CaptureError] = field(default_factory=list)

    @property
    def exit_code(self) -> int | None:
        """The child's exit code, or None if it was killed by a signal."""
        return self.returncode if self.returncode >= 0 else None

    @property
    def signal(self) -> int | None:
        return -self.returncode if self.returncode < 0 else None


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


def await_completion(
    child: subprocess.Popen,
    drains: dict[Future, capture.Origin],
    started: float,
    spawned: float,
) -> ExecutionResult:
    """Wait for the child to exit and for every drainer to hit EOF.

    Reaping the child alone is not enough: lines can still be in flight
    through a pipe after exit.
    """
    returncode = child.wait()
    futures.wait(drains, return_when=futures.ALL_COMPLETED)

    capture_errors = []
    for future in drains:
        exc = future.exception()
        if isinstance(exc, capture.CaptureError):
            capture_errors.append(exc)
        elif exc is not None:
            raise exc

    now = time.monotonic()
    return ExecutionResult(
        returncode=returncode,
        wall_duration=now - started,
        process_duration=now - spawned,
        capture_errors=capture_errors,
    )


def execute(
    invocation: process.ChildInvocation,
    stdout: modes.StreamDisposition,
    stderr: modes.StreamDisposition,
    logger: Logger,
    started: float | None = None,
) -> ExecutionResult:
    """Spawn the child, drain its piped streams concurrently, and wait for all of it.

    Raises process.SpawnError if the child cannot be started.
    """
    if started is None:
        started = time.monotonic()

    logger.debug(f"attempting to run '{invocation.display}'")
    spawned = time.monotonic()
    child = process.spawn(invocation, stdout, stderr)

    with ThreadPoolExecutor(max_workers=N_WORKERS, thread_name_prefix="runner") as pool:
        drains = capture.start_drains(pool, child, logger)
        result = await_completion(child, drains, started, spawned)

    logger.debug(
        f"'{invocation.display}' FINISHED after {result.process_duration:.3f}s "
        f"(total: {result.wall_duration:.3f}s) exit code: {result.returncode}"
    )
    return result


def exit_code_for(result: ExecutionResult, logger: Logger) -> int:
    """Map a finished run to the wrapper's own exit code.

    Every capture failure is logged before a sentinel is chosen. A child that
    exits 124 or 125 by itself is indistinguishable from the sentinels by exit
    code alone; the CRITICAL lines tell them apart.
    """
    for err in result.capture_errors:
        logger.critical(str(err))

    if result.signal is not None:
        logger.critical(f"child terminated by {_signal_name(result.signal)}, no exit code available")
        return EXIT_SIGNALED

    if result.capture_errors:
        logger.critical(f"child exited with code {result.exit_code}, reporting {EXIT_CAPTURE_FAILED}")
        return EXIT_CAPTURE_FAILED

    return result.exit_code


def run(
    config: RunConfig,
    logger: Logger,
    started: float | None = None,
    lookup: gate.EnvLookup = os.environ.get,
) -> int:
    """Run the whole wrapper. Returns the exit code to terminate with."""
    if started is None:
        started = time.monotonic()

    decision = gate.evaluate(config.gate, lookup)
    for reason in decision.reasons:
        logger.trace(reason)
    if not decision.proceed:
        return 0

    stdout = modes.resolve(config.stdout, modes.is_terminal(sys.stdout))
    stderr = modes.resolve(config.stderr, modes.is_terminal(sys.stderr))
    logger.trace(f"stdout: {config.stdout.value} -> {stdout.value}")
    logger.trace(f"stderr: {config.stderr.value} -> {stderr.value}")

    invocation = process.ChildInvocation.from_command(config.command)
    try:
        result = execute(invocation, stdout, stderr, logger, started=started)
    except process.SpawnError as e:
        logger.critical(f"could not start '{invocation.display}': {e}")
        return e.exit_code

    return exit_code_for(result, logger)
