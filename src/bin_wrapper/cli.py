"""Click entry point."""

import sys
import time

import click

from bin_wrapper import __version__, log, runner
from bin_wrapper.gate import GateConfig
from bin_wrapper.modes import RedirectionMode

MODE_CHOICE = click.Choice(RedirectionMode.names(), case_sensitive=False)


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.version_option(version=__version__, prog_name="bin-wrapper")
@click.option(
    "--stdout",
    "stdout_mode",
    type=MODE_CHOICE,
    default="Proxy",
    show_default=True,
    envvar="BIN_WRAPPER_STDOUT",
    help="How should bin-wrapper redirect stdout?",
)
@click.option(
    "--stderr",
    "stderr_mode",
    type=MODE_CHOICE,
    default="Proxy",
    show_default=True,
    envvar="BIN_WRAPPER_STDERR",
    help="How should bin-wrapper redirect stderr?",
)
@click.option(
    "--skip-if-env",
    metavar="NAME",
    default=None,
    help="Lookup the provided ENV variable and skip execution if set",
)
@click.option(
    "--resume-if-env",
    metavar="NAME",
    default=None,
    help="Lookup the provided ENV variable and only resume execution if set",
)
@click.option("-v", "--verbose", count=True, help="Control the output verbosity")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def main(stdout_mode, stderr_mode, skip_if_env, resume_if_env, verbose, command):
    """Run COMMAND, optionally capturing its output into timestamped log lines."""
    started = time.monotonic()
    logger = log.setup(verbose)

    config = runner.RunConfig(
        command=list(command),
        stdout=RedirectionMode.parse(stdout_mode),
        stderr=RedirectionMode.parse(stderr_mode),
        gate=GateConfig(skip_if_env=skip_if_env, resume_if_env=resume_if_env),
    )
    logger.trace(
        f"options: stdout={config.stdout.value} stderr={config.stderr.value} "
        f"skip_if_env={skip_if_env} resume_if_env={resume_if_env} verbose={verbose}"
    )

    code = runner.run(config, logger, started=started)
    sys.exit(code)


if __name__ == "__main__":
    main()
