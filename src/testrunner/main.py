"""CLI entrypoint for testrunner."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import rich_click as click

from testrunner import __version__
from testrunner.config import (
    DEFAULT_IDLE_TIMEOUT_MINUTES,
    DEFAULT_PATTERN,
    ConfigurationError,
)
from testrunner.runner.controllers import RunnerCliController, RunTestsCommand

click.rich_click.USE_MARKDOWN = True
RUNNER_CONTROLLER = RunnerCliController()

_log_handler: logging.Handler | None = None


@click.command()
@click.version_option(version=__version__, prog_name="testrunner")
@click.option(
    "-root",
    "--root",
    "root",
    type=click.Path(path_type=Path),
    default=None,
    help="The directory where the tests are. [default: .]",
)
@click.option(
    "-command",
    "--command",
    "command",
    default=None,
    help="Command to run; the test file path is appended as the last argument.",
)
@click.option(
    "-pattern",
    "--pattern",
    "pattern",
    default=None,
    help=f"Regular expression matched against test file paths. [default: {DEFAULT_PATTERN}]",
)
@click.option(
    "-threads",
    "--threads",
    "threads",
    type=click.IntRange(min=1),
    default=None,
    help="Number of worker threads. [default: CPU count]",
)
@click.option(
    "-timeout",
    "--timeout",
    "timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help=(
        "After this many minutes without output, a blank line is printed to stdout. "
        f"[default: {DEFAULT_IDLE_TIMEOUT_MINUTES:g}]"
    ),
)
@click.option(
    "-verbose",
    "--verbose",
    "verbose",
    is_flag=True,
    default=False,
    help="Print per-file progress to stderr.",
)
@click.option(
    "--follow-symlinks",
    is_flag=True,
    default=False,
    help="Descend into symlinked directories.",
)
@click.option(
    "--queue-capacity",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of queued test files. [default: 128]",
)
def testrunner(  # noqa: PLR0913
    root: Path | None,
    command: str | None,
    pattern: str | None,
    threads: int | None,
    timeout: float | None,
    verbose: bool,
    follow_symlinks: bool,
    queue_capacity: int | None,
) -> None:
    """Run a command against every matching test file, in parallel.

    Exits with status 1 if any command fails.
    """

    run_command = RunTestsCommand(
        command=command,
        root=root,
        pattern=pattern,
        threads=threads,
        timeout_minutes=timeout,
        verbose=True if verbose else None,
        follow_symlinks=True if follow_symlinks else None,
        queue_capacity=queue_capacity,
    )
    try:
        settings = RUNNER_CONTROLLER.resolve_settings(run_command)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    _configure_logging(verbose=settings.verbose)
    try:
        summary = RUNNER_CONTROLLER.run(settings)
    except ConfigurationError as error:
        raise click.ClickException(str(error)) from error

    if summary.exit_code != 0:
        sys.exit(summary.exit_code)


def _configure_logging(*, verbose: bool) -> None:
    global _log_handler  # noqa: PLW0603

    package_logger = logging.getLogger("testrunner")
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)
    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(_log_handler)
    package_logger.setLevel(logging.INFO if verbose else logging.WARNING)


if __name__ == "__main__":  # pragma: no cover
    testrunner()
