"""Subprocess-based command execution for one test file."""

from __future__ import annotations

import subprocess
import time
from typing import Protocol

from testrunner.runner.models import CommandSpec, ExecutionReport, Outcome


class Executor(Protocol):
    """Protocol implemented by command runners."""

    def execute(self, command: CommandSpec, path: str) -> ExecutionReport:
        """Run the command against path; failures are encoded in the report."""


class SubprocessExecutor:
    """Run the configured command with the test file appended as last argument."""

    def execute(self, command: CommandSpec, path: str) -> ExecutionReport:
        argv = command.argv_for(path)
        command_line = " ".join(argv)

        start_monotonic = time.monotonic()
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                check=False,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as error:
            return ExecutionReport(
                path=path,
                command_line=command_line,
                output=f"Failed to start {command.executable}: {error}",
                elapsed_seconds=time.monotonic() - start_monotonic,
                outcome=Outcome.FAILURE,
            )
        elapsed = time.monotonic() - start_monotonic

        return ExecutionReport(
            path=path,
            command_line=command_line,
            output=completed.stdout.decode("utf-8", errors="replace"),
            elapsed_seconds=elapsed,
            outcome=Outcome.SUCCESS if completed.returncode == 0 else Outcome.FAILURE,
        )
