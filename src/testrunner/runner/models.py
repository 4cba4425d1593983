"""Domain models for test runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from testrunner.config import ConfigurationError


class Outcome(str, Enum):
    """Result of running the command against one file."""

    SUCCESS = "success"
    FAILURE = "failure"


class RunPhase(str, Enum):
    """Coordinator lifecycle states."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Executable plus fixed arguments, shared read-only by all workers."""

    executable: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, command: str) -> CommandSpec:
        """Split a command string on whitespace."""

        parts = command.split()
        if not parts:
            raise ConfigurationError("no command is specified")
        return cls(executable=parts[0], args=tuple(parts[1:]))

    def argv_for(self, path: str) -> list[str]:
        return [self.executable, *self.args, path]


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """Captured result of one command invocation."""

    path: str
    command_line: str
    output: str
    elapsed_seconds: float
    outcome: Outcome

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def render(self) -> str:
        return (
            f"Running {self.command_line}\n"
            f"\n"
            f"{self.output}\n"
            f"\n"
            f"Elapsed: {format_elapsed(self.elapsed_seconds)}\n"
        )


@dataclass(frozen=True, slots=True)
class ResultCounts:
    """Point-in-time view of the success/failure tally."""

    succeeded: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Aggregate result of a complete run."""

    dispatched: int
    succeeded: int
    failed: int
    elapsed_seconds: float

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1

    def render(self) -> str:
        return (
            f"\n\nComplete runtime: {format_elapsed(self.elapsed_seconds)}"
            f" | Success: {self.succeeded} Failure: {self.failed}\n\n"
        )


def format_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, rest = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m{rest:.3f}s"
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours}h{minutes}m{rest:.3f}s"
