"""Runtime configuration for the parallel test runner."""

from __future__ import annotations

import math
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PATTERN = "Test.php$"
DEFAULT_IDLE_TIMEOUT_MINUTES = 9.0
DEFAULT_QUEUE_CAPACITY = 128


class ConfigurationError(ValueError):
    """Invalid run configuration; the run must stop before any work starts."""


def default_thread_count() -> int:
    """CPUs this process may run on, like the scheduler affinity mask reports."""

    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


@dataclass(slots=True)
class RunnerSettings:
    """Settings for one test run."""

    command: str = ""
    root: Path = Path(".")
    pattern: str = DEFAULT_PATTERN
    threads: int = field(default_factory=default_thread_count)
    idle_timeout_minutes: float = DEFAULT_IDLE_TIMEOUT_MINUTES
    verbose: bool = False
    follow_symlinks: bool = False
    queue_capacity: int = DEFAULT_QUEUE_CAPACITY

    @property
    def idle_timeout_seconds(self) -> float:
        # queue and lock waits reject timeouts above TIMEOUT_MAX
        return min(self.idle_timeout_minutes * 60.0, threading.TIMEOUT_MAX)

    @classmethod
    def from_env(cls) -> RunnerSettings:
        """Load settings from environment with defaults matching the CLI."""

        return cls(
            command=os.getenv("TESTRUNNER_COMMAND", ""),
            root=Path(os.getenv("TESTRUNNER_ROOT", ".")),
            pattern=os.getenv("TESTRUNNER_PATTERN", DEFAULT_PATTERN),
            threads=_env_int("TESTRUNNER_THREADS", default_thread_count()),
            idle_timeout_minutes=_env_float(
                "TESTRUNNER_TIMEOUT_MINUTES",
                DEFAULT_IDLE_TIMEOUT_MINUTES,
            ),
            verbose=_env_bool("TESTRUNNER_VERBOSE", default=False),
            follow_symlinks=_env_bool("TESTRUNNER_FOLLOW_SYMLINKS", default=False),
            queue_capacity=_env_int("TESTRUNNER_QUEUE_CAPACITY", DEFAULT_QUEUE_CAPACITY),
        )

    def validate(self) -> None:
        """Raise configuration error if numeric settings are out of range."""

        if self.threads < 1:
            raise ConfigurationError(f"Thread count must be >= 1, got {self.threads}.")
        if not math.isfinite(self.idle_timeout_minutes):
            raise ConfigurationError(
                f"Idle timeout must be finite, got {self.idle_timeout_minutes}.",
            )
        if self.idle_timeout_minutes <= 0:
            raise ConfigurationError(
                f"Idle timeout must be > 0 minutes, got {self.idle_timeout_minutes}.",
            )
        if self.queue_capacity < 1:
            raise ConfigurationError(
                f"Queue capacity must be >= 1, got {self.queue_capacity}.",
            )


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid number for {name}: {value!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
