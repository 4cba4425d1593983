"""Controller for the test runner CLI command."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TextIO

from testrunner.config import RunnerSettings
from testrunner.runner.coordinator import Coordinator
from testrunner.runner.models import RunSummary


@dataclass(slots=True)
class RunTestsCommand:
    """CLI input for one run; ``None`` means use the environment/default value."""

    command: str | None = None
    root: Path | None = None
    pattern: str | None = None
    threads: int | None = None
    timeout_minutes: float | None = None
    verbose: bool | None = None
    follow_symlinks: bool | None = None
    queue_capacity: int | None = None


class RunnerCliController:
    """Resolves settings for a CLI invocation and runs the coordinator."""

    def resolve_settings(self, command: RunTestsCommand) -> RunnerSettings:
        settings = RunnerSettings.from_env()
        overrides = {
            "command": command.command,
            "root": command.root,
            "pattern": command.pattern,
            "threads": command.threads,
            "idle_timeout_minutes": command.timeout_minutes,
            "verbose": command.verbose,
            "follow_symlinks": command.follow_symlinks,
            "queue_capacity": command.queue_capacity,
        }
        return replace(
            settings,
            **{name: value for name, value in overrides.items() if value is not None},
        )

    def run(self, settings: RunnerSettings, *, stream: TextIO | None = None) -> RunSummary:
        return Coordinator(settings, stream=stream).run()
