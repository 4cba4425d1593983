"""Top-level wiring of discovery, workers and printer for one run."""

from __future__ import annotations

import logging
import sys
import time
from typing import TextIO

from testrunner.config import RunnerSettings
from testrunner.runner.aggregator import ResultAggregator
from testrunner.runner.executor import Executor, SubprocessExecutor
from testrunner.runner.models import CommandSpec, RunPhase, RunSummary
from testrunner.runner.paths import (
    PathSource,
    Walker,
    compile_pattern,
    ensure_root_accessible,
    walk_tree,
)
from testrunner.runner.pool import WorkerPool
from testrunner.runner.printer import ResultPrinter

logger = logging.getLogger(__name__)


class Coordinator:
    """Runs the configured command against every matching file under root."""

    def __init__(
        self,
        settings: RunnerSettings,
        *,
        stream: TextIO | None = None,
        executor: Executor | None = None,
        walker: Walker = walk_tree,
    ) -> None:
        self.settings = settings
        self._stream = stream
        self._executor = executor or SubprocessExecutor()
        self._walker = walker
        self.phase = RunPhase.IDLE

    def run(self) -> RunSummary:
        """Execute one full run.

        Configuration is validated before any thread starts or any directory
        is read; ``ConfigurationError`` leaves the coordinator in ``IDLE``.
        """

        stream = self._stream if self._stream is not None else sys.stdout
        command, path_source = self._prepare()

        aggregator = ResultAggregator()
        printer = ResultPrinter(stream, idle_timeout_seconds=self.settings.idle_timeout_seconds)
        pool = WorkerPool(
            executor=self._executor,
            command=command,
            aggregator=aggregator,
            results=printer,
            threads=self.settings.threads,
            queue_capacity=self.settings.queue_capacity,
        )

        printer.start()
        pool.start()
        stream.write(f"Starting {pool.size} threads\n\n")
        stream.flush()

        start_monotonic = time.monotonic()
        try:
            self.phase = RunPhase.DISPATCHING
            for path in path_source.paths():
                logger.info("Adding file %s", path)
                pool.submit(path)

            self.phase = RunPhase.DRAINING
            pool.wait_idle()
        finally:
            pool.close()
            self.phase = RunPhase.DONE
            printer.close()

        counts = aggregator.snapshot()
        if counts.total != pool.submitted:
            logger.error(
                "Result count mismatch: dispatched=%d recorded=%d",
                pool.submitted,
                counts.total,
            )
        if path_source.duplicate_count:
            logger.debug("Suppressed %d duplicate paths", path_source.duplicate_count)

        summary = RunSummary(
            dispatched=pool.submitted,
            succeeded=counts.succeeded,
            failed=counts.failed,
            elapsed_seconds=time.monotonic() - start_monotonic,
        )
        stream.write(summary.render())
        stream.flush()
        return summary

    def _prepare(self) -> tuple[CommandSpec, PathSource]:
        command = CommandSpec.parse(self.settings.command)
        self.settings.validate()
        matcher = compile_pattern(self.settings.pattern)
        ensure_root_accessible(self.settings.root)
        return command, PathSource(
            self.settings.root,
            matcher,
            walker=self._walker,
            follow_symlinks=self.settings.follow_symlinks,
        )
