"""Fixed-size worker pool draining a bounded queue of test files."""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Protocol

from testrunner.config import DEFAULT_QUEUE_CAPACITY
from testrunner.runner.aggregator import ResultAggregator
from testrunner.runner.executor import Executor
from testrunner.runner.models import CommandSpec, ExecutionReport, Outcome

logger = logging.getLogger(__name__)

_STOP = object()


class ReportSink(Protocol):
    """Receiver of finished execution reports."""

    def publish(self, report: ExecutionReport) -> None:
        """Accept one report for output."""


class WorkerPool:
    """Runs the command for each submitted path on ``threads`` worker threads.

    The queue's unfinished-task count is the outstanding-work counter: ``submit``
    adds one unit and a worker removes it only after the item's report has
    been published.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        executor: Executor,
        command: CommandSpec,
        aggregator: ResultAggregator,
        results: ReportSink,
        threads: int,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
    ) -> None:
        if threads < 1:
            raise ValueError("threads must be >= 1.")
        if queue_capacity < 1:
            raise ValueError("queue_capacity must be >= 1.")
        self._executor = executor
        self._command = command
        self._aggregator = aggregator
        self._results = results
        self._threads_count = threads
        self._queue: queue.Queue[str | object] = queue.Queue(maxsize=queue_capacity)
        self._threads: list[threading.Thread] = []
        self.submitted = 0

    @property
    def size(self) -> int:
        return self._threads_count

    @property
    def outstanding(self) -> int:
        return self._queue.unfinished_tasks

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("Worker pool is already running.")
        for index in range(self._threads_count):
            thread = threading.Thread(
                target=self._worker_loop,
                daemon=True,
                name=f"testrunner-worker-{index + 1}",
            )
            thread.start()
            self._threads.append(thread)

    def submit(self, path: str) -> None:
        """Queue one path; blocks while the queue is full."""

        self._queue.put(path)
        self.submitted += 1

    def wait_idle(self) -> None:
        """Block until every submitted path has been fully processed."""

        self._queue.join()

    def close(self) -> None:
        """Stop the workers once the queue is drained and join them."""

        for _ in self._threads:
            self._queue.put(_STOP)
        for thread in self._threads:
            thread.join()
        self._threads = []

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP or not isinstance(item, str):
                    return
                self._process(item)
            finally:
                self._queue.task_done()

    def _process(self, path: str) -> None:
        logger.info("Starting file %s", path)
        report = self._execute(path)
        self._aggregator.record(report.outcome)
        logger.info("Finished file %s", path)
        self._results.publish(report)

    def _execute(self, path: str) -> ExecutionReport:
        start_monotonic = time.monotonic()
        try:
            return self._executor.execute(self._command, path)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Executor raised for %s", path)
            return ExecutionReport(
                path=path,
                command_line=" ".join(self._command.argv_for(path)),
                output=f"Executor error: {exc}",
                elapsed_seconds=time.monotonic() - start_monotonic,
                outcome=Outcome.FAILURE,
            )
