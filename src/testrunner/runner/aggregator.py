"""Thread-safe success/failure tally."""

from __future__ import annotations

import threading

from testrunner.runner.models import Outcome, ResultCounts


class ResultAggregator:
    """Counters shared by all workers, guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._succeeded = 0
        self._failed = 0

    def record(self, outcome: Outcome) -> None:
        with self._lock:
            if outcome is Outcome.SUCCESS:
                self._succeeded += 1
            else:
                self._failed += 1

    def snapshot(self) -> ResultCounts:
        with self._lock:
            return ResultCounts(succeeded=self._succeeded, failed=self._failed)
