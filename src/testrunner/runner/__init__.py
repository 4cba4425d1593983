"""Parallel execution of one command per discovered test file.

A ``Coordinator`` walks the root directory, feeds matching paths into a
bounded queue drained by a fixed ``WorkerPool`` of threads, and a single
``ResultPrinter`` thread writes each ``ExecutionReport`` to stdout. When no
report arrives for the idle timeout the printer emits a blank line, which
keeps CI log watchdogs from killing long but healthy runs.
"""

from testrunner.runner.aggregator import ResultAggregator
from testrunner.runner.coordinator import Coordinator
from testrunner.runner.executor import Executor, SubprocessExecutor
from testrunner.runner.models import (
    CommandSpec,
    ExecutionReport,
    Outcome,
    ResultCounts,
    RunPhase,
    RunSummary,
)
from testrunner.runner.paths import PathSource, compile_pattern, walk_tree
from testrunner.runner.pool import WorkerPool
from testrunner.runner.printer import ResultPrinter

__all__ = [
    "CommandSpec",
    "Coordinator",
    "ExecutionReport",
    "Executor",
    "Outcome",
    "PathSource",
    "ResultAggregator",
    "ResultCounts",
    "ResultPrinter",
    "RunPhase",
    "RunSummary",
    "SubprocessExecutor",
    "WorkerPool",
    "compile_pattern",
    "walk_tree",
]
