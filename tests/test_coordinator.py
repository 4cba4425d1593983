from __future__ import annotations

import io
import re
import threading
import time
from pathlib import Path

import allure
import pytest

from testrunner.config import ConfigurationError, RunnerSettings
from testrunner.runner.coordinator import Coordinator
from testrunner.runner.models import CommandSpec, ExecutionReport, Outcome, RunPhase

pytestmark = [
    allure.epic("Test Runner"),
    allure.feature("Run Coordination"),
]


class _InProcessExecutor:
    def __init__(self, *, fail_on: str | None = None, delay: float = 0.0) -> None:
        self.fail_on = fail_on
        self.delay = delay
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def execute(self, command: CommandSpec, path: str) -> ExecutionReport:
        with self._lock:
            self.calls.append(path)
        if self.delay:
            time.sleep(self.delay)
        failed = self.fail_on is not None and self.fail_on in path
        return ExecutionReport(
            path=path,
            command_line=" ".join(command.argv_for(path)),
            output=f"ran {path}",
            elapsed_seconds=self.delay,
            outcome=Outcome.FAILURE if failed else Outcome.SUCCESS,
        )


def _settings(root: Path, command: str, **overrides) -> RunnerSettings:
    values = {"command": command, "root": root, "threads": 2}
    values.update(overrides)
    return RunnerSettings(**values)


def _report_count(output: str) -> int:
    return len(re.findall(r"^Running ", output, flags=re.MULTILINE))


def test_all_matching_files_succeed(make_tree, fake_command: str) -> None:
    root = make_tree("aTest.php", "bTest.php", "sub/cTest.php", "README.md", "sub/helper.php")
    stream = io.StringIO()

    coordinator = Coordinator(_settings(root, fake_command), stream=stream)
    summary = coordinator.run()

    output = stream.getvalue()
    assert summary.dispatched == 3
    assert summary.succeeded == 3
    assert summary.failed == 0
    assert summary.exit_code == 0
    assert coordinator.phase is RunPhase.DONE
    assert output.startswith("Starting 2 threads\n\n")
    assert _report_count(output) == 3
    assert f"checked {root / 'sub' / 'cTest.php'}" in output
    assert "README.md" not in output
    assert re.search(r"Complete runtime: \S+ \| Success: 3 Failure: 0\n\n$", output)


def test_one_failing_file_fails_the_run(make_tree, fake_command: str) -> None:
    root = make_tree("GoodTest.php", "BadTest.php")
    stream = io.StringIO()

    summary = Coordinator(
        _settings(root, f"{fake_command} --fail-on Bad"),
        stream=stream,
    ).run()

    assert (summary.succeeded, summary.failed) == (1, 1)
    assert summary.exit_code == 1
    assert _report_count(stream.getvalue()) == 2
    assert "Success: 1 Failure: 1" in stream.getvalue()


def test_empty_command_stops_before_any_work(make_tree) -> None:
    root = make_tree("aTest.php")
    stream = io.StringIO()
    executor = _InProcessExecutor()
    walked: list[object] = []

    def _walker(root, *, follow_symlinks=False):
        walked.append(root)
        return iter(["aTest.php"])

    coordinator = Coordinator(
        _settings(root, "   "),
        stream=stream,
        executor=executor,
        walker=_walker,
    )

    with pytest.raises(ConfigurationError, match="no command is specified"):
        coordinator.run()

    assert stream.getvalue() == ""
    assert executor.calls == []
    assert walked == []
    assert coordinator.phase is RunPhase.IDLE


def test_invalid_pattern_stops_before_traversal(make_tree) -> None:
    root = make_tree("aTest.php")
    stream = io.StringIO()
    walked: list[object] = []

    def _walker(root, *, follow_symlinks=False):
        walked.append(root)
        return iter(["aTest.php"])

    coordinator = Coordinator(
        _settings(root, "php", pattern="(["),
        stream=stream,
        executor=_InProcessExecutor(),
        walker=_walker,
    )

    with pytest.raises(ConfigurationError, match="Invalid pattern"):
        coordinator.run()

    assert walked == []
    assert stream.getvalue() == ""
    assert coordinator.phase is RunPhase.IDLE


def test_missing_root_is_configuration_error(tmp_path: Path) -> None:
    coordinator = Coordinator(
        _settings(tmp_path / "missing", "php"),
        stream=io.StringIO(),
        executor=_InProcessExecutor(),
    )

    with pytest.raises(ConfigurationError, match="does not exist"):
        coordinator.run()


def test_invalid_thread_count_is_configuration_error(make_tree) -> None:
    coordinator = Coordinator(
        _settings(make_tree(), "php", threads=0),
        stream=io.StringIO(),
        executor=_InProcessExecutor(),
    )

    with pytest.raises(ConfigurationError, match="Thread count"):
        coordinator.run()


def test_single_thread_processes_all_files(make_tree) -> None:
    names = [f"{index}Test.php" for index in range(5)]
    root = make_tree(*names)
    stream = io.StringIO()
    executor = _InProcessExecutor()

    summary = Coordinator(
        _settings(root, "php -l", threads=1),
        stream=stream,
        executor=executor,
    ).run()

    assert summary.dispatched == 5
    assert summary.succeeded + summary.failed == 5
    assert executor.calls == [str(root / name) for name in names]
    assert _report_count(stream.getvalue()) == 5
    assert stream.getvalue().startswith("Starting 1 threads\n\n")


def test_duplicate_paths_from_walker_are_dispatched_once(make_tree) -> None:
    root = make_tree()
    executor = _InProcessExecutor()

    def _walker(root, *, follow_symlinks=False):
        return iter(["aTest.php", "bTest.php", "aTest.php", "bTest.php", "aTest.php"])

    summary = Coordinator(
        _settings(root, "php"),
        stream=io.StringIO(),
        executor=executor,
        walker=_walker,
    ).run()

    assert sorted(executor.calls) == ["aTest.php", "bTest.php"]
    assert summary.dispatched == 2
    assert summary.succeeded == 2


def test_no_matching_files_succeeds_with_empty_summary(make_tree) -> None:
    stream = io.StringIO()

    summary = Coordinator(
        _settings(make_tree("notes.txt"), "php"),
        stream=stream,
        executor=_InProcessExecutor(),
    ).run()

    assert summary.dispatched == 0
    assert summary.exit_code == 0
    assert "Success: 0 Failure: 0" in stream.getvalue()


def test_idle_heartbeat_precedes_slow_report(make_tree) -> None:
    root = make_tree("slowTest.php")
    stream = io.StringIO()

    Coordinator(
        _settings(root, "php", threads=1, idle_timeout_minutes=0.05 / 60),
        stream=stream,
        executor=_InProcessExecutor(delay=0.3),
    ).run()

    output = stream.getvalue()
    before_report = output[: output.index("Running ")]
    assert before_report.startswith("Starting 1 threads\n\n")
    assert before_report.count("\n") >= 4


def test_walker_error_still_shuts_down_workers(make_tree) -> None:
    def _walker(root, *, follow_symlinks=False):
        yield "aTest.php"
        raise RuntimeError("walk interrupted")

    coordinator = Coordinator(
        _settings(make_tree(), "php", threads=3),
        stream=io.StringIO(),
        executor=_InProcessExecutor(),
        walker=_walker,
    )

    with pytest.raises(RuntimeError, match="walk interrupted"):
        coordinator.run()

    assert coordinator.phase is RunPhase.DONE
    alive = [
        thread.name
        for thread in threading.enumerate()
        if thread.name.startswith("testrunner-") and thread.is_alive()
    ]
    assert alive == []


def test_huge_idle_timeout_still_prints_every_report(make_tree, fake_command: str) -> None:
    root = make_tree("aTest.php", "bTest.php")
    stream = io.StringIO()

    summary = Coordinator(
        _settings(root, fake_command, idle_timeout_minutes=1e9),
        stream=stream,
    ).run()

    output = stream.getvalue()
    assert summary.exit_code == 0
    assert _report_count(output) == 2
    assert "Success: 2 Failure: 0" in output
