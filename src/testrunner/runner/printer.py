"""Single writer for report blocks with an idle heartbeat."""

from __future__ import annotations

import logging
import math
import queue
import threading
from typing import TextIO

from testrunner.runner.models import ExecutionReport

logger = logging.getLogger(__name__)

_SENTINEL = object()


class ResultPrinter:
    """Drains published reports to a stream from one background thread.

    When nothing arrives for ``idle_timeout_seconds`` a single blank line is
    written so that log watchers (CI output timeouts) see the run is alive.
    """

    def __init__(self, stream: TextIO, *, idle_timeout_seconds: float) -> None:
        if not math.isfinite(idle_timeout_seconds) or idle_timeout_seconds <= 0:
            raise ValueError("idle_timeout_seconds must be finite and > 0.")
        self._stream = stream
        self._idle_timeout = min(idle_timeout_seconds, threading.TIMEOUT_MAX)
        self._queue: queue.Queue[ExecutionReport | object] = queue.Queue()
        self._thread: threading.Thread | None = None
        self.printed = 0
        self.heartbeats = 0
        self.error: BaseException | None = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Printer is already running.")
        self._thread = threading.Thread(
            target=self._print_loop,
            daemon=True,
            name="testrunner-printer",
        )
        self._thread.start()

    def publish(self, report: ExecutionReport) -> None:
        self._queue.put(report)

    def close(self) -> None:
        """Write everything published so far, then stop the printer thread."""

        if self._thread is None:
            return
        self._queue.put(_SENTINEL)
        self._thread.join()
        self._thread = None
        logger.debug("Printer stopped: reports=%d heartbeats=%d", self.printed, self.heartbeats)
        if self.error is not None:
            raise RuntimeError("Report printer stopped early; reports were lost.") from self.error

    def _print_loop(self) -> None:
        try:
            self._drain()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Report printer failed")
            self.error = exc

    def _drain(self) -> None:
        while True:
            try:
                item = self._queue.get(timeout=self._idle_timeout)
            except queue.Empty:
                self._write("\n")
                self.heartbeats += 1
                continue

            if item is _SENTINEL or not isinstance(item, ExecutionReport):
                return
            text = item.render().strip()
            if not text:
                continue
            self._write(f"\n{text}\n\n")
            self.printed += 1

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()
