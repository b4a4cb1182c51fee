"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Thread-safe progress accounting for a detection run.

Hashing workers report bytes and finished files here; this is the only state
they share. Listener notifications are throttled and issued while the lock is
held, so every listener sees counters that never decrease.
"""

import logging
import threading
import time
from typing import Callable, Optional

from rupes.core.models import ProgressSnapshot, Stage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Stage, ProgressSnapshot], None]

DEFAULT_REPORT_INTERVAL = 0.1  # seconds between callback invocations


class ProgressTracker:
    """
    Accumulates files sized, files hashed, bytes hashed and failures.

    Args:
        progress_callback: Optional listener (stage, snapshot) -> None.
        report_interval: Minimum seconds between two throttled notifications.
    """

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        report_interval: float = DEFAULT_REPORT_INTERVAL
    ):
        self._callback = progress_callback
        self._interval = report_interval
        self._lock = threading.Lock()
        self._start = time.monotonic()
        self._last_report: Optional[float] = None
        self._files_considered = 0
        self._files_hashed = 0
        self._bytes_hashed = 0
        self._files_failed = 0

    def file_considered(self, count: int = 1) -> None:
        with self._lock:
            self._files_considered += count
            self._maybe_report(Stage.SIZING)

    def bytes_hashed(self, count: int) -> None:
        with self._lock:
            self._bytes_hashed += count
            self._maybe_report(Stage.HASHING)

    def file_hashed(self) -> None:
        with self._lock:
            self._files_hashed += 1
            self._maybe_report(Stage.HASHING)

    def file_failed(self) -> None:
        with self._lock:
            self._files_failed += 1
            self._maybe_report(Stage.HASHING)

    def report(self, stage: Stage) -> None:
        """Notify the listener immediately (used at stage boundaries)."""
        with self._lock:
            self._emit(stage)

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return self._snapshot_unlocked()

    def _snapshot_unlocked(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            files_considered=self._files_considered,
            files_hashed=self._files_hashed,
            bytes_hashed=self._bytes_hashed,
            files_failed=self._files_failed,
            elapsed=time.monotonic() - self._start,
        )

    def _maybe_report(self, stage: Stage) -> None:
        if self._callback is None:
            return
        now = time.monotonic()
        if self._last_report is None or now - self._last_report >= self._interval:
            self._emit(stage, now)

    def _emit(self, stage: Stage, now: Optional[float] = None) -> None:
        if self._callback is None:
            return
        self._last_report = now if now is not None else time.monotonic()
        try:
            self._callback(stage, self._snapshot_unlocked())
        except Exception:
            logger.exception("Error in progress callback")
