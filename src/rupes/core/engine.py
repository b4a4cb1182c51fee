"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/engine.py
Duplicate detection pipeline: size buckets, then content digests.

    IDLE -> BUCKETING -> HASHING -> DONE
                 \\           \\
                  +-----------+--> CANCELLED

Bucketing consumes the whole candidate sequence before any file is hashed,
so every bucket is complete when singletons are pruned. Unreadable files are
reported as HashingFailure records and never stop the run. Errors raised by
the candidate source itself (TraversalError) propagate untouched.
"""

import logging
from typing import Iterable, List, Optional

from rupes.core.bucketer import SizeBucketerImpl
from rupes.core.grouper import HashGrouperImpl
from rupes.core.hasher import ChunkedHasherImpl
from rupes.core.interfaces import ChunkedHasher, StoppedFlag
from rupes.core.models import (
    DEFAULT_CHUNK_SIZE, CandidatePath, DetectionResult, DuplicateGroup, EngineState, HashAlgorithm, Stage
)
from rupes.core.progress import DEFAULT_REPORT_INTERVAL, ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)


class DuplicateDetectionEngine:
    """
    Turns a stream of candidate files into groups of identical files.

    Args:
        algorithm: Digest used to prove content equality (SHA-256 by default).
        max_workers: Hashing pool size, defaults to the number of CPUs.
        chunk_size: Bytes read per call while hashing.
        hasher: Custom ChunkedHasher (overrides chunk_size).
        report_interval: Minimum seconds between progress notifications.
    """

    def __init__(
        self,
        algorithm: HashAlgorithm = HashAlgorithm.SHA256,
        max_workers: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        hasher: Optional[ChunkedHasher] = None,
        report_interval: float = DEFAULT_REPORT_INTERVAL
    ):
        self.algorithm = algorithm
        self.max_workers = max_workers
        self.hasher = hasher or ChunkedHasherImpl(chunk_size)
        self.report_interval = report_interval
        self._state = EngineState.IDLE

    @property
    def state(self) -> EngineState:
        return self._state

    def find_duplicates(
        self,
        candidates: Iterable[CandidatePath],
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> DetectionResult:
        """
        Runs the full pipeline.

        Args:
            candidates: Files to analyse; may be lazy and may be empty.
            stopped_flag: Returns True when the caller wants the run to stop.
            progress_callback: (stage, snapshot) -> None, called at bounded intervals.

        Returns:
            DetectionResult with groups sorted by wasted space (largest first),
            failures, final counters and DONE or CANCELLED status.
        """
        self._state = EngineState.IDLE
        tracker = ProgressTracker(progress_callback, self.report_interval)

        # Stage 1: size buckets
        self._state = EngineState.BUCKETING
        bucketer = SizeBucketerImpl(tracker)
        try:
            buckets = bucketer.bucket(candidates, stopped_flag=stopped_flag)
        except Exception:
            self._state = EngineState.IDLE
            raise
        tracker.report(Stage.SIZING)
        if self._is_stopped(stopped_flag):
            return self._finish(EngineState.CANCELLED, [], [], tracker)

        hash_buckets = bucketer.prune_singletons(buckets)
        logger.debug(
            f"{sum(len(f) for f in hash_buckets.values())} files in "
            f"{len(hash_buckets)} size buckets need hashing"
        )

        # Stage 2: content digests
        self._state = EngineState.HASHING
        grouper = HashGrouperImpl(self.hasher, max_workers=self.max_workers, tracker=tracker)
        groups_by_size, failures = grouper.group_buckets(
            hash_buckets, self.algorithm, stopped_flag=stopped_flag
        )
        tracker.report(Stage.HASHING)

        groups = [
            DuplicateGroup(digest=digest, size=size, files=files)
            for size, hash_groups in groups_by_size.items()
            for digest, files in hash_groups.items()
        ]

        status = EngineState.CANCELLED if self._is_stopped(stopped_flag) else EngineState.DONE
        return self._finish(status, groups, failures, tracker)

    def _finish(self, status, groups, failures, tracker: ProgressTracker) -> DetectionResult:
        self._state = status
        result = DetectionResult(
            groups=self.normalize(groups),
            failures=failures,
            progress=tracker.snapshot(),
            status=status,
            algorithm=self.algorithm,
        )
        logger.debug(
            f"Detection {status.value}: {len(result.groups)} groups, "
            f"{len(result.failures)} failures, {result.progress.elapsed:.3f}s"
        )
        return result

    @staticmethod
    def normalize(groups: List[DuplicateGroup]) -> List[DuplicateGroup]:
        """
        Orders members by path and groups by wasted space (descending), so the
        output does not depend on candidate arrival order or worker timing.
        """
        normalized = [
            DuplicateGroup(digest=g.digest, size=g.size, files=sorted(g.files, key=lambda f: f.path))
            for g in groups
        ]
        normalized.sort(key=lambda g: (-g.wasted_bytes, -g.size, g.files[0].path if g.files else ""))
        return normalized

    @staticmethod
    def _is_stopped(stopped_flag: Optional[StoppedFlag]) -> bool:
        return bool(stopped_flag and stopped_flag())
