"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Second pipeline stage: digest-based grouping inside same-size buckets.

Every file of every bucket is an independent hashing task. Tasks run on a
bounded thread pool with a bounded submission window, so the number of open
files and queued futures stays fixed however many same-size files exist.
Digests and failures are gathered on the calling thread only; output order is
rebuilt from arrival order, never from completion order.
"""

import logging
import os
from collections import defaultdict
from concurrent.futures import FIRST_COMPLETED, CancelledError, Future, ThreadPoolExecutor, wait
from typing import Dict, Iterator, List, Optional, Tuple

from rupes.core.exceptions import FileReadError, HashingCancelled
from rupes.core.hasher import ChunkedHasherImpl
from rupes.core.interfaces import ChunkedHasher, HashGrouper, StoppedFlag
from rupes.core.models import CandidatePath, HashAlgorithm, HashingFailure
from rupes.core.progress import ProgressTracker

logger = logging.getLogger(__name__)

# (size, position inside bucket, file)
_Task = Tuple[int, int, CandidatePath]
DigestGroups = Dict[bytes, List[CandidatePath]]


def default_worker_count() -> int:
    return os.cpu_count() or 1


class HashGrouperImpl(HashGrouper):
    """
    Groups same-size files by full-content digest.

    Args:
        hasher: ChunkedHasher used for every file (shared, stateless).
        max_workers: Pool size; 1 hashes inline on the calling thread.
        tracker: Optional ProgressTracker fed with bytes/files hashed.
    """

    def __init__(
        self,
        hasher: Optional[ChunkedHasher] = None,
        max_workers: Optional[int] = None,
        tracker: Optional[ProgressTracker] = None
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError("Worker count must be at least 1")
        self.hasher = hasher or ChunkedHasherImpl()
        self.max_workers = max_workers or default_worker_count()
        self.tracker = tracker

    def group_bucket(
        self,
        size: int,
        files: List[CandidatePath],
        algorithm: HashAlgorithm,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Tuple[DigestGroups, List[HashingFailure]]:
        """Hashes a single bucket. Files of other sizes are rejected."""
        for file in files:
            if file.size != size:
                raise ValueError(f"{file.path} has size {file.size}, expected {size}")
        groups_by_size, failures = self.group_buckets({size: files}, algorithm, stopped_flag)
        return groups_by_size.get(size, {}), failures

    def group_buckets(
        self,
        buckets: Dict[int, List[CandidatePath]],
        algorithm: HashAlgorithm,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Tuple[Dict[int, DigestGroups], List[HashingFailure]]:
        """
        Hashes all files of all buckets.
        Returns ({size: {digest: [files]}}, failures); digest groups with fewer
        than 2 files and sizes without any group are omitted.
        """
        digests: Dict[Tuple[int, int], bytes] = {}
        failures: Dict[Tuple[int, int], HashingFailure] = {}

        tasks = self._iter_tasks(buckets)
        if self.max_workers == 1:
            self._run_inline(tasks, algorithm, stopped_flag, digests, failures)
        else:
            self._run_pooled(tasks, algorithm, stopped_flag, digests, failures)

        result: Dict[int, DigestGroups] = {}
        for size, files in buckets.items():
            hash_groups: DigestGroups = defaultdict(list)
            for position, file in enumerate(files):
                digest = digests.get((size, position))
                if digest is not None:
                    hash_groups[digest].append(file)
            kept = {d: group for d, group in hash_groups.items() if len(group) >= 2}
            if kept:
                result[size] = kept

        ordered_failures = [failures[key] for key in sorted(failures)]
        return result, ordered_failures

    @staticmethod
    def _iter_tasks(buckets: Dict[int, List[CandidatePath]]) -> Iterator[_Task]:
        for size, files in buckets.items():
            for position, file in enumerate(files):
                yield size, position, file

    def _hash_one(
        self,
        file: CandidatePath,
        algorithm: HashAlgorithm,
        stopped_flag: Optional[StoppedFlag]
    ) -> bytes:
        on_chunk = self.tracker.bytes_hashed if self.tracker else None
        return self.hasher.hash_file(file.path, algorithm, on_chunk=on_chunk, stopped_flag=stopped_flag)

    def _run_inline(self, tasks, algorithm, stopped_flag, digests, failures) -> None:
        for size, position, file in tasks:
            if stopped_flag and stopped_flag():
                logger.debug("Hashing interrupted, remaining files skipped")
                return
            try:
                digest = self._hash_one(file, algorithm, stopped_flag)
            except HashingCancelled:
                return
            except FileReadError as e:
                self._record_failure(failures, (size, position), file, e)
                continue
            self._record_digest(digests, (size, position), digest)

    def _run_pooled(self, tasks, algorithm, stopped_flag, digests, failures) -> None:
        window = self.max_workers * 2
        in_flight: Dict[Future, _Task] = {}
        stopping = False

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="rupes-hash") as executor:

            def submit_more() -> None:
                while len(in_flight) < window:
                    task = next(tasks, None)
                    if task is None:
                        return
                    future = executor.submit(self._hash_one, task[2], algorithm, stopped_flag)
                    in_flight[future] = task

            submit_more()
            while in_flight:
                done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    size, position, file = in_flight.pop(future)
                    try:
                        digest = future.result()
                    except (HashingCancelled, CancelledError):
                        continue
                    except FileReadError as e:
                        self._record_failure(failures, (size, position), file, e)
                        continue
                    self._record_digest(digests, (size, position), digest)

                if not stopping and stopped_flag and stopped_flag():
                    stopping = True
                    logger.debug("Hashing interrupted, cancelling queued files")
                    for future in in_flight:
                        future.cancel()
                if not stopping:
                    submit_more()

    def _record_digest(self, digests, key, digest: bytes) -> None:
        digests[key] = digest
        if self.tracker:
            self.tracker.file_hashed()

    def _record_failure(self, failures, key, file: CandidatePath, error: FileReadError) -> None:
        message = str(error.cause) if error.cause else ""
        failures[key] = HashingFailure(file=file, reason=error.reason, message=message)
        logger.warning(f"Could not hash {file.path}: {error.reason}")
        if self.tracker:
            self.tracker.file_failed()
