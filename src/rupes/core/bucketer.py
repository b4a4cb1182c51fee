"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/bucketer.py
First pipeline stage: group candidates by exact byte length.

A file is never hashed unless at least one other candidate has the same size,
which is where most of the pipeline's savings come from.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from rupes.core.interfaces import SizeBucketer, StoppedFlag
from rupes.core.models import CandidatePath
from rupes.core.progress import ProgressTracker

logger = logging.getLogger(__name__)


class SizeBucketerImpl(SizeBucketer):
    """
    Single-pass, streaming size grouping.
    Only the bucket index is held in memory; the candidate source may be lazy.
    """

    def __init__(self, tracker: Optional[ProgressTracker] = None):
        self.tracker = tracker

    def bucket(
        self,
        candidates: Iterable[CandidatePath],
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Dict[int, List[CandidatePath]]:
        """
        Returns {size: [candidates]} in arrival order within each bucket.
        Stops consuming the source as soon as stopped_flag returns True;
        the caller decides what a partial index means.
        """
        buckets: Dict[int, List[CandidatePath]] = defaultdict(list)
        consumed = 0
        for candidate in candidates:
            if stopped_flag and stopped_flag():
                logger.debug(f"Size grouping interrupted after {consumed} files")
                break
            buckets[candidate.size].append(candidate)
            consumed += 1
            if self.tracker:
                self.tracker.file_considered()

        logger.debug(f"Size grouping: {consumed} files in {len(buckets)} buckets")
        return dict(buckets)

    @staticmethod
    def prune_singletons(buckets: Dict[int, List[CandidatePath]]) -> Dict[int, List[CandidatePath]]:
        """Keeps only buckets with 2+ files."""
        pruned = {size: files for size, files in buckets.items() if len(files) >= 2}
        dropped = len(buckets) - len(pruned)
        if dropped:
            logger.debug(f"Dropped {dropped} single-file size buckets")
        return pruned
