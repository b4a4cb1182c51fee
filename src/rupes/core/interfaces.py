"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Protocols for the pluggable parts of the detection pipeline. Structural typing
keeps the engine independent of concrete hashers, groupers and scanners, so
tests can substitute any of them.

Key Components:
---------------
- DigestAccumulator: incremental digest (update bytes, produce final digest).
- ChunkedHasher: computes a file's full-content digest with bounded memory.
- SizeBucketer: single-pass grouping of candidates by exact byte length.
- HashGrouper: digest-based grouping inside same-size buckets.
- CandidateScanner: traversal producing the candidate path sequence.
"""

from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple

from rupes.core.models import CandidatePath, HashAlgorithm, HashingFailure


StoppedFlag = Callable[[], bool]
ChunkCallback = Callable[[int], None]


class DigestAccumulator(Protocol):
    """Common shape of hashlib and xxhash objects."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class ChunkedHasher(Protocol):
    """Interface for full-content hashing of files."""

    def hash_stream(
        self,
        stream: BinaryIO,
        algorithm: HashAlgorithm,
        on_chunk: Optional[ChunkCallback] = None,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> bytes:
        """Digest everything left in an open binary stream."""
        ...

    def hash_file(
        self,
        path: str,
        algorithm: HashAlgorithm,
        on_chunk: Optional[ChunkCallback] = None,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> bytes:
        """
        Open a file and digest its content.

        Raises:
            FileReadError: if the file cannot be opened or a read fails.
            HashingCancelled: if stopped_flag turns true between chunks.
        """
        ...


class SizeBucketer(Protocol):
    """Interface for the size pre-filter."""

    def bucket(
        self,
        candidates: Iterable[CandidatePath],
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Dict[int, List[CandidatePath]]:
        """Group candidates by size, keeping arrival order inside each bucket."""
        ...

    def prune_singletons(
        self,
        buckets: Dict[int, List[CandidatePath]]
    ) -> Dict[int, List[CandidatePath]]:
        """Drop buckets that cannot contain a duplicate."""
        ...


class HashGrouper(Protocol):
    """Interface for digest grouping within size buckets."""

    def group_bucket(
        self,
        size: int,
        files: List[CandidatePath],
        algorithm: HashAlgorithm,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Tuple[Dict[bytes, List[CandidatePath]], List[HashingFailure]]:
        """Hash one bucket and return its non-singleton digest groups."""
        ...

    def group_buckets(
        self,
        buckets: Dict[int, List[CandidatePath]],
        algorithm: HashAlgorithm,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> Tuple[Dict[int, Dict[bytes, List[CandidatePath]]], List[HashingFailure]]:
        """Hash every bucket and return digest groups keyed by size."""
        ...


class CandidateScanner(Protocol):
    """Interface for traversal collaborators."""

    def iter_candidates(self, stopped_flag: Optional[StoppedFlag] = None) -> Iterator[CandidatePath]:
        """Lazily yield files eligible for duplicate analysis."""
        ...
