"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for duplicate detection: candidate files, duplicate groups,
per-file hashing failures, progress snapshots and the run result.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Pattern


# =============================
# Enums
# =============================

class HashAlgorithm(Enum):
    """
    Content digest algorithm used to prove two same-size files identical.
    """
    SHA256 = "sha256"
    MD5 = "md5"
    XXH128 = "xxh128"

    @property
    def digest_size(self) -> int:
        """Length of the produced digest in bytes."""
        return 32 if self is HashAlgorithm.SHA256 else 16

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            HashAlgorithm.SHA256:
                "SHA-256, 32-byte digest (default, strong collision resistance)",
            HashAlgorithm.MD5:
                "MD5, 16-byte digest (faster, drastically higher collision risk)",
            HashAlgorithm.XXH128:
                "XXH3-128, 16-byte digest (fastest, non-cryptographic)",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class EngineState(Enum):
    IDLE = "idle"
    BUCKETING = "bucketing"
    HASHING = "hashing"
    DONE = "done"
    CANCELLED = "cancelled"


class Stage(str, Enum):
    SIZING = "Size grouping"
    HASHING = "Content hashing"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class CandidatePath:
    """
    A file offered for duplicate analysis: its path and its byte length
    as observed by the traversal.
    """
    path: str
    size: int  # in bytes

    def __repr__(self):
        return f"<CandidatePath path={self.path}, size={self.size}>"


@dataclass
class DuplicateGroup:
    """
    Files proven to share both size and content digest.
    """
    digest: bytes
    size: int
    files: List[CandidatePath]

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def wasted_bytes(self) -> int:
        """Space held by every copy except one."""
        return max(0, self.duplicate_count - 1) * self.size

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass(frozen=True)
class HashingFailure:
    """
    A candidate that could not be hashed. The file is excluded from grouping,
    its siblings are not affected.
    """
    file: CandidatePath
    reason: str
    message: str = ""

    @property
    def path(self) -> str:
        return self.file.path

    def __str__(self):
        if self.message:
            return f"{self.file.path}: {self.reason} ({self.message})"
        return f"{self.file.path}: {self.reason}"


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time copy of the engine counters."""
    files_considered: int = 0
    files_hashed: int = 0
    bytes_hashed: int = 0
    files_failed: int = 0
    elapsed: float = 0.0


@dataclass
class DetectionResult:
    """
    Terminal output of one engine run.
    """
    groups: List[DuplicateGroup] = field(default_factory=list)
    failures: List[HashingFailure] = field(default_factory=list)
    progress: ProgressSnapshot = field(default_factory=ProgressSnapshot)
    status: EngineState = EngineState.DONE
    algorithm: HashAlgorithm = HashAlgorithm.SHA256

    @property
    def is_cancelled(self) -> bool:
        return self.status is EngineState.CANCELLED

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def total_wasted_bytes(self) -> int:
        return sum(g.wasted_bytes for g in self.groups)


"""
DTO for scan parameters with built-in validation.
Interface-agnostic, filled from CLI arguments or built directly by callers.
"""
from rupes.utils.convert_utils import ConvertUtils

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB per read


@dataclass
class ScanParams:
    """Parameters for one traversal + detection run, validated on creation."""
    root_dir: str
    recursive: bool = False
    exclude_dots: bool = False
    name_filter: Optional[str] = None
    follow_symlinks: bool = False
    min_size_bytes: Optional[int] = None
    max_size_bytes: Optional[int] = None
    algorithm: HashAlgorithm = HashAlgorithm.SHA256
    max_workers: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    name_pattern: Optional[Pattern[str]] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes is not None and self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.max_size_bytes is not None and self.max_size_bytes < 0:
            raise ValueError("Maximum size cannot be negative")

        if (self.min_size_bytes is not None and self.max_size_bytes is not None
                and self.max_size_bytes < self.min_size_bytes):
            raise ValueError("Maximum size cannot be less than minimum size")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("Worker count must be at least 1")

        if self.chunk_size < 1:
            raise ValueError("Chunk size must be at least 1 byte")

        if self.name_filter:
            try:
                self.name_pattern = re.compile(self.name_filter)
            except re.error as e:
                raise ValueError(f"Invalid filter pattern '{self.name_filter}': {e}") from e

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: Optional[str] = None,
            max_size_str: Optional[str] = None,
            chunk_size_str: Optional[str] = None,
            **kwargs
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable size strings.
        Remaining keyword arguments are passed through unchanged.
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str) if min_size_str else None
        max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else None
        if chunk_size_str:
            kwargs["chunk_size"] = ConvertUtils.human_to_bytes(chunk_size_str)

        return ScanParams(
            root_dir=root_dir,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
            **kwargs
        )
