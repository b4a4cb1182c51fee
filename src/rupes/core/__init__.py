"""
Core detection engine: scanner, hasher, bucketer, grouper and pipeline orchestrator.

This package contains the performance-critical foundation of rupes:
- FileScannerImpl: directory traversal with dotfile, symlink, pattern and size filters
- ChunkedHasherImpl: bounded-memory SHA-256 / MD5 / XXH3-128 content hashing
- SizeBucketerImpl: single-pass size grouping with singleton pruning
- HashGrouperImpl: parallel digest grouping inside same-size buckets
- DuplicateDetectionEngine: IDLE -> BUCKETING -> HASHING -> DONE pipeline
- Models: CandidatePath, DuplicateGroup, HashingFailure and configuration objects

All components are pure Python with no presentation dependencies.
"""

from .scanner import FileScannerImpl
from .hasher import ChunkedHasherImpl, new_accumulator
from .bucketer import SizeBucketerImpl
from .grouper import HashGrouperImpl
from .progress import ProgressTracker
from .engine import DuplicateDetectionEngine
from .exceptions import RupesError, FileReadError, TraversalError, HashingCancelled
from .models import (
    CandidatePath, DuplicateGroup, HashingFailure, DetectionResult, ProgressSnapshot,
    HashAlgorithm, EngineState, Stage, ScanParams)

__all__ = [
    "FileScannerImpl",
    "ChunkedHasherImpl",
    "new_accumulator",
    "SizeBucketerImpl",
    "HashGrouperImpl",
    "ProgressTracker",
    "DuplicateDetectionEngine",
    "RupesError",
    "FileReadError",
    "TraversalError",
    "HashingCancelled",
    "CandidatePath",
    "DuplicateGroup",
    "HashingFailure",
    "DetectionResult",
    "ProgressSnapshot",
    "HashAlgorithm",
    "EngineState",
    "Stage",
    "ScanParams",
]
