"""
rupes: find groups of duplicate files (matching size and content hash).

Core features:
- Size pre-filter: files are only hashed when another file has the same length
- Full-content digests (SHA-256 by default, MD5 or XXH3-128 on request) read in bounded chunks
- Parallel hashing on a bounded thread pool, cooperative cancellation
- Read-only: reports duplicates and wasted space, never deletes anything
"""

# Get version
try:
    from importlib.metadata import PackageNotFoundError, version as _version
    __version__ = _version("rupes")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Public API, only what users should import directly
from rupes.commands import DetectionCommand
from rupes.core import (
    DuplicateDetectionEngine, FileScannerImpl, ScanParams, HashAlgorithm, EngineState,
    CandidatePath, DuplicateGroup, HashingFailure, DetectionResult)
from rupes.utils.convert_utils import ConvertUtils

__all__ = [
    "DetectionCommand",
    "DuplicateDetectionEngine",
    "FileScannerImpl",
    "ScanParams",
    "HashAlgorithm",
    "EngineState",
    "CandidatePath",
    "DuplicateGroup",
    "HashingFailure",
    "DetectionResult",
    "ConvertUtils",
    "__version__",
]
