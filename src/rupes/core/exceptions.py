"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/exceptions.py
Exception hierarchy shared by the scanner, the hasher and the engine.
"""

import errno
from typing import Optional


class RupesError(Exception):
    """Base class for all errors raised by rupes."""


class FileReadError(RupesError):
    """
    A file could not be opened or read to the end while hashing.
    The partial digest, if any, is discarded.
    """

    def __init__(self, path: str, reason: str, cause: Optional[BaseException] = None):
        self.path = path
        self.reason = reason
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{reason} while reading {path}{detail}")

    @classmethod
    def from_os_error(cls, path: str, error: OSError) -> 'FileReadError':
        return cls(path, describe_os_error(error), error)


class TraversalError(RupesError):
    """The directory tree could not be walked, or an entry could not be sized."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class HashingCancelled(RupesError):
    """Raised inside a worker when cancellation is requested mid-file."""


def describe_os_error(error: OSError) -> str:
    """Map an OSError onto a short, stable failure reason."""
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return "permission denied"
    if isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
        return "file vanished"
    if isinstance(error, IsADirectoryError):
        return "not a regular file"
    return "I/O error"
