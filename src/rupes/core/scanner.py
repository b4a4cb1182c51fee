"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Directory traversal producing the candidate sequence for the engine.
Features:
- Optional recursion into subdirectories
- Dotfile/dot-directory exclusion
- Symlinks ignored by default, followed on request with loop detection
- Regex filtering on file names and inclusive size bounds
- Lazy: candidates are yielded while walking, in sorted name order
"""

import logging
import os
import re
import stat
from typing import Iterator, List, Optional, Pattern, Set, Tuple, Union

from rupes.core.exceptions import TraversalError, describe_os_error
from rupes.core.interfaces import CandidateScanner, StoppedFlag
from rupes.core.models import CandidatePath, ScanParams

logger = logging.getLogger(__name__)


class FileScannerImpl(CandidateScanner):
    """
    Walks a directory and yields regular files that pass all filters.

    Attributes:
        root_dir: Directory to scan
        recursive: Descend into subdirectories
        exclude_dots: Skip entries whose name starts with '.'
        name_filter: Regex searched in each file name (optional)
        follow_symlinks: Follow symbolic links instead of ignoring them
        min_size: Minimum file size in bytes, inclusive (optional)
        max_size: Maximum file size in bytes, inclusive (optional)
        errors: Entries that could not be listed or sized during the last walk
    """

    def __init__(
        self,
        root_dir: str,
        recursive: bool = False,
        exclude_dots: bool = False,
        name_filter: Optional[Union[str, Pattern[str]]] = None,
        follow_symlinks: bool = False,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.exclude_dots = exclude_dots
        self.name_filter = re.compile(name_filter) if isinstance(name_filter, str) else name_filter
        self.follow_symlinks = follow_symlinks
        self.min_size = min_size
        self.max_size = max_size
        self.errors: List[TraversalError] = []

    @classmethod
    def from_params(cls, params: ScanParams) -> 'FileScannerImpl':
        return cls(
            root_dir=params.root_dir,
            recursive=params.recursive,
            exclude_dots=params.exclude_dots,
            name_filter=params.name_pattern,
            follow_symlinks=params.follow_symlinks,
            min_size=params.min_size_bytes,
            max_size=params.max_size_bytes,
        )

    def iter_candidates(self, stopped_flag: Optional[StoppedFlag] = None) -> Iterator[CandidatePath]:
        """
        Validates the root directory, then returns a lazy iterator over candidates.

        Raises:
            TraversalError: if root_dir does not exist or is not a directory.
        """
        if not os.path.exists(self.root_dir):
            error_msg = "Directory does not exist"
            logger.error(f"{error_msg}: {self.root_dir}")
            raise TraversalError(self.root_dir, error_msg)
        if not os.path.isdir(self.root_dir):
            error_msg = "Not a directory"
            logger.error(f"{error_msg}: {self.root_dir}")
            raise TraversalError(self.root_dir, error_msg)

        self.errors = []
        return self._walk(stopped_flag)

    def _walk(self, stopped_flag: Optional[StoppedFlag]) -> Iterator[CandidatePath]:
        logger.debug(
            f"Scanning {self.root_dir} (recursive={self.recursive}, exclude_dots={self.exclude_dots}, "
            f"follow_symlinks={self.follow_symlinks}, min_size={self.min_size}, max_size={self.max_size})"
        )
        visited: Set[Tuple[int, int]] = set()
        yielded = 0

        for root, dirs, files in os.walk(self.root_dir, followlinks=self.follow_symlinks, onerror=self._on_walk_error):
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return

            if self.follow_symlinks and not self._first_visit(root, visited):
                logger.debug(f"Skipping already visited directory (symlink loop): {root}")
                dirs[:] = []
                continue

            # Pruning dirs in place keeps os.walk from entering them
            if self.recursive:
                dirs[:] = sorted(d for d in dirs if self._keep_dir(root, d))
            else:
                dirs[:] = []

            for filename in sorted(files):
                candidate = self._process_file(os.path.join(root, filename), filename)
                if candidate is not None:
                    yielded += 1
                    yield candidate

        logger.debug(f"Scan completed. Found {yielded} matching files, {len(self.errors)} errors.")

    def _first_visit(self, directory: str, visited: Set[Tuple[int, int]]) -> bool:
        try:
            st = os.stat(directory)
        except OSError as e:
            self._record_error(directory, e)
            return False
        key = (st.st_dev, st.st_ino)
        if key in visited:
            return False
        visited.add(key)
        return True

    def _keep_dir(self, root: str, name: str) -> bool:
        if self.exclude_dots and name.startswith('.'):
            logger.debug(f"Skipping dot directory: {os.path.join(root, name)}")
            return False
        if not self.follow_symlinks and os.path.islink(os.path.join(root, name)):
            logger.debug(f"Skipping symbolic link: {os.path.join(root, name)}")
            return False
        return True

    def _process_file(self, path: str, filename: str) -> Optional[CandidatePath]:
        """
        Returns a CandidatePath if the entry is a regular file passing all filters.
        """
        if self.exclude_dots and filename.startswith('.'):
            logger.debug(f"Skipping dot file: {path}")
            return None

        try:
            if not self.follow_symlinks and os.path.islink(path):
                logger.debug(f"Skipping symbolic link: {path}")
                return None
            st = os.stat(path)
        except OSError as e:
            self._record_error(path, e)
            return None

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return None

        if self.name_filter is not None and not self.name_filter.search(filename):
            return None

        if not self._size_passes(st.st_size):
            logger.debug(f"Skipping {path} (size {st.st_size} bytes outside range)")
            return None

        return CandidatePath(path=path, size=st.st_size)

    def _size_passes(self, size: int) -> bool:
        if self.min_size is not None and size < self.min_size:
            return False
        if self.max_size is not None and size > self.max_size:
            return False
        return True

    def _on_walk_error(self, error: OSError) -> None:
        self._record_error(error.filename or self.root_dir, error)

    def _record_error(self, path: str, error: OSError) -> None:
        traversal_error = TraversalError(path, f"Could not read entry ({describe_os_error(error)})")
        self.errors.append(traversal_error)
        logger.warning(str(traversal_error))
