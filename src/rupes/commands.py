"""
Command orchestrator for a scan: traversal feeding the detection engine.
Used by the CLI; any other front end goes through the same code path.
"""
from typing import List, Optional

from rupes.core.engine import DuplicateDetectionEngine
from rupes.core.exceptions import TraversalError
from rupes.core.interfaces import StoppedFlag
from rupes.core.models import DetectionResult, ScanParams
from rupes.core.progress import ProgressCallback
from rupes.core.scanner import FileScannerImpl


class DetectionCommand:
    """
    Orchestrates the entire detection workflow:
    1. Build the scanner from ScanParams
    2. Stream its candidates into the engine
    3. Keep traversal errors for the caller to report

    Usage:
        params = ScanParams(root_dir="./photos", recursive=True)
        command = DetectionCommand()
        result = command.execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=interrupt_event.is_set
        )
    """

    def __init__(self):
        self._scanner: Optional[FileScannerImpl] = None

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[ProgressCallback] = None,
            stopped_flag: Optional[StoppedFlag] = None
    ) -> DetectionResult:
        """
        Execute detection with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (stage, snapshot) -> None
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            DetectionResult of the engine run

        Raises:
            TraversalError: If the root directory cannot be scanned
        """
        self._scanner = FileScannerImpl.from_params(params)
        candidates = self._scanner.iter_candidates(stopped_flag=stopped_flag)

        engine = DuplicateDetectionEngine(
            algorithm=params.algorithm,
            max_workers=params.max_workers,
            chunk_size=params.chunk_size,
        )
        return engine.find_duplicates(
            candidates,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

    def get_traversal_errors(self) -> List[TraversalError]:
        """Entries the scanner could not list or size during the last run."""
        if self._scanner is None:
            raise RuntimeError("Execute command first before accessing traversal errors")
        return list(self._scanner.errors)
