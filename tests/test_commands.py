"""
Integration tests for DetectionCommand: the layer wiring the scanner into the engine.
"""
import os

import pytest

from rupes import DetectionCommand, EngineState, HashAlgorithm, ScanParams
from rupes.core.exceptions import TraversalError


class TestDetectionCommand:

    def test_execute_non_recursive(self, test_tree):
        """Only the top-level pair is reported without recursion."""
        result = DetectionCommand().execute(ScanParams(root_dir=str(test_tree)))

        assert result.status is EngineState.DONE
        assert len(result.groups) == 1
        assert [os.path.basename(p) for p in result.groups[0].paths] == ["a-file.txt", "b-file.specialTXT"]
        assert result.progress.files_considered == 3

    def test_execute_recursive(self, test_tree):
        result = DetectionCommand().execute(ScanParams(root_dir=str(test_tree), recursive=True))

        assert [g.duplicate_count for g in result.groups] == [3, 3]
        # three 28-byte copies waste more than three 20-byte copies
        assert [g.size for g in result.groups] == [28, 20]

    def test_execute_recursive_without_dots(self, test_tree):
        params = ScanParams(root_dir=str(test_tree), recursive=True, exclude_dots=True, algorithm=HashAlgorithm.MD5)
        result = DetectionCommand().execute(params)

        assert [g.duplicate_count for g in result.groups] == [2, 2]
        assert all(len(g.digest) == 16 for g in result.groups)

    def test_progress_and_cancellation_forwarded(self, test_tree):
        events = []
        result = DetectionCommand().execute(
            ScanParams(root_dir=str(test_tree)),
            progress_callback=lambda stage, snap: events.append(stage),
            stopped_flag=lambda: True,
        )
        assert result.status is EngineState.CANCELLED
        assert events

    def test_missing_directory_raises(self, temp_dir):
        with pytest.raises(TraversalError):
            DetectionCommand().execute(ScanParams(root_dir=str(temp_dir / "missing")))

    def test_traversal_errors_available_after_execute(self, test_tree):
        command = DetectionCommand()
        with pytest.raises(RuntimeError):
            command.get_traversal_errors()

        command.execute(ScanParams(root_dir=str(test_tree)))
        assert command.get_traversal_errors() == []
