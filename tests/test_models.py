"""
Tests for data models and ScanParams validation.
"""
import pytest

from rupes.aliases import ALGORITHM_ALIASES, ALGORITHM_HELP_TEXT
from rupes.core.models import (
    CandidatePath, DetectionResult, DuplicateGroup, EngineState, HashAlgorithm, HashingFailure, ScanParams
)


class TestHashAlgorithm:

    def test_digest_sizes(self):
        assert HashAlgorithm.SHA256.digest_size == 32
        assert HashAlgorithm.MD5.digest_size == 16
        assert HashAlgorithm.XXH128.digest_size == 16

    def test_repr_is_value(self):
        assert repr(HashAlgorithm.MD5) == "md5"

    def test_descriptions_feed_algorithm_help(self):
        for name, algorithm in ALGORITHM_ALIASES.items():
            assert f"  {name:<6} : {algorithm.description}" in ALGORITHM_HELP_TEXT


class TestDuplicateGroup:

    def test_wasted_bytes_counts_all_but_one_copy(self):
        group = DuplicateGroup(b"d", 10, [CandidatePath(f"/f{i}", 10) for i in range(3)])
        assert group.duplicate_count == 3
        assert group.wasted_bytes == 20
        assert group.paths == ["/f0", "/f1", "/f2"]

    def test_single_file_wastes_nothing(self):
        assert DuplicateGroup(b"d", 10, [CandidatePath("/a", 10)]).wasted_bytes == 0


class TestHashingFailure:

    def test_str_includes_reason_and_message(self):
        failure = HashingFailure(CandidatePath("/x", 3), "permission denied", "Errno 13")
        assert str(failure) == "/x: permission denied (Errno 13)"
        assert failure.path == "/x"

    def test_str_without_message(self):
        assert str(HashingFailure(CandidatePath("/x", 3), "file vanished")) == "/x: file vanished"


class TestDetectionResult:

    def test_aggregates(self):
        result = DetectionResult(
            groups=[
                DuplicateGroup(b"1", 5, [CandidatePath("/a", 5), CandidatePath("/b", 5)]),
                DuplicateGroup(b"2", 2, [CandidatePath(f"/c{i}", 2) for i in range(3)]),
            ],
            status=EngineState.CANCELLED,
        )
        assert result.total_wasted_bytes == 9
        assert result.is_cancelled
        assert not result.has_failures


class TestScanParams:

    def test_defaults(self):
        params = ScanParams(root_dir=".")
        assert params.algorithm is HashAlgorithm.SHA256
        assert params.recursive is False
        assert params.name_pattern is None

    def test_name_filter_compiled(self):
        params = ScanParams(root_dir=".", name_filter=r"\.txt$")
        assert params.name_pattern.search("notes.txt")

    @pytest.mark.parametrize("kwargs, message", [
        ({"root_dir": ""}, "Root directory cannot be empty"),
        ({"root_dir": ".", "min_size_bytes": -1}, "Minimum size cannot be negative"),
        ({"root_dir": ".", "max_size_bytes": -1}, "Maximum size cannot be negative"),
        ({"root_dir": ".", "min_size_bytes": 10, "max_size_bytes": 5}, "less than minimum"),
        ({"root_dir": ".", "max_workers": 0}, "Worker count"),
        ({"root_dir": ".", "chunk_size": 0}, "Chunk size"),
        ({"root_dir": ".", "name_filter": "("}, "Invalid filter pattern"),
    ])
    def test_invalid_values_rejected(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            ScanParams(**kwargs)

    def test_equal_min_and_max_allowed(self):
        params = ScanParams(root_dir=".", min_size_bytes=5, max_size_bytes=5)
        assert params.min_size_bytes == params.max_size_bytes == 5

    def test_from_human_readable(self):
        params = ScanParams.from_human_readable(
            root_dir=".", min_size_str="1K", max_size_str="2M", chunk_size_str="64K",
            recursive=True, algorithm=HashAlgorithm.MD5
        )
        assert params.min_size_bytes == 1024
        assert params.max_size_bytes == 2 * 1024 * 1024
        assert params.chunk_size == 64 * 1024
        assert params.recursive is True
        assert params.algorithm is HashAlgorithm.MD5
