"""
Tests for SizeBucketerImpl: single-pass size grouping and singleton pruning.
"""
from rupes.core.bucketer import SizeBucketerImpl
from rupes.core.models import CandidatePath
from rupes.core.progress import ProgressTracker


def candidate(path, size):
    return CandidatePath(path=path, size=size)


class TestSizeBucketerImpl:

    def test_groups_by_exact_size(self):
        files = [candidate("/a", 5), candidate("/b", 5), candidate("/c", 5), candidate("/d", 3)]
        buckets = SizeBucketerImpl().bucket(files)

        assert set(buckets) == {5, 3}
        assert [f.path for f in buckets[5]] == ["/a", "/b", "/c"]
        assert [f.path for f in buckets[3]] == ["/d"]

    def test_preserves_arrival_order_within_bucket(self):
        files = [candidate("/z", 10), candidate("/a", 10), candidate("/m", 10)]
        buckets = SizeBucketerImpl().bucket(files)
        assert [f.path for f in buckets[10]] == ["/z", "/a", "/m"]

    def test_empty_input_gives_empty_index(self):
        assert SizeBucketerImpl().bucket([]) == {}

    def test_consumes_lazy_source_once(self):
        consumed = []

        def source():
            for i in range(4):
                consumed.append(i)
                yield candidate(f"/f{i}", i % 2)

        buckets = SizeBucketerImpl().bucket(source())
        assert consumed == [0, 1, 2, 3]
        assert len(buckets[0]) == 2
        assert len(buckets[1]) == 2

    def test_stops_consuming_when_stopped(self):
        files = [candidate(f"/f{i}", 1) for i in range(10)]
        seen = {"n": 0}

        def stopped():
            seen["n"] += 1
            return seen["n"] > 3

        buckets = SizeBucketerImpl().bucket(files, stopped_flag=stopped)
        assert len(buckets[1]) == 3

    def test_counts_every_candidate(self):
        tracker = ProgressTracker()
        SizeBucketerImpl(tracker).bucket([candidate("/a", 1), candidate("/b", 2), candidate("/c", 2)])
        assert tracker.snapshot().files_considered == 3


class TestPruneSingletons:

    def test_drops_single_file_buckets(self):
        buckets = {
            5: [candidate("/a", 5), candidate("/b", 5)],
            3: [candidate("/d", 3)],
            0: [candidate("/e", 0), candidate("/f", 0), candidate("/g", 0)],
        }
        pruned = SizeBucketerImpl.prune_singletons(buckets)
        assert set(pruned) == {5, 0}

    def test_all_unique_sizes_prunes_everything(self):
        buckets = {i: [candidate(f"/f{i}", i)] for i in range(5)}
        assert SizeBucketerImpl.prune_singletons(buckets) == {}
