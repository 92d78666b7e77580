"""
Unit tests for FingerprintIndex and DuplicateIndexBuilder.
Uses a stub fingerprinter so grouping logic is tested without decoding images.
"""
import threading
import time
import pytest

from picsorter.core.errors import DecodeError
from picsorter.core.index import DuplicateIndexBuilder, FingerprintIndex
from picsorter.core.models import ImageFile

FP_A = b"\xaa" * 16
FP_B = b"\xbb" * 16
FP_C = b"\xcc" * 16


class StubFingerprinter:
    """Maps paths to fixed fingerprints; None means the file fails to decode."""

    def __init__(self, mapping, delays=None):
        self.mapping = mapping
        self.delays = delays or {}
        self.threads = set()

    def compute(self, file: ImageFile) -> bytes:
        self.threads.add(threading.get_ident())
        time.sleep(self.delays.get(file.path, 0))
        value = self.mapping[file.path]
        if value is None:
            raise DecodeError(file.path, "corrupt data")
        file.fingerprint = value
        return value


def make_files(*paths):
    return [ImageFile(path=p, order=i) for i, p in enumerate(paths)]


class TestFingerprintIndex:

    def test_first_file_opens_singleton_second_makes_group(self):
        index = FingerprintIndex()
        first = ImageFile(path="/1.png", fingerprint=FP_A)
        second = ImageFile(path="/2.png", fingerprint=FP_A)

        index.add(first)
        assert index.unique_images() == [first]
        assert index.duplicate_groups() == []

        index.add(second)
        assert index.unique_images() == []
        groups = index.duplicate_groups()
        assert len(groups) == 1
        assert groups[0].files == [first, second]

    def test_add_requires_fingerprint(self):
        with pytest.raises(ValueError):
            FingerprintIndex().add(ImageFile(path="/x.png"))

    def test_len_contains_and_file_count(self):
        index = FingerprintIndex()
        for path, fp in [("/1", FP_A), ("/2", FP_B), ("/3", FP_A)]:
            index.add(ImageFile(path=path, fingerprint=fp))

        assert len(index) == 2
        assert index.file_count == 3
        assert FP_A in index
        assert FP_C not in index
        assert [f.path for f in index.get(FP_A)] == ["/1", "/3"]
        assert index.get(FP_C) == []


class TestDuplicateIndexBuilder:

    def test_partition_every_file_in_exactly_one_place(self):
        files = make_files("/a", "/b", "/c", "/d", "/e")
        mapping = {"/a": FP_A, "/b": FP_B, "/c": FP_A, "/d": FP_C, "/e": FP_A}

        result = DuplicateIndexBuilder(StubFingerprinter(mapping)).build(files)

        grouped = [f.path for g in result.duplicate_groups for f in g.files]
        uniques = [f.path for f in result.unique_images]
        assert sorted(grouped + uniques) == ["/a", "/b", "/c", "/d", "/e"]
        assert not set(grouped) & set(uniques)
        assert result.processed == 5

    def test_group_members_keep_enumeration_order(self):
        files = make_files("/z.png", "/a.png", "/m.png")
        mapping = {p: FP_A for p in ("/z.png", "/a.png", "/m.png")}

        result = DuplicateIndexBuilder(StubFingerprinter(mapping)).build(files)

        assert [f.path for f in result.duplicate_groups[0].files] == ["/z.png", "/a.png", "/m.png"]

    def test_failed_files_are_excluded_and_counted(self):
        files = make_files("/ok1", "/bad", "/ok2")
        mapping = {"/ok1": FP_A, "/bad": None, "/ok2": FP_A}

        result = DuplicateIndexBuilder(StubFingerprinter(mapping)).build(files)

        assert [f.file.path for f in result.failed] == ["/bad"]
        assert result.failed[0].reason == "corrupt data"
        assert result.processed == 2
        assert result.total == 3
        all_indexed = [f.path for g in result.index for f in g.files]
        assert "/bad" not in all_indexed

    def test_empty_input_is_not_an_error(self):
        result = DuplicateIndexBuilder(StubFingerprinter({})).build([])
        assert result.duplicate_groups == []
        assert result.unique_images == []
        assert result.processed == 0
        assert result.cancelled is False

    def test_parallel_result_matches_enumeration_order(self):
        """Earlier files finish last, yet the representative is still the first enumerated."""
        paths = [f"/img{i}.png" for i in range(6)]
        files = make_files(*paths)
        mapping = {p: FP_A if i % 2 == 0 else FP_B for i, p in enumerate(paths)}
        delays = {p: 0.05 * (len(paths) - i) for i, p in enumerate(paths)}
        stub = StubFingerprinter(mapping, delays)

        result = DuplicateIndexBuilder(stub, workers=4).build(files)

        groups = result.duplicate_groups
        assert [g.fingerprint for g in groups] == [FP_A, FP_B]
        assert [f.path for f in groups[0].files] == ["/img0.png", "/img2.png", "/img4.png"]
        assert [f.path for f in groups[1].files] == ["/img1.png", "/img3.png", "/img5.png"]
        assert len(stub.threads) > 1

    def test_parallel_and_sequential_agree(self):
        paths = [f"/p{i}" for i in range(20)]
        mapping = {p: bytes([i % 7]) * 16 for i, p in enumerate(paths)}
        mapping["/p3"] = None

        seq = DuplicateIndexBuilder(StubFingerprinter(mapping)).build(make_files(*paths))
        par = DuplicateIndexBuilder(StubFingerprinter(mapping), workers=3).build(make_files(*paths))

        def shape(result):
            return [[f.path for f in g.files] for g in result.duplicate_groups], \
                   [f.path for f in result.unique_images], \
                   [f.file.path for f in result.failed]

        assert shape(seq) == shape(par)

    def test_progress_reported_every_ten_files_and_at_end(self):
        paths = [f"/p{i}" for i in range(23)]
        mapping = {p: FP_A for p in paths}
        calls = []

        DuplicateIndexBuilder(StubFingerprinter(mapping)).build(
            make_files(*paths), progress_callback=lambda *a: calls.append(a))

        assert calls == [("Fingerprinting", 10, 23), ("Fingerprinting", 20, 23), ("Fingerprinting", 23, 23)]

    def test_stopped_flag_cancels_build(self):
        files = make_files("/a", "/b")
        result = DuplicateIndexBuilder(StubFingerprinter({"/a": FP_A, "/b": FP_A})).build(
            files, stopped_flag=lambda: True)

        assert result.cancelled is True
        assert len(result.index) == 0

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            DuplicateIndexBuilder(StubFingerprinter({}), workers=0)
