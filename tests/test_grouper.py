"""
Unit tests for DuplicateGrouperImpl and GroupAccumulator.
"""
import random

import pytest

from dupscan.core.errors import IntegrityViolationError
from dupscan.core.grouper import DuplicateGrouperImpl, GroupAccumulator
from dupscan.core.models import DuplicateGroup, FileDescriptor


def fd(path, size, mtime=0.0):
    return FileDescriptor(path=path, name=path.rsplit("/", 1)[-1], size=size, mtime=mtime, atime=0.0, ctime=0.0)


@pytest.fixture
def candidates():
    return [
        (fd("/r/a", 10), b"\x01"),
        (fd("/r/b", 10), b"\x01"),
        (fd("/r/sub/c", 10), b"\x01"),
        (fd("/r/d", 10), b"\x02"),
        (fd("/r/big1", 500), b"\x03"),
        (fd("/r/big2", 500), b"\x03"),
    ]


class TestGrouping:

    def test_three_identical_one_different(self):
        grouper = DuplicateGrouperImpl()
        groups = grouper.group([
            (fd("/r/a", 10), b"h1"),
            (fd("/r/b", 10), b"h1"),
            (fd("/r/c", 10), b"h1"),
            (fd("/r/d", 10), b"h2"),
        ])
        assert len(groups) == 1
        assert groups[0].file_count == 3
        assert groups[0].wasted_space == 20
        assert groups[0].paths == ["/r/a", "/r/b", "/r/c"]

    def test_unique_files_produce_no_group(self):
        assert DuplicateGrouperImpl().group([(fd("/x", 1), b"a"), (fd("/y", 1), b"b")]) == []

    def test_empty_input(self):
        assert DuplicateGrouperImpl().group([]) == []

    def test_groups_sorted_by_wasted_space(self, candidates):
        groups = DuplicateGrouperImpl().group(candidates)
        assert [g.wasted_space for g in groups] == [500, 20]
        assert DuplicateGrouperImpl.total_wasted_space(groups) == 520

    def test_order_independent(self, candidates):
        grouper = DuplicateGrouperImpl()
        expected = grouper.group(candidates)
        for seed in range(5):
            shuffled = list(candidates)
            random.Random(seed).shuffle(shuffled)
            assert grouper.group(shuffled) == expected

    def test_batch_independent(self, candidates):
        expected = DuplicateGrouperImpl().group(candidates)
        first = GroupAccumulator().add_all(candidates[:2])
        second = GroupAccumulator().add_all(candidates[2:5])
        third = GroupAccumulator().add_all(candidates[5:])

        merged, violations = third.merge(first).merge(second).build()
        assert merged == expected
        assert violations == []

    def test_same_path_counted_once(self):
        accumulator = GroupAccumulator()
        accumulator.add(fd("/r/a", 10, mtime=1.0), b"h")
        accumulator.add(fd("/r/a", 10, mtime=5.0), b"h")
        accumulator.add(fd("/r/b", 10), b"h")
        groups, _ = accumulator.build()
        assert len(accumulator) == 2
        assert groups[0].file_count == 2
        assert groups[0].members[0].mtime == 5.0

    def test_integrity_violation_isolated_to_partition(self):
        grouper = DuplicateGrouperImpl()
        groups, violations = grouper.partition([
            (fd("/r/a", 10), b"bad"),
            (fd("/r/b", 11), b"bad"),
            (fd("/r/c", 7), b"ok"),
            (fd("/r/d", 7), b"ok"),
        ])
        assert [g.paths for g in groups] == [["/r/c", "/r/d"]]
        assert len(violations) == 1
        assert isinstance(violations[0], IntegrityViolationError)
        assert violations[0].sizes == {"/r/a": 10, "/r/b": 11}
        assert violations[0].hexdigest == b"bad".hex()


class TestKeyGrouping:

    def test_group_by_size_keeps_shared_sizes(self):
        files = [fd("/a", 1), fd("/b", 1), fd("/c", 2), fd("/d", 3), fd("/e", 3)]
        by_size = DuplicateGrouperImpl().group_by_size(files)
        assert sorted(by_size) == [1, 3]
        assert [f.path for f in by_size[3]] == ["/d", "/e"]

    def test_group_by_key_skips_failing_files(self):
        def key(f):
            if f.path == "/boom":
                raise RuntimeError("key failure")
            return "same"

        groups = DuplicateGrouperImpl.group_by_key([fd("/a", 1), fd("/boom", 1), fd("/b", 1)], key)
        assert [f.path for f in groups["same"]] == ["/a", "/b"]

    def test_none_key_is_dropped(self):
        groups = DuplicateGrouperImpl.group_by_key([fd("/a", 1), fd("/b", 1)], lambda f: None)
        assert groups == {}


class TestDuplicateGroupModel:

    def test_requires_two_members(self):
        with pytest.raises(ValueError):
            DuplicateGroup(digest=b"x", file_size=1, members=(fd("/a", 1),))

    def test_requires_equal_sizes(self):
        with pytest.raises(ValueError):
            DuplicateGroup(digest=b"x", file_size=1, members=(fd("/a", 1), fd("/b", 2)))

    def test_to_dict(self):
        group = DuplicateGroup(digest=b"\xab\xcd", file_size=4, members=(fd("/b", 4), fd("/a", 4)))
        data = group.to_dict()
        assert data["hash"] == "abcd"
        assert data["fileCount"] == 2
        assert data["wastedSpace"] == 4
        assert [f["path"] for f in data["files"]] == ["/a", "/b"]
