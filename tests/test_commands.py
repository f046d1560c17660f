"""
End-to-end tests for ScanCommand: both detection modes, filtering, failures and cancellation.
"""
import json
import os
import sys

import pytest

from dupscan.commands import ScanCommand, find_duplicates
from dupscan.core.classifier import MediaType
from dupscan.core.errors import HashIOError, InvalidRootError
from dupscan.core.hasher import HasherImpl
from dupscan.core.models import DetectionMode, ScanOptions, ScanParams, ScanStatus

MODES = [DetectionMode.PRUNED, DetectionMode.STREAMING]


def params_for(root, **kwargs):
    kwargs.setdefault("options", ScanOptions.from_strings(hidden_folders=["node_modules"]))
    kwargs.setdefault("workers", 2)
    return ScanParams(roots=[str(root)], **kwargs)


class TestScanCommand:

    @pytest.mark.parametrize("mode", MODES)
    def test_three_copies_one_group(self, temp_dir, test_files, mode):
        report = ScanCommand().execute(params_for(temp_dir, mode=mode))

        assert report.status == ScanStatus.COMPLETED
        assert len(report.groups) == 1
        group = report.groups[0]
        assert group.file_count == 3
        assert group.file_size == 10
        assert group.wasted_space == 20
        assert group.paths == sorted(str(test_files[k]) for k in ("a", "b", "c"))
        assert report.total_wasted_space == 20

    def test_inventory_and_totals(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir))

        # node_modules/copy.txt is hidden
        assert report.files_scanned == 7
        assert len(report.files) == 7
        assert report.total_size == 4 * 10 + 1500
        assert report.dirs_scanned == 2
        assert report.warnings == 0
        assert report.finished_at is not None
        assert report.media_summary[MediaType.OTHER]["files"] == 7

    def test_keep_inventory_off(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir, keep_inventory=False))
        assert report.files == []
        assert report.files_scanned == 7

    def test_modes_agree_with_streamed_hashing(self, temp_dir, test_files):
        (temp_dir / "big1.bin").write_bytes(b"L" * 5000)
        (temp_dir / "big2.bin").write_bytes(b"L" * 5000)
        (temp_dir / "big3.bin").write_bytes(b"L" * 4999 + b"M")

        results = []
        for mode in MODES:
            for threshold in (1 << 30, 16):
                report = ScanCommand().execute(params_for(temp_dir, mode=mode, large_file_threshold=threshold))
                results.append([(g.hexdigest, g.paths) for g in report.groups])

        assert all(r == results[0] for r in results)
        assert len(results[0]) == 2

    @pytest.mark.parametrize("mode", MODES)
    def test_empty_files_only_with_include_empty(self, temp_dir, test_files, mode):
        report = ScanCommand().execute(params_for(temp_dir, mode=mode))
        assert all(g.file_size > 0 for g in report.groups)

        report = ScanCommand().execute(params_for(temp_dir, mode=mode, include_empty=True))
        empty_groups = [g for g in report.groups if g.file_size == 0]
        assert len(empty_groups) == 1
        assert empty_groups[0].file_count == 2
        assert empty_groups[0].wasted_space == 0

    def test_min_size_filters_candidates(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir, min_size_bytes=11))
        assert report.groups == []
        assert report.files_scanned == 7

    def test_quick_hash_collision_resolved_by_full_hash(self, temp_dir):
        (temp_dir / "x1").write_bytes(b"H" * 16 + b"1" * 100 + b"T" * 16)
        (temp_dir / "x2").write_bytes(b"H" * 16 + b"2" * 100 + b"T" * 16)
        (temp_dir / "y1").write_bytes(b"A" * 132)

        report = ScanCommand().execute(params_for(temp_dir, sample_size=16))

        assert report.groups == []
        # y1 differs in its head and never reaches the full-hash stage
        assert report.stats.stage_stats["quick-hash"]["files"] == 2
        assert report.stats.stage_stats["full-hash"]["files"] == 2

    def test_hidden_folder_included_when_not_hidden(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir, options=ScanOptions()))
        assert report.groups[0].file_count == 4
        assert report.groups[0].wasted_space == 30

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="symlinks need privileges on Windows")
    @pytest.mark.parametrize("mode", MODES)
    def test_followed_file_link_is_not_a_duplicate(self, temp_dir, mode):
        (temp_dir / "real.bin").write_bytes(b"r" * 4096)
        os.symlink(temp_dir / "real.bin", temp_dir / "alias.bin")
        options = ScanOptions(follow_symlinks=True)

        report = ScanCommand().execute(params_for(temp_dir, mode=mode, options=options))

        assert report.files_scanned == 1
        assert report.groups == []
        assert report.total_wasted_space == 0

    @pytest.mark.parametrize("mode", MODES)
    def test_hash_failure_becomes_warning(self, temp_dir, test_files, monkeypatch, recorder, mode):
        failing = str(test_files["b"])
        original = HasherImpl.full_hash

        def flaky_full_hash(self, path, size=None):
            if path == failing:
                raise HashIOError(path, OSError("read error"))
            return original(self, path, size)

        monkeypatch.setattr(HasherImpl, "full_hash", flaky_full_hash)
        report = ScanCommand().execute(params_for(temp_dir, mode=mode), progress_sink=recorder)

        assert report.status == ScanStatus.COMPLETED
        assert report.groups[0].paths == sorted([str(test_files["a"]), str(test_files["c"])])
        assert report.warnings == 1
        assert [w.path for w in recorder.of_kind("warning")] == [failing]

    def test_integrity_violation_warning_names_member_paths(self, temp_dir, test_files, monkeypatch, recorder):
        monkeypatch.setattr(HasherImpl, "full_hash", lambda self, path, size=None: b"same")

        report = ScanCommand().execute(params_for(temp_dir, mode=DetectionMode.STREAMING), progress_sink=recorder)

        members = sorted(str(test_files[k]) for k in ("a", "b", "c", "d", "unique"))
        assert report.groups == []
        assert len(report.integrity_violations) == 1
        warnings = recorder.of_kind("warning")
        assert [w.path for w in warnings] == [", ".join(members)]
        assert b"same".hex() in warnings[0].message

    def test_invalid_root_raises(self, temp_dir, recorder):
        with pytest.raises(InvalidRootError):
            ScanCommand().execute(params_for(temp_dir / "missing"), progress_sink=recorder)
        assert recorder.events == []

    @pytest.mark.parametrize("mode", MODES)
    def test_cancelled_scan_has_no_groups(self, temp_dir, test_files, mode):
        report = ScanCommand().execute(params_for(temp_dir, mode=mode), stopped_flag=lambda: True)
        assert report.status == ScanStatus.CANCELLED
        assert report.groups == []

    def test_report_is_json_serialisable(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir))
        data = json.loads(json.dumps(report.to_dict()))
        assert data["status"] == "completed"
        assert data["duplicatesFound"] == 1
        assert data["totalWastedSpace"] == 20
        assert data["duplicates"][0]["fileCount"] == 3
        assert data["mediaSummary"]["other"]["files"] == 7

    def test_stage_statistics_recorded(self, temp_dir, test_files):
        report = ScanCommand().execute(params_for(temp_dir))
        assert set(report.stats.stage_stats) == {"walk", "size", "quick-hash", "full-hash", "group"}
        assert "Scan Statistics:" in report.stats.print_summary()

    def test_find_duplicates_shortcut(self, temp_dir, test_files):
        groups = find_duplicates(params_for(temp_dir))
        assert [g.wasted_space for g in groups] == [20]


class TestScanParams:

    def test_from_human_readable(self, temp_dir):
        params = ScanParams.from_human_readable([str(temp_dir)], min_size_str="1K", sample_size_str="4K",
                                                large_file_threshold_str="1M", algorithm="BLAKE2B")
        assert params.min_size_bytes == 1024
        assert params.sample_size == 4096
        assert params.large_file_threshold == 1024 * 1024
        assert params.algorithm == "blake2b"

    def test_single_root_string_accepted(self, temp_dir):
        assert ScanParams(roots=str(temp_dir)).roots == [str(temp_dir)]

    @pytest.mark.parametrize("kwargs", [
        {"roots": []},
        {"roots": ["/x"], "min_size_bytes": -1},
        {"roots": ["/x"], "sample_size": 0},
        {"roots": ["/x"], "workers": 0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            ScanParams(**kwargs)

    def test_unknown_algorithm_rejected_at_execute(self, temp_dir):
        with pytest.raises(ValueError):
            ScanCommand().execute(ScanParams(roots=[str(temp_dir)], algorithm="md5"))
