"""
Unified command orchestrator for scanning and duplicate detection.
This is the SINGLE source of truth for the workflow — used by the CLI and by library callers.
"""
import logging
import time
from typing import Callable, Iterable, List, Optional, Tuple

from dupscan.core.errors import DupScanError
from dupscan.core.grouper import DuplicateGrouperImpl
from dupscan.core.hasher import HasherImpl, get_algorithm
from dupscan.core.models import (
    DetectionMode, DuplicateGroup, FileDescriptor, ScanParams, ScanReport, ScanStatus, Stage
)
from dupscan.core.pipeline import HashWorkerPool
from dupscan.core.progress import ProgressReporter, ProgressSink, ScanCounters
from dupscan.core.scanner import TreeWalkerImpl

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates the whole workflow:
    1. Walk the roots and build the file inventory
    2. Keep files whose size is shared by another file (PRUNED mode)
    3. Quick-hash the survivors and keep shared (size, quick hash) keys (PRUNED mode)
    4. Full-hash the remaining candidates on a bounded worker pool
    5. Group by full hash and account for wasted space

    In STREAMING mode the walk runs on the pool's producer thread and every
    file is full-hashed as soon as it is found.

    Usage:
        params = ScanParams(roots=["/data"])
        report = ScanCommand().execute(params, progress_sink=print_event, stopped_flag=cancel_check)
    """

    def __init__(self, grouper: Optional[DuplicateGrouperImpl] = None):
        self._grouper = grouper or DuplicateGrouperImpl()

    def execute(
            self,
            params: ScanParams,
            progress_sink: Optional[ProgressSink] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> ScanReport:
        """
        Execute a scan with the given parameters.

        Args:
            params: Validated scan parameters
            progress_sink: receives ProgressEvent / WarningEvent / CompleteEvent
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            ScanReport with inventory, groups and statistics. A cancelled scan
            has status CANCELLED and no groups.

        Raises:
            InvalidRootError: If a root is missing, unreadable or not a directory
            ValueError: If an algorithm name is unknown
        """
        report = ScanReport(roots=list(params.roots))
        counters = ScanCounters()
        reporter = ProgressReporter(progress_sink, counters)
        hasher = HasherImpl(
            algorithm=get_algorithm(params.algorithm),
            quick_algorithm=get_algorithm(params.quick_algorithm),
            sample_size=params.sample_size,
            large_file_threshold=params.large_file_threshold,
        )
        pool = HashWorkerPool(
            workers=params.workers,
            queue_size=params.queue_size,
            progress_interval=params.options.file_progress_interval,
        )
        walker = TreeWalkerImpl(params.options)
        total_start = time.time()

        try:
            descriptors = walker.scan(params.roots, progress_sink=reporter.emit,
                                      stopped_flag=stopped_flag, counters=counters)
        except DupScanError as e:
            report.finish(ScanStatus.FAILED, str(e))
            raise

        if params.mode == DetectionMode.STREAMING:
            candidates = self._run_streaming(params, report, descriptors, hasher, pool, reporter, stopped_flag)
        else:
            candidates = self._run_pruned(params, report, descriptors, hasher, pool, reporter, stopped_flag)

        report.dirs_scanned = counters.processed_dirs
        report.warnings = counters.warnings

        if stopped_flag and stopped_flag():
            logger.debug("Scan cancelled, discarding partial results")
            report.stats.total_time = time.time() - total_start
            report.finish(ScanStatus.CANCELLED)
            return report

        start = time.time()
        groups, violations = self._grouper.partition(candidates)
        for violation in violations:
            reporter.warning(", ".join(sorted(violation.sizes)), str(violation))
            report.integrity_violations.append(str(violation))
        report.groups = groups
        report.warnings = counters.warnings
        report.stats.update_stage(Stage.GROUP.value, len(groups), sum(g.file_count for g in groups),
                                  time.time() - start)

        report.stats.total_time = time.time() - total_start
        report.finish(ScanStatus.COMPLETED)
        logger.debug(f"Scan completed: {report.files_scanned} files, {len(groups)} duplicate groups, "
                     f"{report.total_wasted_space} bytes reclaimable")
        return report

    def _eligible(self, params: ScanParams, descriptor: FileDescriptor) -> bool:
        if descriptor.size == 0 and not params.include_empty:
            return False
        return descriptor.size >= params.min_size_bytes

    def _run_pruned(
            self,
            params: ScanParams,
            report: ScanReport,
            descriptors: Iterable[FileDescriptor],
            hasher: HasherImpl,
            pool: HashWorkerPool,
            reporter: ProgressReporter,
            stopped_flag: Optional[Callable[[], bool]]
    ) -> List[Tuple[FileDescriptor, bytes]]:
        start = time.time()
        eligible: List[FileDescriptor] = []
        for descriptor in descriptors:
            report.record_file(descriptor, keep=params.keep_inventory)
            if self._eligible(params, descriptor):
                eligible.append(descriptor)
        report.stats.update_stage(Stage.WALK.value, 0, report.files_scanned, time.time() - start)
        if stopped_flag and stopped_flag():
            return []

        start = time.time()
        size_groups = self._grouper.group_by_size(eligible)
        candidates = [f for files in size_groups.values() for f in files]
        report.stats.update_stage(Stage.SIZE.value, len(size_groups), len(candidates), time.time() - start)

        start = time.time()
        quick_digests = dict(pool.map(
            candidates, lambda f: hasher.quick_hash(f.path, size=f.size),
            reporter=reporter, stage=Stage.QUICK.value, stopped_flag=stopped_flag
        ))
        # equal samples of different sizes are not candidates
        quick_groups = self._grouper.group_by_key(quick_digests, lambda f: (f.size, quick_digests[f]))
        candidates = [f for files in quick_groups.values() for f in files]
        report.stats.update_stage(Stage.QUICK.value, len(quick_groups), len(candidates), time.time() - start)
        if stopped_flag and stopped_flag():
            return []

        start = time.time()
        pairs = list(pool.map(
            candidates, lambda f: hasher.full_hash(f.path, size=f.size),
            reporter=reporter, stage=Stage.FULL.value, stopped_flag=stopped_flag
        ))
        report.stats.update_stage(Stage.FULL.value, 0, len(pairs), time.time() - start)
        return pairs

    def _run_streaming(
            self,
            params: ScanParams,
            report: ScanReport,
            descriptors: Iterable[FileDescriptor],
            hasher: HasherImpl,
            pool: HashWorkerPool,
            reporter: ProgressReporter,
            stopped_flag: Optional[Callable[[], bool]]
    ) -> List[Tuple[FileDescriptor, bytes]]:
        start = time.time()

        def eligible():
            # runs on the pool producer thread, together with the walk
            for descriptor in descriptors:
                report.record_file(descriptor, keep=params.keep_inventory)
                if self._eligible(params, descriptor):
                    yield descriptor

        pairs = list(pool.map(
            eligible(), lambda f: hasher.full_hash(f.path, size=f.size),
            reporter=reporter, stage=Stage.FULL.value, stopped_flag=stopped_flag
        ))
        report.stats.update_stage(Stage.FULL.value, 0, len(pairs), time.time() - start)
        return pairs


def find_duplicates(
        params: ScanParams,
        progress_sink: Optional[ProgressSink] = None,
        stopped_flag: Optional[Callable[[], bool]] = None
) -> List[DuplicateGroup]:
    """Shortcut returning only the duplicate groups."""
    return ScanCommand().execute(params, progress_sink, stopped_flag).groups
