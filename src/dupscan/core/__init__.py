"""
Core duplicate detection engine: walker, hasher, grouper and worker pool.

- TreeWalkerImpl: iterative directory traversal with exclusion and depth rules
- HasherImpl + algorithm implementations: quick (head/tail) and full content digests
- DuplicateGrouperImpl / GroupAccumulator: digest partitioning and wasted space
- HashWorkerPool: bounded-queue hashing threads
- Models: FileDescriptor, DuplicateGroup, ScanOptions, ScanParams, ScanReport

No GUI or persistence dependencies.
"""

from .errors import DupScanError, ErrorKind, HashIOError, IntegrityViolationError, InvalidRootError, RootProblem
from .scanner import TreeWalkerImpl
from .grouper import DuplicateGrouperImpl, GroupAccumulator
from .hasher import HasherImpl, SHA256AlgorithmImpl, Blake2bAlgorithmImpl, XXHashAlgorithmImpl, get_algorithm
from .path_filter import PathFilter
from .pipeline import HashWorkerPool
from .progress import CompleteEvent, LoggingProgressSink, ProgressEvent, ProgressReporter, WarningEvent
from .models import (
    DetectionMode, DuplicateGroup, FileDescriptor, HashKind, HashResult, PipelineConfig,
    ScanOptions, ScanParams, ScanReport, ScanStats, ScanStatus, Stage)

__all__ = [
    "DupScanError",
    "ErrorKind",
    "HashIOError",
    "IntegrityViolationError",
    "InvalidRootError",
    "RootProblem",
    "TreeWalkerImpl",
    "DuplicateGrouperImpl",
    "GroupAccumulator",
    "HasherImpl",
    "SHA256AlgorithmImpl",
    "Blake2bAlgorithmImpl",
    "XXHashAlgorithmImpl",
    "get_algorithm",
    "PathFilter",
    "HashWorkerPool",
    "CompleteEvent",
    "LoggingProgressSink",
    "ProgressEvent",
    "ProgressReporter",
    "WarningEvent",
    "DetectionMode",
    "DuplicateGroup",
    "FileDescriptor",
    "HashKind",
    "HashResult",
    "PipelineConfig",
    "ScanOptions",
    "ScanParams",
    "ScanReport",
    "ScanStats",
    "ScanStatus",
    "Stage",
]
