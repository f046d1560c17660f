"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and configuration objects for scanning, hashing and duplicate grouping.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional, Union, Callable, Iterable, Tuple, FrozenSet
import logging
import os
import re
import stat as stat_module
from enum import Enum

from dupscan.core.classifier import MediaType, classify

logger = logging.getLogger(__name__)


# =============================
# Configuration constants
# =============================

class PipelineConfig:
    """Default tunables shared by the walker, hasher and worker pool."""
    QUICK_SAMPLE_SIZE = 8 * 1024                   # head/tail window of the quick hash
    LARGE_FILE_THRESHOLD = 2 * 1024 * 1024 * 1024  # files >= this are always streamed
    STREAM_CHUNK_SIZE = 1024 * 1024
    DIR_PROGRESS_INTERVAL = 100
    FILE_PROGRESS_INTERVAL = 1000
    QUEUE_SIZE_PER_WORKER = 4

    @staticmethod
    def default_workers() -> int:
        return os.cpu_count() or 1


# =============================
# Enums
# =============================

class DetectionMode(Enum):
    """
    Strategy used to find duplicates after the walk.
    """
    PRUNED = "pruned"
    STREAMING = "streaming"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            DetectionMode.PRUNED: "Pruned",
            DetectionMode.STREAMING: "Streaming",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            DetectionMode.PRUNED:
                "Size → Quick Hash → Full Hash (reads only candidate files)",
            DetectionMode.STREAMING:
                "Full Hash of every file while walking (bounded memory, more I/O)",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class HashKind(Enum):
    QUICK = "quick"
    FULL = "full"


class ScanStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Stage(str, Enum):
    WALK = "walk"
    SIZE = "size"
    QUICK = "quick-hash"
    FULL = "full-hash"
    GROUP = "group"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileDescriptor:
    """
    A regular file found by the walker. Immutable; a later scan of the same
    path produces a new descriptor instead of mutating this one.
    """
    path: str
    name: str
    size: int  # in bytes
    mtime: float
    atime: float
    ctime: float

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileDescriptor":
        return cls(
            path=path,
            name=os.path.basename(path),
            size=st.st_size,
            mtime=st.st_mtime,
            atime=st.st_atime,
            ctime=st.st_ctime,
        )

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @property
    def media_type(self) -> MediaType:
        return classify(self.name)

    def to_dict(self) -> Dict[str, Union[str, int, float]]:
        return {
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "mtime": self.mtime,
            "atime": self.atime,
            "ctime": self.ctime,
        }

    def __repr__(self):
        return f"<FileDescriptor path={self.path}, size={self.size}>"


@dataclass(frozen=True)
class HashResult:
    """A digest of one file. Quick and full results are independent values."""
    path: str
    algorithm: str
    digest: bytes
    kind: HashKind

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()


@dataclass(frozen=True)
class DuplicateGroup:
    """
    Files whose full-content digests are equal.
    Never materialized with fewer than two members.
    """
    digest: bytes
    file_size: int
    members: Tuple[FileDescriptor, ...]

    def __post_init__(self):
        if len(self.members) < 2:
            raise ValueError("A duplicate group needs at least two members")
        if any(m.size != self.file_size for m in self.members):
            raise ValueError("All members of a duplicate group must have the same size")
        object.__setattr__(self, "members", tuple(sorted(self.members, key=lambda m: m.path)))

    @property
    def file_count(self) -> int:
        return len(self.members)

    @property
    def wasted_space(self) -> int:
        """Bytes taken by the copies beyond the first one."""
        return (self.file_count - 1) * self.file_size

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()

    @property
    def paths(self) -> List[str]:
        return [m.path for m in self.members]

    def to_dict(self) -> Dict[str, object]:
        return {
            "hash": self.hexdigest,
            "fileSize": self.file_size,
            "fileCount": self.file_count,
            "wastedSpace": self.wasted_space,
            "files": [m.to_dict() for m in self.members],
        }

    def __repr__(self):
        return f"<DuplicateGroup size={self.file_size}, count={self.file_count}, wasted={self.wasted_space}>"


PatternLike = Union[str, re.Pattern]


@dataclass(frozen=True)
class ScanOptions:
    """Walker configuration. Immutable once a scan starts."""
    follow_symlinks: bool = False
    max_depth: Optional[int] = None  # None means unbounded
    exclude_patterns: Tuple[PatternLike, ...] = ()
    hidden_folders: FrozenSet[str] = frozenset()
    dir_progress_interval: int = PipelineConfig.DIR_PROGRESS_INTERVAL
    file_progress_interval: int = PipelineConfig.FILE_PROGRESS_INTERVAL

    def __post_init__(self):
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("Maximum depth cannot be negative")
        if self.dir_progress_interval <= 0 or self.file_progress_interval <= 0:
            raise ValueError("Progress intervals must be positive")

        patterns = []
        for pattern in self.exclude_patterns:
            if not isinstance(pattern, (str, re.Pattern)):
                raise ValueError(f"Unsupported exclude pattern: {pattern!r}")
            if pattern == "":
                raise ValueError("Empty exclude pattern would exclude everything")
            patterns.append(pattern)
        object.__setattr__(self, "exclude_patterns", tuple(patterns))
        object.__setattr__(self, "hidden_folders", frozenset(self.hidden_folders))

    @staticmethod
    def from_strings(
            exclude: Iterable[str] = (),
            exclude_regex: Iterable[str] = (),
            hidden_folders: Iterable[str] = (),
            follow_symlinks: bool = False,
            max_depth: Optional[int] = None,
    ) -> "ScanOptions":
        """
        Factory for string inputs (CLI). Literal patterns keep their order and
        come before the compiled ones.
        """
        patterns: List[PatternLike] = [p for p in exclude if p]
        for expr in exclude_regex:
            try:
                patterns.append(re.compile(expr))
            except re.error as e:
                raise ValueError(f"Invalid exclude regex '{expr}': {e}") from e
        return ScanOptions(
            follow_symlinks=follow_symlinks,
            max_depth=max_depth,
            exclude_patterns=tuple(patterns),
            hidden_folders=frozenset(h.strip() for h in hidden_folders if h.strip()),
        )


def is_regular_file(st: os.stat_result) -> bool:
    return stat_module.S_ISREG(st.st_mode)


def is_directory(st: os.stat_result) -> bool:
    return stat_module.S_ISDIR(st.st_mode)


# ======================
#  Statistics and reports
# ======================

class ScanStats:
    """
    Statistics collected during a scan, per pipeline stage.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

        for listener in self._listeners:
            try:
                listener(stage_name, self.stage_stats[stage_name])
            except Exception as e:
                logger.error(f"Error in stats listener: {e}")

    def print_summary(self) -> str:
        labels = {
            Stage.WALK.value: "Walk",
            Stage.SIZE.value: "Size Groups",
            Stage.QUICK.value: "Quick Hash Groups",
            Stage.FULL.value: "Full Hash Files",
            Stage.GROUP.value: "Duplicate Groups",
        }

        lines = [
            "Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            label = labels.get(stage, stage.title())
            lines.append(f"{label}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


@dataclass
class ScanReport:
    """Outcome of one scan invocation, handed to whoever persists results."""
    roots: List[str]
    status: ScanStatus = ScanStatus.RUNNING
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    files: List[FileDescriptor] = field(default_factory=list)
    files_scanned: int = 0
    dirs_scanned: int = 0
    total_size: int = 0
    groups: List[DuplicateGroup] = field(default_factory=list)
    warnings: int = 0
    integrity_violations: List[str] = field(default_factory=list)
    media_summary: Dict[MediaType, Dict[str, int]] = field(default_factory=dict)
    stats: ScanStats = field(default_factory=ScanStats)
    error_message: Optional[str] = None

    @property
    def total_wasted_space(self) -> int:
        return sum(g.wasted_space for g in self.groups)

    @property
    def duplicate_files(self) -> int:
        return sum(g.file_count for g in self.groups)

    def record_file(self, descriptor: FileDescriptor, keep: bool = True) -> None:
        self.files_scanned += 1
        self.total_size += descriptor.size
        bucket = self.media_summary.setdefault(descriptor.media_type, {"files": 0, "bytes": 0})
        bucket["files"] += 1
        bucket["bytes"] += descriptor.size
        if keep:
            self.files.append(descriptor)

    def finish(self, status: ScanStatus, error_message: Optional[str] = None) -> None:
        self.status = status
        self.error_message = error_message
        self.finished_at = datetime.now()

    def to_dict(self) -> Dict[str, object]:
        return {
            "roots": list(self.roots),
            "status": self.status.value,
            "startTime": self.started_at.isoformat(),
            "endTime": self.finished_at.isoformat() if self.finished_at else None,
            "filesScanned": self.files_scanned,
            "dirsScanned": self.dirs_scanned,
            "totalSize": self.total_size,
            "warnings": self.warnings,
            "errorMessage": self.error_message,
            "mediaSummary": {m.value: dict(v) for m, v in self.media_summary.items()},
            "duplicatesFound": len(self.groups),
            "totalWastedSpace": self.total_wasted_space,
            "integrityViolations": list(self.integrity_violations),
            "duplicates": [g.to_dict() for g in self.groups],
        }


"""
DTO for scan parameters with built-in validation.
Interface-agnostic — used by both the CLI and library callers.
"""
from dupscan.utils.convert_utils import ConvertUtils


@dataclass
class ScanParams:
    """Parameters for one scan-and-group run, validated on creation."""
    roots: List[str]
    options: ScanOptions = field(default_factory=ScanOptions)
    min_size_bytes: int = 0
    include_empty: bool = False
    mode: DetectionMode = DetectionMode.PRUNED
    algorithm: str = "sha256"
    quick_algorithm: str = "xxh64"
    sample_size: int = PipelineConfig.QUICK_SAMPLE_SIZE
    large_file_threshold: int = PipelineConfig.LARGE_FILE_THRESHOLD
    workers: Optional[int] = None
    queue_size: Optional[int] = None
    keep_inventory: bool = True

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if isinstance(self.roots, str):
            self.roots = [self.roots]
        self.roots = [r for r in self.roots if r]
        if not self.roots:
            raise ValueError("At least one root directory is required")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.sample_size <= 0:
            raise ValueError("Quick-hash sample size must be positive")

        if self.large_file_threshold <= 0:
            raise ValueError("Large-file threshold must be positive")

        if self.workers is not None and self.workers < 1:
            raise ValueError("Worker count must be at least 1")

        if self.queue_size is not None and self.queue_size < 1:
            raise ValueError("Queue size must be at least 1")

        self.algorithm = self.algorithm.strip().lower()
        self.quick_algorithm = self.quick_algorithm.strip().lower()

    @staticmethod
    def from_human_readable(
            roots: List[str],
            min_size_str: str = "0",
            sample_size_str: str = "8K",
            large_file_threshold_str: str = "2G",
            options: Optional[ScanOptions] = None,
            mode: DetectionMode = DetectionMode.PRUNED,
            algorithm: str = "sha256",
            workers: Optional[int] = None,
            include_empty: bool = False,
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        return ScanParams(
            roots=list(roots),
            options=options or ScanOptions(),
            min_size_bytes=ConvertUtils.human_to_bytes(min_size_str),
            include_empty=include_empty,
            mode=mode,
            algorithm=algorithm,
            sample_size=ConvertUtils.human_to_bytes(sample_size_str),
            large_file_threshold=ConvertUtils.human_to_bytes(large_file_threshold_str),
            workers=workers,
        )
