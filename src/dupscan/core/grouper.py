"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Groups hashed files into duplicate groups and accounts for wasted space.

The full-content digest is the only grouping key. Size grouping is offered as a
pre-filter for choosing which files to hash, never as proof of duplication.
Results do not depend on input order or on how the input was split into batches.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Tuple

from dupscan.core.errors import IntegrityViolationError
from dupscan.core.interfaces import DuplicateGrouper
from dupscan.core.models import DuplicateGroup, FileDescriptor

logger = logging.getLogger(__name__)

Candidate = Tuple[FileDescriptor, bytes]


class GroupAccumulator:
    """
    Collects (descriptor, digest) pairs, possibly across many batches.
    Accumulators can be merged in any order with the same final result.
    """

    def __init__(self):
        self._partitions: Dict[bytes, Dict[str, FileDescriptor]] = defaultdict(dict)

    def add(self, descriptor: FileDescriptor, digest: bytes) -> None:
        members = self._partitions[digest]
        known = members.get(descriptor.path)
        # the same path seen twice keeps its most recent descriptor
        if known is None or _recency(descriptor) > _recency(known):
            members[descriptor.path] = descriptor

    def add_all(self, candidates: Iterable[Candidate]) -> "GroupAccumulator":
        for descriptor, digest in candidates:
            self.add(descriptor, digest)
        return self

    def merge(self, other: "GroupAccumulator") -> "GroupAccumulator":
        for digest, members in other._partitions.items():
            for descriptor in members.values():
                self.add(descriptor, digest)
        return self

    def build(self) -> Tuple[List[DuplicateGroup], List[IntegrityViolationError]]:
        groups: List[DuplicateGroup] = []
        violations: List[IntegrityViolationError] = []

        for digest, members in self._partitions.items():
            if len(members) < 2:  # unique file, no group
                continue
            sizes = {m.size for m in members.values()}
            if len(sizes) > 1:
                violations.append(IntegrityViolationError(
                    digest.hex(), {path: m.size for path, m in members.items()}
                ))
                continue
            groups.append(DuplicateGroup(digest=digest, file_size=sizes.pop(), members=tuple(members.values())))

        groups.sort(key=lambda g: (-g.wasted_space, g.digest))
        violations.sort(key=lambda v: v.hexdigest)
        return groups, violations

    def __len__(self):
        return sum(len(m) for m in self._partitions.values())


def _recency(descriptor: FileDescriptor) -> Tuple[float, float, int]:
    return descriptor.mtime, descriptor.ctime, descriptor.size


class DuplicateGrouperImpl(DuplicateGrouper):
    """
    Digest-based grouping plus the key-based pre-filters used before hashing.
    """

    def group(self, candidates: Iterable[Candidate]) -> List[DuplicateGroup]:
        groups, violations = self.partition(candidates)
        for violation in violations:
            logger.warning(str(violation))
        return groups

    def partition(self, candidates: Iterable[Candidate]) -> Tuple[List[DuplicateGroup], List[IntegrityViolationError]]:
        return GroupAccumulator().add_all(candidates).build()

    def group_by_size(self, files: Iterable[FileDescriptor]) -> Dict[int, List[FileDescriptor]]:
        """Groups files by size, keeping only sizes shared by 2+ files."""
        return self.group_by_key(files, lambda f: f.size)

    @staticmethod
    def group_by_key(files: Iterable[FileDescriptor], key_func: Callable[[FileDescriptor], Any]) -> Dict[Any, List[FileDescriptor]]:
        """
        Helper method to group files by any computed key.
        Args:
            files: Files to group
            key_func: Function that computes a hashable key from a FileDescriptor
        Returns:
            Dict[key, List[FileDescriptor]] with only keys shared by 2+ files
        """
        groups = defaultdict(list)
        skipped_files = 0
        for file in files:
            try:
                key = key_func(file)
            except Exception as e:
                logger.warning(f"Error processing {file.path}: {e}")
                skipped_files += 1
                continue
            if key is not None:
                groups[key].append(file)

        if skipped_files > 0:
            logger.warning(f"Skipped {skipped_files} files due to key computation errors")

        return {key: group for key, group in groups.items() if len(group) >= 2}

    @staticmethod
    def total_wasted_space(groups: Iterable[DuplicateGroup]) -> int:
        return sum(g.wasted_space for g in groups)
