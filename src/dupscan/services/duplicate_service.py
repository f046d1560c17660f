from typing import Iterable, List

from dupscan.core.models import DuplicateGroup


class DuplicateService:
    @staticmethod
    def total_wasted_space(groups: Iterable[DuplicateGroup]) -> int:
        """Bytes that would be reclaimed by keeping one file per group."""
        return sum(g.wasted_space for g in groups)

    @staticmethod
    def redundant_paths(groups: Iterable[DuplicateGroup]) -> List[str]:
        """
        Paths of every copy beyond the first member of each group.

        Members are ordered by path, so the kept file is the one with the
        lowest path. Nothing is touched on disk.

        Args:
            groups (Iterable[DuplicateGroup]): Duplicate groups from a scan.

        Returns:
            List[str]: Paths that are redundant copies.
        """
        redundant = []
        for group in groups:
            redundant.extend(m.path for m in group.members[1:])
        return redundant

    @staticmethod
    def filter_by_min_size(groups: Iterable[DuplicateGroup], min_size: int) -> List[DuplicateGroup]:
        return [g for g in groups if g.file_size >= min_size]

    @staticmethod
    def remove_files_from_groups(groups: Iterable[DuplicateGroup], file_paths: Iterable[str]) -> List[DuplicateGroup]:
        """
        Removes files with the specified paths from all duplicate groups.
        Groups that contain fewer than 2 files after removal are discarded.
        """
        excluded = set(file_paths)
        updated_groups = []
        for group in groups:
            remaining = [m for m in group.members if m.path not in excluded]
            if len(remaining) >= 2:
                updated_groups.append(
                    DuplicateGroup(digest=group.digest, file_size=group.file_size, members=tuple(remaining))
                )
        return updated_groups
