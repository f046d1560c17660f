"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/path_filter.py
Decides whether a path built by the walker must be skipped.

Two independent rules:
- exclude patterns: a literal string matches as a substring, a compiled regex
  matches via search() anywhere in the full path
- hidden folders: any path segment equal to a configured name excludes the path,
  so everything below a hidden folder is excluded as well

The filter holds only immutable configuration and is safe to share between threads.
"""

import os
from typing import Iterable, Tuple, FrozenSet

from dupscan.core.models import ScanOptions, PatternLike


class PathFilter:
    def __init__(self, exclude_patterns: Iterable[PatternLike] = (), hidden_folders: Iterable[str] = ()):
        patterns: Tuple[PatternLike, ...] = tuple(exclude_patterns)
        self._literals: Tuple[str, ...] = tuple(p for p in patterns if isinstance(p, str))
        self._regexes = tuple(p for p in patterns if not isinstance(p, str))
        self._hidden: FrozenSet[str] = frozenset(hidden_folders)

    @classmethod
    def from_options(cls, options: ScanOptions) -> "PathFilter":
        return cls(options.exclude_patterns, options.hidden_folders)

    def should_exclude(self, path: str) -> bool:
        """True if the path matches an exclude pattern or crosses a hidden folder."""
        if any(literal in path for literal in self._literals):
            return True
        if any(regex.search(path) for regex in self._regexes):
            return True
        if self._hidden:
            return any(part in self._hidden for part in path.split(os.sep))
        return False

    def __call__(self, path: str) -> bool:
        return self.should_exclude(path)

    def __repr__(self):
        return f"<PathFilter patterns={len(self._literals) + len(self._regexes)}, hidden={sorted(self._hidden)}>"
