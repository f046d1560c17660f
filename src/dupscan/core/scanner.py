"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements iterative directory traversal.
Features:
- Explicit (path, depth) work list processed as a stack: no recursion, so tree
  depth never grows the call stack
- Streams FileDescriptor objects as they are found instead of building one list
- Applies the PathFilter to every entry and prunes excluded subtrees
- Skips symbolic links unless follow_symlinks is set
- Unreadable directories and failing stats become warnings, never scan failures
"""

import errno
import logging
import os
import time
from typing import Callable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from dupscan.core.errors import InvalidRootError, RootProblem
from dupscan.core.interfaces import TreeWalker
from dupscan.core.models import FileDescriptor, ScanOptions, Stage, is_directory, is_regular_file
from dupscan.core.path_filter import PathFilter
from dupscan.core.progress import (
    CompleteEvent, ProgressEvent, ProgressReporter, ProgressSink, ScanCounters
)

logger = logging.getLogger(__name__)

_SILENT_ERRNOS = (errno.EACCES, errno.EPERM)


class TreeWalkerImpl(TreeWalker):
    """
    Walks one or more directory trees and yields every regular file.

    Attributes:
        options: Immutable walk configuration (symlinks, depth, filters, progress intervals)
        path_filter: Exclusion rules applied to each entry's full path
        counters: Counters of the most recent scan() call
    """

    def __init__(self, options: Optional[ScanOptions] = None, path_filter: Optional[PathFilter] = None):
        self.options = options or ScanOptions()
        self.path_filter = path_filter or PathFilter.from_options(self.options)
        self.counters = ScanCounters()

    def scan(
        self,
        root_paths: Union[str, Sequence[str]],
        progress_sink: Optional[ProgressSink] = None,
        stopped_flag: Optional[Callable[[], bool]] = None,
        counters: Optional[ScanCounters] = None
    ) -> Iterator[FileDescriptor]:
        """
        Validates the roots right away, then returns a lazy single-pass iterator.
        Raises InvalidRootError before any event is emitted if a root is unusable.
        """
        if isinstance(root_paths, (str, os.PathLike)):
            root_paths = [root_paths]
        if not root_paths:
            raise ValueError("At least one root path is required")

        roots = self._normalize_roots([self._validate_root(r) for r in root_paths])
        reporter = ProgressReporter(progress_sink, counters)
        self.counters = reporter.counters
        return self._walk(roots, reporter, stopped_flag)

    @staticmethod
    def _validate_root(root) -> str:
        path = os.path.abspath(os.fspath(root))
        try:
            st = os.stat(path)
        except FileNotFoundError:
            logger.error(f"Directory does not exist: {path}")
            raise InvalidRootError(path, RootProblem.NOT_FOUND)
        except PermissionError as e:
            raise InvalidRootError(path, RootProblem.PERMISSION_DENIED, e.strerror)
        except OSError as e:
            raise InvalidRootError(path, RootProblem.NOT_FOUND, e.strerror)

        if not is_directory(st):
            raise InvalidRootError(path, RootProblem.NOT_A_DIRECTORY)
        if not os.access(path, os.R_OK | os.X_OK):
            raise InvalidRootError(path, RootProblem.PERMISSION_DENIED)
        return path

    @staticmethod
    def _normalize_roots(roots: List[str]) -> List[str]:
        """Drop repeated roots and roots nested inside another root, keeping order."""
        result = []
        for root in roots:
            covered = any(
                root.startswith(other.rstrip(os.sep) + os.sep)
                for other in roots if other != root
            )
            if root in result or covered:
                logger.debug(f"Skipping root already covered by another root: {root}")
                continue
            result.append(root)
        return result

    def _walk(
        self,
        roots: List[str],
        reporter: ProgressReporter,
        stopped_flag: Optional[Callable[[], bool]]
    ) -> Iterator[FileDescriptor]:
        opts = self.options
        counters = reporter.counters
        stack: List[Tuple[str, int]] = [(root, 0) for root in reversed(roots)]
        visited: Set[Tuple[int, int]] = set()
        seen_files: Set[Tuple[int, int]] = set()
        emitted = 0
        cancelled = False
        if opts.follow_symlinks:
            for root in roots:
                try:
                    st = os.stat(root)
                except OSError:
                    continue
                visited.add((st.st_dev, st.st_ino))

        logger.debug(f"Starting walk of {roots} (max_depth={opts.max_depth}, follow_symlinks={opts.follow_symlinks})")
        start_time = time.time()

        while stack:
            if stopped_flag and stopped_flag():
                logger.debug("Walk interrupted by user")
                cancelled = True
                break

            current, depth = stack.pop()
            if opts.max_depth is not None and depth > opts.max_depth:
                continue

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                reporter.warning(current, f"Could not read directory {current}: {e.strerror or e}")
                continue

            dirs = counters.add_dir()
            if dirs % opts.dir_progress_interval == 0:
                reporter.emit(self._progress(counters, current, len(stack)))

            for entry in entries:
                if stopped_flag and stopped_flag():
                    cancelled = True
                    break

                full_path = os.path.join(current, entry.name)
                if self.path_filter.should_exclude(full_path):
                    continue

                try:
                    if entry.is_symlink() and not opts.follow_symlinks:
                        logger.debug(f"Skipping symbolic link: {full_path}")
                        continue
                    st = os.stat(full_path)
                except OSError as e:
                    if e.errno in _SILENT_ERRNOS:
                        logger.debug(f"Access denied, skipping: {full_path}")
                    else:
                        reporter.warning(full_path, f"Could not access {full_path}: {e.strerror or e}")
                    continue

                if is_directory(st):
                    if opts.follow_symlinks:
                        # links can point back at an ancestor
                        key = (st.st_dev, st.st_ino)
                        if key in visited:
                            logger.debug(f"Directory already visited, skipping: {full_path}")
                            continue
                        visited.add(key)
                    stack.append((full_path, depth + 1))
                elif is_regular_file(st):
                    if opts.follow_symlinks:
                        # a link and its target are one file on disk
                        key = (st.st_dev, st.st_ino)
                        if key in seen_files:
                            logger.debug(f"File already emitted under another name, skipping: {full_path}")
                            continue
                        seen_files.add(key)
                    descriptor = FileDescriptor.from_stat(full_path, st)
                    files = counters.add_file()
                    emitted += 1
                    if files % opts.file_progress_interval == 0:
                        reporter.emit(self._progress(counters, current, len(stack)))
                    yield descriptor

            if cancelled:
                break

        elapsed = time.time() - start_time
        logger.debug(f"Walk finished in {elapsed:.2f}s: {counters.processed_dirs} dirs, {emitted} files")

        reporter.emit(CompleteEvent(
            stage=Stage.WALK.value,
            processed_dirs=counters.processed_dirs,
            processed_files=counters.processed_files,
            total_files=emitted,
            cancelled=cancelled,
        ))

    @staticmethod
    def _progress(counters: ScanCounters, current: str, queue_depth: int) -> ProgressEvent:
        return ProgressEvent(
            stage=Stage.WALK.value,
            processed_dirs=counters.processed_dirs,
            processed_files=counters.processed_files,
            current_path=current,
            queue_depth=queue_depth,
        )
