"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the scanning pipeline.
Structural typing keeps the walker, hasher and grouper swappable in tests.

Key Components:
---------------
- HashAlgorithm: a named hash function usable in one shot or incrementally.
- Hasher: quick (sampled) and full content hashing of a path.
- TreeWalker: lazy enumeration of regular files under one or more roots.
- DuplicateGrouper: turns (descriptor, digest) pairs into duplicate groups.
"""

from typing import Protocol, List, Iterable, Iterator, Tuple, Optional, Callable, Union, Sequence

from dupscan.core.models import FileDescriptor, DuplicateGroup
from dupscan.core.errors import IntegrityViolationError
from dupscan.core.progress import ProgressSink


class HashState(Protocol):
    """Incremental hash object (hashlib / xxhash compatible)."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in SHA-256, BLAKE2b or xxHash without touching the hasher.
    """
    name: str

    def new(self) -> HashState:
        """Returns a fresh incremental hash object."""
        ...

    def hash(self, data: bytes) -> bytes:
        """Computes the digest of the provided byte data."""
        ...


class Hasher(Protocol):
    """Interface for sampled and full content hashing."""
    def quick_hash(self, path: str, sample_size: Optional[int] = None, size: Optional[int] = None) -> bytes: ...
    def full_hash(self, path: str, size: Optional[int] = None) -> bytes: ...


class TreeWalker(Protocol):
    def scan(
        self,
        root_paths: Union[str, Sequence[str]],
        progress_sink: Optional[ProgressSink] = None,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Iterator[FileDescriptor]:
        """
        Enumerate regular files under the roots.

        Args:
            root_paths: One root or several roots to walk.
            progress_sink: Optional callable receiving progress/warning/complete events.
            stopped_flag: Function that returns True if the walk should stop.

        Returns:
            A single-pass iterator of FileDescriptor.
        """
        ...


class DuplicateGrouper(Protocol):
    def group(self, candidates: Iterable[Tuple[FileDescriptor, bytes]]) -> List[DuplicateGroup]:
        """Group candidates by full digest, dropping unique files."""
        ...

    def partition(
        self,
        candidates: Iterable[Tuple[FileDescriptor, bytes]]
    ) -> Tuple[List[DuplicateGroup], List[IntegrityViolationError]]:
        """Same as group(), but also returns partitions rejected as integrity violations."""
        ...
