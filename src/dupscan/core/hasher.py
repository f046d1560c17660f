"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements content fingerprinting using pluggable hash algorithms.

- quick hash: head sample + tail sample fed into one hash instance. A candidate
  filter only; two files can share it and still differ in the middle.
- full hash: digest of the whole byte stream. Small files are read in one go,
  files at or above the large-file threshold are always streamed in fixed chunks
  so peak memory does not depend on file size.

Any OSError while opening or reading is raised as HashIOError for that file only.
"""

import hashlib
import logging
import os
from typing import Dict, Optional

import xxhash

from dupscan.core.models import FileDescriptor, HashResult, HashKind, PipelineConfig
from dupscan.core.interfaces import Hasher, HashAlgorithm, HashState
from dupscan.core.errors import HashIOError

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxh64"

    def new(self) -> HashState:
        return xxhash.xxh64()

    def hash(self, data: bytes) -> bytes:
        return xxhash.xxh64(data).digest()


class SHA256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self) -> HashState:
        return hashlib.sha256()

    def hash(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()


class Blake2bAlgorithmImpl(HashAlgorithm):
    name = "blake2b"

    def new(self) -> HashState:
        return hashlib.blake2b()

    def hash(self, data: bytes) -> bytes:
        return hashlib.blake2b(data).digest()


ALGORITHMS: Dict[str, type] = {
    XXHashAlgorithmImpl.name: XXHashAlgorithmImpl,
    SHA256AlgorithmImpl.name: SHA256AlgorithmImpl,
    Blake2bAlgorithmImpl.name: Blake2bAlgorithmImpl,
}


def get_algorithm(name: str) -> HashAlgorithm:
    try:
        return ALGORITHMS[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown hash algorithm '{name}'. Choose from: {', '.join(sorted(ALGORITHMS))}")


class HasherImpl(Hasher):
    """
    Computes quick and full digests of files on disk.
    """

    def __init__(
        self,
        algorithm: Optional[HashAlgorithm] = None,
        quick_algorithm: Optional[HashAlgorithm] = None,
        sample_size: int = PipelineConfig.QUICK_SAMPLE_SIZE,
        large_file_threshold: int = PipelineConfig.LARGE_FILE_THRESHOLD,
        chunk_size: int = PipelineConfig.STREAM_CHUNK_SIZE,
    ):
        if sample_size <= 0 or large_file_threshold <= 0 or chunk_size <= 0:
            raise ValueError("Sample size, threshold and chunk size must be positive")
        self.algorithm = algorithm or SHA256AlgorithmImpl()
        self.quick_algorithm = quick_algorithm or XXHashAlgorithmImpl()
        self.sample_size = sample_size
        self.large_file_threshold = large_file_threshold
        self.chunk_size = chunk_size

    def quick_hash(self, path: str, sample_size: Optional[int] = None, size: Optional[int] = None) -> bytes:
        """
        Hash of the first `sample_size` bytes plus, for larger files, the last
        `sample_size` bytes. For files not larger than the sample this is the
        hash of the whole file. Head and tail overlap when the file is only
        slightly larger than the sample.
        """
        sample = sample_size or self.sample_size
        try:
            if size is None:
                size = os.stat(path).st_size
            state = self.quick_algorithm.new()
            with open(path, 'rb') as f:
                state.update(f.read(sample))
                if size > sample:
                    f.seek(max(0, size - sample))
                    state.update(f.read(sample))
            return state.digest()
        except OSError as e:
            raise HashIOError(path, e) from e

    def full_hash(self, path: str, size: Optional[int] = None) -> bytes:
        """Digest of the entire file content."""
        try:
            if size is None:
                size = os.stat(path).st_size
            if size >= self.large_file_threshold:
                return self._stream_hash(path)
            with open(path, 'rb') as f:
                return self.algorithm.hash(f.read())
        except OSError as e:
            raise HashIOError(path, e) from e

    def _stream_hash(self, path: str) -> bytes:
        logger.debug(f"Streaming hash for large file: {path}")
        state = self.algorithm.new()
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                state.update(chunk)
        return state.digest()

    def compute_quick(self, file: FileDescriptor) -> HashResult:
        digest = self.quick_hash(file.path, size=file.size)
        return HashResult(path=file.path, algorithm=self.quick_algorithm.name, digest=digest, kind=HashKind.QUICK)

    def compute_full(self, file: FileDescriptor) -> HashResult:
        digest = self.full_hash(file.path, size=file.size)
        return HashResult(path=file.path, algorithm=self.algorithm.name, digest=digest, kind=HashKind.FULL)
