"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error kinds raised by the scanning, hashing and grouping pipeline.

Only InvalidRootError is fatal. Hash and integrity errors are raised for a single
file or a single hash partition and are converted to warnings by the caller.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    INVALID_ROOT = "invalid-root"
    ACCESS_DENIED = "access-denied"
    IO_FAILURE = "io-failure"
    INTEGRITY_VIOLATION = "integrity-violation"


class RootProblem(Enum):
    NOT_FOUND = "not-found"
    PERMISSION_DENIED = "permission-denied"
    NOT_A_DIRECTORY = "not-a-directory"


class DupScanError(RuntimeError):
    """Base class for all pipeline errors."""
    kind: ErrorKind = ErrorKind.IO_FAILURE


class InvalidRootError(DupScanError):
    """A scan root is missing, unreadable or not a directory."""
    kind = ErrorKind.INVALID_ROOT

    def __init__(self, path: str, reason: RootProblem, detail: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = {
            RootProblem.NOT_FOUND: f"Directory does not exist: {path}",
            RootProblem.PERMISSION_DENIED: f"Permission denied: {path}",
            RootProblem.NOT_A_DIRECTORY: f"Not a directory: {path}",
        }[reason]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class HashIOError(DupScanError):
    """Reading a file for hashing failed (open error or mid-stream read error)."""
    kind = ErrorKind.IO_FAILURE

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to hash {path}: {cause}")


class IntegrityViolationError(DupScanError):
    """Files sharing one full-hash digest have different sizes."""
    kind = ErrorKind.INTEGRITY_VIOLATION

    def __init__(self, hexdigest: str, sizes: dict):
        self.hexdigest = hexdigest
        self.sizes = dict(sizes)
        listed = ", ".join(f"{path} ({size} B)" for path, size in sorted(self.sizes.items()))
        super().__init__(f"Digest {hexdigest} shared by files of different sizes: {listed}")
