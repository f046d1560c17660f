"""
dupscan — concurrent duplicate file finder.

Core features:
- Iterative directory walk with exclusion patterns, hidden folders, depth limit
- Two detection modes: PRUNED (size → quick hash → full hash) and STREAMING (full hash while walking)
- Bounded worker pool for hashing with backpressure and cancellation
- Read-only: reports duplicates and wasted space, never deletes
- CLI with text and JSON output
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("dupscan")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    with open("pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API
from dupscan.commands import ScanCommand, find_duplicates
from dupscan.core import (
    DetectionMode, DuplicateGroup, FileDescriptor, ScanOptions, ScanParams, ScanReport, ScanStatus,
    DupScanError, InvalidRootError)
from dupscan.utils.convert_utils import ConvertUtils
from dupscan.services import DuplicateService

__all__ = [
    "ScanCommand",
    "find_duplicates",
    "DetectionMode",
    "DuplicateGroup",
    "FileDescriptor",
    "ScanOptions",
    "ScanParams",
    "ScanReport",
    "ScanStatus",
    "DupScanError",
    "InvalidRootError",
    "ConvertUtils",
    "DuplicateService",
    "__version__",
]
