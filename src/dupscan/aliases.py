from dupscan.core.hasher import ALGORITHMS
from dupscan.core.models import DetectionMode

MODE_ALIASES = {
    "pruned": DetectionMode.PRUNED,
    "streaming": DetectionMode.STREAMING,
}

MODE_CHOICES = list(MODE_ALIASES.keys())

MODE_HELP_TEXT = (
    "Detection strategy:\n"
    f"  pruned     : {DetectionMode.PRUNED.description}\n"
    f"  streaming  : {DetectionMode.STREAMING.description}\n"
    "Default: pruned"
)

ALGORITHM_CHOICES = sorted(ALGORITHMS.keys())

ALGORITHM_HELP_TEXT = (
    "Full-content hash algorithm:\n"
    "  sha256   : cryptographic, default\n"
    "  blake2b  : cryptographic, usually faster than sha256\n"
    "  xxh64    : non-cryptographic, fastest"
)

EPILOG_TEXT = """
Examples:
  Find duplicates in one folder
  %(prog)s -i ~/Downloads

  Scan two folders, skip node_modules and .git, ignore files below 1MB
  %(prog)s -i ~/Photos /mnt/backup --hidden node_modules .git --min-size 1M

  Machine-readable report for scripts
  %(prog)s -i ~/Music --json > report.json

  Only print the redundant copies, one path per line
  %(prog)s -i ~/Music --list-redundant -q
"""
