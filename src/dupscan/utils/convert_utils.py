"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size and timestamp conversions used by the CLI and report rendering.
"""
import re
import time

_SIZE_PATTERN = re.compile(r'^\s*([0-9]*\.?[0-9]+)\s*([A-Z]*)\s*$')

_UNITS = {
    '': 1, 'B': 1,
    'K': 1024, 'KB': 1024, 'KIB': 1024,
    'M': 1024 ** 2, 'MB': 1024 ** 2, 'MIB': 1024 ** 2,
    'G': 1024 ** 3, 'GB': 1024 ** 3, 'GIB': 1024 ** 3,
    'T': 1024 ** 4, 'TB': 1024 ** 4, 'TIB': 1024 ** 4,
    'P': 1024 ** 5, 'PB': 1024 ** 5, 'PIB': 1024 ** 5,
}


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to a short binary-unit string (e.g. 512B, 1.50KB, 3.20GB).
        """
        if size_bytes < 1024:
            return f"{max(size_bytes, 0)}B"

        value = float(size_bytes)
        for unit in ["KB", "MB", "GB", "TB", "PB"]:
            value /= 1024
            if value < 1024:
                return f"{value:.2f}{unit}"
        return f"{value / 1024:.2f}EB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert a human-readable size to bytes.
        Accepts '1000', '8K', '1.5GB', '2GiB' (binary multiples, case-insensitive).
        Raises ValueError for negative values or unknown units.
        """
        text = str(size_str).strip().upper()
        if text.startswith('-'):
            raise ValueError(f"Negative size not allowed: '{size_str}'")

        match = _SIZE_PATTERN.match(text)
        if not match or match.group(2) not in _UNITS:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1000, 8K, 1.5GB, 2GiB, etc."
            )
        return int(float(match.group(1)) * _UNITS[match.group(2)])

    @staticmethod
    def is_valid_size_format(size_str: str) -> bool:
        try:
            ConvertUtils.human_to_bytes(size_str)
            return True
        except ValueError:
            return False

    @staticmethod
    def timestamp_to_human(timestamp: float, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """Unix timestamp to local-time string."""
        try:
            return time.strftime(fmt, time.localtime(timestamp))
        except (OverflowError, OSError, ValueError):
            return "Invalid timestamp"
