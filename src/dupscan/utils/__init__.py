"""Formatting helpers shared by the CLI and reports."""

from .convert_utils import ConvertUtils

__all__ = ["ConvertUtils"]
