"""Helpers that operate on finished duplicate groups."""

from .duplicate_service import DuplicateService

__all__ = ["DuplicateService"]
