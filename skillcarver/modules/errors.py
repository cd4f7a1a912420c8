"""
Custom exception classes for skillcarver.
"""

from typing import Optional


class SkillcarverError(Exception):
    """Base exception class for skillcarver errors, with an optional hint."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class ArchiveError(SkillcarverError):
    """Raised when the outer gzip stream cannot be decoded."""
    pass


class FetchError(SkillcarverError):
    """Raised when a remote tarball cannot be located or downloaded."""
    pass
