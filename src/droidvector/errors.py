"""Fatal error types raised by the conversion and archive pipelines."""
from __future__ import annotations

from typing import Optional


class DroidVectorError(ValueError):
    """Structured error with a stable code for CLI mapping."""

    code = "E_DROIDVECTOR"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class StructuralError(DroidVectorError):
    """Raised when the tree root is not a recognized container."""

    code = "E_STRUCTURE"


class SizeOverflowError(DroidVectorError):
    """Raised when an archive would not fit the 32-bit ZIP fields."""

    code = "E_ARCHIVE_SIZE"


class DuplicateEntryError(DroidVectorError):
    """Raised when two archive entries resolve to the same path."""

    code = "E_ARCHIVE_DUPLICATE"


class PathDataError(DroidVectorError):
    """Raised when path data cannot be tokenized."""

    code = "E_PATH_DATA"


__all__ = [
    "DroidVectorError",
    "StructuralError",
    "SizeOverflowError",
    "DuplicateEntryError",
    "PathDataError",
]
