"""
Error types raised by the logfmt encoder.
"""
from typing import Any, Optional


class LogfmtError(Exception):
    """Base class for every failure raised by the encoder."""


class UsageError(LogfmtError):
    """The caller (or traversal) broke the key/value protocol."""

    def __init__(self, message: str, key: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.value = value

    def __str__(self) -> str:
        if self.key is not None:
            return f"{self.message} (key={self.key!r})"
        return self.message


class SinkError(LogfmtError):
    """The underlying byte destination failed while being written to."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class AllocationError(LogfmtError):
    """The scratch buffer could not grow."""
