"""Errors raised or delivered while streaming gzip lines."""

from typing import Optional


class GzLinesError(Exception):
    """Base class for gzip line streaming errors."""
    
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
    
    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{self.path}: {message}"
        return message


class OpenError(GzLinesError):
    """A file could not be opened during multiplex setup."""


class DecompressionInitError(GzLinesError):
    """The compressed stream does not start with a valid gzip header."""


class LineTooLongError(GzLinesError):
    """A line did not fit into the scan buffer."""
    
    def __init__(self, limit: int, path: Optional[str] = None):
        super().__init__(f"line exceeds {limit} bytes", path)
        self.limit = limit


class ReadError(GzLinesError):
    """Reading or decompressing failed after the stream had started."""
