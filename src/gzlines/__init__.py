"""
gzlines: iterate lines from many gzip-compressed files at once.

A typical dataset is a directory of gzip-compressed JSON-lines files.
``multiplex_gz_dir`` finds them, decompresses each in its own thread and
hands every line to the caller over one unordered channel.
"""

from gzlines.config import GzLinesConfig
from gzlines.errors import (
    GzLinesError,
    OpenError,
    DecompressionInitError,
    LineTooLongError,
    ReadError,
)
from gzlines.scanner import all_gz_in_dir
from gzlines.streams import LineStream, lines_of_gz, multiplex_gz_lines, multiplex_gz_dir

__version__ = "0.1.0"
__license__ = "CC0-1.0"

__all__ = [
    "GzLinesConfig",
    "GzLinesError",
    "OpenError",
    "DecompressionInitError",
    "LineTooLongError",
    "ReadError",
    "all_gz_in_dir",
    "LineStream",
    "lines_of_gz",
    "multiplex_gz_lines",
    "multiplex_gz_dir",
]
