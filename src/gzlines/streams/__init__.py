"""Line streaming from gzip files, single and multiplexed."""

from gzlines.streams.stream import LineStream
from gzlines.streams.lines import lines_of_gz, split_lines
from gzlines.streams.multiplex import multiplex_gz_lines, multiplex_gz_dir

__all__ = [
    "LineStream",
    "lines_of_gz",
    "split_lines",
    "multiplex_gz_lines",
    "multiplex_gz_dir",
]
