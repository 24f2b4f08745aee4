"""
Line streaming from a single gzip-compressed file.
"""

import gzip
import io
import logging
import threading
import zlib
from typing import BinaryIO, Iterator, Optional

from gzlines.channels import Channel, ChannelClosed
from gzlines.config import config
from gzlines.errors import DecompressionInitError, GzLinesError, LineTooLongError, ReadError
from gzlines.streams.stream import LineStream

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
GZIP_HEADER_SIZE = 10
DEFLATE = 8
RESERVED_FLAGS = 0xE0
FHCRC = 0x02
FEXTRA = 0x04
FNAME = 0x08
FCOMMENT = 0x10


def lines_of_gz(fileobj: BinaryIO,
                line_buffer_length_factor: Optional[int] = None,
                name: Optional[str] = None) -> LineStream:
    """
    Stream the lines of a gzip-compressed file from a background thread.
    
    The gzip header is checked before the thread starts; everything after
    it is decompressed lazily as lines are received. The handle is never
    closed here; it belongs to the caller.
    
    Args:
        fileobj: Binary file object positioned at the start of the gzip data
        line_buffer_length_factor: Overrides ``config.line_buffer_length_factor``
        name: Label for errors, defaults to ``fileobj.name``
        
    Returns:
        LineStream whose lines arrive in file order
        
    Raises:
        DecompressionInitError: If the gzip header is missing or invalid
    """
    max_line_length = config.resolve_max_line_length(line_buffer_length_factor)
    if name is None:
        name = getattr(fileobj, "name", None)
        if not isinstance(name, str):
            name = None
    
    reader = _open_gzip(fileobj, name)
    lines, errors = Channel.group("lines", "errors")
    thread = threading.Thread(
        target=_scan,
        args=(reader, max_line_length, lines, errors, name),
        name=f"gzlines-scan-{name or id(fileobj)}",
        daemon=True,
    )
    thread.start()
    logger.debug("Streaming lines of %s", name or fileobj)
    return LineStream(lines, errors, [thread])


def split_lines(reader: BinaryIO, max_line_length: int,
                name: Optional[str] = None) -> Iterator[bytes]:
    """
    Yield lines of a decompressed stream without their terminators.
    
    Lines end at ``\\n`` and lose one trailing ``\\r``. A final line without
    terminator is still yielded. A line whose bytes, terminator included,
    do not fit into ``max_line_length`` raises LineTooLongError.
    """
    while True:
        try:
            chunk = reader.readline(max_line_length)
        except (OSError, EOFError, zlib.error) as e:
            raise ReadError(str(e) or type(e).__name__, name) from e
        if not chunk:
            return
        if chunk.endswith(b"\n"):
            chunk = chunk[:-1]
        elif len(chunk) >= max_line_length:
            raise LineTooLongError(max_line_length, name)
        if chunk.endswith(b"\r"):
            chunk = chunk[:-1]
        yield chunk


def _scan(reader: gzip.GzipFile, max_line_length: int,
          lines: Channel, errors: Channel, name: Optional[str]) -> None:
    try:
        try:
            for line in split_lines(reader, max_line_length, name):
                lines.send(line)
        except GzLinesError as e:
            logger.debug("Stream of %s failed: %s", name, e)
            errors.send(e)
    except ChannelClosed:
        logger.debug("Consumer closed the stream of %s", name)
    finally:
        lines.try_close()
        errors.try_close()
        reader.close()


def _open_gzip(fileobj: BinaryIO, name: Optional[str]) -> gzip.GzipFile:
    """Check the whole gzip header, optional fields included, then replay it."""
    header = bytearray()
    
    def take(n: int) -> bytes:
        try:
            data = fileobj.read(n)
        except OSError as e:
            raise DecompressionInitError(f"reading gzip header: {e}", name) from e
        if len(data) < n:
            raise DecompressionInitError("unexpected end of file in gzip header", name)
        header.extend(data)
        return data
    
    def take_zero_terminated() -> None:
        while take(1) != b"\x00":
            pass
    
    fixed = take(GZIP_HEADER_SIZE)
    if fixed[:2] != GZIP_MAGIC:
        raise DecompressionInitError("not a gzip file", name)
    if fixed[2] != DEFLATE:
        raise DecompressionInitError(f"unknown compression method {fixed[2]}", name)
    flags = fixed[3]
    if flags & RESERVED_FLAGS:
        raise DecompressionInitError("reserved gzip header flags set", name)
    
    if flags & FEXTRA:
        xlen = int.from_bytes(take(2), "little")
        take(xlen)
    if flags & FNAME:
        take_zero_terminated()
    if flags & FCOMMENT:
        take_zero_terminated()
    if flags & FHCRC:
        expected = zlib.crc32(header) & 0xFFFF
        if int.from_bytes(take(2), "little") != expected:
            raise DecompressionInitError("gzip header checksum mismatch", name)
    
    return gzip.GzipFile(fileobj=_Rewound(bytes(header), fileobj), mode="rb")


class _Rewound(io.RawIOBase):
    """Replays bytes already read from ``fileobj`` before reading on."""
    
    def __init__(self, head: bytes, fileobj: BinaryIO):
        self._head = head
        self._fileobj = fileobj
    
    def readable(self) -> bool:
        return True
    
    def readinto(self, buffer) -> int:
        if self._head:
            n = min(len(buffer), len(self._head))
            buffer[:n] = self._head[:n]
            self._head = self._head[n:]
            return n
        data = self._fileobj.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n
