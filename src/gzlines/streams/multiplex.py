"""
Fan-in of many gzip line streams into one pair of channels.
"""

import logging
import os
import threading
from typing import BinaryIO, Iterable, List, Optional, Union

from gzlines.channels import Channel, ChannelClosed
from gzlines.config import config
from gzlines.errors import DecompressionInitError, OpenError
from gzlines.scanner import all_gz_in_dir
from gzlines.streams.lines import lines_of_gz
from gzlines.streams.stream import LineStream

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def multiplex_gz_lines(*paths: PathLike,
                       line_buffer_length_factor: Optional[int] = None) -> LineStream:
    """
    Stream lines from a pool of gzip files without guaranteed order.
    
    Each file is read by its own thread. Lines of one file keep their
    order; lines of different files interleave arbitrarily. A file that
    fails to decompress puts one error on ``errors`` and the other files
    carry on. Both channels close once every file is finished.
    
    All files are opened before any thread starts. If one cannot be
    opened, the ones already opened are closed again and OpenError is
    raised.
    
    Args:
        *paths: Gzip files to read
        line_buffer_length_factor: Overrides ``config.line_buffer_length_factor``
        
    Returns:
        LineStream over the combined lines and errors
        
    Raises:
        OpenError: If any path cannot be opened
    """
    # Fail on a bad factor before touching the filesystem
    config.resolve_max_line_length(line_buffer_length_factor)
    
    opened = _open_all(paths)
    lines, errors = Channel.group("lines", "errors")
    
    forwarders = []
    for path, rawf in opened:
        forwarder = threading.Thread(
            target=_send_from_file,
            args=(path, rawf, line_buffer_length_factor, lines, errors),
            name=f"gzlines-forward-{path}",
            daemon=True,
        )
        forwarders.append(forwarder)
    for forwarder in forwarders:
        forwarder.start()
    
    supervisor = threading.Thread(
        target=_close_when_done,
        args=(forwarders, lines, errors),
        name="gzlines-multiplex",
        daemon=True,
    )
    supervisor.start()
    logger.debug("Multiplexing %d files", len(opened))
    return LineStream(lines, errors, [supervisor])


def multiplex_gz_dir(directory: PathLike,
                     patterns: Optional[Iterable[str]] = None,
                     line_buffer_length_factor: Optional[int] = None) -> LineStream:
    """Multiplex every gzip file ``all_gz_in_dir`` finds in ``directory``."""
    paths = all_gz_in_dir(directory, patterns)
    return multiplex_gz_lines(*paths, line_buffer_length_factor=line_buffer_length_factor)


def _open_all(paths: Iterable[PathLike]) -> List[tuple]:
    opened = []
    for path in paths:
        path = os.fspath(path)
        try:
            rawf = open(path, "rb")
        except OSError as e:
            for _, earlier in opened:
                earlier.close()
            raise OpenError(e.strerror or str(e), path) from e
        logger.debug("Opened %s", path)
        opened.append((path, rawf))
    return opened


def _send_from_file(path: str, rawf: BinaryIO,
                    line_buffer_length_factor: Optional[int],
                    lines: Channel, errors: Channel) -> None:
    try:
        try:
            stream = lines_of_gz(rawf, line_buffer_length_factor, name=path)
        except DecompressionInitError as e:
            logger.warning("Cannot decompress %s: %s", path, e)
            errors.send(e)
            return
        
        try:
            for line, err in stream.events():
                if err is None:
                    lines.send(line)
                else:
                    logger.warning("Stream of %s ended with error: %s", path, err)
                    errors.send(err)
        finally:
            stream.close()
    except ChannelClosed:
        logger.debug("Consumer closed the multiplexed stream; stopping %s", path)
    finally:
        rawf.close()
        logger.debug("Closed %s", path)


def _close_when_done(forwarders: List[threading.Thread],
                     lines: Channel, errors: Channel) -> None:
    for forwarder in forwarders:
        forwarder.join()
    lines.try_close()
    errors.try_close()
