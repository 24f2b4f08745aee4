"""
Paired line and error channels handed to the consumer.
"""

import logging
import threading
import time
from typing import Iterator, List, Optional, Sequence, Tuple

from gzlines.channels import Channel, select
from gzlines.config import config

logger = logging.getLogger(__name__)


class LineStream:
    """
    Lines and errors produced by one or more background threads.
    
    ``lines`` carries ``bytes`` without their terminator and ``errors``
    carries at most one exception per source file. Both are unbuffered:
    a producer blocks until its value is received, so both channels must
    be consumed together. Use ``events()`` or ``collect()`` unless you
    select on the channels yourself.
    
    A consumer that stops early must call ``close()`` (or use the stream
    as a context manager); otherwise the producer threads stay blocked and
    their files stay open for the life of the process.
    """
    
    def __init__(self, lines: Channel, errors: Channel,
                 threads: Sequence[threading.Thread] = ()):
        self.lines = lines
        self.errors = errors
        self._threads = list(threads)
    
    def events(self) -> Iterator[Tuple[Optional[bytes], Optional[Exception]]]:
        """
        Yield ``(line, None)`` or ``(None, error)`` until both channels close.
        
        Example:
            for line, err in stream.events():
                if err is not None:
                    log.warning("skipping file: %s", err)
                    continue
                record = json.loads(line)
        """
        pending = [self.lines, self.errors]
        while pending:
            channel, item, ok = select(*pending)
            if not ok:
                pending.remove(channel)
            elif channel is self.lines:
                yield item, None
            else:
                yield None, item
    
    def collect(self) -> Tuple[List[bytes], List[Exception]]:
        """Drain both channels into lists."""
        lines: List[bytes] = []
        errors: List[Exception] = []
        for line, err in self.events():
            if err is None:
                lines.append(line)
            else:
                errors.append(err)
        return lines, errors
    
    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the producer threads to finish.
        
        Returns:
            True if every producer has finished
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            if deadline is None:
                thread.join()
            else:
                thread.join(max(0.0, deadline - time.monotonic()))
        return not any(thread.is_alive() for thread in self._threads)
    
    def close(self) -> None:
        """Stop consuming: release blocked producers and let them close their files."""
        self.lines.try_close()
        self.errors.try_close()
        if not self.wait(config.join_timeout):
            logger.warning("Producers still running %.1fs after close", config.join_timeout)
    
    def __enter__(self) -> 'LineStream':
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
