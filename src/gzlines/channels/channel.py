"""
Unbuffered hand-off channels for threads.

A send blocks until a receiver has taken that item, so a slow consumer
stalls its producers. Channels created together with ``Channel.group``
share one condition variable and can be waited on jointly with ``select``.
"""

import threading
import time
from collections import deque
from typing import Any, Deque, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar('T')


class ChannelClosed(Exception):
    """Raised when sending on, or closing, an already closed channel."""


class ChannelTimeout(Exception):
    """Raised when a receive or select times out."""


class Channel(Generic[T]):
    """
    A thread-safe rendezvous channel.
    
    Multiple threads may send concurrently; items are received in the
    order they were offered.
    """
    
    def __init__(self, name: Optional[str] = None,
                 condition: Optional[threading.Condition] = None):
        """
        Initialize channel.
        
        Args:
            name: Label used in repr and error messages
            condition: Condition shared with sibling channels (see ``group``)
        """
        self.name = name
        self._cond = condition or threading.Condition()
        self._pending: Deque[Tuple[int, T]] = deque()
        self._next_ticket = 0
        self._taken = set()
        self._closed = False
    
    @classmethod
    def group(cls, *names: str) -> List['Channel']:
        """Create channels sharing one condition so they can be selected on."""
        cond = threading.Condition()
        return [cls(name=name, condition=cond) for name in names]
    
    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed
    
    def send(self, item: T) -> None:
        """Offer ``item`` and block until a receiver takes it."""
        with self._cond:
            if self._closed:
                raise ChannelClosed(f"send on closed channel {self.name or ''}".rstrip())
            ticket = self._next_ticket
            self._next_ticket += 1
            self._pending.append((ticket, item))
            self._cond.notify_all()
            
            while ticket not in self._taken:
                if self._closed:
                    # Withdraw the offer; nobody will take it now
                    self._withdraw(ticket)
                    raise ChannelClosed(f"channel {self.name or ''} closed during send".rstrip())
                self._cond.wait()
            self._taken.discard(ticket)
    
    def recv(self, timeout: Optional[float] = None) -> Tuple[Optional[T], bool]:
        """
        Receive the next item.
        
        Returns:
            ``(item, True)`` for a value, ``(None, False)`` once the channel
            is closed and drained.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._pending:
                    return self._take(), True
                if self._closed:
                    return None, False
                if not _wait(self._cond, deadline):
                    raise ChannelTimeout(f"recv timed out on {self.name or 'channel'}")
    
    def close(self) -> None:
        """Close the channel; blocked senders are released with ChannelClosed."""
        with self._cond:
            if self._closed:
                raise ChannelClosed(f"close of closed channel {self.name or ''}".rstrip())
            self._closed = True
            self._cond.notify_all()
    
    def try_close(self) -> bool:
        """Close unless already closed; returns True if this call closed it."""
        with self._cond:
            if self._closed:
                return False
            self._closed = True
            self._cond.notify_all()
            return True
    
    def __iter__(self) -> Iterator[T]:
        while True:
            item, ok = self.recv()
            if not ok:
                return
            yield item
    
    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Channel {self.name or hex(id(self))} {state}>"
    
    # Callers below must hold self._cond
    
    def _take(self) -> T:
        ticket, item = self._pending.popleft()
        self._taken.add(ticket)
        self._cond.notify_all()
        return item
    
    def _withdraw(self, ticket: int) -> None:
        for entry in self._pending:
            if entry[0] == ticket:
                self._pending.remove(entry)
                return


def select(*channels: Channel, timeout: Optional[float] = None) -> Tuple[Channel, Any, bool]:
    """
    Wait until one of ``channels`` can be received from.
    
    A channel holding an item wins over a closed one, and earlier channels
    win over later ones. All channels must come from the same ``group``.
    
    Returns:
        ``(channel, item, ok)`` where ``ok`` is False if ``channel`` is closed
    """
    if not channels:
        raise ValueError("select needs at least one channel")
    cond = channels[0]._cond
    if any(ch._cond is not cond for ch in channels):
        raise ValueError("select requires channels created by Channel.group")
    
    deadline = None if timeout is None else time.monotonic() + timeout
    with cond:
        while True:
            for ch in channels:
                if ch._pending:
                    return ch, ch._take(), True
            for ch in channels:
                if ch._closed:
                    return ch, None, False
            if not _wait(cond, deadline):
                raise ChannelTimeout("select timed out")


def _wait(cond: threading.Condition, deadline: Optional[float]) -> bool:
    if deadline is None:
        cond.wait()
        return True
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        return False
    cond.wait(remaining)
    return True
