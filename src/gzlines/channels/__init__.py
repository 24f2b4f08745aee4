"""Rendezvous channels used to hand lines and errors between threads."""

from gzlines.channels.channel import (
    Channel,
    ChannelClosed,
    ChannelTimeout,
    select,
)

__all__ = [
    "Channel",
    "ChannelClosed",
    "ChannelTimeout",
    "select",
]
