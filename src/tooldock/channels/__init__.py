"""
ToolDock Channels Package

Channel dock and abstract channel interface.
"""

from .base import Channel
from .dock import ChannelDock

__all__ = [
    "Channel",
    "ChannelDock",
]
