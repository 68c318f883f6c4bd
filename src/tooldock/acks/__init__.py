"""
ToolDock ACKs Package

Localized acknowledgment templates and the batch dispatcher.
"""

from .templates import apply_provider, template_for, generic_ack, collapsed_ack
from .dispatcher import AckDispatcher, dedupe

__all__ = [
    "apply_provider",
    "template_for",
    "generic_ack",
    "collapsed_ack",
    "AckDispatcher",
    "dedupe",
]
