"""
ToolDock exception hierarchy.

Handlers and collaborators raise these; the execution wrapper turns them
into ``ToolResult`` errors so a batch never aborts on a single failure.
"""

from typing import Optional


class ToolDockError(Exception):
    """Base class for all ToolDock errors."""


class ToolValidationError(ToolDockError):
    """Missing or malformed tool arguments, or an unknown tool."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        super().__init__(message)
        self.tool_name = tool_name


class ProviderError(ToolDockError):
    """A remote provider call failed or returned an error payload."""

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransportError(ToolDockError):
    """Sending a message through the chat transport failed."""


class CancelledByUser(ToolDockError):
    """A task was cancelled while its handler was still running."""
