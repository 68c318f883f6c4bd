"""
ToolDock — tool dispatch and provider fallback core for chat assistants.
"""

from .version import __version__, get_version

__all__ = ["__version__", "get_version"]
