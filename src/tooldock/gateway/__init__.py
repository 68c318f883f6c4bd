"""
ToolDock Gateway Package
"""

from .startup import Gateway, build_gateway
from .server import create_app

__all__ = ["Gateway", "build_gateway", "create_app"]
