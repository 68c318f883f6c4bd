"""
ToolDock Config Package

Configuration loading and models.
"""

from .models import (
    ToolDockConfig,
    GatewayConfig,
    ChannelConfig,
    AckConfig,
    ProviderConfig,
    TaskConfig,
    DispatchConfig,
    LoggingConfig,
)
from .loader import load_config

__all__ = [
    "ToolDockConfig",
    "GatewayConfig",
    "ChannelConfig",
    "AckConfig",
    "ProviderConfig",
    "TaskConfig",
    "DispatchConfig",
    "LoggingConfig",
    "load_config",
]
