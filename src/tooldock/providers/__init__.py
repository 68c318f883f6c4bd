"""
ToolDock Providers Package

Provider catalog, alias normalization, fallback ordering and the
client seam to external capability providers.
"""

from .catalog import PROVIDER_CATALOG, ProviderInfo
from .normalizer import ProviderNormalizer
from .fallback import FallbackOrchestrator, FallbackOutcome, try_providers
from .base import MediaAsset, ProviderClient, ProviderHub, generic_callback_result
from .http import CallbackJobClient

__all__ = [
    "PROVIDER_CATALOG",
    "ProviderInfo",
    "ProviderNormalizer",
    "FallbackOrchestrator",
    "FallbackOutcome",
    "try_providers",
    "MediaAsset",
    "ProviderClient",
    "ProviderHub",
    "generic_callback_result",
    "CallbackJobClient",
]
