"""
ToolDock Tools Package

Tool contract, registry/execution wrapper and the built-in catalogue.
"""

from .base import (
    MediaUrls,
    ParameterSpec,
    QuotedMedia,
    Tool,
    ToolContext,
    ToolDeclaration,
    ToolInvocation,
    ToolResult,
)
from .registry import ToolRegistry
from .common import ProviderTool
from .creation import CreateImageTool, CreateMusicTool, CreateVideoTool, ImageToVideoTool
from .editing import EditImageTool, EditVideoTool
from .audio import (
    TextToSpeechTool,
    TranscribeAudioTool,
    TranslateAndSpeakTool,
    TranslateTextTool,
    cloned_voice,
)
from .chat import CreatePollTool, SendLocationTool
from .meta import RetryWithFallbackTool


def build_default_registry(hub, orchestrator, reconciler, channel) -> ToolRegistry:
    """Register the whole built-in catalogue."""
    registry = ToolRegistry(display_name=hub.normalizer.display_name)
    for tool in (
        CreateImageTool(hub, orchestrator),
        EditImageTool(hub, orchestrator),
        CreateVideoTool(hub, orchestrator),
        ImageToVideoTool(hub, orchestrator),
        EditVideoTool(hub, orchestrator),
        CreateMusicTool(hub, orchestrator, reconciler),
        TextToSpeechTool(hub, orchestrator),
        TranscribeAudioTool(hub, orchestrator),
        TranslateTextTool(hub, orchestrator),
        TranslateAndSpeakTool(hub, orchestrator),
        SendLocationTool(channel),
        CreatePollTool(channel),
    ):
        registry.register(tool)
    registry.register(RetryWithFallbackTool(registry, orchestrator))
    return registry


__all__ = [
    "MediaUrls",
    "ParameterSpec",
    "QuotedMedia",
    "Tool",
    "ToolContext",
    "ToolDeclaration",
    "ToolInvocation",
    "ToolResult",
    "ToolRegistry",
    "ProviderTool",
    "CreateImageTool",
    "CreateMusicTool",
    "CreateVideoTool",
    "ImageToVideoTool",
    "EditImageTool",
    "EditVideoTool",
    "TextToSpeechTool",
    "TranscribeAudioTool",
    "TranslateAndSpeakTool",
    "TranslateTextTool",
    "cloned_voice",
    "CreatePollTool",
    "SendLocationTool",
    "RetryWithFallbackTool",
    "build_default_registry",
]
