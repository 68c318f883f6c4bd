"""
Provider Catalog

Each provider has a canonical lowercase key, a display name used in
acknowledgments, and the surface spellings (model names, brand names)
planners tend to emit for it.
"""

from pydantic import BaseModel
from typing import Dict, List


class ProviderInfo(BaseModel):
    """Metadata about a capability provider."""
    name: str
    display_name: str
    aliases: List[str] = []
    capabilities: List[str] = []


# ─── Full Provider Catalog ───────────────────────────────────────

PROVIDER_CATALOG: Dict[str, ProviderInfo] = {
    "gemini": ProviderInfo(
        name="gemini",
        display_name="Gemini",
        aliases=["google", "veo", "veo3", "veo-3", "veo 3", "google-veo3", "nano-banana"],
        capabilities=["image", "video", "translation"],
    ),
    "openai": ProviderInfo(
        name="openai",
        display_name="OpenAI",
        aliases=["sora", "sora2", "sora-2", "sora-pro", "sora-2-pro", "dall-e", "gpt-image", "chatgpt", "whisper"],
        capabilities=["image", "video", "translation", "transcription"],
    ),
    "grok": ProviderInfo(
        name="grok",
        display_name="Grok",
        aliases=["xai", "x.ai", "kling", "kling-text-to-video"],
        capabilities=["image", "video"],
    ),
    "elevenlabs": ProviderInfo(
        name="elevenlabs",
        display_name="ElevenLabs",
        aliases=["eleven", "11labs", "eleven-labs"],
        capabilities=["speech", "transcription"],
    ),
    "suno": ProviderInfo(
        name="suno",
        display_name="Suno",
        aliases=["kie", "kie.ai", "kieai"],
        capabilities=["music"],
    ),
    "runway": ProviderInfo(
        name="runway",
        display_name="Runway",
        aliases=["runwayml", "gen-4"],
        capabilities=["video"],
    ),
}


# ─── Tool → Capability / Default Provider ────────────────────────

TOOL_CAPABILITIES: Dict[str, str] = {
    "create_image": "image",
    "edit_image": "image",
    "create_video": "video",
    "image_to_video": "video",
    "edit_video": "video",
    "create_music": "music",
    "text_to_speech": "speech",
    "translate_and_speak": "speech",
    "transcribe_audio": "transcription",
    "translate_text": "translation",
}

DEFAULT_TOOL_PROVIDERS: Dict[str, str] = {
    "create_image": "gemini",
    "edit_image": "gemini",
    "create_video": "grok",
    "image_to_video": "grok",
    "edit_video": "grok",
    "create_music": "suno",
    "text_to_speech": "elevenlabs",
    "translate_and_speak": "elevenlabs",
    "transcribe_audio": "elevenlabs",
    "translate_text": "gemini",
}
