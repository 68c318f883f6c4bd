"""
Provider Clients — the seam to external capability providers.

Concrete vendor clients live outside this package; they subclass
``ProviderClient`` and override the capabilities they actually offer.
Anything not overridden raises ``ProviderError`` so the fallback chain
simply moves on.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..errors import ProviderError
from ..types import ProviderKey
from ..utils import dig

logger = logging.getLogger("tooldock.providers")


class MediaAsset(BaseModel):
    """A media file produced by a provider."""
    url: str
    caption: Optional[str] = None
    filename: Optional[str] = None
    revised_prompt: Optional[str] = None


class ProviderClient:
    """Abstract base for all capability providers."""

    provider_name: ProviderKey = ""

    def _unsupported(self, capability: str):
        raise ProviderError(
            f"{self.provider_name or type(self).__name__} does not support {capability}",
            provider=self.provider_name,
        )

    # ── Images ──

    async def generate_image(self, prompt: str) -> MediaAsset:
        self._unsupported("image generation")

    async def edit_image(self, image_url: str, prompt: str) -> MediaAsset:
        self._unsupported("image editing")

    # ── Video ──

    async def generate_video(self, prompt: str, duration: Optional[int] = None) -> MediaAsset:
        self._unsupported("video generation")

    async def image_to_video(self, image_url: str, prompt: str, duration: Optional[int] = None) -> MediaAsset:
        self._unsupported("image to video")

    async def edit_video(self, video_url: str, prompt: str) -> MediaAsset:
        self._unsupported("video editing")

    # ── Audio & text ──

    async def text_to_speech(
        self, text: str, voice_id: Optional[str] = None, language: Optional[str] = None
    ) -> MediaAsset:
        self._unsupported("text to speech")

    async def transcribe(self, audio_url: str, language: Optional[str] = None) -> str:
        self._unsupported("transcription")

    async def translate(self, text: str, target_language: str) -> str:
        self._unsupported("translation")

    async def clone_voice(self, sample_url: str, name: str) -> str:
        self._unsupported("voice cloning")

    async def delete_voice(self, voice_id: str) -> None:
        self._unsupported("voice deletion")

    # ── Async jobs ──

    async def submit_job(self, kind: str, payload: Dict[str, Any], callback_url: str) -> str:
        """Start a callback-completed job and return the provider's job id."""
        self._unsupported(f"async {kind} jobs")

    def translate_callback(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Turn a provider webhook payload into a ToolResult-shaped dict.

        Returns None for intermediate callbacks that do not finish the job.
        """
        return generic_callback_result(payload)


# ─── Generic Callback Translation ────────────────────────────────

PENDING_STATES = {"pending", "queued", "processing", "running", "in_progress", "submitted"}
FAILED_STATES = {"failed", "error", "cancelled", "canceled", "rejected"}


def generic_callback_result(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Best-effort translation of a ``{status, error, data: {..._url}}`` envelope.
    """
    status = str(dig(payload, "status") or dig(payload, "data.status") or "").strip().lower()
    if status in PENDING_STATES:
        return None

    error = dig(payload, "error") or dig(payload, "data.error")
    if error or status in FAILED_STATES:
        return {"success": False, "error": str(error or status)}

    media: Dict[str, str] = {}
    for kind in ("image", "video", "audio"):
        url = dig(payload, f"data.{kind}_url") or dig(payload, f"{kind}_url")
        if url:
            media[kind] = str(url)
    return {
        "success": True,
        "data": dig(payload, "data.text") or dig(payload, "result"),
        "media_urls": media or None,
    }


class ProviderHub:
    """Name → client lookup shared by every tool handler."""

    def __init__(self, clients: Optional[Dict[str, ProviderClient]] = None, normalizer=None):
        from .normalizer import ProviderNormalizer

        self.normalizer = normalizer or ProviderNormalizer()
        self._clients: Dict[ProviderKey, ProviderClient] = {}
        for key, client in (clients or {}).items():
            self.register(key, client)

    def register(self, key: str, client: ProviderClient):
        canonical = self.normalizer.normalize(key)
        if not client.provider_name:
            client.provider_name = canonical
        self._clients[canonical] = client

    def get(self, key: Optional[str]) -> ProviderClient:
        canonical = self.normalizer.normalize(key)
        client = self._clients.get(canonical) if canonical else None
        if client is None:
            raise ProviderError(f"No client configured for provider '{key}'", provider=canonical)
        return client

    def has(self, key: Optional[str]) -> bool:
        canonical = self.normalizer.normalize(key)
        return bool(canonical) and canonical in self._clients

    def list_names(self):
        return list(self._clients.keys())
