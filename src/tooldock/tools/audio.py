"""
Audio & Language Tools
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from pydantic import BaseModel, Field

from ..messages import message
from ..providers.base import ProviderClient
from ..providers.fallback import try_providers
from .base import MediaUrls, ToolContext, ToolResult
from .common import ProviderTool

logger = logging.getLogger("tooldock.tools.audio")


@asynccontextmanager
async def cloned_voice(client: ProviderClient, sample_url: str, name: Optional[str] = None):
    """
    Clone a voice for the duration of the block and always delete it.

    Cloned voices count against a small account quota, so a failed
    delete is logged loudly but never changes the block's outcome.
    """
    voice_id = await client.clone_voice(sample_url, name or f"tooldock-{uuid.uuid4().hex[:8]}")
    logger.debug(f"🎙️ Cloned voice {voice_id}")
    try:
        yield voice_id
    finally:
        try:
            await client.delete_voice(voice_id)
            logger.debug(f"Deleted cloned voice {voice_id}")
        except Exception as e:
            logger.warning(f"⚠️ Could not delete cloned voice {voice_id}: {e}")


# ─── Text to speech ──────────────────────────────────────────────

class TextToSpeechArgs(BaseModel):
    text: str = Field(..., description="Text to read aloud")
    voice_id: Optional[str] = Field(None, description="Voice to use")
    language: Optional[str] = Field(None, description="Language code of the text")
    provider: Optional[str] = Field(None, description="Speech provider")


class TextToSpeechTool(ProviderTool):
    name = "text_to_speech"
    description = "Convert text into a spoken audio message."
    args_schema = TextToSpeechArgs
    capability = "speech"

    async def run(
        self,
        ctx: ToolContext,
        text: str,
        voice_id: Optional[str] = None,
        language: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> ToolResult:
        outcome = await self.call_provider(
            ctx, provider, lambda c: c.text_to_speech(text, voice_id, language or ctx.language)
        )
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "audio", key, tried)


# ─── Transcription ───────────────────────────────────────────────

class TranscribeAudioArgs(BaseModel):
    audio_url: Optional[str] = Field(None, description="Recording to transcribe; defaults to the quoted audio")
    language: Optional[str] = Field(None, description="Spoken language, if known")
    provider: Optional[str] = Field(None, description="Transcription provider")


class TranscribeAudioTool(ProviderTool):
    name = "transcribe_audio"
    description = "Transcribe a voice message or audio file to text."
    args_schema = TranscribeAudioArgs
    capability = "transcription"

    async def run(
        self,
        ctx: ToolContext,
        audio_url: Optional[str] = None,
        language: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> ToolResult:
        audio_url = audio_url or ctx.media("audio")
        if not audio_url:
            return self.missing_media(ctx, "audio")
        outcome = await self.call_provider(ctx, provider, lambda c: c.transcribe(audio_url, language))
        if isinstance(outcome, ToolResult):
            return outcome
        transcript, key, tried = outcome
        return ToolResult.ok(data=transcript, provider=key, providers_tried=list(tried))


# ─── Translation ─────────────────────────────────────────────────

class TranslateTextArgs(BaseModel):
    text: str = Field(..., description="Text to translate")
    target_language: str = Field(..., description="Language to translate into")
    provider: Optional[str] = Field(None, description="Translation provider")


class TranslateTextTool(ProviderTool):
    name = "translate_text"
    description = "Translate text into another language."
    args_schema = TranslateTextArgs
    capability = "translation"

    async def run(
        self, ctx: ToolContext, text: str, target_language: str, provider: Optional[str] = None
    ) -> ToolResult:
        outcome = await self.call_provider(ctx, provider, lambda c: c.translate(text, target_language))
        if isinstance(outcome, ToolResult):
            return outcome
        translated, key, tried = outcome
        return ToolResult.ok(
            data=translated,
            provider=key,
            providers_tried=list(tried),
            target_language=target_language,
        )


class TranslateAndSpeakArgs(BaseModel):
    text: str = Field(..., description="Text to translate and read aloud")
    target_language: str = Field(..., description="Language to translate into")
    voice_id: Optional[str] = Field(None, description="Voice to use")
    clone_voice: bool = Field(False, description="Speak in the voice of the quoted recording")


class TranslateAndSpeakTool(ProviderTool):
    """
    Translation goes down the translation chain; speech always uses the
    tool's speech provider, optionally with a temporary cloned voice.
    """
    name = "translate_and_speak"
    description = "Translate text and send it as a voice message."
    args_schema = TranslateAndSpeakArgs
    capability = "speech"

    async def run(
        self,
        ctx: ToolContext,
        text: str,
        target_language: str,
        voice_id: Optional[str] = None,
        clone_voice: bool = False,
    ) -> ToolResult:
        translation = await self._translate(ctx, text, target_language)
        if isinstance(translation, ToolResult):
            return translation
        translated, translator = translation
        self.check_cancelled(ctx)

        speaker_key = self.normalizer.default_provider_for(self.name)
        speaker = self.hub.get(speaker_key)
        sample_url = ctx.media("audio") if clone_voice else None

        if sample_url:
            async with cloned_voice(speaker, sample_url) as cloned_id:
                self.check_cancelled(ctx)
                asset = await speaker.text_to_speech(translated, cloned_id, target_language)
        else:
            asset = await speaker.text_to_speech(translated, voice_id, target_language)

        return ToolResult.ok(
            data=translated,
            media_urls=MediaUrls(audio=asset.url),
            provider=speaker_key,
            translated_by=translator,
            target_language=target_language,
        )

    async def _translate(self, ctx: ToolContext, text: str, target_language: str):
        async def attempt(key: str):
            return await self.hub.get(key).translate(text, target_language)

        outcome = await try_providers(
            self.orchestrator,
            "translation",
            attempt,
            first=self.normalizer.default_provider_for("translate_text"),
        )
        if not outcome.succeeded:
            return ToolResult.fail(
                message("all_providers_failed", ctx.language),
                error_code="provider",
                providers_tried=outcome.tried,
            )
        return outcome.result, outcome.provider
