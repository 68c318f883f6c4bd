"""
Creation tools for images, video and music.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..messages import message
from ..tasks.reconciler import CallbackReconciler
from .base import ToolContext, ToolResult
from .common import ProviderTool

logger = logging.getLogger("tooldock.tools.creation")

PROVIDER_HINT = "Provider to use. Omit to use the default and fall back automatically."


# ─── Images ──────────────────────────────────────────────────────

class CreateImageArgs(BaseModel):
    prompt: str = Field(..., description="What the image should show")
    provider: Optional[str] = Field(None, description=PROVIDER_HINT)


class CreateImageTool(ProviderTool):
    name = "create_image"
    description = "Generate an image from a text prompt."
    args_schema = CreateImageArgs
    capability = "image"

    async def run(self, ctx: ToolContext, prompt: str, provider: Optional[str] = None) -> ToolResult:
        outcome = await self.call_provider(ctx, provider, lambda c: c.generate_image(prompt))
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "image", key, tried)


# ─── Video ───────────────────────────────────────────────────────

class CreateVideoArgs(BaseModel):
    prompt: str = Field(..., description="What the video should show")
    provider: Optional[str] = Field(None, description=PROVIDER_HINT)
    duration: Optional[int] = Field(None, ge=1, le=60, description="Length in seconds")


class CreateVideoTool(ProviderTool):
    name = "create_video"
    description = "Generate a short video from a text prompt."
    args_schema = CreateVideoArgs
    capability = "video"

    async def run(
        self, ctx: ToolContext, prompt: str, provider: Optional[str] = None, duration: Optional[int] = None
    ) -> ToolResult:
        outcome = await self.call_provider(ctx, provider, lambda c: c.generate_video(prompt, duration))
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "video", key, tried)


class ImageToVideoArgs(BaseModel):
    prompt: str = Field(..., description="How the image should move")
    image_url: Optional[str] = Field(None, description="Image to animate; defaults to the quoted image")
    provider: Optional[str] = Field(None, description=PROVIDER_HINT)
    duration: Optional[int] = Field(None, ge=1, le=60, description="Length in seconds")


class ImageToVideoTool(ProviderTool):
    name = "image_to_video"
    description = "Animate an image into a short video."
    args_schema = ImageToVideoArgs
    capability = "video"

    async def run(
        self,
        ctx: ToolContext,
        prompt: str,
        image_url: Optional[str] = None,
        provider: Optional[str] = None,
        duration: Optional[int] = None,
    ) -> ToolResult:
        image_url = image_url or ctx.media("image")
        if not image_url:
            return self.missing_media(ctx, "image")
        outcome = await self.call_provider(
            ctx, provider, lambda c: c.image_to_video(image_url, prompt, duration)
        )
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "video", key, tried)


# ─── Music ───────────────────────────────────────────────────────

class CreateMusicArgs(BaseModel):
    prompt: str = Field(..., description="Description or lyrics of the song")
    style: Optional[str] = Field(None, description="Genre or style")
    title: Optional[str] = Field(None, description="Song title")
    instrumental: bool = Field(False, description="No vocals")
    provider: Optional[str] = Field(None, description="Music provider")


class CreateMusicTool(ProviderTool):
    """
    Music takes minutes, so the job is submitted and the result arrives
    through the provider callback; the handler returns right away.
    """
    name = "create_music"
    description = "Compose a song. The audio is delivered when it is ready."
    args_schema = CreateMusicArgs
    capability = "music"

    def __init__(self, hub, orchestrator, reconciler: CallbackReconciler):
        super().__init__(hub, orchestrator)
        self.reconciler = reconciler

    async def run(
        self,
        ctx: ToolContext,
        prompt: str,
        style: Optional[str] = None,
        title: Optional[str] = None,
        instrumental: bool = False,
        provider: Optional[str] = None,
    ) -> ToolResult:
        self.check_cancelled(ctx)
        key = self.explicit_provider(provider) or self.normalizer.default_provider_for(self.name)
        payload = {
            "prompt": prompt,
            "instrumental": instrumental,
            "customMode": bool(style or title),
        }
        if style:
            payload["style"] = style
        if title:
            payload["title"] = title

        task_id = await self.reconciler.accept(
            "generate", key, payload, chat_id=ctx.chat_id, language=ctx.language
        )
        return ToolResult.ok(
            data=message("task_accepted", ctx.language),
            provider=key,
            task_id=task_id,
            pending=True,
        )
