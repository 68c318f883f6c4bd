"""Image and video editing tools; the source media defaults to what the user quoted."""

from typing import Optional

from pydantic import BaseModel, Field

from .base import ToolContext, ToolResult
from .common import ProviderTool
from .creation import PROVIDER_HINT


class EditImageArgs(BaseModel):
    prompt: str = Field(..., description="What to change")
    image_url: Optional[str] = Field(None, description="Image to edit; defaults to the quoted image")
    provider: Optional[str] = Field(None, description=PROVIDER_HINT)


class EditImageTool(ProviderTool):
    name = "edit_image"
    description = "Edit an image according to an instruction."
    args_schema = EditImageArgs
    capability = "image"

    async def run(
        self, ctx: ToolContext, prompt: str, image_url: Optional[str] = None, provider: Optional[str] = None
    ) -> ToolResult:
        image_url = image_url or ctx.media("image")
        if not image_url:
            return self.missing_media(ctx, "image")
        outcome = await self.call_provider(ctx, provider, lambda c: c.edit_image(image_url, prompt))
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "image", key, tried)


class EditVideoArgs(BaseModel):
    prompt: str = Field(..., description="What to change")
    video_url: Optional[str] = Field(None, description="Video to edit; defaults to the quoted video")
    provider: Optional[str] = Field(None, description=PROVIDER_HINT)


class EditVideoTool(ProviderTool):
    name = "edit_video"
    description = "Edit a video according to an instruction."
    args_schema = EditVideoArgs
    capability = "video"

    async def run(
        self, ctx: ToolContext, prompt: str, video_url: Optional[str] = None, provider: Optional[str] = None
    ) -> ToolResult:
        video_url = video_url or ctx.media("video")
        if not video_url:
            return self.missing_media(ctx, "video")
        outcome = await self.call_provider(ctx, provider, lambda c: c.edit_video(video_url, prompt))
        if isinstance(outcome, ToolResult):
            return outcome
        asset, key, tried = outcome
        return self.media_result(asset, "video", key, tried)
