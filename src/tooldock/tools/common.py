"""
Shared plumbing for capability handlers.

With an explicit provider a handler makes exactly one attempt and lets a
ProviderError propagate. Without one it walks the capability's fallback
chain starting from the tool's default provider.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from ..errors import CancelledByUser
from ..messages import message
from ..providers.base import MediaAsset, ProviderClient, ProviderHub
from ..providers.fallback import FallbackOrchestrator, try_providers
from .base import MediaUrls, Tool, ToolContext, ToolResult

logger = logging.getLogger("tooldock.tools")

_NO_PROVIDER_VALUES = {"none", "auto", "default", "any"}


class ProviderTool(Tool):
    capability: str = ""

    def __init__(self, hub: ProviderHub, orchestrator: FallbackOrchestrator):
        self.hub = hub
        self.orchestrator = orchestrator

    @property
    def normalizer(self):
        return self.hub.normalizer

    def explicit_provider(self, raw: Optional[str]) -> Optional[str]:
        key = self.normalizer.normalize(raw)
        if key in _NO_PROVIDER_VALUES:
            return None
        return key

    @staticmethod
    def check_cancelled(ctx: ToolContext):
        if ctx.is_cancelled():
            raise CancelledByUser("cancelled")

    async def call_provider(
        self,
        ctx: ToolContext,
        provider: Optional[str],
        attempt: Callable[[ProviderClient], Awaitable[Any]],
    ):
        """
        Run ``attempt(client)`` against one provider or down the chain.

        Returns ``(value, provider_key, tried)`` or a failed ToolResult
        once every provider has been exhausted.
        """
        self.check_cancelled(ctx)
        explicit = self.explicit_provider(provider)
        if explicit:
            value = await attempt(self.hub.get(explicit))
            return value, explicit, [explicit]

        async def run(key: str):
            self.check_cancelled(ctx)
            return await attempt(self.hub.get(key))

        outcome = await try_providers(
            self.orchestrator,
            self.capability or self.normalizer.capability_for(self.name) or self.name,
            run,
            first=self.normalizer.default_provider_for(self.name),
        )
        self.check_cancelled(ctx)
        if not outcome.succeeded:
            return ToolResult.fail(
                message("all_providers_failed", ctx.language),
                error_code="provider",
                providers_tried=outcome.tried,
            )
        return outcome.result, outcome.provider, outcome.tried

    def media_result(self, asset: MediaAsset, kind: str, provider: str, tried) -> ToolResult:
        return ToolResult.ok(
            data=asset.revised_prompt,
            media_urls=MediaUrls(**{kind: asset.url}),
            caption=asset.caption,
            provider=provider,
            providers_tried=list(tried),
        )

    def missing_media(self, ctx: ToolContext, kind: str) -> ToolResult:
        labels = {"he": {"image": "תמונה", "video": "וידאו", "audio": "הקלטה"}}
        label = labels.get(ctx.language, {}).get(kind, kind)
        return ToolResult.fail(message("no_media", ctx.language, media=label), error_code="validation")
