"""
Meta tools — calls that re-drive other tools.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..messages import message
from ..providers.fallback import FallbackOrchestrator
from .base import Tool, ToolContext, ToolResult

logger = logging.getLogger("tooldock.tools.meta")


class RetryWithFallbackArgs(BaseModel):
    tool: str = Field(..., description="The tool that failed, e.g. create_video")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Arguments of the failed call")
    providers_tried: List[str] = Field(default_factory=list, description="Providers that already failed")
    provider_tried: Optional[str] = Field(None, description="The provider that just failed")
    capability: Optional[str] = Field(None, description="Capability class, if the tool has none")


class RetryWithFallbackTool(Tool):
    """
    Re-run a failed call on the next untried provider of its capability,
    moving down the chain until one succeeds or the chain is exhausted.
    """
    name = "retry_with_fallback"
    description = "Retry a failed media request with a different provider."
    args_schema = RetryWithFallbackArgs

    def __init__(self, registry, orchestrator: FallbackOrchestrator):
        self.registry = registry
        self.orchestrator = orchestrator

    async def run(
        self,
        ctx: ToolContext,
        tool: str,
        arguments: Optional[Dict[str, Any]] = None,
        providers_tried: Optional[List[str]] = None,
        provider_tried: Optional[str] = None,
        capability: Optional[str] = None,
    ) -> ToolResult:
        normalizer = self.orchestrator.normalizer
        if tool == self.name or not self.registry.has(tool):
            return ToolResult.fail(message("unknown_tool", ctx.language, tool=tool), error_code="unknown_tool")

        capability = capability or normalizer.capability_for(tool)
        tried = [p for p in (providers_tried or []) if p]
        if provider_tried:
            tried.append(provider_tried)
        tried = [normalizer.normalize(p) for p in tried]

        while True:
            provider = self.orchestrator.next_provider(capability, tried) if capability else None
            if provider is None:
                logger.warning(f"No provider left for {tool} after {tried}")
                return ToolResult.fail(
                    message("all_providers_failed", ctx.language),
                    error_code="provider",
                    providers_tried=tried,
                )
            logger.info(f"🔄 Retrying {tool} with {provider} (tried: {tried})")
            result = await self.registry.invoke(tool, {**(arguments or {}), "provider": provider}, ctx)
            tried.append(provider)
            if result.success:
                result.providers_tried = tried
                return result
            if ctx.is_cancelled():
                return result
