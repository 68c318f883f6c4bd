"""
ACK Dispatcher — status messages for a batch of tool calls.

Texts are derived from the complete batch before any call starts, so
dedup and collapse never depend on completion order. Sending is best
effort: a transport failure is logged and the tools run regardless.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from ..config.models import AckConfig
from ..providers.fallback import FallbackOrchestrator
from ..providers.normalizer import ProviderNormalizer
from ..tools.base import ToolInvocation
from ..types import ProviderKey
from .templates import BULLET, apply_provider, collapsed_ack, generic_ack, template_for

logger = logging.getLogger("tooldock.acks")

FALLBACK_TOOL = "retry_with_fallback"

# Provider values that mean "no particular provider"
_NO_PROVIDER_VALUES = {"none", "auto", "default", "any"}


def dedupe(texts: Iterable[str]) -> List[str]:
    """Drop empty and repeated texts, keeping first-seen order."""
    seen = set()
    out: List[str] = []
    for text in texts:
        if not text or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


class AckDispatcher:
    def __init__(
        self,
        normalizer: Optional[ProviderNormalizer] = None,
        orchestrator: Optional[FallbackOrchestrator] = None,
        config: Optional[AckConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.normalizer = normalizer or ProviderNormalizer()
        self.orchestrator = orchestrator
        self.config = config or AckConfig()
        self._sleep = sleep

    # ── Text derivation ──

    def resolve_provider(self, call: ToolInvocation) -> Optional[ProviderKey]:
        """
        Effective provider for an ACK: explicit argument, then the tool's
        default. The fallback meta-tool reports the provider it will try next.
        """
        args = call.arguments or {}
        if call.name == FALLBACK_TOOL:
            return self._next_fallback_provider(args)

        explicit = self._explicit(args)
        if explicit:
            return explicit
        return self.normalizer.default_provider_for(call.name)

    def _explicit(self, args: dict) -> Optional[ProviderKey]:
        for field in ("provider", "service"):
            key = self.normalizer.normalize(args.get(field))
            if key and key not in _NO_PROVIDER_VALUES:
                return key
        return None

    def _next_fallback_provider(self, args: dict) -> Optional[ProviderKey]:
        if self.orchestrator is None:
            return None
        tried = args.get("providers_tried")
        if isinstance(tried, str):
            tried = [tried]
        elif isinstance(tried, (list, tuple, set)):
            tried = [p for p in tried if isinstance(p, str)]
        else:
            tried = []
        if isinstance(args.get("provider_tried"), str):
            tried.append(args["provider_tried"])

        capability = args.get("capability")
        if not isinstance(capability, str) or not capability:
            capability = self.normalizer.capability_for(str(args.get("tool") or ""))
        if not capability:
            return None
        return self.orchestrator.next_provider(capability, tried)

    def build_ack(self, call: ToolInvocation, language: Optional[str] = None) -> str:
        if call.name in self.config.self_acknowledging:
            return ""
        template = template_for(call.name, language or self.config.language, self.config.templates)
        provider = self.resolve_provider(call)
        display = self.normalizer.display_name(provider) if provider else None
        return apply_provider(template, display)

    def build_acks(
        self,
        calls: Sequence[Any],
        language: Optional[str] = None,
        skip: Iterable[str] = (),
    ) -> List[str]:
        """One text per call, ``""`` for calls that must not be acknowledged."""
        skipped = set(skip or ())
        acks: List[str] = []
        for raw in calls:
            call = ToolInvocation.coerce(raw)
            if not call.name or call.name in skipped:
                acks.append("")
                continue
            try:
                acks.append(self.build_ack(call, language))
            except Exception as e:
                logger.warning(f"ACK for {call.name} fell back to the generic text: {e}")
                acks.append(generic_ack(language or self.config.language))
        return acks

    def collapse(self, acks: Sequence[str], language: Optional[str] = None) -> List[str]:
        """
        Dedupe, then fold the batch: 1 → as is, 2 → bulleted, 3+ → a count.
        """
        survivors = dedupe(acks)
        if not self.config.collapse or len(survivors) <= 1:
            return survivors
        if len(survivors) == 2:
            return ["\n".join(BULLET + text for text in survivors)]
        return [collapsed_ack(len(survivors), language or self.config.language)]

    def prepare(
        self,
        calls: Sequence[Any],
        language: Optional[str] = None,
        skip: Iterable[str] = (),
    ) -> List[str]:
        if not self.config.enabled:
            return []
        return self.collapse(self.build_acks(calls, language, skip), language)

    # ── Sending ──

    async def send(self, channel, chat_id: str, messages: Sequence[str], min_delay: float = 0.0) -> int:
        """
        Send messages one by one, ``min_delay`` seconds apart.

        Returns how many were delivered; failures are logged and skipped.
        """
        sent = 0
        for i, text in enumerate(messages):
            if i and min_delay > 0:
                await self._sleep(min_delay)
            try:
                await channel.send_message(chat_id, text)
                sent += 1
            except Exception as e:
                logger.error(f"❌ Failed to send ACK to {chat_id}: {e}")
        return sent

    async def acknowledge(
        self,
        channel,
        chat_id: str,
        calls: Sequence[Any],
        language: Optional[str] = None,
        skip: Iterable[str] = (),
        min_delay: float = 0.0,
    ) -> List[str]:
        """Build, collapse and send the ACKs for a batch; returns what was attempted."""
        messages = self.prepare(calls, language, skip)
        if messages:
            logger.debug(f"ACK for {chat_id}: {messages}")
            await self.send(channel, chat_id, messages, min_delay)
        return messages
