"""
Fallback Orchestrator — picks the next untried provider for a capability.

``next_provider`` is a pure function of (capability, tried). Retrying is
composed outside it by accumulating the tried set, which is what
``try_providers`` does for handlers that want the whole loop.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set

from ..errors import ProviderError
from ..types import Capability, ProviderKey
from .normalizer import ProviderNormalizer

logger = logging.getLogger("tooldock.providers.fallback")


class FallbackOrchestrator:
    def __init__(
        self,
        orders: Dict[Capability, List[str]],
        normalizer: Optional[ProviderNormalizer] = None,
    ):
        self.normalizer = normalizer or ProviderNormalizer()
        self._orders: Dict[Capability, tuple] = {}
        for capability, providers in (orders or {}).items():
            chain: List[ProviderKey] = []
            for p in providers:
                key = self.normalizer.normalize(p)
                if key and key not in chain:
                    chain.append(key)
            self._orders[capability] = tuple(chain)

    @classmethod
    def from_config(cls, config, normalizer: Optional[ProviderNormalizer] = None) -> "FallbackOrchestrator":
        """Build from a ProviderConfig."""
        return cls(config.fallback_order, normalizer=normalizer or ProviderNormalizer.from_config(config))

    def order_for(self, capability: Capability) -> List[ProviderKey]:
        return list(self._orders.get(capability, ()))

    def capabilities(self) -> List[Capability]:
        return sorted(self._orders)

    def next_provider(self, capability: Capability, tried: Iterable[Any] = ()) -> Optional[ProviderKey]:
        """
        First provider in the capability's order that is not in ``tried``.

        Returns None when every provider was tried or the capability has
        no configured order.
        """
        order = self._orders.get(capability)
        if not order:
            return None
        attempted = {self.normalizer.normalize(p) for p in (tried or ())}
        for provider in order:
            if provider not in attempted:
                return provider
        return None


@dataclass
class FallbackOutcome:
    """What ``try_providers`` ended up with."""
    result: Any = None
    provider: Optional[ProviderKey] = None
    tried: List[ProviderKey] = field(default_factory=list)
    errors: Dict[ProviderKey, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.provider is not None


async def try_providers(
    orchestrator: FallbackOrchestrator,
    capability: Capability,
    attempt: Callable[[ProviderKey], Awaitable[Any]],
    first: Optional[str] = None,
    tried: Iterable[str] = (),
    on_fallback: Optional[Callable[[ProviderKey], Awaitable[None]]] = None,
) -> FallbackOutcome:
    """
    Call ``attempt(provider)`` down the fallback chain until one succeeds.

    ``first`` (usually the provider the user asked for) is attempted
    before the chain even if it is not part of it. ``on_fallback`` runs
    before every attempt after the first one, e.g. to tell the user which
    provider is being tried now. A ProviderError or any exception counts
    as a failure and moves on to the next provider.
    """
    normalizer = orchestrator.normalizer
    attempted: Set[ProviderKey] = {normalizer.normalize(p) for p in tried if normalizer.normalize(p)}
    outcome = FallbackOutcome()

    candidate = normalizer.normalize(first)
    if candidate in attempted:
        candidate = None
    if candidate is None:
        candidate = orchestrator.next_provider(capability, attempted)

    while candidate is not None:
        if outcome.tried and on_fallback is not None:
            await on_fallback(candidate)
        attempted.add(candidate)
        outcome.tried.append(candidate)
        try:
            logger.debug(f"🔄 [{capability}] Trying provider: {candidate} (attempt {len(outcome.tried)})")
            outcome.result = await attempt(candidate)
            outcome.provider = candidate
            return outcome
        except ProviderError as e:
            logger.warning(f"[{capability}] Provider {candidate} failed: {e}")
            outcome.errors[candidate] = str(e)
        except Exception as e:
            logger.error(f"[{capability}] Provider {candidate} raised: {e}", exc_info=True)
            outcome.errors[candidate] = str(e)
        candidate = orchestrator.next_provider(capability, attempted)

    logger.warning(f"[{capability}] All providers exhausted: {outcome.tried}")
    return outcome
