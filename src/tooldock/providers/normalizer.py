"""
Provider Normalizer — alias resolution and display names.

Pure lookups over tables built once at startup; every method is safe to
call concurrently and none of them raise on odd input.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..types import ProviderKey
from .catalog import DEFAULT_TOOL_PROVIDERS, PROVIDER_CATALOG, TOOL_CAPABILITIES, ProviderInfo

logger = logging.getLogger("tooldock.providers.normalizer")


def _clean(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip().lower()


class ProviderNormalizer:
    """
    Maps provider spellings to canonical keys.

    The alias table is flattened at construction so every alias points
    straight at a key that maps to itself, which keeps ``normalize``
    idempotent even when configured aliases chain.
    """

    def __init__(
        self,
        catalog: Optional[Dict[str, ProviderInfo]] = None,
        extra_aliases: Optional[Dict[str, str]] = None,
        display_names: Optional[Dict[str, str]] = None,
        tool_defaults: Optional[Dict[str, str]] = None,
        tool_capabilities: Optional[Dict[str, str]] = None,
    ):
        catalog = catalog if catalog is not None else PROVIDER_CATALOG

        raw_aliases: Dict[str, str] = {}
        for key, info in catalog.items():
            canonical = _clean(key)
            raw_aliases[canonical] = canonical
            for alias in info.aliases:
                raw_aliases[_clean(alias)] = canonical
        for alias, target in (extra_aliases or {}).items():
            raw_aliases[_clean(alias)] = _clean(target)

        self._aliases = self._flatten(raw_aliases)

        self._display: Dict[str, str] = {
            _clean(key): info.display_name for key, info in catalog.items()
        }
        for key, name in (display_names or {}).items():
            self._display[self.normalize(key)] = name

        defaults = dict(DEFAULT_TOOL_PROVIDERS)
        defaults.update(tool_defaults or {})
        self._tool_defaults: Dict[str, str] = {
            tool: self.normalize(provider) for tool, provider in defaults.items() if _clean(provider)
        }
        self._tool_capabilities = dict(TOOL_CAPABILITIES)
        self._tool_capabilities.update(tool_capabilities or {})

    @classmethod
    def from_config(cls, config) -> "ProviderNormalizer":
        """Build from a ProviderConfig."""
        return cls(
            extra_aliases=config.aliases,
            display_names=config.display_names,
            tool_defaults=config.tool_defaults,
        )

    @staticmethod
    def _flatten(aliases: Dict[str, str]) -> Dict[str, str]:
        flat: Dict[str, str] = {}
        for alias in aliases:
            seen = {alias}
            target = aliases[alias]
            while target in aliases and aliases[target] != target and target not in seen:
                seen.add(target)
                target = aliases[target]
            flat[alias] = target
        # Anything an alias resolves to is itself a fixed point
        for target in set(flat.values()):
            if flat.get(target, target) != target:
                logger.warning(f"Alias cycle around '{target}', pinning it as canonical")
            flat[target] = target
        return flat

    # ── Lookups ──

    def normalize(self, raw: Any) -> Optional[ProviderKey]:
        """Canonical key for ``raw``; unknown spellings pass through lowercased."""
        key = _clean(raw)
        if not key:
            return None
        return self._aliases.get(key, key)

    def display_name(self, key: Any) -> str:
        """Human name for a provider, else the capitalized raw key."""
        normalized = self.normalize(key)
        if not normalized:
            return ""
        if normalized in self._display:
            return self._display[normalized]
        raw = str(key).strip()
        return raw[:1].upper() + raw[1:]

    def default_provider_for(self, tool_name: str) -> Optional[ProviderKey]:
        """Static default provider for a tool, or None if it has none."""
        return self._tool_defaults.get(tool_name)

    def capability_for(self, tool_name: str) -> Optional[str]:
        return self._tool_capabilities.get(tool_name)

    def known_keys(self) -> Iterable[ProviderKey]:
        return sorted(set(self._aliases.values()))

    def aliases_for(self, key: str) -> list:
        canonical = self.normalize(key)
        return sorted(a for a, t in self._aliases.items() if t == canonical and a != canonical)
