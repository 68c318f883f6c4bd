"""
External-Task Reconciliation Map.

Short-lived table from provider job id to local task id. An entry is
consumed by exactly one ``resolve_external`` call; racing duplicate
webhooks for the same id see None.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from .models import ReconciliationEntry

logger = logging.getLogger("tooldock.tasks.reconciliation")


class ReconciliationMap:
    def __init__(self, ttl: float = 6 * 3600, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, ReconciliationEntry] = {}
        self._lock = asyncio.Lock()

    async def register_external(
        self, external_id: str, local_task_id: str, provider: Optional[str] = None
    ) -> ReconciliationEntry:
        """Record that ``external_id`` belongs to ``local_task_id``."""
        external_id = str(external_id)
        async with self._lock:
            self._prune()
            existing = self._entries.get(external_id)
            if existing is not None:
                if existing.local_task_id == local_task_id:
                    return existing.model_copy()
                raise ValueError(
                    f"External id {external_id} is already mapped to task {existing.local_task_id}"
                )
            entry = ReconciliationEntry(
                external_id=external_id,
                local_task_id=local_task_id,
                provider=provider,
                created_at=self._clock(),
            )
            self._entries[external_id] = entry
            logger.debug(f"Mapped {provider or 'provider'} job {external_id} → task {local_task_id}")
            return entry.model_copy()

    async def resolve_external(self, external_id: str) -> Optional[str]:
        """Pop the local task id for ``external_id``; single use."""
        async with self._lock:
            self._prune()
            entry = self._entries.pop(str(external_id), None)
            return entry.local_task_id if entry else None

    async def peek(self, external_id: str) -> Optional[ReconciliationEntry]:
        async with self._lock:
            self._prune()
            entry = self._entries.get(str(external_id))
            return entry.model_copy() if entry else None

    def _prune(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.created_at > self.ttl]
        for key in expired:
            entry = self._entries.pop(key)
            logger.warning(f"Dropping stale mapping {key} → task {entry.local_task_id} (no callback within ttl)")

    def __len__(self) -> int:
        return len(self._entries)
