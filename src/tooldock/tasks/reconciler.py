"""
Callback Reconciler — two-phase async provider jobs.

Phase one (``accept``) runs inside a tool handler: it creates a pending
task, submits the job with a callback URL and records the provider's
job id. Phase two (``on_external_callback``) runs when the provider
calls back, always in a background task so the webhook is acknowledged
right away.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set

from ..providers.base import ProviderHub, generic_callback_result
from ..types import TaskId
from ..utils import dig
from .models import Task
from .reconciliation import ReconciliationMap
from .store import TaskStore

logger = logging.getLogger("tooldock.tasks.reconciler")

DEFAULT_CORRELATION_PATHS = ("data.task_id", "data.taskId", "task_id", "id")

DeliveryHook = Callable[[Task], Awaitable[None]]


class CallbackReconciler:
    def __init__(
        self,
        store: TaskStore,
        mapping: ReconciliationMap,
        hub: ProviderHub,
        public_base_url: str = "http://127.0.0.1:18789",
        correlation_paths: Iterable[str] = DEFAULT_CORRELATION_PATHS,
        deliver: Optional[DeliveryHook] = None,
    ):
        self.store = store
        self.mapping = mapping
        self.hub = hub
        self.public_base_url = public_base_url.rstrip("/")
        self.correlation_paths = list(correlation_paths)
        self.deliver = deliver
        self._background: Set[asyncio.Task] = set()

    def callback_url(self, provider: str) -> str:
        return f"{self.public_base_url}/callbacks/{provider}"

    # ── Phase one ──

    async def accept(
        self,
        kind: str,
        provider: str,
        payload: Dict[str, Any],
        chat_id: Optional[str] = None,
        language: str = "en",
    ) -> TaskId:
        """
        Submit a callback-completed job and return the local task id.

        Any failure to submit or to record the job id fails the local
        task and re-raises for the execution wrapper to report.
        """
        provider_key = self.hub.normalizer.normalize(provider)
        task = await self.store.create(kind=kind, chat_id=chat_id, provider=provider_key, language=language)
        try:
            client = self.hub.get(provider_key)
            external_id = await client.submit_job(kind, payload, self.callback_url(provider_key))
            await self.mapping.register_external(external_id, task.id, provider=provider_key)
        except Exception as e:
            logger.error(f"❌ Submitting {kind} job to {provider_key} failed: {e}")
            await self.store.fail(task.id, str(e) or type(e).__name__)
            raise
        logger.info(f"📨 Task {task.id} waiting for {provider_key} job {external_id}")
        return task.id

    # ── Phase two ──

    def extract_correlation_id(self, payload: Any) -> Optional[str]:
        for path in self.correlation_paths:
            value = dig(payload, path)
            if value not in (None, ""):
                return str(value)
        return None

    def handle_webhook(self, provider: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Acknowledge a provider callback and reconcile it in the background.
        """
        external_id = self.extract_correlation_id(payload)
        if external_id is None:
            logger.warning(f"Callback from {provider} carried no job id, ignoring")
            return {"status": "ignored", "reason": "no task id"}

        job = asyncio.create_task(self.on_external_callback(provider, payload))
        self._background.add(job)
        job.add_done_callback(self._job_done)
        return {"status": "received", "task_id": external_id}

    def _job_done(self, job: asyncio.Task):
        self._background.discard(job)
        if job.cancelled():
            return
        exc = job.exception()
        if exc is not None:
            logger.error(f"Callback reconciliation crashed: {exc}", exc_info=exc)

    async def on_external_callback(self, provider: str, payload: Dict[str, Any]) -> Optional[Task]:
        """
        Match a callback to its local task and record the outcome.

        Intermediate callbacks leave the mapping in place; unknown job ids
        are logged and dropped.
        """
        external_id = self.extract_correlation_id(payload)
        if external_id is None:
            logger.warning(f"Callback from {provider} carried no job id")
            return None

        outcome = self._translate(provider, payload)
        if outcome is None:
            logger.debug(f"Intermediate {provider} callback for job {external_id}")
            return None

        task_id = await self.mapping.resolve_external(external_id)
        if task_id is None:
            logger.warning(f"⚠️ Callback for unknown {provider} job {external_id}, nothing to reconcile")
            return None

        if outcome.get("success", True):
            changed = await self.store.complete(task_id, outcome)
        else:
            changed = await self.store.fail(task_id, str(outcome.get("error") or "failed"), result=outcome)

        task = await self.store.get(task_id)
        if changed and task is not None and self.deliver is not None:
            try:
                await self.deliver(task)
            except Exception as e:
                logger.error(f"Delivering task {task_id} failed: {e}", exc_info=True)
        return task

    def _translate(self, provider: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            if self.hub.has(provider):
                return self.hub.get(provider).translate_callback(payload)
            return generic_callback_result(payload)
        except Exception as e:
            logger.error(f"Could not translate {provider} callback: {e}", exc_info=True)
            return {"success": False, "error": "unreadable callback"}

    async def cancel(self, task_id: TaskId) -> bool:
        """Cancel a pending task and tell its chat; late callbacks are then ignored."""
        if not await self.store.cancel(task_id):
            return False
        task = await self.store.get(task_id)
        if task is not None and self.deliver is not None:
            try:
                await self.deliver(task)
            except Exception as e:
                logger.error(f"Delivering cancelled task {task_id} failed: {e}", exc_info=True)
        return True

    async def drain(self, timeout: Optional[float] = None):
        """Wait for in-flight callback work, e.g. on shutdown."""
        if not self._background:
            return
        pending = list(self._background)
        logger.info(f"Draining {len(pending)} callback job(s)")
        await asyncio.wait(pending, timeout=timeout)

    @property
    def in_flight(self) -> int:
        return len(self._background)
