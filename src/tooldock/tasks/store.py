"""
Async Task Store — pending → terminal status tracking.

Shared between request handlers and webhook deliveries, so every
mutation happens under one ``asyncio.Lock``. Terminal writes are first
write wins, which makes duplicate webhook delivery harmless. Finished
tasks are kept for ``retention`` seconds, then dropped.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from .models import Task, TaskStatus

logger = logging.getLogger("tooldock.tasks.store")

CANCELLED_ERROR = "cancelled"


class TaskStore:
    def __init__(self, retention: float = 24 * 3600, clock: Callable[[], float] = time.time):
        self.retention = retention
        self._clock = clock
        self._tasks: Dict[str, Task] = {}
        self._done_events: Dict[str, asyncio.Event] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    async def create(self, task_id: Optional[str] = None, **meta: Any) -> Task:
        """Register a new pending task; the id must not be in use."""
        task_id = task_id or self.new_id()
        async with self._lock:
            self._prune()
            if task_id in self._tasks:
                raise ValueError(f"Task {task_id} already exists")
            meta.setdefault("created_at", self._clock())
            task = Task(id=task_id, **meta)
            self._tasks[task_id] = task
            self._done_events[task_id] = asyncio.Event()
            logger.debug(f"Task {task_id} created ({task.kind or 'untyped'})")
            return task.model_copy(deep=True)

    async def complete(self, task_id: str, result: Optional[Dict[str, Any]] = None) -> bool:
        """Mark a task done. Returns False when it was unknown or already terminal."""
        return await self._finish(task_id, TaskStatus.DONE, result=result)

    async def fail(self, task_id: str, error: str, result: Optional[Dict[str, Any]] = None) -> bool:
        """Mark a task failed. Returns False when it was unknown or already terminal."""
        return await self._finish(task_id, TaskStatus.FAILED, result=result, error=error or "failed")

    async def cancel(self, task_id: str) -> bool:
        """Fail a task that may still be in flight."""
        return await self.fail(task_id, CANCELLED_ERROR)

    async def _finish(
        self,
        task_id: str,
        status: TaskStatus,
        result: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> bool:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.warning(f"Cannot mark unknown task {task_id} as {status.value}")
                return False
            if task.is_terminal:
                logger.info(f"Task {task_id} already {task.status.value}, ignoring {status.value}")
                return False
            task.status = status
            task.result = result
            task.error = error
            task.completed_at = self._clock()
            self._done_events[task_id].set()
            logger.info(f"Task {task_id} → {status.value}")
            return True

    async def get(self, task_id: str) -> Optional[Task]:
        async with self._lock:
            self._prune()
            task = self._tasks.get(task_id)
            return task.model_copy(deep=True) if task else None

    async def list(self, status: Optional[TaskStatus] = None) -> List[Task]:
        async with self._lock:
            self._prune()
            return [
                t.model_copy(deep=True) for t in self._tasks.values()
                if status is None or t.status == status
            ]

    async def wait(self, task_id: str, timeout: Optional[float] = None) -> Optional[Task]:
        """Block until the task is terminal (or the timeout passes)."""
        event = self._done_events.get(task_id)
        if event is None:
            return None
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass
        return await self.get(task_id)

    def _prune(self) -> None:
        cutoff = self._clock() - self.retention
        expired = [
            task_id for task_id, t in self._tasks.items()
            if t.is_terminal and t.completed_at is not None and t.completed_at < cutoff
        ]
        for task_id in expired:
            del self._tasks[task_id]
            self._done_events.pop(task_id, None)
        if expired:
            logger.info(f"🧹 Dropped {len(expired)} finished task(s) past retention")

    def __len__(self) -> int:
        return len(self._tasks)
