"""
Task Models
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class Task(BaseModel):
    """
    One in-flight or finished async operation.

    Leaves ``pending`` exactly once and never changes afterwards.
    """
    id: str
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: float = Field(default_factory=time.time)
    completed_at: Optional[float] = None

    # Routing metadata for the delivery path
    kind: Optional[str] = None
    chat_id: Optional[str] = None
    provider: Optional[str] = None
    language: str = "en"

    @property
    def is_terminal(self) -> bool:
        return self.status != TaskStatus.PENDING


class ReconciliationEntry(BaseModel):
    """Provider job id → local task id, created when the provider accepts a job."""
    external_id: str
    local_task_id: str
    provider: Optional[str] = None
    created_at: float = Field(default_factory=time.monotonic)
