"""
ToolDock Tasks Package

Async task tracking and provider callback reconciliation.
"""

from .models import ReconciliationEntry, Task, TaskStatus
from .store import TaskStore
from .reconciliation import ReconciliationMap
from .reconciler import CallbackReconciler

__all__ = [
    "ReconciliationEntry",
    "Task",
    "TaskStatus",
    "TaskStore",
    "ReconciliationMap",
    "CallbackReconciler",
]
