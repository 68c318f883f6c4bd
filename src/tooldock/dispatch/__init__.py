"""
ToolDock Dispatch Package

Planner batches in, ordered chat segments out.
"""

from .segments import Segment, segments_from_result
from .bridge import PlannerBridge, TurnResult, TurnState
from .sender import ResultSender

__all__ = [
    "Segment",
    "segments_from_result",
    "PlannerBridge",
    "TurnResult",
    "TurnState",
    "ResultSender",
]
