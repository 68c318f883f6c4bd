"""
ToolDock Planner Package
"""

from .base import CommandPlanner, Planner, StaticPlanner

__all__ = ["CommandPlanner", "Planner", "StaticPlanner"]
