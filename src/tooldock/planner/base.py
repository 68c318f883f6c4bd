"""
Planners turn an inbound message into tool calls.

The real planner is an LLM living outside this package. It only has to
return an ordered list of ``{name, arguments}``; anything it returns is
coerced and validated downstream.
"""

import json
import shlex
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

from ..tools.base import ToolContext, ToolDeclaration, ToolInvocation


class Planner(ABC):
    @abstractmethod
    async def plan(
        self,
        ctx: ToolContext,
        tools: Sequence[ToolDeclaration],
        history: Sequence[Any] = (),
    ) -> List[Any]:
        """
        Return the next batch of tool calls, or an empty list when done.

        ``history`` holds the TurnResults of earlier steps of this turn.
        """
        pass


class CommandPlanner(Planner):
    """
    A deterministic planner for development and testing.

    Understands ``/tool_name {json args}``, ``/tool_name key=value ...``
    and ``/tool_name free text`` (free text becomes ``prompt``). Plans a
    single step.
    """

    async def plan(self, ctx, tools, history=()):
        if history:
            return []
        text = (ctx.original_text or "").strip()
        if not text.startswith("/"):
            return []
        name, _, rest = text[1:].partition(" ")
        known = {t.name for t in tools}
        if name not in known:
            return [ToolInvocation(name=name)]
        return [ToolInvocation(name=name, arguments=self._parse_args(rest.strip()))]

    @staticmethod
    def _parse_args(rest: str) -> dict:
        if not rest:
            return {}
        if rest.startswith("{"):
            try:
                parsed = json.loads(rest)
            except json.JSONDecodeError:
                return {"prompt": rest}
            return parsed if isinstance(parsed, dict) else {}
        try:
            parts = shlex.split(rest)
        except ValueError:
            return {"prompt": rest}
        if parts and all("=" in p for p in parts):
            return dict(p.split("=", 1) for p in parts)
        return {"prompt": rest}


class StaticPlanner(Planner):
    """Plays back a fixed list of batches, one per step."""

    def __init__(self, batches: Sequence[Sequence[Any]] = ()):
        self.batches = [list(b) for b in batches]

    async def plan(self, ctx, tools, history=()):
        step = len(history)
        if step < len(self.batches):
            return list(self.batches[step])
        return []
