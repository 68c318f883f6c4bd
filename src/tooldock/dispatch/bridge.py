"""
Planner-to-Tool Bridge — runs one planner batch end to end.

Per batch: acknowledge once for the whole set, execute through the
registry (in order or concurrently), and append every result's segments
so nothing a later call produces overwrites an earlier one.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Set

from ..acks.dispatcher import AckDispatcher
from ..config.models import DispatchConfig
from ..messages import message
from ..tools.base import ToolContext, ToolInvocation, ToolResult
from ..tools.registry import ToolRegistry
from .segments import Segment, segments_from_result

logger = logging.getLogger("tooldock.dispatch")

# Tools whose ACK is redundant in a given context
TRANSCRIBE_TOOL = "transcribe_audio"


@dataclass
class TurnState:
    """Bookkeeping that spans the batches of one multi-step turn."""
    acked: Set[str] = field(default_factory=set)
    executed: Set[str] = field(default_factory=set)
    succeeded_creation: Set[str] = field(default_factory=set)


@dataclass
class TurnResult:
    calls: List[ToolInvocation] = field(default_factory=list)
    results: List[ToolResult] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    acks: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return bool(self.results) and all(r.success for r in self.results)


def call_signature(call: ToolInvocation) -> str:
    return f"{call.name}:{json.dumps(call.arguments, sort_keys=True, default=str)}"


class PlannerBridge:
    def __init__(
        self,
        registry: ToolRegistry,
        acks: AckDispatcher,
        config: Optional[DispatchConfig] = None,
    ):
        self.registry = registry
        self.acks = acks
        self.config = config or DispatchConfig()

    def skip_list(self, ctx: ToolContext) -> Set[str]:
        skip = set()
        if ctx.audio_already_transcribed:
            skip.add(TRANSCRIBE_TOOL)
        return skip

    async def run_batch(
        self,
        raw_calls: Sequence[Any],
        ctx: ToolContext,
        channel=None,
        state: Optional[TurnState] = None,
        min_delay: float = 0.0,
        parallel: Optional[bool] = None,
    ) -> TurnResult:
        state = state if state is not None else TurnState()
        calls = [ToolInvocation.coerce(c) for c in raw_calls]
        turn = TurnResult(calls=calls)
        if not calls:
            return turn

        # Only earlier batches count; a batch may repeat its own calls
        blocked: dict = {}
        runnable: List[int] = []
        for i, call in enumerate(calls):
            if call.name in state.succeeded_creation:
                logger.info(f"Blocking {call.name}, it already succeeded in this turn")
                blocked[i] = ToolResult.fail(message("duplicate_call", ctx.language), error_code="duplicate")
            elif call_signature(call) in state.executed and call.name not in self.config.stochastic_tools:
                logger.info(f"Blocking duplicate call {call.name} in this turn")
                blocked[i] = ToolResult.fail(message("duplicate_call", ctx.language), error_code="duplicate")
            else:
                runnable.append(i)

        # ACK text comes from the whole batch, before anything runs
        to_ack = [calls[i] for i in runnable if self.registry.has(calls[i].name)]
        skip = self.skip_list(ctx) | state.acked
        if channel is not None and to_ack:
            turn.acks = await self.acks.acknowledge(
                channel, ctx.chat_id, to_ack, ctx.language, skip=skip, min_delay=min_delay
            )
        state.acked.update(c.name for c in to_ack)

        run_parallel = self.config.parallel if parallel is None else parallel
        if run_parallel:
            executed = await asyncio.gather(
                *(self.registry.invoke(calls[i].name, calls[i].arguments, ctx) for i in runnable)
            )
        else:
            executed = []
            for i in runnable:
                executed.append(await self.registry.invoke(calls[i].name, calls[i].arguments, ctx))
        by_index = dict(zip(runnable, executed))
        by_index.update(blocked)

        for i, result in zip(runnable, executed):
            state.executed.add(call_signature(calls[i]))
            if result.success and calls[i].name in self.config.creation_tools:
                state.succeeded_creation.add(calls[i].name)

        for i in range(len(calls)):
            result = by_index[i]
            turn.results.append(result)
            turn.segments.extend(segments_from_result(result))

        ok = sum(1 for r in turn.results if r.success)
        logger.info(f"Batch for {ctx.chat_id}: {ok}/{len(calls)} succeeded, {len(turn.segments)} segment(s)")
        return turn
