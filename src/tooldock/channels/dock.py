"""
Channel Dock — central handling of inbound chat messages.

Every channel hands its messages to ``handle_incoming_message``; the
dock asks the planner for tool calls and runs them through the bridge,
step by step, until the planner has nothing more to do.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..dispatch.bridge import PlannerBridge, TurnResult, TurnState
from ..dispatch.sender import ResultSender
from ..planner.base import Planner
from ..tools.base import QuotedMedia, ToolContext
from .base import Channel

logger = logging.getLogger("tooldock.channels.dock")


class ChannelDock:
    def __init__(
        self,
        planner: Planner,
        bridge: PlannerBridge,
        default_language: str = "en",
        max_steps: int = 5,
    ):
        self.planner = planner
        self.bridge = bridge
        self.default_language = default_language
        self.max_steps = max_steps
        self.channels: Dict[str, Channel] = {}
        self._senders: Dict[str, ResultSender] = {}
        # chat id → cancel event of the turn currently running there
        self._active: Dict[str, asyncio.Event] = {}

    def register_channel(self, name: str, channel: Channel, sender: Optional[ResultSender] = None):
        self.channels[name] = channel
        self._senders[name] = sender or ResultSender(channel, channel.min_send_delay)

    def cancel_chat(self, chat_id: str) -> bool:
        event = self._active.get(chat_id)
        if event is None:
            return False
        event.set()
        return True

    async def handle_incoming_message(
        self,
        channel_name: str,
        chat_id: str,
        user_id: str,
        text: str,
        quoted_media: Optional[QuotedMedia] = None,
        message_id: Optional[str] = None,
        language: Optional[str] = None,
        audio_already_transcribed: bool = False,
    ) -> List[TurnResult]:
        """
        Central point for all incoming messages.
        """
        channel = self.channels.get(channel_name)
        if not channel:
            logger.error(f"Channel {channel_name} not found")
            return []

        cancel_event = asyncio.Event()
        self._active[chat_id] = cancel_event
        ctx = ToolContext(
            chat_id=chat_id,
            sender_id=user_id,
            message_id=message_id,
            original_text=text,
            language=language or self.default_language,
            quoted_media=quoted_media,
            audio_already_transcribed=audio_already_transcribed,
            cancel_event=cancel_event,
        )

        state = TurnState()
        turns: List[TurnResult] = []
        sender = self._senders[channel_name]
        try:
            for step in range(self.max_steps):
                calls = await self.planner.plan(ctx, self.bridge.registry.declarations(), turns)
                if not calls:
                    break
                logger.info(f"Step {step + 1} for {chat_id}: {[getattr(c, 'name', c) for c in calls]}")
                turn = await self.bridge.run_batch(
                    calls, ctx, channel=channel, state=state, min_delay=channel.min_send_delay
                )
                turns.append(turn)
                await sender.send(chat_id, turn.segments)
                if ctx.is_cancelled():
                    break
        finally:
            if self._active.get(chat_id) is cancel_event:
                del self._active[chat_id]
        return turns
