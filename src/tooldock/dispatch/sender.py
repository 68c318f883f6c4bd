"""Delivers displayable segments through a channel."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from ..messages import message
from ..tasks.models import Task, TaskStatus
from .segments import Segment, segments_from_payload

logger = logging.getLogger("tooldock.dispatch.sender")


class ResultSender:
    def __init__(
        self,
        channel,
        min_delay: float = 0.0,
        display_name: Optional[Callable[[str], str]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.channel = channel
        self.display_name = display_name or (lambda key: key.capitalize())
        self.min_delay = min_delay
        self._sleep = sleep

    async def send(self, chat_id: str, segments: Sequence[Segment]) -> int:
        """Send segments in order; a failed segment is logged and skipped."""
        sent = 0
        for i, segment in enumerate(segments):
            if i and self.min_delay > 0:
                await self._sleep(self.min_delay)
            try:
                if segment.kind == "text":
                    await self.channel.send_message(chat_id, segment.text or "")
                else:
                    await self.channel.send_media(
                        chat_id, segment.url, segment.caption, segment.filename, kind=segment.kind
                    )
                sent += 1
            except Exception as e:
                logger.error(f"❌ Failed to send {segment.kind} to {chat_id}: {e}")
        return sent

    async def deliver_task(self, task: Task):
        """Delivery hook for finished async tasks."""
        if not task.chat_id:
            logger.info(f"Task {task.id} has no chat to deliver to")
            return
        if task.status == TaskStatus.DONE:
            segments = segments_from_payload(task.result or {})
        elif task.error == "cancelled":
            segments = [Segment.text_segment(message("cancelled", task.language))]
        else:
            label = self.display_name(task.provider) if task.provider else "The service"
            segments = [Segment.text_segment(message("provider_failed", task.language, provider=label))]
        logger.info(f"📬 Delivering task {task.id} ({task.status.value}) to {task.chat_id}")
        await self.send(task.chat_id, segments)
