"""
Chat tools: actions whose output is itself a chat message.

These send through the channel directly, so they never need an ACK.
"""

import logging
import random
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .base import Tool, ToolContext, ToolResult

logger = logging.getLogger("tooldock.tools.chat")

# (lat_min, lat_max, lng_min, lng_max)
REGIONS: Dict[str, Tuple[float, float, float, float]] = {
    "world": (-55.0, 70.0, -170.0, 175.0),
    "europe": (36.0, 70.0, -10.0, 40.0),
    "israel": (29.5, 33.3, 34.3, 35.9),
    "usa": (25.0, 49.0, -124.0, -67.0),
    "japan": (31.0, 45.0, 129.5, 145.5),
}


class SendLocationArgs(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    name: Optional[str] = Field(None, description="Label shown with the pin")
    region: Optional[str] = Field(
        None, description=f"Pick a random spot in a region: {', '.join(REGIONS)}"
    )


class SendLocationTool(Tool):
    name = "send_location"
    description = "Send a location pin, either exact coordinates or a random spot in a region."
    args_schema = SendLocationArgs

    def __init__(self, channel, rng: Optional[random.Random] = None):
        self.channel = channel
        self._rng = rng or random.Random()

    async def run(
        self,
        ctx: ToolContext,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        name: Optional[str] = None,
        region: Optional[str] = None,
    ) -> ToolResult:
        if latitude is None or longitude is None:
            box = REGIONS.get((region or "world").strip().lower(), REGIONS["world"])
            latitude = round(self._rng.uniform(box[0], box[1]), 6)
            longitude = round(self._rng.uniform(box[2], box[3]), 6)

        await self.channel.send_location(ctx.chat_id, latitude, longitude, name)
        return ToolResult.ok(latitude=latitude, longitude=longitude, name=name, sent=True)


class CreatePollArgs(BaseModel):
    question: str = Field(..., description="Poll question")
    options: List[str] = Field(..., min_length=2, max_length=12, description="Answer options")
    multiple_answers: bool = Field(False, description="Allow picking more than one option")

    @field_validator("options")
    @classmethod
    def strip_options(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v if o and o.strip()]
        if len(cleaned) < 2:
            raise ValueError("a poll needs at least two options")
        return cleaned


class CreatePollTool(Tool):
    name = "create_poll"
    description = "Create a poll in the chat."
    args_schema = CreatePollArgs

    def __init__(self, channel):
        self.channel = channel

    async def run(
        self, ctx: ToolContext, question: str, options: List[str], multiple_answers: bool = False
    ) -> ToolResult:
        await self.channel.send_poll(ctx.chat_id, question, options, multiple_answers)
        return ToolResult.ok(question=question, options=options, sent=True)
