"""
Base class for chat transports.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class Channel(ABC):
    name: str = "channel"

    # Minimum seconds between two outbound messages
    min_send_delay: float = 0.0

    @abstractmethod
    async def start(self):
        """Start receiving messages."""
        pass

    @abstractmethod
    async def stop(self):
        """Stop the channel."""
        pass

    @abstractmethod
    async def send_message(self, chat_id: str, text: str):
        """Send a text message to a chat."""
        pass

    @abstractmethod
    async def send_media(
        self,
        chat_id: str,
        url: str,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
        kind: str = "image",
    ):
        """Send an image, video or audio file by URL."""
        pass

    async def send_location(self, chat_id: str, latitude: float, longitude: float, name: Optional[str] = None):
        label = f"{name}\n" if name else ""
        await self.send_message(
            chat_id, f"📍 {label}https://maps.google.com/?q={latitude},{longitude}"
        )

    async def send_poll(self, chat_id: str, question: str, options: List[str], multiple_answers: bool = False):
        lines = [f"📊 {question}"] + [f"{i}. {option}" for i, option in enumerate(options, 1)]
        await self.send_message(chat_id, "\n".join(lines))
