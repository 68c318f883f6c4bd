"""
WhatsApp Channel Adapter using webhook-based approach.

Receives Meta Cloud API webhooks through the gateway and sends text,
media and location messages via the Graph API.
"""

import os
import logging
from typing import Any, Dict, Optional

import httpx

from ....errors import TransportError
from ....tools.base import QuotedMedia
from ...base import Channel

logger = logging.getLogger("tooldock.channels.whatsapp")

MEDIA_TYPES = ("image", "video", "audio")


class WhatsAppChannel(Channel):
    """
    WhatsApp channel adapter using webhooks.

    Sending raises TransportError on failure; callers decide whether
    that is worth more than a log line.
    """

    name = "whatsapp"

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        on_message=None,
        min_send_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or os.getenv(
            "WHATSAPP_API_URL",
            "https://graph.facebook.com/v18.0",
        )).rstrip("/")
        self.api_token = api_token or os.getenv("WHATSAPP_API_TOKEN")
        self.phone_number_id = phone_number_id or os.getenv("WHATSAPP_PHONE_NUMBER_ID")
        self.min_send_delay = min_send_delay
        self._on_message = on_message
        self._transport = transport

        if not self.api_token:
            logger.warning("WHATSAPP_API_TOKEN is not set")

    def set_handler(self, on_message):
        self._on_message = on_message

    async def start(self):
        """
        This channel works via webhooks, so there is nothing to start.
        """
        logger.info("WhatsApp channel started — webhook at /webhooks/whatsapp")

    async def stop(self):
        logger.info("WhatsApp channel stopped")

    # ── Sending ──

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    async def _post(self, chat_id: str, payload: Dict[str, Any]):
        url = f"{self.api_url}/{self.phone_number_id}/messages"
        body = {"messaging_product": "whatsapp", "to": chat_id, **payload}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, json=body, headers=self._headers, timeout=10)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"WhatsApp {payload.get('type')} to {chat_id} failed: {e}") from e
        logger.info(f"WhatsApp {payload.get('type')} sent to {chat_id}")

    async def send_message(self, chat_id: str, text: str):
        await self._post(chat_id, {"type": "text", "text": {"body": text}})

    async def send_media(
        self,
        chat_id: str,
        url: str,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
        kind: str = "image",
    ):
        media: Dict[str, Any] = {"link": url}
        if caption and kind != "audio":
            media["caption"] = caption
        if kind not in MEDIA_TYPES:
            kind = "document"
            if filename:
                media["filename"] = filename
        await self._post(chat_id, {"type": kind, kind: media})

    async def send_location(self, chat_id: str, latitude: float, longitude: float, name: Optional[str] = None):
        location: Dict[str, Any] = {"latitude": latitude, "longitude": longitude}
        if name:
            location["name"] = name
        await self._post(chat_id, {"type": "location", "location": location})

    # ── Receiving ──

    async def media_url(self, media_id: str) -> Optional[str]:
        """Resolve a Cloud API media id to a download URL."""
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(f"{self.api_url}/{media_id}", headers=self._headers, timeout=10)
                resp.raise_for_status()
                return resp.json().get("url")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Could not resolve WhatsApp media {media_id}: {e}")
            return None

    async def handle_webhook(self, body: dict) -> int:
        """
        Process an incoming webhook payload from Meta Cloud API.

        Returns how many messages were handed to the dock.
        """
        handled = 0
        for entry in body.get("entry", []) or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value", {}) or {}
                for message in value.get("messages", []) or []:
                    if await self._dispatch(message):
                        handled += 1
        return handled

    async def _dispatch(self, message: dict) -> bool:
        kind = message.get("type")
        chat_id = message.get("from")
        if not chat_id:
            return False

        text = ""
        quoted = None
        if kind == "text":
            text = (message.get("text") or {}).get("body", "")
        elif kind in MEDIA_TYPES:
            media = message.get(kind) or {}
            text = media.get("caption", "")
            url = media.get("link") or (await self.media_url(media["id"]) if media.get("id") else None)
            if url:
                quoted = QuotedMedia(kind=kind, url=url, caption=media.get("caption"))
        else:
            logger.debug(f"Ignoring WhatsApp {kind} message")
            return False

        logger.info(f"WhatsApp {kind} from {chat_id}: {text[:50]}...")
        if self._on_message:
            try:
                await self._on_message(
                    channel_name=self.name,
                    chat_id=chat_id,
                    user_id=chat_id,
                    text=text,
                    quoted_media=quoted,
                    message_id=message.get("id"),
                )
            except Exception as e:
                logger.error(f"Error processing WhatsApp message: {e}", exc_info=True)
        return True
