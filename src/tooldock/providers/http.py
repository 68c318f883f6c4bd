"""
Callback Job Client — submits long-running jobs over HTTP.

Works with Kie.ai-style music APIs: the job is accepted immediately with a
provider task id, and the result is POSTed later to ``callback_url``.
"""

import os
import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import ProviderError
from ..utils import dig
from .base import ProviderClient

logger = logging.getLogger("tooldock.providers.http")


class CallbackJobClient(ProviderClient):
    """
    Generic async-job provider.

    ``submit_job`` POSTs ``{**payload, "callBackUrl": ...}`` to
    ``{api_url}/{kind}`` and reads the job id from ``data.taskId``.
    """

    def __init__(
        self,
        provider_name: str = "suno",
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider_name = provider_name
        self.api_url = (api_url or os.getenv("KIE_API_URL", "https://api.kie.ai/api/v1")).rstrip("/")
        self.api_token = api_token or os.getenv("KIE_API_KEY")
        self.timeout = timeout
        self._transport = transport

        if not self.api_token:
            logger.warning(f"{provider_name}: API token is not set")

    async def submit_job(self, kind: str, payload: Dict[str, Any], callback_url: str) -> str:
        url = f"{self.api_url}/{kind}"
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        body = {**payload, "callBackUrl": callback_url}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, json=body, headers=headers, timeout=self.timeout)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"{self.provider_name} rejected job: HTTP {e.response.status_code}",
                provider=self.provider_name,
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"{self.provider_name} request failed: {e}", provider=self.provider_name) from e

        if isinstance(data, dict) and data.get("code") not in (None, 200):
            raise ProviderError(
                f"{self.provider_name} error {data.get('code')}: {data.get('msg')}",
                provider=self.provider_name,
            )

        job_id = dig(data, "data.taskId") or dig(data, "data.task_id")
        if not job_id:
            raise ProviderError(f"{self.provider_name} returned no task id", provider=self.provider_name)

        logger.info(f"{self.provider_name} accepted {kind} job {job_id}")
        return str(job_id)

    def translate_callback(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        callback_type = data.get("callbackType")

        if payload.get("code") not in (None, 200) or callback_type == "error":
            return {
                "success": False,
                "error": str(payload.get("msg") or "generation failed"),
            }

        # "text" / "first" callbacks only report progress
        if callback_type not in (None, "complete"):
            return None

        tracks = data.get("data") or []
        if not tracks:
            return {"success": False, "error": "callback carried no tracks"}

        first = tracks[0]
        audio_url = (
            first.get("audio_url") or first.get("audioUrl") or first.get("url")
            or first.get("stream_audio_url")
        )
        if not audio_url:
            return {"success": False, "error": "callback carried no audio url"}

        return {
            "success": True,
            "data": first.get("title") or "",
            "media_urls": {"audio": audio_url},
            "title": first.get("title"),
            "duration": first.get("duration"),
            "lyrics": first.get("lyric") or first.get("lyrics") or first.get("prompt"),
            "total_tracks": len(tracks),
        }
