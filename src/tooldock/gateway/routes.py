"""
Gateway HTTP Routes — REST API endpoints.

Provides: health check, WhatsApp webhook, provider callbacks, task
status and cancellation, and the tool catalogue.
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..version import get_version

logger = logging.getLogger("tooldock.gateway.routes")

router = APIRouter()


def _gateway(request: Request):
    return request.app.state.gateway


async def _json_object(request: Request):
    """Parsed body if it is a JSON object, else None."""
    raw = await request.body()
    try:
        body = json.loads(raw or b"")
    except (ValueError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


# ─── Core Endpoints ──────────────────────────────────────────────

@router.get("/")
async def root():
    return {
        "status": "ok",
        "service": "tooldock-gateway",
        "version": get_version(),
    }


@router.get("/health")
async def health_check(request: Request):
    gateway = _gateway(request)
    return {
        "status": "healthy",
        "channels": list(gateway.dock.channels.keys()),
        "providers": gateway.hub.list_names(),
        "tools": gateway.registry.list_names(),
        "pending_callbacks": gateway.reconciler.in_flight,
    }


@router.get("/tools")
async def list_tools(request: Request):
    return {
        "tools": [d.model_dump() for d in _gateway(request).registry.declarations()],
    }


# ─── Channel Webhooks ────────────────────────────────────────────

@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(request: Request, background: BackgroundTasks):
    """Receive WhatsApp webhook events; messages are handled after the 200."""
    body = await _json_object(request)
    if body is None:
        return JSONResponse({"error": "invalid payload"}, status_code=400)
    whatsapp_channel = _gateway(request).dock.channels.get("whatsapp")
    if whatsapp_channel and hasattr(whatsapp_channel, "handle_webhook"):
        background.add_task(whatsapp_channel.handle_webhook, body)
    return {"status": "ok"}


@router.get("/webhooks/whatsapp")
async def whatsapp_verify(request: Request):
    """WhatsApp webhook verification challenge."""
    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge", "")

    verify_token = _gateway(request).config.channel.verify_token
    if mode == "subscribe" and token == verify_token:
        return PlainTextResponse(challenge)
    return JSONResponse({"error": "Verification failed"}, status_code=403)


# ─── Provider Callbacks ──────────────────────────────────────────

@router.post("/callbacks/{provider}")
async def provider_callback(provider: str, request: Request):
    """
    Completion webhook for async provider jobs.

    Always answers 200 once the body is a JSON object, because providers
    retry anything else; reconciliation runs in the background.
    """
    body = await _json_object(request)
    if body is None:
        logger.warning(f"Malformed callback body from {provider}")
        return JSONResponse({"status": "error", "error": "invalid payload"}, status_code=400)
    try:
        ack = _gateway(request).reconciler.handle_webhook(provider, body)
    except Exception as e:
        logger.error(f"Callback from {provider} could not be scheduled: {e}", exc_info=True)
        ack = {"status": "error"}
    return ack


# ─── Tasks ───────────────────────────────────────────────────────

@router.get("/tasks/{task_id}")
async def get_task(task_id: str, request: Request):
    task = await _gateway(request).store.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task.model_dump(mode="json")


@router.post("/tasks/{task_id}/cancel")
async def cancel_task(task_id: str, request: Request):
    gateway = _gateway(request)
    task = await gateway.store.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    cancelled = await gateway.reconciler.cancel(task_id)
    # Also stop the turn still running in that chat, if any
    turn_stopped = gateway.dock.cancel_chat(task.chat_id) if task.chat_id else False
    task = await gateway.store.get(task_id)
    return {"cancelled": cancelled, "turn_stopped": turn_stopped, "task": task.model_dump(mode="json")}
