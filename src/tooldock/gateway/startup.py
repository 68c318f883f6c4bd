"""
Gateway Startup — builds and wires all core services.

Everything the HTTP surface needs lives on one ``Gateway`` object that
is created once and stored on ``app.state``. The task store and the
reconciliation map are created here and shared by the tool that
accepts async jobs and the webhook that completes them.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import FastAPI

from ..acks.dispatcher import AckDispatcher
from ..channels.base import Channel
from ..channels.dock import ChannelDock
from ..channels.plugins.whatsapp.adapter import WhatsAppChannel
from ..config.models import ToolDockConfig
from ..dispatch.bridge import PlannerBridge
from ..dispatch.sender import ResultSender
from ..planner.base import CommandPlanner, Planner
from ..providers.base import ProviderClient, ProviderHub
from ..providers.fallback import FallbackOrchestrator
from ..providers.http import CallbackJobClient
from ..providers.normalizer import ProviderNormalizer
from ..tasks.reconciler import CallbackReconciler
from ..tasks.reconciliation import ReconciliationMap
from ..tasks.store import TaskStore
from ..tools import build_default_registry
from ..tools.registry import ToolRegistry
from ..utils import setup_logging

logger = logging.getLogger("tooldock.gateway")


@dataclass
class Gateway:
    config: ToolDockConfig
    normalizer: ProviderNormalizer
    orchestrator: FallbackOrchestrator
    hub: ProviderHub
    store: TaskStore
    mapping: ReconciliationMap
    reconciler: CallbackReconciler
    channel: Channel
    sender: ResultSender
    acks: AckDispatcher
    registry: ToolRegistry
    bridge: PlannerBridge
    planner: Planner
    dock: ChannelDock


def build_gateway(
    config: Optional[ToolDockConfig] = None,
    clients: Optional[Dict[str, ProviderClient]] = None,
    channel: Optional[Channel] = None,
    planner: Optional[Planner] = None,
) -> Gateway:
    """
    Wire every service from a config.

    ``clients`` are the provider clients (key or alias → client). When
    none are given only the callback job client for music is set up.
    """
    config = config or ToolDockConfig()

    normalizer = ProviderNormalizer.from_config(config.providers)
    orchestrator = FallbackOrchestrator.from_config(config.providers, normalizer=normalizer)
    if clients is None:
        clients = {"suno": CallbackJobClient("suno")}
    hub = ProviderHub(clients, normalizer=normalizer)

    if channel is None:
        channel = WhatsAppChannel(
            api_url=config.channel.api_url,
            api_token=config.channel.api_token,
            phone_number_id=config.channel.phone_number_id,
            min_send_delay=config.channel.min_send_delay,
        )
    sender = ResultSender(channel, channel.min_send_delay, display_name=normalizer.display_name)

    store = TaskStore(retention=config.tasks.task_retention)
    mapping = ReconciliationMap(ttl=config.tasks.reconciliation_ttl)
    reconciler = CallbackReconciler(
        store,
        mapping,
        hub,
        public_base_url=config.gateway.public_base_url,
        correlation_paths=config.tasks.correlation_paths,
        deliver=sender.deliver_task,
    )

    acks = AckDispatcher(normalizer, orchestrator, config.acks)
    registry = build_default_registry(hub, orchestrator, reconciler, channel)
    bridge = PlannerBridge(registry, acks, config.dispatch)
    planner = planner or CommandPlanner()

    dock = ChannelDock(planner, bridge, default_language=config.acks.language)
    dock.register_channel(getattr(channel, "name", "whatsapp"), channel, sender)
    if hasattr(channel, "set_handler"):
        channel.set_handler(dock.handle_incoming_message)

    logger.info(
        f"🔧 Gateway wired: {len(registry.list_names())} tools, "
        f"providers={hub.list_names()}, channel={getattr(channel, 'name', 'channel')}"
    )
    return Gateway(
        config=config,
        normalizer=normalizer,
        orchestrator=orchestrator,
        hub=hub,
        store=store,
        mapping=mapping,
        reconciler=reconciler,
        channel=channel,
        sender=sender,
        acks=acks,
        registry=registry,
        bridge=bridge,
        planner=planner,
        dock=dock,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start channels on boot; drain callback work and stop channels on shutdown."""
    gateway: Gateway = app.state.gateway
    setup_logging(gateway.config.logging)
    for name, channel in gateway.dock.channels.items():
        try:
            await channel.start()
        except Exception as e:
            logger.error(f"❌ Failed to start {name}: {e}")
    logger.info("🚀 ToolDock gateway started")

    yield

    await gateway.reconciler.drain(timeout=10)
    for name, channel in gateway.dock.channels.items():
        try:
            await channel.stop()
        except Exception as e:
            logger.error(f"Failed to stop {name}: {e}")
    logger.info("👋 ToolDock gateway stopped")
