"""
Configuration Models — Full config hierarchy for ToolDock.

Layers: env vars > tooldock.json / tooldock.yaml > defaults
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


# ─── Gateway Config ──────────────────────────────────────────────

class GatewayConfig(BaseModel):
    """HTTP gateway configuration."""
    port: int = Field(18789, description="Port to listen on")
    host: str = Field("127.0.0.1", description="Host to bind to")
    public_base_url: str = Field(
        "http://127.0.0.1:18789",
        description="Externally reachable base URL, used to build provider callback URLs",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


# ─── Channel Config ──────────────────────────────────────────────

class ChannelConfig(BaseModel):
    """Chat transport configuration (WhatsApp Business API)."""
    enabled: bool = True
    api_url: str = "https://graph.facebook.com/v18.0"
    api_token: Optional[str] = None
    phone_number_id: Optional[str] = None
    verify_token: str = Field("tooldock-whatsapp-verify", description="Webhook verification token")
    min_send_delay: float = Field(1.0, ge=0, description="Minimum seconds between outbound messages")


# ─── ACK Config ──────────────────────────────────────────────────

class AckConfig(BaseModel):
    """Acknowledgment message configuration."""
    enabled: bool = True
    collapse: bool = Field(True, description="Collapse a batch into a single message")
    language: str = Field("en", description="Template language: en, he")
    templates: Dict[str, str] = Field(
        default_factory=dict,
        description="Per-tool template overrides (may contain __PROVIDER__)",
    )
    self_acknowledging: List[str] = Field(
        default_factory=lambda: ["send_location"],
        description="Tools whose own output is the acknowledgment",
    )


# ─── Provider Config ─────────────────────────────────────────────

class ProviderConfig(BaseModel):
    """Provider aliasing, defaults and fallback chains."""
    fallback_order: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "image": ["gemini", "openai", "grok"],
            "video": ["grok", "openai", "gemini"],
            "translation": ["gemini", "openai"],
            "transcription": ["elevenlabs", "openai"],
        },
        description="Capability class → ordered provider keys",
    )
    tool_defaults: Dict[str, str] = Field(
        default_factory=dict,
        description="Per-tool default provider overrides",
    )
    aliases: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra alias → provider key mappings",
    )
    display_names: Dict[str, str] = Field(default_factory=dict)


# ─── Task Config ─────────────────────────────────────────────────

class TaskConfig(BaseModel):
    """Async task and webhook reconciliation configuration."""
    reconciliation_ttl: float = Field(
        6 * 3600, gt=0, description="Seconds before an unclaimed external id is dropped"
    )
    task_retention: float = Field(
        24 * 3600, gt=0, description="Seconds a finished task stays queryable"
    )
    correlation_paths: List[str] = Field(
        default_factory=lambda: ["data.task_id", "data.taskId", "task_id", "id"],
        description="Dotted paths tried in order to find the provider job id",
    )


# ─── Dispatch Config ─────────────────────────────────────────────

class DispatchConfig(BaseModel):
    """Planner-to-tool bridge configuration."""
    parallel: bool = Field(False, description="Run the calls of one batch concurrently")
    stochastic_tools: List[str] = Field(
        default_factory=lambda: [
            "create_image", "create_video", "edit_image", "image_to_video",
            "create_music", "create_poll", "retry_with_fallback",
        ],
        description="Tools allowed to repeat with identical arguments in one turn",
    )
    creation_tools: List[str] = Field(
        default_factory=lambda: [
            "create_image", "create_video", "edit_image", "edit_video", "image_to_video",
        ],
        description="Tools that run at most once successfully per turn",
    )


# ─── Logging Config ──────────────────────────────────────────────

class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field("INFO", description="Log level")
    format: str = Field(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        description="Log format string",
    )


# ─── Top-Level Config ────────────────────────────────────────────

class ToolDockConfig(BaseModel):
    """
    Master configuration model — mirrors tooldock.json.

    Hierarchy: env vars > tooldock.json > defaults
    """
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    acks: AckConfig = Field(default_factory=AckConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    tasks: TaskConfig = Field(default_factory=TaskConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
