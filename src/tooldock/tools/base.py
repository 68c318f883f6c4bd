"""
Tool Base — the contract every capability tool implements.

A tool is a named capability with a pydantic argument schema and an async
``run`` handler. The schema doubles as the planner-facing declaration.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


# ─── Declarations ─────────────────────────────────────────────────

class ParameterSpec(BaseModel):
    """One declared tool parameter."""
    model_config = ConfigDict(frozen=True)

    type: str = "string"
    required: bool = False
    description: str = ""
    enum: Optional[List[Any]] = None


class ToolDeclaration(BaseModel):
    """Immutable, planner-facing description of a tool."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, ParameterSpec] = Field(default_factory=dict)

    @property
    def required(self) -> List[str]:
        return [name for name, spec in self.parameters.items() if spec.required]


class ToolInvocation(BaseModel):
    """
    A planner-produced call. Nothing about it is trusted: ``arguments``
    may arrive as a JSON string or not at all.
    """
    name: str = ""
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, raw: Any) -> "ToolInvocation":
        """Build an invocation from whatever the planner handed over."""
        if isinstance(raw, ToolInvocation):
            return raw
        if not isinstance(raw, dict):
            return cls(name=str(getattr(raw, "name", "") or ""), arguments=_coerce_args(getattr(raw, "arguments", None)))
        args = raw.get("arguments", raw.get("args"))
        return cls(name=str(raw.get("name") or ""), arguments=_coerce_args(args))


def _coerce_args(args: Any) -> Dict[str, Any]:
    if args is None:
        return {}
    if isinstance(args, str) and args.strip():
        try:
            args = json.loads(args)
        except json.JSONDecodeError:
            return {}
    if isinstance(args, dict):
        # planners occasionally emit numeric keys
        return {str(k): v for k, v in args.items()}
    return {}


# ─── Context ──────────────────────────────────────────────────────

class QuotedMedia(BaseModel):
    """Media attached to, or quoted by, the inbound message."""
    model_config = ConfigDict(frozen=True)

    kind: str  # image | video | audio
    url: str
    caption: Optional[str] = None


class ToolContext(BaseModel):
    """
    Read-only per-call context handed to every handler.

    Frozen so concurrent handlers in one batch cannot leak state into
    each other; ``cancel_event`` is the only live object and is owned by
    the caller.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    chat_id: str = ""
    sender_id: Optional[str] = None
    message_id: Optional[str] = None
    original_text: str = ""
    language: str = "en"
    quoted_media: Optional[QuotedMedia] = None
    audio_already_transcribed: bool = False
    cancel_event: Optional[asyncio.Event] = None

    def media(self, kind: str) -> Optional[str]:
        """URL of the quoted/attached media of the given kind, if any."""
        if self.quoted_media and self.quoted_media.kind == kind:
            return self.quoted_media.url
        return None

    def is_cancelled(self) -> bool:
        return bool(self.cancel_event and self.cancel_event.is_set())


# ─── Results ──────────────────────────────────────────────────────

class MediaUrls(BaseModel):
    image: Optional[str] = None
    video: Optional[str] = None
    audio: Optional[str] = None

    def items(self):
        return [(k, v) for k, v in (("image", self.image), ("video", self.video), ("audio", self.audio)) if v]


class ToolResult(BaseModel):
    """
    Uniform handler result. Tool-specific fields ride along as extras.
    """
    model_config = ConfigDict(extra="allow")

    success: bool = True
    data: Optional[Any] = None
    error: Optional[str] = None
    media_urls: Optional[MediaUrls] = None
    caption: Optional[str] = None
    provider: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, **fields) -> "ToolResult":
        return cls(success=True, data=data, **fields)

    @classmethod
    def fail(cls, error: str, **fields) -> "ToolResult":
        return cls(success=False, error=error, **fields)

    @classmethod
    def from_any(cls, value: Any) -> "ToolResult":
        """Normalize whatever a handler returned."""
        if isinstance(value, ToolResult):
            return value
        if value is None:
            return cls(success=True)
        if isinstance(value, dict):
            payload = dict(value)
            if "success" not in payload:
                payload["success"] = not payload.get("error")
            if "mediaUrls" in payload and "media_urls" not in payload:
                payload["media_urls"] = payload.pop("mediaUrls")
            return cls(**payload)
        return cls(success=True, data=value)


# ─── Tool ─────────────────────────────────────────────────────────

class Tool(ABC):
    name: str
    description: str
    args_schema: Type[BaseModel]

    @abstractmethod
    async def run(self, ctx: ToolContext, **kwargs) -> Any:
        pass

    def declaration(self) -> ToolDeclaration:
        """Derive the immutable declaration from the pydantic schema."""
        schema = self.args_schema.model_json_schema()
        required = set(schema.get("required", []))
        params: Dict[str, ParameterSpec] = {}
        for pname, prop in schema.get("properties", {}).items():
            params[pname] = ParameterSpec(
                type=_json_type(prop),
                required=pname in required,
                description=prop.get("description", ""),
                enum=_json_enum(prop),
            )
        return ToolDeclaration(name=self.name, description=self.description, parameters=params)

    def to_openai_schema(self) -> Dict[str, Any]:
        """
        Convert tool to OpenAI-compatible function schema.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.args_schema.model_json_schema(),
            },
        }


def _json_type(prop: Dict[str, Any]) -> str:
    if "type" in prop:
        return prop["type"]
    # Optional[X] renders as anyOf: [{type: X}, {type: null}]
    for option in prop.get("anyOf", []):
        if option.get("type") and option["type"] != "null":
            return option["type"]
    return "string"


def _json_enum(prop: Dict[str, Any]) -> Optional[List[Any]]:
    if "enum" in prop:
        return list(prop["enum"])
    for option in prop.get("anyOf", []):
        if "enum" in option:
            return list(option["enum"])
    return None
