import asyncio

import pytest
from pydantic import BaseModel, Field

from tooldock.errors import ProviderError
from tooldock.tools import Tool, ToolContext, ToolRegistry, ToolResult
from tooldock.tools.base import ToolInvocation


class NoArgs(BaseModel):
    pass


class EchoArgs(BaseModel):
    text: str = Field(..., description="Text to echo")
    times: int = 1


class EchoTool(Tool):
    name = "echo"
    description = "Echo text back"
    args_schema = EchoArgs

    async def run(self, ctx, text: str, times: int = 1):
        return text * times


class ReturnsTool(Tool):
    description = "Returns a fixed value"
    args_schema = NoArgs

    def __init__(self, name, value):
        self.name = name
        self.value = value

    async def run(self, ctx, **kwargs):
        return self.value


class BoomTool(Tool):
    name = "boom"
    description = "Always crashes"
    args_schema = NoArgs

    async def run(self, ctx, **kwargs):
        raise RuntimeError("secret stack detail")


class ProviderDownTool(Tool):
    name = "provider_down"
    description = "Provider returns 503"
    args_schema = NoArgs

    async def run(self, ctx, **kwargs):
        raise ProviderError("HTTP 503 from upstream", provider="grok", status_code=503)


class ContextTool(Tool):
    name = "whoami"
    description = "Reports the chat id"
    args_schema = NoArgs

    async def run(self, ctx, **kwargs):
        return {"data": ctx.chat_id, "language": ctx.language}


@pytest.fixture
def reg():
    registry = ToolRegistry(display_name=lambda key: key.upper())
    for tool in (EchoTool(), BoomTool(), ProviderDownTool(), ContextTool()):
        registry.register(tool)
    return registry


def test_declaration_is_derived_from_schema(reg):
    decl = reg.declaration("echo")
    assert decl.name == "echo"
    assert decl.required == ["text"]
    assert decl.parameters["text"].description == "Text to echo"
    assert decl.parameters["times"].type == "integer"
    assert decl.parameters["times"].required is False


def test_duplicate_registration_is_rejected(reg):
    with pytest.raises(ValueError):
        reg.register(EchoTool())


@pytest.mark.asyncio
async def test_unknown_tool_returns_structured_error(reg, ctx):
    result = await reg.invoke("does_not_exist", {}, ctx)
    assert result.success is False
    assert "does_not_exist" in result.error
    assert result.error_code == "unknown_tool"


@pytest.mark.asyncio
async def test_missing_required_argument(reg, ctx):
    result = await reg.invoke("echo", {"times": 2}, ctx)
    assert result.success is False
    assert "text" in result.error
    assert result.error_code == "validation"


@pytest.mark.asyncio
async def test_blank_required_argument_counts_as_missing(reg, ctx):
    result = await reg.invoke("echo", {"text": "   "}, ctx)
    assert result.success is False
    assert result.error_code == "validation"


@pytest.mark.asyncio
async def test_arguments_as_json_string_are_coerced(reg, ctx):
    result = await reg.invoke("echo", '{"text": "ab", "times": "2"}', ctx)
    assert result.success is True
    assert result.data == "abab"


@pytest.mark.asyncio
async def test_junk_arguments_become_empty(reg, ctx):
    result = await reg.invoke("echo", "not json at all", ctx)
    assert result.success is False
    assert result.error_code == "validation"


@pytest.mark.asyncio
async def test_invalid_type_is_a_validation_error(reg, ctx):
    result = await reg.invoke("echo", {"text": "a", "times": "many"}, ctx)
    assert result.success is False
    assert result.error_code == "validation"


@pytest.mark.asyncio
async def test_handler_exception_never_escapes(reg, ctx):
    result = await reg.invoke("boom", {}, ctx)
    assert result.success is False
    assert "secret stack detail" not in result.error
    assert result.error_code == "internal"


@pytest.mark.asyncio
async def test_provider_error_is_localized_without_http_code(reg):
    he = ToolContext(chat_id="1", language="he")
    result = await reg.invoke("provider_down", {}, he)
    assert result.success is False
    assert "GROK" in result.error
    assert "503" not in result.error
    assert result.provider == "grok"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value, success, data",
    [
        (None, True, None),
        ("plain text", True, "plain text"),
        ({"error": "nope"}, False, None),
        ({"data": 3, "mediaUrls": {"image": "https://x/i.png"}}, True, 3),
        (ToolResult.fail("bad"), False, None),
    ],
)
async def test_handler_return_values_are_normalized(ctx, value, success, data):
    registry = ToolRegistry()
    registry.register(ReturnsTool("returns", value))
    result = await registry.invoke("returns", {}, ctx)
    assert isinstance(result, ToolResult)
    assert result.success is success
    assert result.data == data


@pytest.mark.asyncio
async def test_media_urls_camel_case_is_accepted(ctx):
    registry = ToolRegistry()
    registry.register(ReturnsTool("media", {"mediaUrls": {"image": "https://x/i.png"}}))
    result = await registry.invoke("media", {}, ctx)
    assert result.media_urls.image == "https://x/i.png"


@pytest.mark.asyncio
async def test_context_is_read_only(reg, ctx):
    result = await reg.invoke("whoami", {}, ctx)
    assert result.data == ctx.chat_id
    with pytest.raises(Exception):
        ctx.chat_id = "someone else"


@pytest.mark.asyncio
async def test_batch_continues_after_failures(reg, ctx):
    calls = [
        ToolInvocation.coerce({"name": "boom"}),
        ToolInvocation.coerce({"name": "missing"}),
        ToolInvocation.coerce({"name": "echo", "arguments": '{"text": "ok"}'}),
    ]
    results = await asyncio.gather(*(reg.invoke(c.name, c.arguments, ctx) for c in calls))
    assert [r.success for r in results] == [False, False, True]


def test_invocation_coerce_handles_garbage():
    assert ToolInvocation.coerce({"name": "x", "arguments": None}).arguments == {}
    assert ToolInvocation.coerce({"name": "x", "arguments": "[1, 2]"}).arguments == {}
    assert ToolInvocation.coerce({"name": "x", "args": {"a": 1}}).arguments == {"a": 1}
    assert ToolInvocation.coerce("nonsense").name == ""
    assert ToolInvocation.coerce({"name": "x", "arguments": {1: "a", "b": 2}}).arguments == {"1": "a", "b": 2}


@pytest.mark.asyncio
async def test_non_string_argument_keys(reg, ctx):
    result = await reg.invoke("echo", {"text": "ok", 7: "ignored"}, ctx)
    assert result.success is True
    assert result.data == "ok"


def test_schemas_for_planners(reg):
    schemas = reg.get_all_schemas()
    assert {s["function"]["name"] for s in schemas} == {"echo", "boom", "provider_down", "whoami"}
