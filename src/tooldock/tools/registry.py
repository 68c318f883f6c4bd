"""
Tool Registry & Execution Wrapper.

The registry is built once at startup. ``invoke`` is the single entry
point for running a tool: it never raises for tool-level problems, so a
batch of planner calls always runs to the end.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..errors import CancelledByUser, ProviderError, ToolValidationError
from ..messages import message
from .base import Tool, ToolContext, ToolDeclaration, ToolResult, _coerce_args

logger = logging.getLogger("tooldock.tools.registry")


class ToolRegistry:
    def __init__(self, display_name: Optional[Callable[[str], str]] = None):
        self._tools: Dict[str, Tool] = {}
        self._declarations: Dict[str, ToolDeclaration] = {}
        self._display_name = display_name

    def register(self, tool: Tool):
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        self._declarations[tool.name] = tool.declaration()

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def declaration(self, name: str) -> Optional[ToolDeclaration]:
        return self._declarations.get(name)

    def declarations(self) -> List[ToolDeclaration]:
        return list(self._declarations.values())

    def get_all_schemas(self) -> List[Dict[str, Any]]:
        return [t.to_openai_schema() for t in self._tools.values()]

    def list_names(self) -> List[str]:
        return list(self._tools.keys())

    # ── Execution ──

    async def invoke(self, name: str, args: Any, ctx: ToolContext) -> ToolResult:
        """
        Validate, execute and normalize one tool call.

        Unknown tools, bad arguments, provider failures and unexpected
        handler exceptions all come back as ``ToolResult(success=False)``.
        """
        language = ctx.language
        tool = self._tools.get(name)
        if tool is None:
            logger.error(f"❌ Unknown tool: {name}")
            return ToolResult.fail(message("unknown_tool", language, tool=name), error_code="unknown_tool")

        started = time.monotonic()
        try:
            kwargs = self._validate(tool, _coerce_args(args), language)
            logger.debug(f"→ Calling tool: {name} with args: {kwargs}")
            raw = await tool.run(ctx, **kwargs)
            result = ToolResult.from_any(raw)
        except ToolValidationError as e:
            logger.warning(f"Tool {name} rejected arguments: {e}")
            result = ToolResult.fail(str(e), error_code="validation")
        except ProviderError as e:
            logger.error(f"Tool {name} provider error ({e.provider}, status={e.status_code}): {e}")
            result = ToolResult.fail(
                message("provider_failed", language, provider=self._provider_label(e.provider, language)),
                error_code="provider",
                provider=e.provider,
            )
        except CancelledByUser:
            logger.info(f"Tool {name} cancelled")
            result = ToolResult.fail(message("cancelled", language), error_code="cancelled")
        except Exception as e:
            logger.error(f"Tool {name} error: {e}", exc_info=True)
            result = ToolResult.fail(message("generic_error", language), error_code="internal")

        elapsed = time.monotonic() - started
        status = "ok" if result.success else "failed"
        logger.info(f"Tool {name} {status} in {elapsed:.2f}s")
        return result

    def _validate(self, tool: Tool, args: Dict[str, Any], language: str) -> Dict[str, Any]:
        declaration = self._declarations[tool.name]
        missing = [
            field for field in declaration.required
            if args.get(field) is None or (isinstance(args.get(field), str) and not args[field].strip())
        ]
        if missing:
            raise ToolValidationError(
                message("missing_args", language, tool=tool.name, fields=", ".join(missing)),
                tool_name=tool.name,
            )
        try:
            validated = tool.args_schema.model_validate(args)
        except ValidationError as e:
            logger.debug(f"Validation detail for {tool.name}: {e}")
            raise ToolValidationError(
                message("invalid_args", language, tool=tool.name), tool_name=tool.name
            ) from e
        return validated.model_dump()

    def _provider_label(self, provider: Optional[str], language: str) -> str:
        if provider and self._display_name:
            return self._display_name(provider)
        if provider:
            return provider.capitalize()
        return "The service" if language == "en" else "השירות"
