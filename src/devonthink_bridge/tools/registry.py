"""
Tool registry for DEVONthink operations.

This module provides:
- ToolDefinition: Everything needed to call a tool (input model, handler)
- ToolRegistry: Looks up tools by name and runs them with uniform results

Every call through the registry returns a ScriptResult. Bridge failures
(validation, host, decode) are converted into success:false payloads so
callers never need to distinguish exceptions from error payloads.

Example:
    ```python
    registry = ToolRegistry()
    result = await registry.call("rename_record", {"uuid": "...", "newName": "Q3"})
    if not result.success:
        print(result.error_type, result.error)
    ```
"""

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from devonthink_bridge.errors import BridgeError, ErrorType
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.types import ScriptResult

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[ScriptResult]]


class ToolDefinition(BaseModel):
    """
    Complete definition of a DEVONthink operation.

    Attributes:
        name: Tool name used to call it (e.g., "update_record_properties")
        description: Human-readable description for tool listings
        input_model: Pydantic model validating the call arguments
        result_model: ScriptResult subclass the handler returns
        handler: async (params, executor, timeout=None) -> result_model
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="Human-readable description")
    input_model: type[BaseModel] = Field(..., description="Model validating arguments")
    result_model: type[ScriptResult] = Field(
        default=ScriptResult, description="Result payload model"
    )
    handler: Handler = Field(..., description="Coroutine implementing the tool")

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the tool's arguments (camelCase keys)."""
        return self.input_model.model_json_schema(by_alias=True)


def format_input_errors(tool_name: str, error: PydanticValidationError) -> str:
    """Collapse pydantic errors into one readable message."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return f"Validation failed for {tool_name}: {'; '.join(messages)}"


class ToolRegistry:
    """
    Registry of callable DEVONthink tools.

    Attributes:
        executor: Executor shared by every tool call (holds no per-call state)
    """

    def __init__(
        self,
        executor: JXAExecutor | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> None:
        """
        Initialize registry.

        Args:
            executor: Executor to run scripts with, or None for defaults
            tools: Tool definitions, or None for every built-in tool
        """
        self.executor = executor or JXAExecutor()
        if tools is None:
            from devonthink_bridge.tools import get_default_tools

            tools = get_default_tools()
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """
        Add a tool definition.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get_definition(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def get_definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def list_tool_names(self) -> list[str]:
        return list(self._tools.keys())

    async def call(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> ScriptResult:
        """
        Validate arguments and run a tool.

        Args:
            name: Tool name
            arguments: Raw arguments (camelCase or snake_case keys)
            timeout: Per-call host timeout in seconds

        Returns:
            The tool's result, or a failure result for any bridge error
        """
        tool = self.get_definition(name)
        if tool is None:
            return ScriptResult.failure(f"Unknown tool '{name}'", ErrorType.VALIDATION)

        try:
            params = tool.input_model.model_validate(arguments or {})
        except PydanticValidationError as e:
            return tool.result_model.failure(
                format_input_errors(tool.name, e), ErrorType.VALIDATION
            )

        try:
            return await tool.handler(params, self.executor, timeout=timeout)
        except BridgeError as e:
            logger.info("Tool %s failed: %s", tool.name, e)
            return tool.result_model.failure(str(e), e.error_type)
