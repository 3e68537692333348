"""Tests for ToolRegistry lookup and uniform results."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from devonthink_bridge.config import Settings
from devonthink_bridge.errors import ErrorType, HostExecutionError, ResultDecodingError
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.tools import ToolDefinition, ToolRegistry
from devonthink_bridge.tools.application import NoInput
from devonthink_bridge.tools.records import RenameRecordResult
from devonthink_bridge.types import ScriptResult

EXPECTED_TOOLS = {
    "is_running",
    "get_open_databases",
    "get_record_properties",
    "update_record_properties",
    "rename_record",
    "delete_record",
    "move_record",
    "get_custom_metadata",
    "update_custom_metadata",
    "add_tags",
    "remove_tags",
    "lookup_record",
}


@pytest.fixture
def executor():
    mock = MagicMock(spec=JXAExecutor)
    mock.application_name = "DEVONthink"
    mock.execute = AsyncMock()
    return mock


@pytest.fixture
def registry(executor):
    return ToolRegistry(executor=executor)


class TestRegistryContents:
    def test_default_tools(self, registry):
        assert set(registry.list_tool_names()) == EXPECTED_TOOLS

    def test_get_definition(self, registry):
        tool = registry.get_definition("rename_record")
        assert tool is not None
        assert tool.result_model is RenameRecordResult
        assert registry.get_definition("format_disk") is None

    def test_input_schema_uses_camel_case(self, registry):
        schema = registry.get_definition("rename_record").input_schema()
        assert "newName" in schema["properties"]
        assert "uuid" in schema["properties"]

    def test_duplicate_registration_rejected(self, registry):
        tool = registry.get_definition("is_running")
        with pytest.raises(ValueError, match="already registered"):
            registry.register(tool)

    def test_explicit_tool_list(self, executor):
        async def handler(params, executor, timeout=None):
            return ScriptResult(success=True)

        tool = ToolDefinition(
            name="noop", description="Does nothing", input_model=NoInput, handler=handler
        )
        registry = ToolRegistry(executor=executor, tools=[tool])
        assert registry.list_tool_names() == ["noop"]


class TestRegistryCall:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry, executor):
        result = await registry.call("format_disk", {})

        assert not result.success
        assert result.error_type == ErrorType.VALIDATION
        assert "Unknown tool 'format_disk'" in result.error
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, registry, executor):
        result = await registry.call("update_record_properties", {"uuid": "ABC", "rating": 9})

        assert not result.success
        assert result.error_type == ErrorType.VALIDATION
        assert result.error.startswith("Validation failed for update_record_properties")
        assert "rating" in result.error
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_locator(self, registry):
        result = await registry.call("delete_record", {})

        assert result.error_type == ErrorType.VALIDATION
        assert "one of uuid, id, path or name is required" in result.error

    @pytest.mark.asyncio
    async def test_unsafe_locator_becomes_validation_failure(self, registry, executor):
        result = await registry.call("delete_record", {"uuid": "abc`; theApp.quit()"})

        assert not result.success
        assert result.error_type == ErrorType.VALIDATION
        assert result.error.startswith("uuid contains invalid characters")
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self, registry, executor):
        executor.execute.side_effect = HostExecutionError(
            "timeout", "osascript timed out after 1.0s", timeout=1.0
        )

        result = await registry.call("rename_record", {"uuid": "ABC", "newName": "Q3"}, timeout=1.0)

        assert isinstance(result, RenameRecordResult)
        assert not result.success
        assert result.error_type == ErrorType.TIMEOUT
        assert "timed out" in result.error
        assert executor.execute.call_args.kwargs["timeout"] == 1.0

    @pytest.mark.asyncio
    async def test_decode_error_becomes_failure(self, registry, executor):
        executor.execute.side_effect = ResultDecodingError("empty output", "")

        result = await registry.call("is_running", {})

        assert result.error_type == ErrorType.DECODE

    @pytest.mark.asyncio
    async def test_success_returned_unchanged(self, registry, executor):
        expected = RenameRecordResult(success=True, uuid="ABC", old_name="Q2", new_name="Q3")
        executor.execute.return_value = expected

        result = await registry.call("rename_record", {"uuid": "ABC", "new_name": "Q3"})

        assert result is expected

    @pytest.mark.asyncio
    async def test_application_failure_returned_unchanged(self, registry, executor):
        expected = ScriptResult.failure("Record with UUID ABC not found", ErrorType.NOT_FOUND)
        executor.execute.return_value = expected

        result = await registry.call("get_record_properties", {"uuid": "ABC"})

        assert result is expected


@pytest.mark.asyncio
@patch("devonthink_bridge.jxa.executor.asyncio.create_subprocess_exec")
async def test_lone_surrogate_metadata_reaches_host_escaped(mock_subprocess):
    process = AsyncMock()
    process.communicate.return_value = (
        b'{"success": true, "uuid": "U", "name": "Doc", "updatedKeys": ["Note"], "skippedKeys": []}',
        b"",
    )
    process.returncode = 0
    mock_subprocess.return_value = process
    registry = ToolRegistry(executor=JXAExecutor(Settings(osascript_path="osascript")))

    result = await registry.call(
        "update_custom_metadata", {"uuid": "U", "customMetaData": {"Note": "a\ud800b"}}
    )

    assert result.success
    assert result.updated_keys == ["Note"]
    sent = process.communicate.call_args.kwargs["input"]
    assert b'"Note": "a\\ud800b"' in sent
