"""Tag tools: add tags to or remove tags from a record."""

from pydantic import Field

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.escaping import js_json
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.jxa.resolution import validate_locator
from devonthink_bridge.tools.registry import ToolDefinition
from devonthink_bridge.types import RecordLocator, ScriptResult


class TagsInput(RecordLocator):
    tags: list[str] = Field(..., min_length=1, description="Tags to add or remove")


class TagsResult(ScriptResult):
    required_on_success = ("uuid", "name", "tags", "changed_tags")

    uuid: str | None = None
    name: str | None = None
    tags: list[str] | None = None
    changed_tags: list[str] | None = None


_ADD_TAGS = """
const merged = record.tags().slice();
const changedTags = [];
for (const tag of requested) {
  if (merged.indexOf(tag) === -1) {
    merged.push(tag);
    changedTags.push(tag);
  }
}
"""

_REMOVE_TAGS = """
const merged = [];
const changedTags = [];
for (const tag of record.tags()) {
  if (requested.indexOf(tag) === -1) {
    merged.push(tag);
  } else {
    changedTags.push(tag);
  }
}
"""

_TAGS_RESPONSE = """
if (changedTags.length > 0) {
  record.tags = merged;
}
const response = {};
response["success"] = true;
response["uuid"] = record.uuid();
response["name"] = record.name();
response["tags"] = record.tags();
response["changedTags"] = changedTags;
return JSON.stringify(response);
"""


async def _change_tags(
    params: TagsInput,
    executor: JXAExecutor,
    change: str,
    timeout: float | None,
) -> TagsResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(f"const requested = {js_json(params.tags)};")
    builder.add(change)
    builder.add(_TAGS_RESPONSE)
    return await executor.execute(builder.build(), TagsResult, timeout=timeout)


async def add_tags(
    params: TagsInput, executor: JXAExecutor, timeout: float | None = None
) -> TagsResult:
    return await _change_tags(params, executor, _ADD_TAGS, timeout)


async def remove_tags(
    params: TagsInput, executor: JXAExecutor, timeout: float | None = None
) -> TagsResult:
    return await _change_tags(params, executor, _REMOVE_TAGS, timeout)


def get_tag_tools() -> list[ToolDefinition]:
    """Tool definitions for tagging."""
    return [
        ToolDefinition(
            name="add_tags",
            description="Add tags to a DEVONthink record. Tags already present are left alone.",
            input_model=TagsInput,
            result_model=TagsResult,
            handler=add_tags,
        ),
        ToolDefinition(
            name="remove_tags",
            description="Remove tags from a DEVONthink record. Missing tags are ignored.",
            input_model=TagsInput,
            result_model=TagsResult,
            handler=remove_tags,
        ),
    ]
