"""Lookup tool: find records by filename, path, URL, tags or content hash.

Unlike record resolution this returns every match (up to a limit), so it
is the way to list candidates after an ambiguous resolution.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.escaping import check_safe, js_bool, js_json, js_number, js_value
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.tools.registry import ToolDefinition
from devonthink_bridge.types import RecordSummary, ScriptResult

LookupType = Literal["filename", "path", "url", "tags", "content_hash"]

# Lookup type -> DEVONthink command taking (value, {in: database})
_LOOKUP_COMMANDS = {
    "filename": "lookupRecordsWithFile",
    "path": "lookupRecordsWithPath",
    "url": "lookupRecordsWithURL",
    "content_hash": "lookupRecordsWithContentHash",
}


class LookupRecordInput(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    lookup_type: LookupType = Field(..., description="What to look records up by")
    value: str | None = Field(
        default=None, description="Filename, path, URL or content hash to match"
    )
    tags: list[str] | None = Field(default=None, description="Tags to match (lookup_type=tags)")
    match_any_tag: bool = Field(
        default=False, description="Match records with any of the tags instead of all"
    )
    database: str | None = Field(
        default=None, description="Database to search (default: all open databases)"
    )
    limit: int = Field(default=50, ge=1, le=1000, description="Maximum records returned")

    @model_validator(mode="after")
    def _check_value(self) -> "LookupRecordInput":
        if self.lookup_type == "tags":
            if not self.tags:
                raise ValueError("tags lookup requires at least one tag")
        elif not self.value:
            raise ValueError(f"{self.lookup_type} lookup requires value")
        return self


class LookupRecordResult(ScriptResult):
    required_on_success = ("records", "total_count")

    records: list[RecordSummary] | None = None
    total_count: int | None = None


def _lookup_call(params: LookupRecordInput) -> str:
    if params.lookup_type == "tags":
        return (
            f"theApp.lookupRecordsWithTags({js_json(params.tags)}, "
            f"{{any: {js_bool(params.match_any_tag)}, in: scope}})"
        )
    command = _LOOKUP_COMMANDS[params.lookup_type]
    return f"theApp.{command}({js_value(params.value)}, {{in: scope}})"


async def lookup_record(
    params: LookupRecordInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> LookupRecordResult:
    check_safe("value", params.value)
    check_safe("database", params.database)

    builder = ScriptBuilder(executor.application_name)
    builder.use_helpers()
    builder.add(
        f"""
const limit = {js_number(params.limit)};
const scopes = searchScopes(theApp, {{database: {js_value(params.database)}}});
const records = [];
let totalCount = 0;
for (let i = 0; i < scopes.length; i++) {{
  const scope = scopes[i];
  const found = {_lookup_call(params)} || [];
  totalCount += found.length;
  for (let j = 0; j < found.length && records.length < limit; j++) {{
    records.push({{
      uuid: found[j].uuid(),
      name: found[j].name(),
      location: found[j].location(),
      recordType: found[j].recordType(),
      database: scope.name()
    }});
  }}
}}
const response = {{}};
response["success"] = true;
response["records"] = records;
response["totalCount"] = totalCount;
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), LookupRecordResult, timeout=timeout)


def get_lookup_tools() -> list[ToolDefinition]:
    """Tool definitions for record lookup."""
    return [
        ToolDefinition(
            name="lookup_record",
            description=(
                "Find DEVONthink records by filename, filesystem path, URL, tags or "
                "content hash. Returns every match up to limit, with totalCount."
            ),
            input_model=LookupRecordInput,
            result_model=LookupRecordResult,
            handler=lookup_record,
        ),
    ]
