"""Custom metadata tools.

Custom metadata are the user-defined columns (Year, Country, Author, ...)
DEVONthink shows next to the built-in properties. Keys and values are
embedded as one JSON blob.
"""

from typing import Any

from pydantic import Field

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.escaping import js_bool, js_json
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.jxa.resolution import validate_locator
from devonthink_bridge.tools.registry import ToolDefinition
from devonthink_bridge.types import RecordLocator, ScriptResult

# Keys tried when the caller does not name any
DEFAULT_METADATA_KEYS = [
    "Country",
    "country",
    "Year",
    "year",
    "Author",
    "author",
    "Category",
    "Type",
    "type",
    "Organization",
    "organisation",
]


class GetCustomMetaDataInput(RecordLocator):
    keys: list[str] | None = Field(
        default=None,
        description=(
            "Specific metadata keys to retrieve. If not provided, common "
            "metadata keys are tried."
        ),
    )


class UpdateCustomMetaDataInput(RecordLocator):
    custom_meta_data: dict[str, Any] = Field(
        ...,
        description="Custom metadata as key-value pairs (e.g., {'Year': 2024, 'Country': 'USA'})",
    )
    replace: bool = Field(
        default=False,
        description=(
            "If true, clear existing custom metadata keys that are not provided. "
            "If false, merge with existing metadata."
        ),
    )


class GetCustomMetaDataResult(ScriptResult):
    required_on_success = ("uuid", "name", "custom_meta_data")

    uuid: str | None = None
    name: str | None = None
    custom_meta_data: dict[str, Any] | None = None


class UpdateCustomMetaDataResult(ScriptResult):
    required_on_success = ("uuid", "name", "updated_keys", "skipped_keys")

    uuid: str | None = None
    name: str | None = None
    updated_keys: list[str] | None = None
    skipped_keys: list[str] | None = None
    cleared_keys: list[str] | None = None


async def get_custom_metadata(
    params: GetCustomMetaDataInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> GetCustomMetaDataResult:
    locator = params.locator()
    validate_locator(locator)
    keys = params.keys if params.keys else DEFAULT_METADATA_KEYS

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(
        f"""
const keysToCheck = {js_json(keys)};
const customMetaData = {{}};
for (const key of keysToCheck) {{
  try {{
    const value = theApp.getCustomMetaData({{for: key, from: record}});
    if (value !== null && value !== undefined) {{
      customMetaData[key] = value;
    }}
  }} catch (metadataError) {{
    console.log("Info: No metadata for key '" + key + "': " + metadataError.toString());
  }}
}}
const response = {{}};
response["success"] = true;
response["uuid"] = record.uuid();
response["name"] = record.name();
response["customMetaData"] = customMetaData;
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), GetCustomMetaDataResult, timeout=timeout)


async def update_custom_metadata(
    params: UpdateCustomMetaDataInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> UpdateCustomMetaDataResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(
        f"""
const metadata = {js_json(params.custom_meta_data)};
const replaceMode = {js_bool(params.replace)};
const updatedKeys = [];
const skippedKeys = [];
const clearedKeys = [];

if (replaceMode) {{
  // Stored keys are lowercased and prefixed with "md"
  const provided = Object.keys(metadata).map((key) => key.toLowerCase());
  const existing = record.customMetaData() || {{}};
  for (const storedKey of Object.keys(existing)) {{
    const key = storedKey.indexOf("md") === 0 ? storedKey.substring(2) : storedKey;
    if (provided.indexOf(key.toLowerCase()) !== -1) {{
      continue;
    }}
    try {{
      theApp.addCustomMetaData("", {{for: key, to: record}});
      clearedKeys.push(key);
    }} catch (metadataError) {{
      console.log("Warning: Failed to clear custom metadata '" + key + "': " + metadataError.toString());
    }}
  }}
}}

for (const [key, value] of Object.entries(metadata)) {{
  try {{
    theApp.addCustomMetaData(value, {{for: key, to: record}});
    updatedKeys.push(key);
  }} catch (metadataError) {{
    console.log("Warning: Failed to set custom metadata '" + key + "': " + metadataError.toString());
    skippedKeys.push(key);
  }}
}}

const response = {{}};
response["success"] = true;
response["uuid"] = record.uuid();
response["name"] = record.name();
response["updatedKeys"] = updatedKeys;
response["skippedKeys"] = skippedKeys;
response["clearedKeys"] = clearedKeys;
return JSON.stringify(response);
"""
    )
    return await executor.execute(
        builder.build(), UpdateCustomMetaDataResult, timeout=timeout
    )


def get_metadata_tools() -> list[ToolDefinition]:
    """Tool definitions for custom metadata."""
    return [
        ToolDefinition(
            name="get_custom_metadata",
            description=(
                "Retrieve custom metadata (custom columns) from a DEVONthink record, "
                "such as Year, Country or Author."
            ),
            input_model=GetCustomMetaDataInput,
            result_model=GetCustomMetaDataResult,
            handler=get_custom_metadata,
        ),
        ToolDefinition(
            name="update_custom_metadata",
            description=(
                "Update custom metadata (custom columns) for an existing DEVONthink "
                "record. Keys DEVONthink refuses are reported in skippedKeys."
            ),
            input_model=UpdateCustomMetaDataInput,
            result_model=UpdateCustomMetaDataResult,
            handler=update_custom_metadata,
        ),
    ]
