"""Record tools: read, update, rename, delete and move DEVONthink records.

Each handler resolves its target with the shared lookup fragment and runs
the operation in the same script, so resolution and mutation happen in one
osascript invocation.
"""

from datetime import datetime

from pydantic import Field, model_validator

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.escaping import js_string, js_value
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.jxa.resolution import validate_locator
from devonthink_bridge.tools.registry import ToolDefinition
from devonthink_bridge.types import RecordLocator, ScriptResult

# JXA property name -> input field, in the order they are applied
UPDATABLE_PROPERTIES = {
    "url": "url",
    "comment": "comment",
    "rating": "rating",
    "label": "label",
    "flag": "flag",
    "unread": "unread",
    "locking": "locking",
    "name": "new_name",
}


# ===== Inputs =====


class GetRecordPropertiesInput(RecordLocator):
    pass


class UpdateRecordPropertiesInput(RecordLocator):
    url: str | None = Field(default=None, description="The URL for the record")
    comment: str | None = Field(default=None, description="Comment for the record")
    rating: int | None = Field(default=None, ge=0, le=5, description="Rating (0-5)")
    label: int | None = Field(default=None, ge=0, le=7, description="Label index (0-7)")
    flag: bool | None = Field(default=None, description="Flag state")
    unread: bool | None = Field(default=None, description="Unread state")
    locking: bool | None = Field(default=None, description="Locked state")
    new_name: str | None = Field(default=None, description="New record name")

    @model_validator(mode="after")
    def _name_as_new_name(self) -> "UpdateRecordPropertiesInput":
        # With uuid or database+id the record is already located, so name is
        # the property to set rather than a lookup key
        located = self.uuid is not None or (self.id is not None and self.database is not None)
        if not located or self.name is None:
            return self
        if self.new_name is not None and self.new_name != self.name:
            raise ValueError(
                "name and newName disagree; with uuid or database+id, name sets the record name"
            )
        self.new_name = self.name
        self.name = None
        return self

    def property_updates(self) -> dict[str, object]:
        """JXA property name -> value for every supplied property."""
        updates = {}
        for prop, field in UPDATABLE_PROPERTIES.items():
            value = getattr(self, field)
            if value is not None:
                updates[prop] = value
        return updates


class RenameRecordInput(RecordLocator):
    new_name: str = Field(..., min_length=1, description="New name for the record")


class DeleteRecordInput(RecordLocator):
    pass


class MoveRecordInput(RecordLocator):
    destination: RecordLocator = Field(..., description="Group to move the record into")


# ===== Results =====


class RecordPropertiesResult(ScriptResult):
    required_on_success = ("uuid", "name")

    uuid: str | None = None
    id: int | None = None
    name: str | None = None
    location: str | None = None
    path: str | None = None
    record_type: str | None = None
    kind: str | None = None
    database: str | None = None
    tags: list[str] | None = None
    comment: str | None = None
    url: str | None = None
    rating: int | None = None
    label: int | None = None
    flag: bool | None = None
    unread: bool | None = None
    locking: bool | None = None
    size: int | None = None
    creation_date: datetime | None = None
    modification_date: datetime | None = None


class UpdateRecordPropertiesResult(ScriptResult):
    required_on_success = ("uuid", "name", "updated_properties", "skipped_properties")

    uuid: str | None = None
    name: str | None = None
    updated_properties: list[str] | None = None
    skipped_properties: list[str] | None = None


class RenameRecordResult(ScriptResult):
    required_on_success = ("uuid", "old_name", "new_name")

    uuid: str | None = None
    old_name: str | None = None
    new_name: str | None = None


class DeleteRecordResult(ScriptResult):
    required_on_success = ("uuid", "name")

    uuid: str | None = None
    name: str | None = None


class MoveRecordResult(ScriptResult):
    required_on_success = ("uuid", "name", "location")

    uuid: str | None = None
    name: str | None = None
    location: str | None = None
    database: str | None = None


# ===== Handlers =====


async def get_record_properties(
    params: GetRecordPropertiesInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> RecordPropertiesResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(
        """
const isoDate = (value) => (value ? value.toISOString() : null);
const response = {};
response["success"] = true;
response["uuid"] = record.uuid();
response["id"] = record.id();
response["name"] = record.name();
response["location"] = record.location();
response["path"] = record.path();
response["recordType"] = record.recordType();
response["kind"] = record.kind();
response["database"] = record.database().name();
response["tags"] = record.tags();
response["comment"] = record.comment();
response["url"] = record.url();
response["rating"] = record.rating();
response["label"] = record.label();
response["flag"] = record.flag();
response["unread"] = record.unread();
response["locking"] = record.locking();
response["size"] = record.size();
response["creationDate"] = isoDate(record.creationDate());
response["modificationDate"] = isoDate(record.modificationDate());
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), RecordPropertiesResult, timeout=timeout)


def _set_property_statements(prop: str, value: object) -> str:
    # prop comes from UPDATABLE_PROPERTIES, never from the caller
    return f"""
try {{
  record.{prop} = {js_value(value)};
  updatedProperties.push("{prop}");
}} catch (error) {{
  console.log("Warning: Failed to set {prop}: " + error.toString());
  skippedProperties.push("{prop}");
}}
"""


async def update_record_properties(
    params: UpdateRecordPropertiesInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> UpdateRecordPropertiesResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add("const updatedProperties = [];\nconst skippedProperties = [];")
    for prop, value in params.property_updates().items():
        builder.add(_set_property_statements(prop, value))
    builder.add(
        """
const response = {};
response["success"] = true;
response["uuid"] = record.uuid();
response["name"] = record.name();
response["updatedProperties"] = updatedProperties;
response["skippedProperties"] = skippedProperties;
return JSON.stringify(response);
"""
    )
    return await executor.execute(
        builder.build(), UpdateRecordPropertiesResult, timeout=timeout
    )


async def rename_record(
    params: RenameRecordInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> RenameRecordResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(
        f"""
const oldName = record.name();
record.name = {js_string(params.new_name)};
const response = {{}};
response["success"] = true;
response["uuid"] = record.uuid();
response["oldName"] = oldName;
response["newName"] = record.name();
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), RenameRecordResult, timeout=timeout)


async def delete_record(
    params: DeleteRecordInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> DeleteRecordResult:
    locator = params.locator()
    validate_locator(locator)

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.add(
        """
const response = {};
response["success"] = true;
response["uuid"] = record.uuid();
response["name"] = record.name();
theApp.delete({record: record});
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), DeleteRecordResult, timeout=timeout)


async def move_record(
    params: MoveRecordInput,
    executor: JXAExecutor,
    timeout: float | None = None,
) -> MoveRecordResult:
    locator = params.locator()
    validate_locator(locator)
    validate_locator(params.destination, prefix="destination.")

    builder = ScriptBuilder(executor.application_name)
    builder.resolve(locator)
    builder.resolve(params.destination, variable="destination")
    builder.add(
        """
const destinationType = destination.recordType();
if (destinationType !== "group") {
  const errorResponse = {};
  errorResponse["success"] = false;
  errorResponse["error"] = "Destination " + destination.name() + " is not a group";
  errorResponse["errorType"] = "application";
  return JSON.stringify(errorResponse);
}
const moved = theApp.move({record: record, to: destination});
const response = {};
response["success"] = true;
response["uuid"] = moved.uuid();
response["name"] = moved.name();
response["location"] = moved.location();
response["database"] = moved.database().name();
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), MoveRecordResult, timeout=timeout)


def get_record_tools() -> list[ToolDefinition]:
    """Tool definitions for record operations."""
    return [
        ToolDefinition(
            name="get_record_properties",
            description=(
                "Get the standard properties of a DEVONthink record (name, location, "
                "type, tags, comment, rating, label, dates). Locate the record by uuid, "
                "by id plus database, by path, or by exact name."
            ),
            input_model=GetRecordPropertiesInput,
            result_model=RecordPropertiesResult,
            handler=get_record_properties,
        ),
        ToolDefinition(
            name="update_record_properties",
            description=(
                "Update standard record properties in DEVONthink like URL, comment, "
                "rating, label, flag, unread, locking and name. These are built-in "
                "DEVONthink properties, not custom metadata. Properties DEVONthink "
                "refuses are reported in skippedProperties. When uuid or id plus database "
                "locates the record, name is the new name. Country and other custom "
                "columns are set with update_custom_metadata."
            ),
            input_model=UpdateRecordPropertiesInput,
            result_model=UpdateRecordPropertiesResult,
            handler=update_record_properties,
        ),
        ToolDefinition(
            name="rename_record",
            description="Rename a DEVONthink record.",
            input_model=RenameRecordInput,
            result_model=RenameRecordResult,
            handler=rename_record,
        ),
        ToolDefinition(
            name="delete_record",
            description="Delete a DEVONthink record (moves it to the database's trash).",
            input_model=DeleteRecordInput,
            result_model=DeleteRecordResult,
            handler=delete_record,
        ),
        ToolDefinition(
            name="move_record",
            description=(
                "Move a DEVONthink record into another group. Both the record and the "
                "destination group are located in the same script run."
            ),
            input_model=MoveRecordInput,
            result_model=MoveRecordResult,
            handler=move_record,
        ),
    ]
