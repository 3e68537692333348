"""
Shared types for the DEVONthink bridge.

This module defines the data structures that cross the bridge boundary:
- RecordLocator: identifier option set used to locate a single record
- ScriptResult: base result payload every script emits
- RecordSummary: documented element shape for list-valued results

Per project patterns:
- Pydantic BaseModel for validation and serialization
- Field() with descriptions for documentation
- Payload keys are camelCase on the wire, snake_case in Python
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from devonthink_bridge.errors import ErrorType

LOCATOR_FIELDS = ("uuid", "id", "path", "name", "database")


class RecordLocator(BaseModel):
    """
    Identifier option set for locating exactly one record.

    Which fields are populated selects the resolution strategy; see
    devonthink_bridge.jxa.resolution for the fixed order. Empty strings are
    treated as absent.

    Attributes:
        uuid: Global unique id, valid across all open databases
        id: Numeric record id, only unique within one database
        path: Filesystem path of the record's file
        name: Exact record name
        database: Display name of an open database to scope the lookup
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    uuid: str | None = Field(default=None, description="UUID of the record")
    id: int | None = Field(
        default=None,
        ge=0,
        description="Numeric record id (requires database)",
    )
    path: str | None = Field(default=None, description="Filesystem path of the record")
    name: str | None = Field(default=None, description="Exact name of the record")
    database: str | None = Field(
        default=None,
        description="Name of the database to search (default: all open databases)",
    )

    @field_validator("uuid", "path", "name", "database", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value

    @model_validator(mode="after")
    def _check_locating_fields(self) -> "RecordLocator":
        if self.uuid is None and self.path is None and self.name is None:
            if self.id is None:
                raise ValueError("one of uuid, id, path or name is required")
            if self.database is None:
                raise ValueError(
                    "id requires database because record ids are only unique within a database"
                )
        return self

    def locator(self) -> "RecordLocator":
        """Return only the locating fields, dropping any operation parameters."""
        return RecordLocator.model_validate(
            {field: getattr(self, field) for field in LOCATOR_FIELDS}
        )

    def describe(self) -> str:
        """Short human-readable label used in not-found messages."""
        if self.uuid is not None:
            return f"UUID {self.uuid}"
        if self.id is not None and self.database is not None:
            return f"ID {self.id} in database {self.database}"
        label = f"path {self.path}" if self.path is not None else f"name {self.name}"
        if self.database is not None:
            label += f" in database {self.database}"
        return label


class ScriptResult(BaseModel):
    """
    Result payload emitted by every generated script.

    success=False implies error is set and every operation-specific field is
    discarded. success=True implies the fields named in required_on_success
    are present.

    Attributes:
        success: Whether the operation completed
        error: Failure message (required when success is False)
        error_type: Failure category
        candidates: Match count for ambiguous resolutions
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    required_on_success: ClassVar[tuple[str, ...]] = ()

    success: bool = Field(..., description="Whether the operation completed")
    error: str | None = Field(default=None, description="Failure message")
    error_type: ErrorType | None = Field(default=None, description="Failure category")
    candidates: int | None = Field(
        default=None, description="Number of matches when resolution was ambiguous"
    )

    @model_validator(mode="after")
    def _check_outcome(self) -> "ScriptResult":
        if not self.success:
            if not self.error:
                raise ValueError("success is false but no error message was given")
            return self
        missing = [name for name in self.required_on_success if getattr(self, name) is None]
        if missing:
            raise ValueError(f"success is true but {', '.join(missing)} missing")
        return self

    @classmethod
    def failure(
        cls,
        error: str,
        error_type: ErrorType | None = None,
        candidates: int | None = None,
    ):
        """Build the failure variant of this result type."""
        return cls(success=False, error=error, error_type=error_type, candidates=candidates)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RecordSummary(BaseModel):
    """Compact description of a record inside list-valued results."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    uuid: str
    name: str
    location: str | None = None
    record_type: str | None = None
    database: str | None = None


class RawScriptResult(ScriptResult):
    """ScriptResult that keeps every payload field, for ad hoc scripts."""

    model_config = ConfigDict(extra="allow")
