"""Tests for operation handlers: generated scripts and result passthrough."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from devonthink_bridge.errors import ValidationError
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.tools.application import IsRunningResult, NoInput, is_running, get_open_databases
from devonthink_bridge.tools.lookup import LookupRecordInput, LookupRecordResult, lookup_record
from devonthink_bridge.tools.metadata import (
    DEFAULT_METADATA_KEYS,
    GetCustomMetaDataInput,
    UpdateCustomMetaDataInput,
    get_custom_metadata,
    update_custom_metadata,
)
from devonthink_bridge.tools.records import (
    DeleteRecordInput,
    GetRecordPropertiesInput,
    MoveRecordInput,
    RenameRecordInput,
    UpdateRecordPropertiesInput,
    UpdateRecordPropertiesResult,
    delete_record,
    get_record_properties,
    get_record_tools,
    move_record,
    rename_record,
    update_record_properties,
)
from devonthink_bridge.tools.tags import TagsInput, add_tags, remove_tags
from devonthink_bridge.types import RecordLocator


@pytest.fixture
def executor():
    """JXAExecutor stand-in that records the script instead of running it."""
    mock = MagicMock(spec=JXAExecutor)
    mock.application_name = "DEVONthink"
    mock.execute = AsyncMock()
    return mock


def _script(executor) -> str:
    return executor.execute.call_args.args[0]


# ===== Records =====


@pytest.mark.asyncio
async def test_update_record_properties_script(executor):
    executor.execute.return_value = UpdateRecordPropertiesResult(
        success=True, uuid="ABC", name="Doc", updated_properties=["comment"], skipped_properties=[]
    )
    params = UpdateRecordPropertiesInput(
        uuid="ABC", comment='Say "hi"\nthen leave', rating=3, flag=False
    )

    result = await update_record_properties(params, executor, timeout=12)

    assert result is executor.execute.return_value
    script = _script(executor)
    assert executor.execute.call_args.args[1] is UpdateRecordPropertiesResult
    assert executor.execute.call_args.kwargs["timeout"] == 12
    assert 'const recordLookup = getRecord(theApp, {"uuid": "ABC"' in script
    assert 'record.comment = "Say \\"hi\\"\\nthen leave";' in script
    assert "record.rating = 3;" in script
    assert "record.flag = false;" in script
    assert "record.url" not in script
    assert "record.name =" not in script


@pytest.mark.asyncio
async def test_update_record_properties_rename_via_new_name(executor):
    params = UpdateRecordPropertiesInput(uuid="ABC", new_name="Renamed")

    await update_record_properties(params, executor)

    assert 'record.name = "Renamed";' in _script(executor)


@pytest.mark.asyncio
async def test_update_record_properties_name_with_uuid_renames(executor):
    params = UpdateRecordPropertiesInput.model_validate({"uuid": "U", "name": "New Title"})

    await update_record_properties(params, executor)

    script = _script(executor)
    assert params.property_updates() == {"name": "New Title"}
    assert 'record.name = "New Title";' in script
    assert '"uuid": "U"' in script
    assert '"name": null' in script


@pytest.mark.asyncio
async def test_update_record_properties_name_with_id_and_database_renames(executor):
    params = UpdateRecordPropertiesInput.model_validate(
        {"id": 42, "database": "Inbox", "name": "New Title", "rating": 2}
    )

    await update_record_properties(params, executor)

    script = _script(executor)
    assert 'record.name = "New Title";' in script
    assert "record.rating = 2;" in script


@pytest.mark.asyncio
async def test_update_record_properties_name_without_uuid_locates(executor):
    params = UpdateRecordPropertiesInput(name="Report", database="Archive", flag=True)

    await update_record_properties(params, executor)

    script = _script(executor)
    assert '"name": "Report"' in script
    assert "record.name =" not in script


def test_update_record_properties_conflicting_names_rejected():
    with pytest.raises(Exception, match="name and newName disagree"):
        UpdateRecordPropertiesInput.model_validate(
            {"uuid": "U", "name": "One", "newName": "Two"}
        )


@pytest.mark.asyncio
async def test_unsafe_locator_rejected_before_dispatch(executor):
    params = UpdateRecordPropertiesInput(uuid='x"); theApp.quit(); ("', rating=1)

    with pytest.raises(ValidationError):
        await update_record_properties(params, executor)

    executor.execute.assert_not_called()


@pytest.mark.asyncio
async def test_get_record_properties_by_name_and_database(executor):
    params = GetRecordPropertiesInput(name="Report", database="Archive")

    await get_record_properties(params, executor)

    script = _script(executor)
    assert '"name": "Report"' in script
    assert '"database": "Archive"' in script
    assert 'response["recordType"] = record.recordType();' in script


@pytest.mark.asyncio
async def test_rename_record_escapes_new_name(executor):
    await rename_record(RenameRecordInput(uuid="ABC", new_name="Q3 `final`"), executor)

    assert 'record.name = "Q3 \\u0060final\\u0060";' in _script(executor)


@pytest.mark.asyncio
async def test_delete_record_reads_identity_before_delete(executor):
    await delete_record(DeleteRecordInput(uuid="ABC"), executor)

    script = _script(executor)
    assert script.index('response["uuid"] = record.uuid();') < script.index(
        "theApp.delete({record: record});"
    )


@pytest.mark.asyncio
async def test_move_record_resolves_both_in_one_script(executor):
    params = MoveRecordInput(
        uuid="ABC", destination=RecordLocator(name="Projects", database="Work")
    )

    await move_record(params, executor)

    script = _script(executor)
    executor.execute.assert_awaited_once()
    assert script.count("= getRecord(theApp, {") == 2
    assert "const destination = destinationLookup.record;" in script
    assert "theApp.move({record: record, to: destination});" in script
    assert 'destinationType !== "group"' in script
    assert "smart group" not in script


@pytest.mark.asyncio
async def test_move_record_validates_destination(executor):
    params = MoveRecordInput(uuid="ABC", destination=RecordLocator(name="bad`group"))

    with pytest.raises(ValidationError) as exc_info:
        await move_record(params, executor)

    assert exc_info.value.field == "destination.name"


# ===== Metadata =====


@pytest.mark.asyncio
async def test_get_custom_metadata_default_keys(executor):
    await get_custom_metadata(GetCustomMetaDataInput(uuid="ABC"), executor)

    assert f"const keysToCheck = {json.dumps(DEFAULT_METADATA_KEYS)};" in _script(executor)


@pytest.mark.asyncio
async def test_get_custom_metadata_requested_keys(executor):
    await get_custom_metadata(GetCustomMetaDataInput(uuid="ABC", keys=["Year"]), executor)

    assert 'const keysToCheck = ["Year"];' in _script(executor)


@pytest.mark.asyncio
async def test_update_custom_metadata_embeds_json(executor):
    params = UpdateCustomMetaDataInput.model_validate(
        {"uuid": "ABC", "customMetaData": {"Year": 2024, "Country": "Côte d'Ivoire"}, "replace": True}
    )

    await update_custom_metadata(params, executor)

    script = _script(executor)
    assert 'const metadata = {"Year": 2024, "Country": "Côte d\'Ivoire"};' in script
    assert "const replaceMode = true;" in script


# ===== Tags =====


@pytest.mark.asyncio
async def test_add_tags(executor):
    await add_tags(TagsInput(uuid="ABC", tags=["invoice", "2024"]), executor)

    script = _script(executor)
    assert 'const requested = ["invoice", "2024"];' in script
    assert "merged.push(tag);" in script


@pytest.mark.asyncio
async def test_remove_tags(executor):
    await remove_tags(TagsInput(uuid="ABC", tags=["draft"]), executor)

    script = _script(executor)
    assert 'const requested = ["draft"];' in script
    assert "requested.indexOf(tag) === -1" in script


# ===== Application =====


@pytest.mark.asyncio
async def test_is_running_does_not_launch(executor):
    executor.execute.return_value = IsRunningResult(success=True, is_running=False)

    result = await is_running(NoInput(), executor)

    script = _script(executor)
    assert "includeStandardAdditions" not in script
    assert "theApp.running()" in script
    assert result.is_running is False


@pytest.mark.asyncio
async def test_get_open_databases(executor):
    await get_open_databases(NoInput(), executor)

    assert "theApp.databases()" in _script(executor)


# ===== Lookup =====


@pytest.mark.asyncio
async def test_lookup_by_tags(executor):
    params = LookupRecordInput(lookup_type="tags", tags=["a", "b"], match_any_tag=True)

    await lookup_record(params, executor)

    script = _script(executor)
    assert 'theApp.lookupRecordsWithTags(["a", "b"], {any: true, in: scope})' in script
    assert "searchScopes(theApp, {database: null})" in script
    assert executor.execute.call_args.args[1] is LookupRecordResult


@pytest.mark.asyncio
async def test_lookup_by_content_hash_in_database(executor):
    params = LookupRecordInput(lookup_type="content_hash", value="a1b2c3", database="Inbox")

    await lookup_record(params, executor)

    script = _script(executor)
    assert 'theApp.lookupRecordsWithContentHash("a1b2c3", {in: scope})' in script
    assert 'searchScopes(theApp, {database: "Inbox"})' in script


def test_lookup_requires_value():
    with pytest.raises(Exception, match="filename lookup requires value"):
        LookupRecordInput(lookup_type="filename")


def test_lookup_tags_requires_tags():
    with pytest.raises(Exception, match="requires at least one tag"):
        LookupRecordInput(lookup_type="tags")


@pytest.mark.asyncio
async def test_update_custom_metadata_lone_surrogate_encodable(executor):
    params = UpdateCustomMetaDataInput(uuid="U", custom_meta_data={"Note": "a\ud800b"})

    await update_custom_metadata(params, executor)

    script = _script(executor)
    assert 'const metadata = {"Note": "a\\ud800b"};' in script
    script.encode("utf-8")


def test_update_record_properties_points_to_custom_metadata():
    description = get_record_tools()[1].description

    assert "update_custom_metadata" in description
    assert "Country" in description
