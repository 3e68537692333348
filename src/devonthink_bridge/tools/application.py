"""Application-level tools: running state and open databases."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.executor import JXAExecutor
from devonthink_bridge.tools.registry import ToolDefinition
from devonthink_bridge.types import ScriptResult


class NoInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DatabaseInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    uuid: str
    path: str | None = None
    read_only: bool | None = None


class IsRunningResult(ScriptResult):
    required_on_success = ("is_running",)

    is_running: bool | None = None


class OpenDatabasesResult(ScriptResult):
    required_on_success = ("databases",)

    databases: list[DatabaseInfo] | None = None
    current_database: str | None = None


async def is_running(
    params: NoInput, executor: JXAExecutor, timeout: float | None = None
) -> IsRunningResult:
    # No standard additions: touching them would launch the application
    builder = ScriptBuilder(executor.application_name, standard_additions=False)
    builder.add(
        """
const response = {};
response["success"] = true;
response["isRunning"] = theApp.running();
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), IsRunningResult, timeout=timeout)


async def get_open_databases(
    params: NoInput, executor: JXAExecutor, timeout: float | None = None
) -> OpenDatabasesResult:
    builder = ScriptBuilder(executor.application_name)
    builder.add(
        """
const databases = [];
const open = theApp.databases();
for (let i = 0; i < open.length; i++) {
  const database = open[i];
  databases.push({
    name: database.name(),
    uuid: database.uuid(),
    path: database.path(),
    readOnly: database.readOnly()
  });
}
let currentDatabase = null;
try {
  currentDatabase = theApp.currentDatabase().name();
} catch (currentError) {
  currentDatabase = null;
}
const response = {};
response["success"] = true;
response["databases"] = databases;
response["currentDatabase"] = currentDatabase;
return JSON.stringify(response);
"""
    )
    return await executor.execute(builder.build(), OpenDatabasesResult, timeout=timeout)


def get_application_tools() -> list[ToolDefinition]:
    """Tool definitions for application state."""
    return [
        ToolDefinition(
            name="is_running",
            description="Check whether DEVONthink is running, without launching it.",
            input_model=NoInput,
            result_model=IsRunningResult,
            handler=is_running,
        ),
        ToolDefinition(
            name="get_open_databases",
            description="List the databases currently open in DEVONthink.",
            input_model=NoInput,
            result_model=OpenDatabasesResult,
            handler=get_open_databases,
        ),
    ]
