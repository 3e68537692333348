"""DEVONthink operations exposed as tools.

Each tool is a thin handler: it validates its locator, builds a script
with ScriptBuilder and returns the decoded result unchanged.

Public exports:
    ToolDefinition: Tool name, models and handler
    ToolRegistry: Name lookup and uniform invocation
    get_default_tools: Every built-in tool definition
"""

from devonthink_bridge.tools.registry import ToolDefinition, ToolRegistry


def get_default_tools() -> list[ToolDefinition]:
    """
    Get every built-in tool definition.

    Returns:
        List of ToolDefinition for application, record, metadata, tag and lookup tools
    """
    from devonthink_bridge.tools.application import get_application_tools
    from devonthink_bridge.tools.lookup import get_lookup_tools
    from devonthink_bridge.tools.metadata import get_metadata_tools
    from devonthink_bridge.tools.records import get_record_tools
    from devonthink_bridge.tools.tags import get_tag_tools

    return (
        get_application_tools()
        + get_record_tools()
        + get_metadata_tools()
        + get_tag_tools()
        + get_lookup_tools()
    )


__all__ = ["ToolDefinition", "ToolRegistry", "get_default_tools"]
