"""
DEVONthink Bridge

Drives DEVONthink from Python through JavaScript for Automation (JXA).
This package provides:

- String safety layer: validation and escaping of values embedded in scripts
- Record resolution: one lookup fragment shared by every record operation
- Script execution: osascript dispatch with timeouts and typed results
- Tools: thin operation handlers and a registry with uniform results
- CLI infrastructure: Typer-based command structure
"""

__version__ = "0.1.0"

from devonthink_bridge.errors import (
    BridgeError,
    ErrorType,
    HostExecutionError,
    ResultDecodingError,
    ValidationError,
)
from devonthink_bridge.jxa import JXAExecutor, ScriptBuilder
from devonthink_bridge.tools import ToolDefinition, ToolRegistry
from devonthink_bridge.types import RecordLocator, RecordSummary, ScriptResult

__all__ = [
    "__version__",
    # Errors
    "BridgeError",
    "ErrorType",
    "HostExecutionError",
    "ResultDecodingError",
    "ValidationError",
    # Scripts
    "JXAExecutor",
    "ScriptBuilder",
    # Tools
    "ToolDefinition",
    "ToolRegistry",
    # Data Types
    "RecordLocator",
    "RecordSummary",
    "ScriptResult",
]
