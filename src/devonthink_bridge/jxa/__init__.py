"""JXA script generation and execution for DEVONthink.

This module provides the string safety layer, the record resolution
fragment, script composition and the osascript executor.

Public exports:
    JXAExecutor: Runs scripts through osascript and decodes results
    decode_result: Decode raw output into a typed result
    ScriptBuilder: Composes complete scripts around an operation body
    get_record_lookup_helpers: JXA fragment defining getRecord()
    resolve_statements: Statements resolving a locator into a variable
    validate_locator: Safety-check every text field of a locator
    is_jxa_safe_string: Fast pre-validation gate for identifiers
    escape_string_for_jxa: Escape text for a double-quoted literal
    js_string, js_number, js_bool, js_json, js_value: Per-context embedders
"""

from devonthink_bridge.jxa.builder import ScriptBuilder
from devonthink_bridge.jxa.escaping import (
    check_safe,
    escape_string_for_jxa,
    find_unsafe_pattern,
    is_jxa_safe_string,
    js_bool,
    js_json,
    js_number,
    js_string,
    js_value,
)
from devonthink_bridge.jxa.executor import JXAExecutor, decode_result
from devonthink_bridge.jxa.resolution import (
    get_record_lookup_helpers,
    lookup_options_literal,
    resolve_statements,
    validate_locator,
)

__all__ = [
    "JXAExecutor",
    "decode_result",
    "ScriptBuilder",
    "get_record_lookup_helpers",
    "lookup_options_literal",
    "resolve_statements",
    "validate_locator",
    "check_safe",
    "escape_string_for_jxa",
    "find_unsafe_pattern",
    "is_jxa_safe_string",
    "js_bool",
    "js_json",
    "js_number",
    "js_string",
    "js_value",
]
