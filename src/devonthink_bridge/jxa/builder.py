"""Script composition for DEVONthink operations.

ScriptBuilder is the single place where complete scripts are assembled.
Operation handlers supply only a body; the builder adds:
  - the application handle (name embedded through the safety layer)
  - the record lookup helpers, when the body resolves records
  - a catch-all that turns any thrown error into a success:false payload

The body runs inside an arrow function, so it must end by returning
JSON.stringify(...) of its payload.
"""

from devonthink_bridge.jxa.escaping import js_string
from devonthink_bridge.jxa.resolution import get_record_lookup_helpers, resolve_statements
from devonthink_bridge.types import RecordLocator

# Catch block shared by every composed script
_CATCH_BLOCK = """  } catch (error) {
    const errorResponse = {};
    errorResponse["success"] = false;
    errorResponse["error"] = error.toString();
    errorResponse["errorType"] = "application";
    return JSON.stringify(errorResponse);
  }"""


class ScriptBuilder:
    """Builder for complete JXA scripts.

    Example:
        builder = ScriptBuilder("DEVONthink")
        builder.resolve(locator)
        builder.add('return JSON.stringify({success: true, name: record.name()});')
        script = builder.build()
    """

    def __init__(self, application_name: str, standard_additions: bool = True):
        """Initialize builder.

        Args:
            application_name: Scripting name of the target application
            standard_additions: Set includeStandardAdditions on the app handle.
                Disable for scripts that must not launch the application.
        """
        self._application_name = application_name
        self._standard_additions = standard_additions
        self._statements: list[str] = []
        self._needs_helpers = False

    def resolve(self, locator: RecordLocator, variable: str = "record") -> "ScriptBuilder":
        """Resolve a locator into a script variable, returning early on a miss."""
        self._needs_helpers = True
        self._statements.append(resolve_statements(locator, variable))
        return self

    def use_helpers(self) -> "ScriptBuilder":
        """Include the lookup helpers (findDatabase, searchScopes, ...) without resolving."""
        self._needs_helpers = True
        return self

    def add(self, statements: str) -> "ScriptBuilder":
        """Append raw body statements. Embedded values must already be escaped."""
        self._statements.append(statements)
        return self

    def build(self) -> str:
        """Assemble the full script text."""
        lines = [
            "(() => {",
            f"  const theApp = Application({js_string(self._application_name)});",
        ]
        if self._standard_additions:
            lines.append("  theApp.includeStandardAdditions = true;")
        if self._needs_helpers:
            lines.append(_indent(get_record_lookup_helpers(), 2))
        lines.append("  try {")
        for statements in self._statements:
            lines.append(_indent(statements, 4))
        lines.append(_CATCH_BLOCK)
        lines.append("})();")
        return "\n".join(lines) + "\n"


def _indent(text: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line if line.strip() else line for line in text.strip("\n").splitlines())
