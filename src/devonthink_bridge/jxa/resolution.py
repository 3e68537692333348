"""Record resolution for generated JXA scripts.

Turns a RecordLocator into exactly one DEVONthink record, or a typed miss,
inside the same script that then operates on it. The lookup runs in the
host process, so resolution and the operation share one osascript run.

Strategy order is fixed and picked by which locator fields are populated:
  1. uuid              - global lookup; a miss is final
  2. database + id     - numeric id within the named database
  3. path              - filesystem path, named database or every open one
  4. name              - exact, case-sensitive name, named database or all
  5. otherwise         - not found

A database name that matches no open database yields no scope to search,
so the result is not_found rather than an error.
"""

import re

from devonthink_bridge.jxa.escaping import check_safe, js_string, js_value
from devonthink_bridge.types import LOCATOR_FIELDS, RecordLocator

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

RECORD_LOOKUP_HELPERS = """
function findDatabase(theApp, name) {
  const databases = theApp.databases();
  for (let i = 0; i < databases.length; i++) {
    if (databases[i].name() === name) {
      return databases[i];
    }
  }
  return null;
}

function searchScopes(theApp, options) {
  if (options.database !== null && options.database !== undefined) {
    const database = findDatabase(theApp, options.database);
    return database ? [database] : [];
  }
  return theApp.databases();
}

function pickUnique(matches, method) {
  if (matches.length === 1) {
    return {record: matches[0], status: "found", method: method, candidates: 1};
  }
  return {
    record: null,
    status: matches.length > 1 ? "ambiguous" : "not_found",
    method: method,
    candidates: matches.length
  };
}

function getRecord(theApp, options) {
  if (options.uuid) {
    let record = null;
    try {
      record = theApp.getRecordWithUuid(options.uuid);
    } catch (lookupError) {
      record = null;
    }
    return pickUnique(record ? [record] : [], "uuid");
  }

  if (options.database && options.id !== null && options.id !== undefined) {
    const database = findDatabase(theApp, options.database);
    let record = null;
    if (database) {
      try {
        record = theApp.getRecordWithId(options.id, {in: database});
      } catch (lookupError) {
        record = null;
      }
    }
    return pickUnique(record ? [record] : [], "id");
  }

  if (options.path) {
    const matches = [];
    const scopes = searchScopes(theApp, options);
    for (let i = 0; i < scopes.length; i++) {
      const found = theApp.lookupRecordsWithPath(options.path, {in: scopes[i]}) || [];
      for (let j = 0; j < found.length; j++) {
        matches.push(found[j]);
      }
    }
    return pickUnique(matches, "path");
  }

  if (options.name) {
    const matches = [];
    const scopes = searchScopes(theApp, options);
    for (let i = 0; i < scopes.length; i++) {
      const found = scopes[i].contents.whose({name: options.name})();
      for (let j = 0; j < found.length; j++) {
        // whose() compares case-insensitively; keep exact matches only
        if (found[j].name() === options.name) {
          matches.push(found[j]);
        }
      }
    }
    return pickUnique(matches, "name");
  }

  return pickUnique([], "none");
}

function resolutionFailure(lookup, label) {
  const response = {};
  response["success"] = false;
  response["errorType"] = lookup.status;
  if (lookup.status === "ambiguous") {
    response["error"] = "Found " + lookup.candidates + " records matching " + label +
      "; specify uuid or database to select one";
    response["candidates"] = lookup.candidates;
  } else {
    response["error"] = "Record with " + label + " not found";
  }
  return response;
}
"""


def get_record_lookup_helpers() -> str:
    """Return the JXA fragment defining getRecord and resolutionFailure."""
    return RECORD_LOOKUP_HELPERS


def validate_locator(locator: RecordLocator, prefix: str = "") -> None:
    """Gate every text field of a locator through the safety check.

    Args:
        locator: Locator to check
        prefix: Prefix for the field name in error messages (e.g. "destination.")

    Raises:
        ValidationError: If any text field contains unsafe characters
    """
    for field in ("uuid", "path", "name", "database"):
        check_safe(f"{prefix}{field}", getattr(locator, field))


def lookup_options_literal(locator: RecordLocator) -> str:
    """Render the locator as a JXA object literal for getRecord().

    All five fields are emitted; absent ones as null.
    """
    entries = [f'"{field}": {js_value(getattr(locator, field))}' for field in LOCATOR_FIELDS]
    return "{" + ", ".join(entries) + "}"


def resolve_statements(locator: RecordLocator, variable: str = "record") -> str:
    """Render the statements that resolve a locator into a script variable.

    On a miss the enclosing function returns the resolutionFailure payload,
    so statements after these only run with a resolved record.

    Args:
        locator: Which record to resolve
        variable: JXA variable name to bind the record to

    Returns:
        JXA statements for use inside a ScriptBuilder body

    Raises:
        ValueError: If variable is not a valid identifier
    """
    if not _IDENTIFIER.match(variable):
        raise ValueError(f"Invalid JXA variable name: {variable!r}")
    lookup = f"{variable}Lookup"
    return (
        f"const {lookup} = getRecord(theApp, {lookup_options_literal(locator)});\n"
        f"if (!{lookup}.record) {{\n"
        f"  return JSON.stringify(resolutionFailure({lookup}, {js_string(locator.describe())}));\n"
        f"}}\n"
        f"const {variable} = {lookup}.record;\n"
    )
