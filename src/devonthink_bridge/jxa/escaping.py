"""String safety layer for generated JXA.

Scripts are composed as text, so every caller-supplied value that lands in
a script goes through exactly one of the embedders below, at the point of
embedding. Escaping a value twice corrupts it.

Two checks are provided:
  1. is_jxa_safe_string - fast gate that rejects identifiers which could
     break out of a literal (quote + terminator, raw control characters)
  2. escape_string_for_jxa - transforms any text so that, placed between
     double quotes, JavaScript reads back the original value exactly

The escapes produced are also valid JSON string escapes, which keeps the
output decodable by json.loads for verification.
"""

import json
import math
import re

from devonthink_bridge.errors import ValidationError
from devonthink_bridge.jxa.patterns import ESCAPE_MAP, UNSAFE_PATTERNS

_COMPILED_UNSAFE = [(re.compile(pattern), desc) for pattern, desc in UNSAFE_PATTERNS]

# Unpaired surrogates cannot be encoded as UTF-8 for osascript stdin
_SURROGATES = re.compile("[\ud800-\udfff]")


def find_unsafe_pattern(value: str) -> str | None:
    """Return the description of the first unsafe pattern in value, if any."""
    for pattern, desc in _COMPILED_UNSAFE:
        if pattern.search(value):
            return desc
    return None


def is_jxa_safe_string(value: str) -> bool:
    """Check whether value can be embedded without altering script syntax.

    Args:
        value: Caller-supplied text

    Returns:
        True if no unsafe pattern matches, False otherwise
    """
    if not isinstance(value, str):
        return False
    return find_unsafe_pattern(value) is None


def check_safe(field: str, value: str | None) -> None:
    """Raise ValidationError if value fails is_jxa_safe_string.

    None is accepted as "not supplied".

    Raises:
        ValidationError: If value contains an unsafe pattern
    """
    if value is None:
        return
    if not isinstance(value, str):
        raise ValidationError(field, f"must be a string, got {type(value).__name__}")
    desc = find_unsafe_pattern(value)
    if desc is not None:
        raise ValidationError(field, f"contains invalid characters ({desc})")


def escape_string_for_jxa(value: str) -> str:
    """Escape text for placement between double quotes in a JXA script.

    Args:
        value: Any text

    Returns:
        Escaped text, without surrounding quotes
    """
    parts = []
    for char in value:
        mapped = ESCAPE_MAP.get(char)
        if mapped is not None:
            parts.append(mapped)
        elif char < " " or char == "\x7f" or "\ud800" <= char <= "\udfff":
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(char)
    return "".join(parts)


def js_string(value: str) -> str:
    """Embed value as a double-quoted string literal."""
    if not isinstance(value, str):
        raise TypeError(f"js_string expects str, got {type(value).__name__}")
    return f'"{escape_string_for_jxa(value)}"'


def js_number(value: int | float) -> str:
    """Embed value as a numeric literal.

    Raises:
        ValidationError: If value is not a finite number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("value", f"must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError("value", "must be a finite number")
    return repr(value)


def js_bool(value: bool) -> str:
    """Embed value as a boolean literal."""
    return "true" if value else "false"


def js_json(value) -> str:
    """Embed a JSON-serializable structure as a JavaScript expression.

    JSON text is a valid JavaScript expression once the two line separators
    JavaScript treats as newlines are escaped. Unpaired surrogates become
    \\u escapes so the script stays encodable.
    """
    text = json.dumps(value, ensure_ascii=False)
    text = text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
    return _SURROGATES.sub(lambda match: f"\\u{ord(match.group()):04x}", text)


def js_value(value) -> str:
    """Embed any supported Python value using the matching embedder."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return js_bool(value)
    if isinstance(value, (int, float)):
        return js_number(value)
    if isinstance(value, str):
        return js_string(value)
    return js_json(value)
