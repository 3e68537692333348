"""Pattern definitions for JXA string safety checks.

This module defines regex patterns for detecting text that could terminate
or alter the string literal it is embedded in. Used by is_jxa_safe_string
to reject caller-supplied values before any script is generated.
"""

# Each entry is (pattern, description); the first match wins
UNSAFE_PATTERNS = [
    (r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "raw control character"),
    (r"[\"']\s*[;)}\]]", "quote followed by a statement terminator"),
    (r"\$\{", "template literal interpolation"),
    (r"`", "backtick"),
]

# Characters that must never appear unescaped inside a JXA string literal
ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\u0027",
    "`": "\\u0060",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
