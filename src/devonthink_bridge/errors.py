"""
Exception classes for the DEVONthink automation bridge.

This module defines the failures the bridge raises in-process:
- ValidationError: caller-supplied text or locator rejected before dispatch
- HostExecutionError: osascript could not start, timed out, or crashed
- ResultDecodingError: osascript output is not a valid result payload

Record resolution misses and application-level rejections are NOT raised;
they arrive as success:false payloads tagged with an ErrorType.

Per project patterns:
- Inherit from a shared base so callers can catch every bridge failure
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""

from enum import Enum


class ErrorType(str, Enum):
    """
    Failure categories reported in the errorType field of a result payload.
    """

    VALIDATION = "validation"
    """Input rejected before any host process was started."""

    HOST = "host"
    """osascript failed to start or exited with a non-zero status."""

    TIMEOUT = "timeout"
    """osascript exceeded the configured timeout and was killed."""

    DECODE = "decode"
    """osascript output was not a valid result payload."""

    NOT_FOUND = "not_found"
    """No record matched the locator."""

    AMBIGUOUS = "ambiguous"
    """More than one record matched the locator."""

    APPLICATION = "application"
    """DEVONthink rejected the operation."""


class BridgeError(Exception):
    """
    Base class for failures raised by the bridge itself.

    Attributes:
        error_type: ErrorType reported when the failure is converted to a payload
    """

    error_type: ErrorType = ErrorType.HOST


class ValidationError(BridgeError):
    """
    Raised when a value fails validation before dispatch.

    Attributes:
        field: Name of the offending parameter
        reason: Why the value was rejected
    """

    error_type = ErrorType.VALIDATION

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field} {reason}")


class HostExecutionError(BridgeError):
    """
    Raised when the scripting host fails at the process level.

    Attributes:
        reason: One of "spawn", "timeout", "exit"
        returncode: Process exit code, if the process ran
        stderr: Captured standard error, if any
        timeout: Timeout in seconds that was exceeded (timeout variant only)
    """

    def __init__(
        self,
        reason: str,
        message: str,
        returncode: int | None = None,
        stderr: str = "",
        timeout: float | None = None,
    ) -> None:
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        self.timeout = timeout
        super().__init__(message)

    @property
    def timed_out(self) -> bool:
        return self.reason == "timeout"

    @property
    def error_type(self) -> ErrorType:  # type: ignore[override]
        return ErrorType.TIMEOUT if self.timed_out else ErrorType.HOST


class ResultDecodingError(BridgeError):
    """
    Raised when host output cannot be decoded into the expected result.

    This indicates a defect in the generated script, not a user error.

    Attributes:
        reason: What was wrong with the output
        output: The raw output (truncated for the message)
    """

    error_type = ErrorType.DECODE

    def __init__(self, reason: str, output: str) -> None:
        self.reason = reason
        self.output = output
        preview = output if len(output) <= 200 else output[:200] + "..."
        super().__init__(f"Could not decode script result: {reason} (output: {preview!r})")
