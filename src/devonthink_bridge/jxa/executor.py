"""JXA script execution through osascript.

Runs a composed script in its own osascript process with:
- Script text passed on stdin (no shell, no argument length limits)
- Timeout enforcement (process killed on expiry)
- stdout as the only result channel, decoded as one JSON object

Per call the script moves Composing -> Dispatched -> Completed, or ends in
HostExecutionError / ResultDecodingError. Nothing is retried; concurrent
calls are independent processes and share no state here.
"""

import asyncio
import json
import logging
from typing import TypeVar

from pydantic import ValidationError as PydanticValidationError

from devonthink_bridge.config import Settings, settings as default_settings
from devonthink_bridge.errors import HostExecutionError, ResultDecodingError, ValidationError
from devonthink_bridge.types import ScriptResult

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ScriptResult)

# Payload keys kept on a failure; operation-specific fields are not trusted
_FAILURE_KEYS = ("success", "error", "errorType", "candidates")


def decode_result(output: str, result_type: type[R] = ScriptResult) -> R:
    """Decode osascript stdout into a typed result.

    Args:
        output: Raw standard output of the script
        result_type: ScriptResult subclass describing the expected payload

    Returns:
        Validated result. On success:false only the failure fields are kept.

    Raises:
        ResultDecodingError: If output is not a JSON object with a boolean
            success flag, or violates result_type
    """
    text = output.strip()
    if not text:
        raise ResultDecodingError("empty output", output)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResultDecodingError(f"invalid JSON ({e.msg})", output) from e

    if not isinstance(payload, dict):
        raise ResultDecodingError(f"expected object, got {type(payload).__name__}", output)
    if not isinstance(payload.get("success"), bool):
        raise ResultDecodingError("missing boolean 'success' field", output)

    if not payload["success"]:
        payload = {key: payload[key] for key in _FAILURE_KEYS if key in payload}

    try:
        return result_type.model_validate(payload)
    except PydanticValidationError as e:
        raise ResultDecodingError(
            f"payload does not match {result_type.__name__}: {e.error_count()} error(s)", output
        ) from e


class JXAExecutor:
    """Executor for JXA scripts against the scripting host.

    Each call spawns `osascript -l JavaScript -` and writes the script to
    its stdin. Exit status zero means the host ran without a host-level
    fault; script-level errors are expected to arrive as success:false.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize executor.

        Args:
            settings: Bridge settings, or None for the environment defaults
        """
        self.settings = settings or default_settings

    @property
    def application_name(self) -> str:
        return self.settings.application_name

    def effective_timeout(self, timeout: float | None) -> float:
        """Default a missing timeout and clamp to max_timeout."""
        if timeout is None or timeout <= 0:
            timeout = self.settings.default_timeout
        return min(timeout, self.settings.max_timeout)

    async def run(self, script: str, timeout: float | None = None) -> str:
        """Run a script and return its standard output.

        Args:
            script: Complete JXA program text
            timeout: Seconds before the process is killed (default from settings)

        Returns:
            Decoded standard output

        Raises:
            HostExecutionError: If osascript cannot start, times out, or exits non-zero
            ValidationError: If the script text cannot be encoded as UTF-8
        """
        effective_timeout = self.effective_timeout(timeout)
        try:
            script_bytes = script.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError(
                "script", f"is not encodable as UTF-8 ({e.reason} at position {e.start})"
            ) from e

        logger.debug(
            "Dispatching script (%d chars, timeout %.1fs)", len(script), effective_timeout
        )

        try:
            proc = await asyncio.create_subprocess_exec(
                self.settings.osascript_path,
                "-l",
                "JavaScript",
                "-",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Could not start %s: %s", self.settings.osascript_path, e)
            raise HostExecutionError(
                "spawn", f"Could not start {self.settings.osascript_path}: {e}"
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input=script_bytes),
                timeout=effective_timeout,
            )
        except asyncio.CancelledError:
            await self._kill(proc)
            logger.debug("Script cancelled; osascript killed")
            raise
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.warning("Script timed out after %.1fs", effective_timeout)
            raise HostExecutionError(
                "timeout",
                f"Script execution timed out after {effective_timeout}s",
                timeout=effective_timeout,
            )

        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        if proc.returncode != 0:
            logger.warning("osascript exited with code %s: %s", proc.returncode, stderr_text)
            raise HostExecutionError(
                "exit",
                f"osascript exited with code {proc.returncode}: {stderr_text or 'no error output'}",
                returncode=proc.returncode,
                stderr=stderr_text,
            )

        if stderr_text:
            # console.log() output from the script lands on stderr
            logger.debug("Script log output: %s", stderr_text)

        return stdout.decode("utf-8", errors="replace")

    async def execute(
        self,
        script: str,
        result_type: type[R] = ScriptResult,
        timeout: float | None = None,
    ) -> R:
        """Run a script and decode its result payload.

        Args:
            script: Complete JXA program text
            result_type: ScriptResult subclass describing the expected payload
            timeout: Seconds before the process is killed (default from settings)

        Returns:
            The decoded result, success or application-level failure

        Raises:
            HostExecutionError: On process-level failure
            ResultDecodingError: If output is not a valid payload
        """
        output = await self.run(script, timeout=timeout)
        try:
            result = decode_result(output, result_type)
        except ResultDecodingError as e:
            logger.warning("%s", e)
            raise
        logger.debug("Script completed (success=%s)", result.success)
        return result

    async def _kill(self, proc: asyncio.subprocess.Process) -> None:
        try:
            proc.kill()
        except ProcessLookupError:
            return  # exited just before the kill
        await proc.wait()
