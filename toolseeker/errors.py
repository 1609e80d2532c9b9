"""Error types raised by toolseeker."""

from typing import List, Optional


class ToolSeekerError(Exception):
    """Base class for toolseeker errors."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        super().__init__(message)
        self.recovery_hint = recovery_hint or "Check the searcher and advisor configuration."


class IndexStorageError(ToolSeekerError):
    """A search backend failed to commit or open its index storage.

    This is not recoverable within the session and is always propagated.
    """

    def __init__(self, session_id: str, operation: str, cause: Exception):
        self.session_id = session_id
        self.operation = operation
        message = f"Failed to {operation} index for session '{session_id}': {cause}"
        super().__init__(message, recovery_hint="Discard the session and start a new conversation.")


class SearchPayloadError(ToolSeekerError):
    """A tool search response payload could not be parsed into tool names."""

    def __init__(self, payload: str, reason: str):
        self.payload = payload
        message = f"Malformed tool search payload ({reason}): {payload[:200]!r}"
        super().__init__(message, recovery_hint="Expected a JSON array of tool names.")


class ToolNotFoundError(ToolSeekerError):
    """The host could not resolve a tool the model asked to invoke."""

    def __init__(self, tool_name: str, available: Optional[List[str]] = None):
        self.tool_name = tool_name
        self.available = sorted(available or [])
        message = f"Tool '{tool_name}' is not registered"
        hint = "Search for the tool first; only discovered tools can be invoked."
        super().__init__(message, recovery_hint=hint)


class ConfigurationError(ToolSeekerError):
    """Raised for invalid searcher or advisor configuration."""

    def __init__(self, setting: str, value: object, valid: List[str]):
        self.setting = setting
        self.value = value
        self.valid = valid
        message = f"Invalid value {value!r} for '{setting}'. Valid values: {', '.join(valid)}"
        super().__init__(message, recovery_hint=f"Use one of: {', '.join(valid)}")
