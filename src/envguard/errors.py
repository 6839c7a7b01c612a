"""Custom exceptions for envguard with user-friendly context."""

from typing import Any


class EnvGuardError(Exception):
    """Base error for envguard."""

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context."""
        parts = [self.message]

        if self.context:
            ctx_parts = [f"{k}={v}" for k, v in self.context.items() if v is not None]
            if ctx_parts:
                parts.append(f"({', '.join(ctx_parts)})")

        return " ".join(parts)


class WorkspaceNotFoundError(EnvGuardError):
    """No usable workspace root."""

    def __init__(self, root: str | None = None, **context: Any):
        if root:
            msg = f"Workspace folder '{root}' does not exist. Cannot save to the env file."
        else:
            msg = "No workspace folder open. Cannot save to the env file."
        super().__init__(msg, **context)


class DocumentNotFoundError(EnvGuardError):
    """Source document could not be read."""

    def __init__(self, path: str, **context: Any):
        super().__init__(f"Document '{path}' not found or unreadable", path=path, **context)


class ReadOnlyTargetError(EnvGuardError):
    """Target document cannot be written."""

    def __init__(self, path: str, **context: Any):
        super().__init__(
            f"Failed to apply edit. The file '{path}' is read-only.",
            **context
        )


class StaleSpanError(EnvGuardError):
    """Document changed since the finding was computed."""

    def __init__(self, path: str, start: int, end: int, **context: Any):
        super().__init__(
            f"The text at {start}-{end} in '{path}' no longer matches the secret. "
            f"Rescan the document and try again.",
            **context
        )


class InvalidVariableNameError(EnvGuardError):
    """Caller-supplied variable name is not UPPER_SNAKE_CASE."""

    def __init__(self, name: str, **context: Any):
        super().__init__(
            f"Invalid variable name '{name}'. Use UPPER_SNAKE_CASE (e.g. OPENAI_API_KEY).",
            **context
        )


class UnsupportedValueError(EnvGuardError):
    """Secret value cannot be stored in a line-oriented env file."""

    def __init__(self, reason: str, **context: Any):
        super().__init__(f"Secret value cannot be stored: {reason}", **context)


class StoreWriteError(EnvGuardError):
    """Writing the env file failed; the source was left untouched."""

    def __init__(self, path: str, reason: str, **context: Any):
        super().__init__(
            f"Could not write '{path}': {reason}. The source file was not changed.",
            **context
        )


class SourceEditError(EnvGuardError):
    """The secret is stored but the source rewrite failed."""

    def __init__(self, path: str, variable_name: str, reason: str, **context: Any):
        super().__init__(
            f"Saved {variable_name} to the env file but could not update '{path}': {reason}",
            variable_name=variable_name,
            **context
        )
