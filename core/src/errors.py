"""
Exceptions shared by the parser, the services and the CLI.
"""

from typing import Optional


class PulseError(Exception):
    """Base class for all Pulse errors."""
    pass


class ParseError(PulseError):
    """Raised when a Pulsefile cannot be parsed."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.source_line = source_line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"Pulsefile parse error: {self.message}"
        return f"Pulsefile parse error at line {self.line}, column {self.column}: {self.message}"

    def context(self) -> str:
        """Offending source line with a caret under the error column."""
        if self.source_line is None or self.column is None:
            return ""
        return f"{self.source_line}\n{' ' * (self.column - 1)}^"


class PulsefileNotFoundError(PulseError):
    """Raised when no Pulsefile is available for a repository."""
    pass


class WebhookPayloadError(PulseError):
    """Raised when a webhook payload is missing required fields."""
    pass


class WorkspaceError(PulseError):
    """Raised when a repository workspace cannot be prepared."""
    pass


class ApiError(PulseError):
    """Raised by the CLI client when the server cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
