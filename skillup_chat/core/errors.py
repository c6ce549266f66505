"""
Application errors for clean API error handling.

Each error carries a user-facing message; the API layer maps the type to an
HTTP status (see skillup_chat.api.handlers). Nothing here knows about FastAPI.
"""

from typing import Any


class ChatError(Exception):
    """Base class for errors raised while answering a chat message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputValidationError(ChatError):
    """Raised when the request body has no usable message (400)."""


class ConfigurationError(ChatError):
    """Raised when a required setting such as GOOGLE_API_KEY is missing or invalid (500)."""


class KnowledgeLoadError(ChatError):
    """Raised when the knowledge base document is missing or malformed (500)."""


class UpstreamError(ChatError):
    """Raised when every generation attempt against the Gemini API failed (502)."""

    def __init__(
        self,
        status: int,
        details: str,
        model: str,
        api_version: str,
        hint: str | None = None,
        attempts: list[Any] | None = None,
    ) -> None:
        self.status = status
        self.details = details
        self.model = model
        self.api_version = api_version
        self.hint = hint
        self.attempts = attempts or []
        super().__init__("Upstream error")

    def to_payload(self) -> dict[str, Any]:
        """Response body for the 502 reply. Attempts stay server-side."""
        payload: dict[str, Any] = {
            "error": self.message,
            "status": self.status,
            "details": self.details,
            "model": self.model,
            "apiVersion": self.api_version,
        }
        if self.hint:
            payload["hint"] = self.hint
        return payload
