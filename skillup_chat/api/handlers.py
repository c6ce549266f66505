"""
API handlers: validate request data, call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging
from typing import Any

from fastapi.responses import JSONResponse

from skillup_chat.core.config import load_chat_settings
from skillup_chat.core.errors import ConfigurationError, InputValidationError, UpstreamError
from skillup_chat.services.chat_service import answer_message

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validate_message(payload: Any) -> str:
    """Return the message from a decoded JSON body; InputValidationError if absent, empty or not a string."""
    message = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(message, str) or not message:
        raise InputValidationError("Invalid message")
    return message


def handle_chat(payload: Any) -> JSONResponse:
    """
    Answer one chat message. Validation and configuration are checked before
    any outbound call; unexpected failures are logged and returned as a generic 500.
    """
    try:
        message = validate_message(payload)
        settings = load_chat_settings()
        reply = answer_message(message, settings)
    except InputValidationError as e:
        return _error(400, e.message)
    except ConfigurationError as e:
        logger.error("[handlers:handle_chat] configuration error: %s", e.message)
        return _error(500, e.message)
    except UpstreamError as e:
        return JSONResponse(status_code=502, content=e.to_payload())
    except Exception:
        logger.exception("Server error")
        return _error(500, "Server error")
    return JSONResponse(status_code=200, content={"reply": reply})
