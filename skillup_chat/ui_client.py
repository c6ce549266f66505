"""
HTTP helper for the chat widget: POST {message} to the backend, return text to show.

Kept apart from ui.py so it can be used (and tested) without Streamlit.
"""

import requests

from skillup_chat.core.config import API_BASE, UI_REQUEST_TIMEOUT

TYPING_PLACEHOLDER = "Typing..."
GREETING = "Hello 👋, how can Skillup help you today?"
NO_REPLY = "Sorry, I couldn't understand that."
CONNECTION_ERROR = "Error connecting to AI 😞"


def send_message(message: str, api_base: str = API_BASE, timeout: float = UI_REQUEST_TIMEOUT) -> str:
    """Return the assistant reply, or a short apology when the backend has none."""
    try:
        r = requests.post(f"{api_base.rstrip('/')}/api/chat", json={"message": message}, timeout=timeout)
        data = r.json()
    except (requests.RequestException, ValueError):
        return CONNECTION_ERROR
    reply = data.get("reply") if isinstance(data, dict) else None
    return reply or NO_REPLY
