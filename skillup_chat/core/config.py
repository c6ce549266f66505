"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
Chat settings are re-read from the environment on every request.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from skillup_chat.core.errors import ConfigurationError

load_dotenv()

# Project root (where data/ lives)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent

# Knowledge base bundled with the app
DEFAULT_KNOWLEDGE_BASE_PATH: Path = PROJECT_ROOT / "data" / "skillup-knowledge.json"
DEFAULT_INSTITUTE_NAME: str = "SkillUp Institute"

# Gemini (Google generative language API)
GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL: str = "gemini-2.0-flash"
SUPPORTED_API_VERSIONS: frozenset[str] = frozenset({"v1", "v1beta"})

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0

# Chat UI backend
API_BASE: str = os.getenv("API_BASE", "http://localhost:8000").strip() or "http://localhost:8000"
UI_REQUEST_TIMEOUT: float = 90.0


@dataclass(frozen=True)
class ChatSettings:
    """Per-request snapshot of the environment the chat endpoint depends on."""

    api_key: str
    model: str
    api_version_override: str | None
    api_base: str = GEMINI_API_BASE
    timeout: float = LLM_API_TIMEOUT
    knowledge_base_path: Path = DEFAULT_KNOWLEDGE_BASE_PATH
    institute_name: str = DEFAULT_INSTITUTE_NAME


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def load_chat_settings() -> ChatSettings:
    """
    Read chat settings from the environment.

    Raises:
        ConfigurationError: GOOGLE_API_KEY is missing, GOOGLE_API_VERSION is not
            one of v1/v1beta, or GOOGLE_API_TIMEOUT is not a positive number.
    """
    api_key = _env("GOOGLE_API_KEY")
    if not api_key:
        raise ConfigurationError("Missing GOOGLE_API_KEY")

    override = _env("GOOGLE_API_VERSION") or None
    if override is not None and override not in SUPPORTED_API_VERSIONS:
        raise ConfigurationError(
            f"Invalid GOOGLE_API_VERSION {override!r}; expected one of {sorted(SUPPORTED_API_VERSIONS)}"
        )

    raw_timeout = _env("GOOGLE_API_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else LLM_API_TIMEOUT
    except ValueError:
        raise ConfigurationError(f"Invalid GOOGLE_API_TIMEOUT {raw_timeout!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"Invalid GOOGLE_API_TIMEOUT {raw_timeout!r}")

    kb_path = _env("KNOWLEDGE_BASE_PATH")
    return ChatSettings(
        api_key=api_key,
        model=_env("GOOGLE_MODEL") or DEFAULT_MODEL,
        api_version_override=override,
        api_base=(_env("GOOGLE_API_BASE") or GEMINI_API_BASE).rstrip("/"),
        timeout=timeout,
        knowledge_base_path=Path(kb_path) if kb_path else DEFAULT_KNOWLEDGE_BASE_PATH,
        institute_name=_env("INSTITUTE_NAME") or DEFAULT_INSTITUTE_NAME,
    )
