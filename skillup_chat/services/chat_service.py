"""
Chat service: answer one user message with the knowledge base and Gemini.

Responsibility: load the knowledge base, build the augmented prompt, run the
model resolver, and turn an exhausted fallback chain into UpstreamError.
Called by the API layer; no HTTP or FastAPI types here.
"""

import json
import logging
from typing import Any

from skillup_chat.agent.llm import GeminiClient
from skillup_chat.agent.resolver import generate_with_fallback
from skillup_chat.agent.types import Success
from skillup_chat.core.config import ChatSettings
from skillup_chat.core.errors import UpstreamError
from skillup_chat.ingest.loader import load_knowledge_base

logger = logging.getLogger(__name__)

HINT_NOT_FOUND = (
    "Model not found or unsupported for this API/version. Try GOOGLE_MODEL=gemini-1.5-flash-latest "
    "and/or GOOGLE_API_VERSION=v1. If using a Vertex AI key, switch to an AI Studio API key or "
    "update the endpoint to Vertex."
)
HINT_FORBIDDEN = (
    "Permission denied. If this is a Vertex AI key, the AI Studio endpoint will not work. Use an AI "
    "Studio key for generativelanguage.googleapis.com or configure the Vertex endpoint."
)


def upstream_hint(status: int) -> str | None:
    if status == 404:
        return HINT_NOT_FOUND
    if status == 403:
        return HINT_FORBIDDEN
    return None


def build_prompt(knowledge_base: dict[str, Any], message: str, institute_name: str) -> str:
    """Embed the whole knowledge base and the question in a single user prompt."""
    kb_block = json.dumps(knowledge_base, indent=2, ensure_ascii=False)
    return f"""
You are an AI assistant for {institute_name}. Use the following knowledge base to answer questions accurately and helpfully.

KNOWLEDGE BASE:
{kb_block}

USER QUESTION: "{message}"

INSTRUCTIONS:
1. If the question is about {institute_name} (courses, admissions, fees, placements, etc.), use the knowledge base to provide accurate information.
2. Be friendly, professional, and helpful.
3. If the question is not related to {institute_name}, politely redirect to institute-related topics.
4. For complex queries, break down information into clear points.
5. Always maintain a positive and encouraging tone.
6. If you don't know something from the knowledge base, admit it and suggest contacting the institute directly.

Please provide a helpful response:
"""


def build_client(settings: ChatSettings) -> GeminiClient:
    return GeminiClient(api_key=settings.api_key, base_url=settings.api_base, timeout=settings.timeout)


def answer_message(message: str, settings: ChatSettings) -> str:
    """
    Return the model's reply to one message.

    Raises:
        KnowledgeLoadError: The knowledge base could not be loaded.
        UpstreamError: Every generation attempt failed.
        httpx.HTTPError: Transport failure talking to the API (not retried).
    """
    logger.info("[chat_service:answer_message] IN  message_len=%d model=%s", len(message), settings.model)
    knowledge_base = load_knowledge_base(settings.knowledge_base_path)
    prompt = build_prompt(knowledge_base, message, settings.institute_name)

    with build_client(settings) as client:
        outcome = generate_with_fallback(
            client,
            prompt,
            model_id=settings.model,
            api_version_override=settings.api_version_override,
        )

    result = outcome.result
    if isinstance(result, Success):
        logger.info(
            "[chat_service:answer_message] OUT reply_len=%d failed_attempts=%d",
            len(result.reply_text), len(outcome.attempts),
        )
        return result.reply_text

    spec = result.model_spec
    logger.error(
        "Gemini upstream error status=%d spec=%s attempts=%s body=%r",
        result.http_status, spec,
        [f"{a.model_spec}:{a.http_status}" for a in outcome.attempts],
        result.body_text[:500],
    )
    raise UpstreamError(
        status=result.http_status,
        details=result.body_text,
        model=spec.model_name,
        api_version=spec.api_version.value,
        hint=upstream_hint(result.http_status),
        attempts=outcome.attempts,
    )
