"""
Gemini LLM client: thin httpx wrapper over the generative language REST API.

Two calls: list models for an API version, and generateContent for a model spec.
No retries here; fallback across model names/versions lives in resolver.py.
"""

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from skillup_chat.agent.types import (
    ApiVersion,
    GenerationRequest,
    GenerationResult,
    ModelInfo,
    Success,
    UpstreamFailure,
)
from skillup_chat.core.config import GEMINI_API_BASE, LLM_API_TIMEOUT

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "Sorry, I couldn't understand that. Please contact SkillUp Institute directly for assistance."
)


def extract_reply(data: Any) -> str | None:
    """Return candidates[0].content.parts[0].text, or None when any level is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


class GeminiClient:
    """
    Blocking client for one chat request. Use as a context manager so the
    underlying httpx.Client is closed when the request is done.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GEMINI_API_BASE,
        timeout: float = LLM_API_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """POST {version}/models/{model}:generateContent and classify the response."""
        spec = request.model_spec
        path = f"/{spec.api_version.value}/models/{quote(spec.model_name, safe='')}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": request.prompt_text}]}]}
        logger.info("[llm:generate] IN  spec=%s prompt_len=%d", spec, len(request.prompt_text))
        response = self._http.post(path, params={"key": self._api_key}, json=payload)
        if not response.is_success:
            logger.info("[llm:generate] OUT spec=%s status=%d", spec, response.status_code)
            return UpstreamFailure(
                http_status=response.status_code,
                body_text=response.text,
                model_spec=spec,
            )
        try:
            data = response.json()
        except json.JSONDecodeError:
            logger.warning("[llm:generate] spec=%s returned non-JSON body", spec)
            data = None
        reply = extract_reply(data)
        if reply is None:
            logger.warning("[llm:generate] spec=%s no candidate text; using fallback reply", spec)
            reply = FALLBACK_REPLY
        logger.info("[llm:generate] OUT spec=%s status=%d reply_len=%d", spec, response.status_code, len(reply))
        return Success(reply_text=reply)

    def list_models(self, api_version: ApiVersion) -> list[ModelInfo]:
        """
        GET {version}/models. A non-2xx status or an unparsable body is treated
        as an empty listing so the caller can move on to the next version.
        """
        response = self._http.get(f"/{api_version.value}/models", params={"key": self._api_key})
        if not response.is_success:
            logger.warning(
                "[llm:list_models] version=%s status=%d body=%r",
                api_version.value, response.status_code, response.text[:200],
            )
            return []
        try:
            data = response.json()
        except json.JSONDecodeError:
            logger.warning("[llm:list_models] version=%s returned non-JSON body", api_version.value)
            return []
        raw_models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(raw_models, list):
            return []
        models = []
        for m in raw_models:
            if not isinstance(m, dict) or not isinstance(m.get("name"), str):
                continue
            methods = m.get("supportedGenerationMethods") or []
            models.append(ModelInfo(
                name=m["name"],
                supported_generation_methods=tuple(x for x in methods if isinstance(x, str)),
            ))
        logger.info("[llm:list_models] OUT version=%s models=%d", api_version.value, len(models))
        return models
