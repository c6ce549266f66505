"""
Model resolver: pick a model name / API version and fall back on 404.

Different Gemini model families were certified against different API versions,
and free-tier keys often ask for a combination the API does not serve. The
resolver maps the configured identifier to a default ModelSpec, calls it, and on
a 404 walks a lazily produced list of alternatives until one succeeds:

    1. <model>-latest on the same version (never doubled)
    2. <model> on the other version
    3. per version (current, other): list models and pick the closest match

Attempts are strictly sequential; the first success wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol

from skillup_chat.agent.types import (
    ApiVersion,
    AttemptRecord,
    GenerationRequest,
    GenerationResult,
    ModelInfo,
    ModelSpec,
    Success,
    UpstreamFailure,
)

logger = logging.getLogger(__name__)

LATEST_SUFFIX = "-latest"
GENERATE_METHOD = "generateContent"
FAMILY_SEGMENTS = 3


class ModelBackend(Protocol):
    def generate(self, request: GenerationRequest) -> GenerationResult: ...

    def list_models(self, api_version: ApiVersion) -> list[ModelInfo]: ...


@dataclass(frozen=True)
class ModelRule:
    """One row of the identifier -> (model, version) table."""

    matches: Callable[[str], bool]
    model: Callable[[str], str]
    api_version: ApiVersion


def _exact(name: str) -> Callable[[str], bool]:
    return lambda model_id: model_id == name


def _prefix(prefix: str) -> Callable[[str], bool]:
    return lambda model_id: model_id.startswith(prefix)


def _same(model_id: str) -> str:
    return model_id


# Ordered; first match wins. Add new families here.
MODEL_RULES: tuple[ModelRule, ...] = (
    ModelRule(_exact("gemini-pro"), lambda _: "gemini-1.0-pro", ApiVersion.V1BETA),
    ModelRule(_prefix("gemini-1.5"), _same, ApiVersion.V1),
    ModelRule(_prefix("gemini-1.0"), _same, ApiVersion.V1BETA),
)
DEFAULT_API_VERSION = ApiVersion.V1


def resolve_default_spec(model_id: str, api_version_override: str | ApiVersion | None = None) -> ModelSpec:
    """Map a logical model identifier to the ModelSpec of the primary attempt."""
    if api_version_override:
        return ModelSpec(model_id, ApiVersion(api_version_override))
    for rule in MODEL_RULES:
        if rule.matches(model_id):
            return ModelSpec(rule.model(model_id), rule.api_version)
    return ModelSpec(model_id, DEFAULT_API_VERSION)


def strip_latest(model_name: str) -> str:
    if model_name.endswith(LATEST_SUFFIX):
        return model_name[: -len(LATEST_SUFFIX)]
    return model_name


def family_prefix(model_name: str) -> str:
    """First three hyphen-separated segments, e.g. gemini-1.5-flash-8b -> gemini-1.5-flash."""
    return "-".join(strip_latest(model_name).split("-")[:FAMILY_SEGMENTS])


def pick_closest_model(models: list[ModelInfo], desired: str) -> str | None:
    """
    Choose a model id from a listing, in order of preference:
    exact id, <base>-latest, same family prefix, then anything that can generateContent.
    """
    usable = [m for m in models if m.supports(GENERATE_METHOD)]
    base = strip_latest(desired)
    for wanted in (desired, base + LATEST_SUFFIX):
        for m in usable:
            if m.model_id == wanted:
                return wanted
    family = family_prefix(desired)
    for m in usable:
        if m.model_id.startswith(family):
            return m.model_id
    return usable[0].model_id if usable else None


def simple_fallbacks(primary: ModelSpec) -> Iterator[ModelSpec]:
    if not primary.model_name.endswith(LATEST_SUFFIX):
        yield ModelSpec(primary.model_name + LATEST_SUFFIX, primary.api_version)
    yield ModelSpec(primary.model_name, primary.api_version.other())


def listed_fallbacks(primary: ModelSpec, backend: ModelBackend) -> Iterator[ModelSpec]:
    """Consult the models listing per version; the listing call happens only when reached."""
    for version in (primary.api_version, primary.api_version.other()):
        models = backend.list_models(version)
        if not models:
            logger.info("[resolver:listed_fallbacks] version=%s listing empty; next version", version.value)
            continue
        picked = pick_closest_model(models, primary.model_name)
        logger.info("[resolver:listed_fallbacks] version=%s picked=%r", version.value, picked)
        if picked:
            yield ModelSpec(picked, version)


def fallback_candidates(primary: ModelSpec, backend: ModelBackend) -> Iterator[ModelSpec]:
    """Alternatives to try after the primary spec returned 404, in order."""
    yield from simple_fallbacks(primary)
    yield from listed_fallbacks(primary, backend)


@dataclass
class ResolutionOutcome:
    """Final result plus the failures seen on the way."""

    result: GenerationResult
    attempts: list[AttemptRecord]


def generate_with_fallback(
    backend: ModelBackend,
    prompt_text: str,
    model_id: str,
    api_version_override: str | ApiVersion | None = None,
) -> ResolutionOutcome:
    """
    Run the primary attempt and, on 404 only, the fallback chain.
    Returns the first Success, or the UpstreamFailure of the last attempt.
    """
    primary = resolve_default_spec(model_id, api_version_override)
    logger.info("[resolver:generate_with_fallback] IN  model_id=%r primary=%s", model_id, primary)
    attempts: list[AttemptRecord] = []

    result = backend.generate(GenerationRequest(primary, prompt_text))
    if isinstance(result, Success):
        return ResolutionOutcome(result, attempts)
    _record_failure(attempts, result)
    if result.http_status != 404:
        return ResolutionOutcome(result, attempts)

    for spec in fallback_candidates(primary, backend):
        result = backend.generate(GenerationRequest(spec, prompt_text))
        if isinstance(result, Success):
            logger.info(
                "[resolver:generate_with_fallback] OUT success spec=%s after %d failed attempts",
                spec, len(attempts),
            )
            return ResolutionOutcome(result, attempts)
        _record_failure(attempts, result)

    logger.info("[resolver:generate_with_fallback] OUT exhausted attempts=%d", len(attempts))
    return ResolutionOutcome(result, attempts)


def _record_failure(attempts: list[AttemptRecord], failure: UpstreamFailure) -> None:
    attempts.append(AttemptRecord(failure.model_spec, failure.http_status))
    logger.warning(
        "[resolver] attempt failed spec=%s status=%d body=%r",
        failure.model_spec, failure.http_status, failure.body_text[:200],
    )
