"""Value types shared by the Gemini client and the model resolver."""

from dataclasses import dataclass, field
from enum import Enum


class ApiVersion(str, Enum):
    """Endpoint surface version of the generative language API."""

    V1 = "v1"
    V1BETA = "v1beta"

    def other(self) -> "ApiVersion":
        return ApiVersion.V1BETA if self is ApiVersion.V1 else ApiVersion.V1


@dataclass(frozen=True)
class ModelSpec:
    """Concrete model name paired with the API version it is called on."""

    model_name: str
    api_version: ApiVersion

    def __str__(self) -> str:
        return f"{self.api_version.value}/{self.model_name}"


@dataclass(frozen=True)
class GenerationRequest:
    model_spec: ModelSpec
    prompt_text: str


@dataclass(frozen=True)
class Success:
    reply_text: str


@dataclass(frozen=True)
class UpstreamFailure:
    http_status: int
    body_text: str
    model_spec: ModelSpec


GenerationResult = Success | UpstreamFailure


@dataclass(frozen=True)
class ModelInfo:
    """One entry of the models listing (e.g. name='models/gemini-1.5-flash')."""

    name: str
    supported_generation_methods: tuple[str, ...] = field(default_factory=tuple)

    @property
    def model_id(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    def supports(self, method: str) -> bool:
        return method in self.supported_generation_methods


@dataclass(frozen=True)
class AttemptRecord:
    """A failed generation attempt, kept for server-side diagnostics."""

    model_spec: ModelSpec
    http_status: int
