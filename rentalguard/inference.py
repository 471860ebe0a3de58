"""OpenAI Responses API wrapper that classifies failures instead of raising them."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

import openai

from .config import settings
from .prompt import SYSTEM_PROMPT, ContentBlock

logger = logging.getLogger(__name__)


@dataclass
class InferenceSuccess:
    raw_text: str


@dataclass
class AuthFailure:
    detail: str


@dataclass
class RateLimited:
    detail: str


@dataclass
class UpstreamError:
    detail: str


InferenceOutcome = Union[InferenceSuccess, AuthFailure, RateLimited, UpstreamError]


def _default_client() -> Optional[openai.OpenAI]:
    if not settings.OPENAI_API_KEY:
        return None
    # no SDK-side retries; a failed call goes straight back to the caller
    return openai.OpenAI(api_key=settings.OPENAI_API_KEY, max_retries=0)


def to_input_parts(blocks: List[ContentBlock]) -> List[Dict[str, str]]:
    parts = []
    for b in blocks:
        if b.kind == "image":
            parts.append({"type": "input_image", "image_url": b.value})
        else:
            parts.append({"type": "input_text", "text": b.value})
    return parts


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def response_text(response: Any) -> str:
    """Primary text payload: top-level output_text, else the first content item's text."""
    text = _field(response, "output_text")
    if isinstance(text, str) and text:
        return text
    content = _field(response, "content")
    if isinstance(content, (list, tuple)) and content:
        first = _field(content[0], "text")
        if isinstance(first, str):
            return first
    return ""


def classify_failure(exc: Exception) -> InferenceOutcome:
    status = getattr(exc, "status_code", None)
    if isinstance(exc, openai.AuthenticationError) or status == 401:
        return AuthFailure(f"authentication failed ({exc.__class__.__name__})")
    if isinstance(exc, openai.RateLimitError) or status == 429:
        return RateLimited(f"rate limited ({exc.__class__.__name__})")
    detail = exc.__class__.__name__
    if status is not None:
        detail += f" (HTTP {status})"
    return UpstreamError(detail)


class InferenceInvoker:
    """Calls the model with a fixed sampling configuration.

    The client is built lazily from settings unless one is injected; an absent
    API key is reported as an AuthFailure rather than raised.
    """

    def __init__(
        self,
        client: Any = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        client_factory: Callable[[], Any] = _default_client,
    ):
        self._client = client
        self._client_factory = client_factory
        self.model = model or settings.RENTALGUARD_MODEL
        self.temperature = settings.INFERENCE_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.INFERENCE_MAX_OUTPUT_TOKENS

    @property
    def client(self):
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def invoke(self, blocks: List[ContentBlock]) -> InferenceOutcome:
        client = self.client
        if client is None:
            return AuthFailure("OPENAI_API_KEY is not configured")

        request_input = [
            {"role": "system", "content": [{"type": "input_text", "text": SYSTEM_PROMPT}]},
            {"role": "user", "content": to_input_parts(blocks)},
        ]
        try:
            response = client.responses.create(
                model=self.model,
                input=request_input,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            outcome = classify_failure(e)
            logger.error("Inference call failed: %s", outcome.detail,
                         extra={"error_kind": type(outcome).__name__})
            return outcome

        return InferenceSuccess(response_text(response))
