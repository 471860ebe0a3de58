"""
Tests for the inference wrapper: request shape, reply text extraction and
failure classification using the SDK's own exception types.
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from rentalguard.inference import (
    AuthFailure,
    InferenceInvoker,
    InferenceSuccess,
    RateLimited,
    UpstreamError,
    _default_client,
    classify_failure,
    response_text,
)
from rentalguard import inference
from rentalguard.prompt import SYSTEM_PROMPT, ContentBlock


def api_error(cls, status):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(status, request=request)
    return cls("boom", response=response, body=None)


class FakeResponses:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def fake_client(result=None, error=None):
    return SimpleNamespace(responses=FakeResponses(result, error))


BLOCKS = [
    ContentBlock("text", "page_url: https://example.com"),
    ContentBlock("image", "data:image/png;base64,AAAA"),
]


class TestInvoke:

    def test_success_uses_output_text(self):
        client = fake_client(SimpleNamespace(output_text='{"score": 10}'))
        outcome = InferenceInvoker(client=client, model="m", temperature=0.2, max_output_tokens=700).invoke(BLOCKS)
        assert outcome == InferenceSuccess('{"score": 10}')

    def test_request_shape(self):
        client = fake_client(SimpleNamespace(output_text="{}"))
        InferenceInvoker(client=client, model="gpt-test", temperature=0.2, max_output_tokens=700).invoke(BLOCKS)
        kwargs = client.responses.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_output_tokens"] == 700
        system, user = kwargs["input"]
        assert system["role"] == "system"
        assert system["content"] == [{"type": "input_text", "text": SYSTEM_PROMPT}]
        assert user["role"] == "user"
        assert user["content"] == [
            {"type": "input_text", "text": "page_url: https://example.com"},
            {"type": "input_image", "image_url": "data:image/png;base64,AAAA"},
        ]

    def test_missing_api_key_is_auth_failure(self):
        invoker = InferenceInvoker(client_factory=lambda: None)
        assert isinstance(invoker.invoke(BLOCKS), AuthFailure)

    @pytest.mark.parametrize("error,expected", [
        (api_error(openai.AuthenticationError, 401), AuthFailure),
        (api_error(openai.RateLimitError, 429), RateLimited),
        (api_error(openai.InternalServerError, 500), UpstreamError),
        (api_error(openai.BadRequestError, 400), UpstreamError),
        (RuntimeError("socket closed"), UpstreamError),
    ])
    def test_failures_are_classified(self, error, expected):
        outcome = InferenceInvoker(client=fake_client(error=error), model="m").invoke(BLOCKS)
        assert isinstance(outcome, expected)

    def test_upstream_detail_names_status(self):
        outcome = classify_failure(api_error(openai.InternalServerError, 500))
        assert outcome == UpstreamError("InternalServerError (HTTP 500)")


class TestResponseText:

    def test_prefers_output_text(self):
        assert response_text({"output_text": "a", "content": [{"text": "b"}]}) == "a"

    def test_falls_back_to_first_content_item(self):
        assert response_text(SimpleNamespace(output_text="", content=[SimpleNamespace(text="b")])) == "b"

    def test_empty_when_nothing_found(self):
        assert response_text(SimpleNamespace()) == ""
        assert response_text({"content": []}) == ""


class TestDefaultClient:

    def test_no_key_builds_no_client(self, monkeypatch):
        monkeypatch.setattr(inference.settings, "OPENAI_API_KEY", None)
        assert _default_client() is None

    def test_sdk_retries_disabled(self, monkeypatch):
        monkeypatch.setattr(inference.settings, "OPENAI_API_KEY", "sk-test")
        assert _default_client().max_retries == 0
