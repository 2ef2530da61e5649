"""Tests for POST /api/ai/generate-message and the completion error envelope."""

import httpx
import pytest

from app.api.dependencies import get_message_completion_service
from app.api.errors import ErrorCode, completion_error_to_api_error
from app.services.llm.completion_errors import (
    ConfigurationError,
    NetworkError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from app.services.llm.message_completion_service import (
    OpenRouterMessageCompletionService,
    ServiceOverrides,
)
from conftest import FakeHttpCall, chat_response


URL = "/api/ai/generate-message"
PROMPT = "Helped me debug the payment webhook late on Friday"


def use_upstream(api, config_data, response: httpx.Response) -> FakeHttpCall:
    http_call = FakeHttpCall(response)
    service = OpenRouterMessageCompletionService(config_data, ServiceOverrides(http_call=http_call))
    api.app.dependency_overrides[get_message_completion_service] = lambda: service
    return http_call


class TestGenerateMessage:
    def test_requires_api_key(self, api, http_call):
        response = api.post(URL, json={"prompt": PROMPT})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert http_call.call_count == 0

    def test_returns_generated_message(self, api, alice, http_call):
        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Huge thanks for untangling the release pipeline this week!"
        assert body["suggested_hashtags"] == ["#teamwork", "#release_hero"]

        user_content = http_call.calls[0][2]["messages"][1]["content"]
        assert f"Highlight: {PROMPT}" in user_content
        assert "Tone: grateful" in user_content

    @pytest.mark.parametrize(
        "prompt, code",
        [
            ("too short", "PROMPT_TOO_SHORT"),
            ("x" * 201, "PROMPT_TOO_LONG"),
            (42, "INVALID_PROMPT"),
        ],
    )
    def test_prompt_validation(self, api, alice, http_call, prompt, code):
        response = api.post(URL, json={"prompt": prompt}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == code
        assert "prompt" in error["details"]
        assert http_call.call_count == 0

    def test_prompt_is_stripped_before_length_check(self, api, alice, http_call):
        response = api.post(URL, json={"prompt": "   short    "}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PROMPT_TOO_SHORT"

    def test_rate_limit_maps_to_503_with_retry_after(self, api, alice, config_data):
        use_upstream(api, config_data, httpx.Response(429, text="slow down", headers={"retry-after": "12"}))

        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "AI_SERVICE_UNAVAILABLE"
        assert error["details"] == {"service": "OpenRouter.ai", "retry_after": 12}

    def test_upstream_server_error_maps_to_503(self, api, alice, config_data):
        use_upstream(api, config_data, httpx.Response(502, text="bad gateway", headers={"x-request-id": "abc"}))

        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "AI_SERVICE_UNAVAILABLE"
        assert error["details"]["correlation_id"] == "abc"

    def test_upstream_auth_failure_maps_to_500(self, api, alice, config_data):
        use_upstream(api, config_data, httpx.Response(401, text="invalid key"))

        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "details" not in error

    def test_unparseable_content_maps_to_503(self, api, alice, config_data):
        use_upstream(api, config_data, chat_response("no json here"))

        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "AI_SERVICE_UNAVAILABLE"

    def test_missing_openrouter_key_maps_to_500(self, api, alice):
        def broken_service():
            raise ConfigurationError("Invalid OpenRouter configuration: api_key is required")

        api.app.dependency_overrides[get_message_completion_service] = broken_service

        response = api.post(URL, json={"prompt": PROMPT}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "AI service configuration error."


class TestCompletionErrorMapping:
    """Every error kind maps to exactly one status and code."""

    @pytest.mark.parametrize(
        "error, status_code, code",
        [
            (ConfigurationError("bad key"), 500, ErrorCode.INTERNAL_ERROR),
            (ValidationError("bad input"), 400, ErrorCode.INVALID_PROMPT),
            (RateLimitError("slow down", retry_after=5), 503, ErrorCode.AI_SERVICE_UNAVAILABLE),
            (ServiceUnavailableError("down", status_code=503), 503, ErrorCode.AI_SERVICE_UNAVAILABLE),
            (NetworkError("timeout"), 503, ErrorCode.AI_SERVICE_UNAVAILABLE),
            (ParseError("garbage"), 503, ErrorCode.AI_SERVICE_UNAVAILABLE),
        ],
    )
    def test_mapping(self, error, status_code, code):
        api_error = completion_error_to_api_error(error)

        assert api_error.status_code == status_code
        assert api_error.code == code

    def test_validation_message_passed_through(self):
        api_error = completion_error_to_api_error(ValidationError("highlight: too long"))
        assert api_error.message == "highlight: too long"

    def test_network_request_id_in_details(self):
        api_error = completion_error_to_api_error(NetworkError("HTTP 404", request_id="req-1"))
        assert api_error.details == {"service": "OpenRouter.ai", "request_id": "req-1"}

    def test_parse_error_hides_raw_payload(self):
        api_error = completion_error_to_api_error(ParseError("garbage", raw_payload="secret"))
        assert api_error.details is None
