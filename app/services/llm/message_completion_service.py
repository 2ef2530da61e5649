import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.services.llm.completion_errors import (
    CompletionError,
    ConfigurationError,
    NetworkError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from app.services.llm.config.openrouter_config import OpenRouterConfig
from app.services.llm.kudo_message_schemas import (
    CompletionOverrides,
    KudoMessageRequest,
    KudoMessageResult,
    OpenRouterChatResponse,
)
from app.services.llm.llm_message import ChatMessage
from app.services.llm.llm_service_base import MessageCompletionService
from prompts.kudo_prompts import KUDO_SYSTEM_MESSAGE, KUDO_USER_MESSAGE_TEMPLATE, LENGTH_GUIDANCE


HttpCall = Callable[[str, dict[str, str], dict[str, Any]], Awaitable[httpx.Response]]

RECIPIENT_MAX_LENGTH = 100
HIGHLIGHT_MAX_LENGTH = 500
RAW_SNIPPET_LENGTH = 500

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_NEWLINE_PATTERN = re.compile(r"[\r\n]")
_WHITESPACE_PATTERN = re.compile(r"\s+")

DEFAULT_LOGGER = logging.getLogger("kudos.openrouter")


async def httpx_post(url: str, headers: dict[str, str], payload: dict[str, Any]) -> httpx.Response:
    """Default HTTP call. httpx's own timeout is disabled; the service enforces `timeout_ms`."""
    async with httpx.AsyncClient(timeout=None) as client:
        return await client.post(url, headers=headers, json=payload)


@dataclass(frozen=True)
class ServiceOverrides:
    """Replaceable collaborators of the completion service"""
    http_call: HttpCall | None = None
    logger: logging.Logger | None = None
    timeout_ms: int | None = None


def sanitize_prompt_input(value: str, max_length: int) -> str:
    """Trim, truncate to `max_length` and collapse newlines/whitespace runs to single spaces"""
    value = value.strip()[:max_length]
    value = _NEWLINE_PATTERN.sub(" ", value)
    return _WHITESPACE_PATTERN.sub(" ", value)


def extract_json_object(content: str) -> dict[str, Any]:
    """
    Parse a JSON object from model output.
    Falls back to the outermost `{...}` span when the content has surrounding prose.
    """
    text = content.strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None

    if not isinstance(parsed, dict):
        match = _JSON_OBJECT_PATTERN.search(text)
        if match is None:
            raise ParseError("Failed to parse JSON response: no JSON object found", _snippet(text))
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse JSON response: {e}", _snippet(text)) from e

    if not isinstance(parsed, dict):
        raise ParseError("Response content is not a JSON object", _snippet(text))
    return parsed


def _normalize_result_fields(parsed: dict[str, Any]) -> dict[str, Any]:
    hashtags = parsed.get("suggested_hashtags")
    if hashtags is None:
        hashtags = parsed.get("suggestedHashtags")

    return {
        "message": parsed.get("message") or "",
        "suggested_hashtags": hashtags if hashtags is not None else [],
    }


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    value = value.strip()
    # HTTP-date values and non-ASCII digits are not supported
    return int(value) if value.isascii() and value.isdigit() else None


def _snippet(text: str) -> str:
    return text[:RAW_SNIPPET_LENGTH]


def _describe_validation_error(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )


def _format_context(context: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in context.items())


class OpenRouterMessageCompletionService(MessageCompletionService):
    """OpenRouter implementation of kudo message completion"""

    def __init__(
        self,
        config: OpenRouterConfig | Mapping[str, Any],
        overrides: ServiceOverrides | None = None,
    ) -> None:
        if isinstance(config, OpenRouterConfig):
            self._config = config
        else:
            try:
                self._config = OpenRouterConfig.model_validate(dict(config))
            except PydanticValidationError as e:
                raise ConfigurationError(
                    f"Invalid OpenRouter configuration: {_describe_validation_error(e)}"
                ) from e

        overrides = overrides or ServiceOverrides()
        if overrides.timeout_ms is not None and overrides.timeout_ms <= 0:
            raise ConfigurationError(f"Timeout override must be positive, got {overrides.timeout_ms}")

        self._http_call: HttpCall = overrides.http_call or httpx_post
        self._logger = overrides.logger or DEFAULT_LOGGER
        self._timeout_ms = overrides.timeout_ms if overrides.timeout_ms is not None else self._config.timeout_ms

        self._logger.info(
            "OpenRouter service initialized (model=%s, api_url=%s, timeout_ms=%d)",
            self._config.default_model,
            self._config.api_url,
            self._timeout_ms,
        )

    @property
    def config(self) -> OpenRouterConfig:
        return self._config

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def with_overrides(self, overrides: ServiceOverrides) -> "OpenRouterMessageCompletionService":
        """Create a new service with the same config; fields missing from `overrides` keep their current values"""
        return OpenRouterMessageCompletionService(
            self._config,
            ServiceOverrides(
                http_call=overrides.http_call or self._http_call,
                logger=overrides.logger or self._logger,
                timeout_ms=overrides.timeout_ms if overrides.timeout_ms is not None else self._timeout_ms,
            ),
        )

    async def complete(
        self,
        request: KudoMessageRequest | Mapping[str, Any],
        overrides: CompletionOverrides | Mapping[str, Any] | None = None,
    ) -> KudoMessageResult:
        try:
            validated_request = self._validate_request(request)
            completion_overrides = self._validate_overrides(overrides)
        except ValidationError as e:
            self._logger.error("%s (error_kind=%s)", e.message, e.kind.value)
            raise

        context = {
            "recipient_length": len(validated_request.recipient_label),
            "highlight_length": len(validated_request.highlight),
            "tone": validated_request.tone.value,
        }
        self._logger.debug(
            "Starting kudo message completion (%s, length=%s)",
            _format_context(context),
            validated_request.length.value,
        )

        try:
            messages = self._build_messages(validated_request)
            payload = self._compose_payload(messages, completion_overrides)
            raw_response = await self._execute_request(payload)
            result = self._parse_response(raw_response)
        except CompletionError as e:
            self._logger.error("%s (%s, error_kind=%s)", e.message, _format_context(context), e.kind.value)
            raise
        except Exception as e:
            self._logger.error(
                "Unexpected error in OpenRouter service (%s, error=%s)",
                _format_context(context),
                e,
            )
            raise NetworkError(f"Unexpected error: {e}") from e

        self._logger.info(
            "Kudo message completion successful (message_length=%d, hashtag_count=%d)",
            len(result.message),
            len(result.suggested_hashtags),
        )
        return result

    def _validate_request(self, request: KudoMessageRequest | Mapping[str, Any]) -> KudoMessageRequest:
        if isinstance(request, KudoMessageRequest):
            return request
        try:
            return KudoMessageRequest.model_validate(request)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid input: {_describe_validation_error(e)}") from e

    def _validate_overrides(
        self,
        overrides: CompletionOverrides | Mapping[str, Any] | None,
    ) -> CompletionOverrides:
        if overrides is None:
            return CompletionOverrides()
        if isinstance(overrides, CompletionOverrides):
            return overrides
        try:
            return CompletionOverrides.model_validate(overrides)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid completion overrides: {_describe_validation_error(e)}") from e

    def _build_messages(self, request: KudoMessageRequest) -> list[ChatMessage]:
        """Build the system + user prompt from sanitized request fields"""
        user_content = KUDO_USER_MESSAGE_TEMPLATE.format(
            recipient=sanitize_prompt_input(request.recipient_label, RECIPIENT_MAX_LENGTH),
            highlight=sanitize_prompt_input(request.highlight, HIGHLIGHT_MAX_LENGTH),
            tone=request.tone.value,
            length_guidance=LENGTH_GUIDANCE[request.length.value],
        )

        try:
            return [ChatMessage.system(KUDO_SYSTEM_MESSAGE), ChatMessage.user(user_content)]
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid message format: {_describe_validation_error(e)}") from e

    def _compose_payload(self, messages: list[ChatMessage], overrides: CompletionOverrides) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": overrides.model or self._config.default_model,
            "messages": [message.to_dict() for message in messages],
        }
        # Sampling parameter names match the OpenRouter wire format
        payload.update(overrides.model_dump(exclude_none=True, exclude={"model"}))
        return payload

    def _build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
            "HTTP-Referer": self._config.site_url,
            "X-Title": self._config.app_title,
        }

    async def _execute_request(self, payload: dict[str, Any]) -> OpenRouterChatResponse:
        url = f"{self._config.api_url}/chat/completions"

        try:
            response = await asyncio.wait_for(
                self._http_call(url, self._build_headers(), payload),
                timeout=self._timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request timeout after {self._timeout_ms}ms") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to OpenRouter failed: {e}") from e

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            raw_data = response.json()
        except ValueError as e:
            raise ParseError("Response body is not valid JSON", _snippet(response.text)) from e

        try:
            return OpenRouterChatResponse.model_validate(raw_data)
        except PydanticValidationError as e:
            raise ParseError(
                f"Invalid response format: {_describe_validation_error(e)}",
                _snippet(json.dumps(raw_data)),
            ) from e

    def _error_from_response(self, response: httpx.Response) -> CompletionError:
        """Map a non-2xx upstream response to a typed error"""
        status_code = response.status_code
        error_text = _snippet(response.text) or "Unable to read error response"
        request_id = response.headers.get("x-request-id")

        if status_code in (401, 403):
            return ConfigurationError(
                f"Authentication failed: {status_code} - {error_text}. Check OPENROUTER_API_KEY."
            )
        if status_code == 429:
            return RateLimitError(
                f"Rate limit exceeded: {error_text}",
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        if status_code == 422:
            return ValidationError(f"Schema validation failed: {error_text}")
        if status_code >= 500:
            return ServiceUnavailableError(
                f"OpenRouter service error: {status_code} - {error_text}",
                status_code=status_code,
                correlation_id=request_id,
            )
        return NetworkError(f"HTTP {status_code}: {error_text}", request_id=request_id)

    def _parse_response(self, raw_response: OpenRouterChatResponse) -> KudoMessageResult:
        content = raw_response.choices[0].message.content if raw_response.choices else None
        if not content:
            raise ParseError("Missing message content in response", _snippet(raw_response.model_dump_json()))

        parsed = extract_json_object(content)

        try:
            result = KudoMessageResult.model_validate(_normalize_result_fields(parsed))
        except PydanticValidationError as e:
            raise ParseError(
                f"Response content validation failed: {_describe_validation_error(e)}",
                _snippet(content.strip()),
            ) from e

        if raw_response.usage:
            self._logger.debug(
                "Token usage (prompt_tokens=%d, completion_tokens=%d, total_tokens=%d)",
                raw_response.usage.prompt_tokens,
                raw_response.usage.completion_tokens,
                raw_response.usage.total_tokens,
            )

        return result
