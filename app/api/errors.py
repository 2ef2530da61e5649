import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.services.llm.completion_errors import CompletionError, CompletionErrorKind


LOGGER = logging.getLogger("kudos.api")

AI_SERVICE_NAME = "OpenRouter.ai"

ErrorDetails = dict[str, str | int | float | bool | None]


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    KUDO_NOT_FOUND = "KUDO_NOT_FOUND"
    INVALID_UUID = "INVALID_UUID"
    INVALID_RECIPIENT = "INVALID_RECIPIENT"
    SELF_KUDO_NOT_ALLOWED = "SELF_KUDO_NOT_ALLOWED"
    INVALID_MESSAGE = "INVALID_MESSAGE"
    MESSAGE_TOO_SHORT = "MESSAGE_TOO_SHORT"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"

    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    INVALID_PROMPT = "INVALID_PROMPT"
    PROMPT_TOO_SHORT = "PROMPT_TOO_SHORT"
    PROMPT_TOO_LONG = "PROMPT_TOO_LONG"
    AI_SERVICE_UNAVAILABLE = "AI_SERVICE_UNAVAILABLE"

    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorBody(BaseModel):
    message: str
    code: ErrorCode
    details: ErrorDetails | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


class ApiError(Exception):
    """Error rendered as `{"error": {...}}` with the given HTTP status"""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: ErrorDetails | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    def to_response(self) -> JSONResponse:
        body = ErrorBody(message=self.message, code=self.code, details=self.details or None)
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(error=body).model_dump(mode="json", exclude_none=True),
        )


def completion_error_to_api_error(error: CompletionError) -> ApiError:
    """Map a completion failure to the HTTP status and error code shown to clients"""
    service_details: ErrorDetails = {"service": AI_SERVICE_NAME}

    match error.kind:
        case CompletionErrorKind.CONFIGURATION:
            return ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                ErrorCode.INTERNAL_ERROR,
                "AI service configuration error.",
            )
        case CompletionErrorKind.VALIDATION:
            return ApiError(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_PROMPT, error.message)
        case CompletionErrorKind.RATE_LIMIT:
            retry_after = getattr(error, "retry_after", None)
            if retry_after:
                service_details["retry_after"] = retry_after
            return ApiError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                ErrorCode.AI_SERVICE_UNAVAILABLE,
                "AI service rate limit exceeded. Please try again later.",
                service_details,
            )
        case CompletionErrorKind.SERVICE_UNAVAILABLE:
            correlation_id = getattr(error, "correlation_id", None)
            if correlation_id:
                service_details["correlation_id"] = correlation_id
            return ApiError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                ErrorCode.AI_SERVICE_UNAVAILABLE,
                "AI service is temporarily unavailable. Please write your message manually.",
                service_details,
            )
        case CompletionErrorKind.NETWORK:
            request_id = getattr(error, "request_id", None)
            if request_id:
                service_details["request_id"] = request_id
            return ApiError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                ErrorCode.AI_SERVICE_UNAVAILABLE,
                "AI service is temporarily unavailable. Please write your message manually.",
                service_details,
            )
        case CompletionErrorKind.PARSE:
            return ApiError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                ErrorCode.AI_SERVICE_UNAVAILABLE,
                "AI service returned an invalid response. Please write your message manually.",
            )


# (field location, pydantic error type) -> code; `None` type matches any error on that field
_VALIDATION_CODES: dict[tuple[tuple[str, ...], str | None], ErrorCode] = {
    (("body", "prompt"), "string_too_short"): ErrorCode.PROMPT_TOO_SHORT,
    (("body", "prompt"), "string_too_long"): ErrorCode.PROMPT_TOO_LONG,
    (("body", "prompt"), None): ErrorCode.INVALID_PROMPT,
    (("body", "message"), "string_too_short"): ErrorCode.MESSAGE_TOO_SHORT,
    (("body", "message"), "string_too_long"): ErrorCode.MESSAGE_TOO_LONG,
    (("body", "message"), None): ErrorCode.INVALID_MESSAGE,
    (("body", "recipient_id"), None): ErrorCode.INVALID_RECIPIENT,
    (("path", "id"), None): ErrorCode.INVALID_UUID,
}

_VALIDATION_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.PROMPT_TOO_SHORT: "Prompt is too short.",
    ErrorCode.PROMPT_TOO_LONG: "Prompt is too long.",
    ErrorCode.INVALID_PROMPT: "Invalid prompt.",
    ErrorCode.MESSAGE_TOO_SHORT: "Message is too short.",
    ErrorCode.MESSAGE_TOO_LONG: "Message is too long.",
    ErrorCode.INVALID_MESSAGE: "Invalid message.",
    ErrorCode.INVALID_RECIPIENT: "Invalid recipient.",
    ErrorCode.INVALID_UUID: "id must be a valid UUID.",
}


def _validation_error_code(error: dict[str, Any]) -> ErrorCode:
    location = tuple(str(part) for part in error.get("loc", ()))[:2]
    error_type = error.get("type")
    return (
        _VALIDATION_CODES.get((location, error_type))
        or _VALIDATION_CODES.get((location, None))
        or ErrorCode.INVALID_PARAMETERS
    )


def request_validation_to_api_error(exc: RequestValidationError) -> ApiError:
    errors = exc.errors()
    details: ErrorDetails = {}
    for error in errors:
        # Drop the "body"/"query"/"path" prefix from the field name
        field_path = [str(part) for part in error.get("loc", ())[1:]]
        details[".".join(field_path) or "body"] = error.get("msg", "Invalid value.")

    code = _validation_error_code(errors[0]) if errors else ErrorCode.INVALID_PARAMETERS
    message = _VALIDATION_MESSAGES.get(code, "Invalid request parameters.")
    return ApiError(status.HTTP_400_BAD_REQUEST, code, message, details)


_HTTP_STATUS_CODES: dict[int, ErrorCode] = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
}


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as the shared `{"error": {...}}` envelope"""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return exc.to_response()

    @app.exception_handler(CompletionError)
    async def handle_completion_error(request: Request, exc: CompletionError) -> JSONResponse:
        LOGGER.error(
            "AI completion failed on %s (error_kind=%s, message=%s, diagnostics=%s)",
            request.url.path,
            exc.kind.value,
            exc.message,
            exc.diagnostics(),
        )
        return completion_error_to_api_error(exc).to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return request_validation_to_api_error(exc).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INVALID_PARAMETERS)
        if exc.status_code >= 500:
            code = ErrorCode.INTERNAL_ERROR
        message = exc.detail if isinstance(exc.detail, str) else "Request failed."
        return ApiError(exc.status_code, code, message).to_response()

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unexpected error on %s %s", request.method, request.url.path)
        return ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.INTERNAL_ERROR,
            "Unexpected error occurred.",
        ).to_response()
