from enum import Enum


class CompletionErrorKind(str, Enum):
    """Closed set of failure kinds raised by the message completion service"""
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK = "network"
    PARSE = "parse"


RETRYABLE_KINDS = frozenset({
    CompletionErrorKind.RATE_LIMIT,
    CompletionErrorKind.SERVICE_UNAVAILABLE,
    CompletionErrorKind.NETWORK,
})


class CompletionError(Exception):
    """
    Base class for every failure of a completion call.
    `kind` is the discriminant; callers should `match error.kind` rather than
    checking subclasses.
    """
    kind: CompletionErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def diagnostics(self) -> dict[str, str | int]:
        """Kind-specific optional fields that are set on this error"""
        return {}


class ConfigurationError(CompletionError):
    kind = CompletionErrorKind.CONFIGURATION


class ValidationError(CompletionError):
    kind = CompletionErrorKind.VALIDATION


class RateLimitError(CompletionError):
    kind = CompletionErrorKind.RATE_LIMIT

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def diagnostics(self) -> dict[str, str | int]:
        return {"retry_after": self.retry_after} if self.retry_after is not None else {}


class ServiceUnavailableError(CompletionError):
    kind = CompletionErrorKind.SERVICE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        correlation_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.correlation_id = correlation_id

    def diagnostics(self) -> dict[str, str | int]:
        fields: dict[str, str | int] = {}
        if self.status_code is not None:
            fields["status_code"] = self.status_code
        if self.correlation_id:
            fields["correlation_id"] = self.correlation_id
        return fields


class NetworkError(CompletionError):
    kind = CompletionErrorKind.NETWORK

    def __init__(self, message: str, request_id: str | None = None) -> None:
        super().__init__(message)
        self.request_id = request_id

    def diagnostics(self) -> dict[str, str | int]:
        return {"request_id": self.request_id} if self.request_id else {}


class ParseError(CompletionError):
    kind = CompletionErrorKind.PARSE

    def __init__(self, message: str, raw_payload: str | None = None) -> None:
        super().__init__(message)
        self.raw_payload = raw_payload

    def diagnostics(self) -> dict[str, str | int]:
        return {"raw_payload": self.raw_payload} if self.raw_payload else {}
