from fastapi import Request, status

from app.api.errors import ApiError, ErrorCode
from app.request_context import RequestContext
from app.services.api_key_service import ApiKeyService


API_KEY_HEADER = "X-API-Key"


class AuthService:
    """Service for handling authentication and creating request contexts"""

    def __init__(self, api_key_service: ApiKeyService):
        self.api_key_service = api_key_service

    def authenticate(self, request: Request) -> RequestContext:
        """
        Authenticate a request by its `X-API-Key` header.

        Raises:
            ApiError: 401 UNAUTHORIZED if the key is missing, unknown or revoked
        """
        api_key = request.headers.get(API_KEY_HEADER)
        if not api_key:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, ErrorCode.UNAUTHORIZED, "Authentication required.")

        validated_key, error = self.api_key_service.validate_api_key(api_key)
        if validated_key is None:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, ErrorCode.UNAUTHORIZED, error or "Invalid API key")

        return RequestContext(
            user_id=validated_key.profile_id,
            api_key_id=validated_key.id,
        )
