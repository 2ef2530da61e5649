from typing import Annotated

from fastapi import Depends, Request

from app.request_context import RequestContext
from app.db.api_key_repo import ApiKeyRepo
from app.db.database import Database
from app.db.kudo_repo import KudoRepo
from app.db.profile_repo import ProfileRepo
from app.services.api_key_service import ApiKeyService
from app.services.auth_service import AuthService
from app.services.kudo_service import KudoService
from app.services.llm.config.openrouter_config import config_data_from_settings
from app.services.llm.llm_service_base import MessageCompletionService
from app.services.llm.message_completion_service import OpenRouterMessageCompletionService
from app.services.profile_service import ProfileService
from app.settings import settings

# Singleton instances
_database_instance = Database()
_profile_repo_instance = ProfileRepo(_database_instance)
_api_key_repo_instance = ApiKeyRepo(_database_instance)
_kudo_repo_instance = KudoRepo(_database_instance)
_api_key_service_instance = ApiKeyService(_api_key_repo_instance)
_auth_service_instance = AuthService(_api_key_service_instance)
_profile_service_instance = ProfileService(_profile_repo_instance, _api_key_service_instance)
_kudo_service_instance = KudoService(_kudo_repo_instance, _profile_repo_instance)

# Built on first use so that a missing OPENROUTER_API_KEY only fails AI requests
_message_completion_service_instance: MessageCompletionService | None = None


def get_database() -> Database:
    """Get the singleton Database instance"""
    return _database_instance


def get_auth_service() -> AuthService:
    """Get the singleton AuthService instance"""
    return _auth_service_instance


def get_profile_service() -> ProfileService:
    """Get the singleton ProfileService instance"""
    return _profile_service_instance


def get_kudo_service() -> KudoService:
    """Get the singleton KudoService instance"""
    return _kudo_service_instance


def get_message_completion_service() -> MessageCompletionService:
    """
    Get the singleton MessageCompletionService instance.
    Raises ConfigurationError if the OpenRouter settings are invalid.
    """
    global _message_completion_service_instance
    if _message_completion_service_instance is None:
        _message_completion_service_instance = OpenRouterMessageCompletionService(
            config_data_from_settings(settings)
        )
    return _message_completion_service_instance


def get_auth_context(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RequestContext:
    """Authenticate request (X-API-Key header) and return its context"""
    return auth_service.authenticate(request)


# Type annotations for dependencies
AuthContextDep = Annotated[RequestContext, Depends(get_auth_context)]
KudoServiceDep = Annotated[KudoService, Depends(get_kudo_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
MessageCompletionServiceDep = Annotated[MessageCompletionService, Depends(get_message_completion_service)]
