from typing import TYPE_CHECKING

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

if TYPE_CHECKING:
    from app.settings import Settings


DEFAULT_API_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "meta-llama/llama-3.3-70b-instruct:free"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_SITE_URL = "https://kudospace.dev"
DEFAULT_APP_TITLE = "KudoSpace"

_url_adapter = TypeAdapter(AnyHttpUrl)


class OpenRouterConfig(BaseModel):
    """Validated, immutable configuration of the OpenRouter completion service"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    api_key: str = Field(..., min_length=1, description="OpenRouter API key")
    api_url: str = Field(DEFAULT_API_URL, description="Base URL of the OpenRouter API")
    default_model: str = Field(DEFAULT_MODEL, min_length=1)
    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, gt=0, description="Request timeout in milliseconds")
    site_url: str = Field(DEFAULT_SITE_URL, description="Sent as HTTP-Referer")
    app_title: str = Field(DEFAULT_APP_TITLE, description="Sent as X-Title")

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("OPENROUTER_API_KEY is required")
        return value

    @field_validator("api_url")
    @classmethod
    def _api_url_is_valid(cls, value: str) -> str:
        # Validate with pydantic, but keep the caller's string (minus trailing slash)
        try:
            _url_adapter.validate_python(value)
        except ValidationError as e:
            raise ValueError("OPENROUTER_API_URL must be a valid URL") from e
        return value.rstrip("/")


def config_data_from_settings(settings: "Settings") -> dict[str, object]:
    """Raw (unvalidated) config values read from application settings"""
    return {
        "api_key": settings.openrouter_api_key,
        "api_url": settings.openrouter_api_url,
        "default_model": settings.openrouter_default_model,
        "timeout_ms": settings.openrouter_timeout_ms,
        "site_url": settings.site_url,
        "app_title": settings.app_title,
    }
