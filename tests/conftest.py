"""Shared fixtures for service and API tests."""

import asyncio
import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_auth_service,
    get_kudo_service,
    get_message_completion_service,
    get_profile_service,
)
from app.db.api_key_repo import ApiKeyRepo
from app.db.database import Database
from app.db.kudo_repo import KudoRepo
from app.db.profile_repo import ProfileRepo
from app.services.api_key_service import ApiKeyService
from app.services.auth_service import AuthService
from app.services.kudo_service import KudoService
from app.services.llm.message_completion_service import (
    OpenRouterMessageCompletionService,
    ServiceOverrides,
)
from app.services.profile_service import ProfileService
from main import create_app


VALID_CONTENT = json.dumps({
    "message": "Huge thanks for untangling the release pipeline this week!",
    "suggested_hashtags": ["#teamwork", "#release_hero"],
})


class FakeHttpCall:
    """Records calls and returns a canned httpx.Response (optionally after a delay)."""

    def __init__(
        self,
        response: httpx.Response | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.response = response
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, dict[str, str], dict[str, Any]]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> httpx.Response:
        self.calls.append((url, headers, payload))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def chat_response(
    content: str | None = VALID_CONTENT,
    usage: bool = True,
    status_code: int = 200,
) -> httpx.Response:
    """Build an OpenRouter-style chat completion response."""
    body: dict[str, Any] = {
        "id": "gen-123",
        "model": "meta-llama/llama-3.3-70b-instruct:free",
        "choices": [
            {
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }
    if usage:
        body["usage"] = {"prompt_tokens": 120, "completion_tokens": 40, "total_tokens": 160}
    return httpx.Response(status_code, json=body)


@pytest.fixture
def config_data() -> dict[str, Any]:
    return {
        "api_key": "sk-or-test",
        "api_url": "https://openrouter.test/api/v1",
        "default_model": "meta-llama/llama-3.3-70b-instruct:free",
        "timeout_ms": 2000,
    }


@pytest.fixture
def http_call() -> FakeHttpCall:
    return FakeHttpCall(chat_response())


@pytest.fixture
def service(config_data, http_call) -> OpenRouterMessageCompletionService:
    return OpenRouterMessageCompletionService(config_data, ServiceOverrides(http_call=http_call))


@pytest.fixture
def valid_request() -> dict[str, Any]:
    return {
        "recipient_label": "Ada",
        "highlight": "Fixed the flaky deployment pipeline before the release",
        "tone": "celebratory",
        "length": "short",
    }


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(str(tmp_path / "kudos.db"))
    db.setup()
    return db


@pytest.fixture
def profile_repo(database) -> ProfileRepo:
    return ProfileRepo(database)


@pytest.fixture
def kudo_repo(database) -> KudoRepo:
    return KudoRepo(database)


@pytest.fixture
def api_key_service(database) -> ApiKeyService:
    return ApiKeyService(ApiKeyRepo(database))


@pytest.fixture
def profile_service(profile_repo, api_key_service) -> ProfileService:
    return ProfileService(profile_repo, api_key_service)


@pytest.fixture
def kudo_service(kudo_repo, profile_repo) -> KudoService:
    return KudoService(kudo_repo, profile_repo)


@pytest.fixture
def alice(profile_service):
    return profile_service.register_profile("Alice Example", email="alice@example.com")


@pytest.fixture
def bob(profile_service):
    return profile_service.register_profile("Bob Builder", email="bob@example.com")


@pytest.fixture
def api(api_key_service, profile_service, kudo_service, service):
    """TestClient wired to the temporary database and the fake OpenRouter service."""
    app = create_app()
    app.dependency_overrides[get_auth_service] = lambda: AuthService(api_key_service)
    app.dependency_overrides[get_profile_service] = lambda: profile_service
    app.dependency_overrides[get_kudo_service] = lambda: kudo_service
    app.dependency_overrides[get_message_completion_service] = lambda: service
    return TestClient(app)
