"""Tests for GET /api/users and GET /health."""

import pytest


URL = "/api/users"


@pytest.fixture
def carol(profile_service):
    return profile_service.register_profile("Carol 100%_Done", email="carol@corp.example")


def names(response) -> list[str]:
    return [user["display_name"] for user in response.json()["data"]]


class TestListUsers:
    def test_requires_api_key(self, api):
        response = api.get(URL)
        assert response.status_code == 401

    def test_excludes_requester_by_default(self, api, alice, bob, carol):
        response = api.get(URL, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 200
        assert names(response) == ["Bob Builder", "Carol 100%_Done"]

    def test_include_requester(self, api, alice, bob):
        response = api.get(URL, params={"exclude_me": "false"}, headers={"X-API-Key": alice.plaintext_key})

        assert names(response) == ["Alice Example", "Bob Builder"]

    def test_search_by_name_case_insensitive(self, api, alice, bob, carol):
        response = api.get(URL, params={"search": "  bob "}, headers={"X-API-Key": alice.plaintext_key})

        assert names(response) == ["Bob Builder"]

    def test_search_by_email(self, api, alice, bob, carol):
        response = api.get(URL, params={"search": "corp.example"}, headers={"X-API-Key": alice.plaintext_key})

        assert names(response) == ["Carol 100%_Done"]

    def test_search_wildcards_are_literal(self, api, alice, bob, carol):
        response = api.get(URL, params={"search": "%_"}, headers={"X-API-Key": alice.plaintext_key})

        assert names(response) == ["Carol 100%_Done"]

    def test_profile_fields(self, api, alice, bob):
        response = api.get(URL, headers={"X-API-Key": alice.plaintext_key})

        assert response.json()["data"][0] == {
            "id": bob.profile.id,
            "display_name": "Bob Builder",
            "avatar_url": None,
            "email": "bob@example.com",
        }

    def test_search_too_long(self, api, alice):
        response = api.get(URL, params={"search": "x" * 101}, headers={"X-API-Key": alice.plaintext_key})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PARAMETERS"


class TestHealth:
    def test_health_is_public(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "0.1.0"
        assert isinstance(body["ai_configured"], bool)
