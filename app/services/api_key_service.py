import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime

from app.db.api_key_repo import ApiKeyRepo
from app.models.api_key import ApiKey


LOGGER = logging.getLogger("kudos.auth")

API_KEY_PREFIX = "kudos_"


@dataclass
class ApiKeyCreationResult:
    key_id: str
    plaintext_key: str
    name: str
    created_at: datetime


class ApiKeyService:
    """Issues profile API keys; only their SHA-256 hashes are stored"""

    def __init__(self, api_key_repo: ApiKeyRepo) -> None:
        self.api_key_repo = api_key_repo

    def hash_key(self, plaintext_key: str) -> str:
        return hashlib.sha256(plaintext_key.encode()).hexdigest()

    def generate_api_key(self) -> str:
        return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"

    def create_api_key(self, profile_id: str, name: str) -> ApiKeyCreationResult:
        plaintext_key = self.generate_api_key()

        stored = self.api_key_repo.create_api_key(
            key_id=str(uuid.uuid4()),
            profile_id=profile_id,
            key_hash=self.hash_key(plaintext_key),
            name=name,
        )
        LOGGER.info("API key issued (key_id=%s, profile_id=%s)", stored.id, profile_id)

        return ApiKeyCreationResult(
            key_id=stored.id,
            plaintext_key=plaintext_key,
            name=stored.name,
            created_at=stored.created_at,
        )

    def validate_api_key(self, plaintext_key: str) -> tuple[ApiKey | None, str | None]:
        """Return the stored key, or `None` with the reason it was rejected"""
        stored = self.api_key_repo.get_api_key_by_hash(self.hash_key(plaintext_key))
        if stored is None:
            return None, "Invalid API key"

        if stored.deleted_at is not None:
            return None, "API key has been revoked"

        return stored, None

    def revoke_api_key(self, key_id: str) -> None:
        self.api_key_repo.soft_delete_api_key(key_id)
        LOGGER.info("API key revoked (key_id=%s)", key_id)
