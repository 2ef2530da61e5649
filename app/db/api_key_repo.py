import sqlite3
from datetime import datetime

from app.db.database import Database, register_schema_sql
from app.models.api_key import ApiKey
from utils import utc_now


@register_schema_sql
def _create_api_keys_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS api_keys (
            id TEXT PRIMARY KEY,
            profile_id TEXT NOT NULL,
            key_hash TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TEXT NOT NULL,
            deleted_at TEXT,
            FOREIGN KEY (profile_id) REFERENCES profiles(id) ON DELETE CASCADE
        )
    """


@register_schema_sql
def _create_api_keys_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_api_keys_key_hash
        ON api_keys(key_hash)
    """


def _api_key_from_row(row: sqlite3.Row) -> ApiKey:
    return ApiKey(
        id=row["id"],
        profile_id=row["profile_id"],
        key_hash=row["key_hash"],
        name=row["name"],
        created_at=datetime.fromisoformat(row["created_at"]),
        deleted_at=datetime.fromisoformat(row["deleted_at"]) if row["deleted_at"] else None,
    )


class ApiKeyRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def get_api_key_by_hash(self, key_hash: str) -> ApiKey | None:
        rows = self.db.execute_query(
            "SELECT id, profile_id, key_hash, name, created_at, deleted_at FROM api_keys WHERE key_hash = ?",
            (key_hash,)
        )

        if not rows:
            return None
        return _api_key_from_row(rows[0])

    def create_api_key(self, key_id: str, profile_id: str, key_hash: str, name: str) -> ApiKey:
        created_at = utc_now()
        self.db.execute_update(
            "INSERT INTO api_keys (id, profile_id, key_hash, name, created_at, deleted_at) VALUES (?, ?, ?, ?, ?, NULL)",
            (key_id, profile_id, key_hash, name, created_at.isoformat())
        )

        return ApiKey(
            id=key_id,
            profile_id=profile_id,
            key_hash=key_hash,
            name=name,
            created_at=created_at,
        )

    def soft_delete_api_key(self, key_id: str) -> None:
        self.db.execute_update(
            "UPDATE api_keys SET deleted_at = ? WHERE id = ? AND deleted_at IS NULL",
            (utc_now().isoformat(), key_id)
        )
