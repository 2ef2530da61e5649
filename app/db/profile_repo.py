import sqlite3
from datetime import datetime

from app.db.database import Database, register_schema_sql
from app.models.profile.models import Profile
from utils import utc_now


@register_schema_sql
def _create_profiles_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            display_name TEXT NOT NULL,
            email TEXT,
            avatar_url TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """


PROFILE_COLUMNS = "id, display_name, email, avatar_url, created_at, updated_at"


def profile_from_row(row: sqlite3.Row, prefix: str = "") -> Profile:
    """Build a Profile from a row; `prefix` selects aliased join columns (e.g. `sender_`)"""
    return Profile(
        id=row[f"{prefix}id"],
        display_name=row[f"{prefix}display_name"],
        email=row[f"{prefix}email"],
        avatar_url=row[f"{prefix}avatar_url"],
        created_at=datetime.fromisoformat(row[f"{prefix}created_at"]),
        updated_at=datetime.fromisoformat(row[f"{prefix}updated_at"]),
    )


class ProfileRepo:
    """Repository for profile data access"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_profile_by_id(self, profile_id: str) -> Profile | None:
        rows = self.db.execute_query(
            f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = ?",
            (profile_id,)
        )

        if not rows:
            return None
        return profile_from_row(rows[0])

    def list_profiles(self, search: str | None = None, exclude_id: str | None = None) -> list[Profile]:
        """List profiles ordered by display name, optionally filtered by a name/email substring"""
        conditions: list[str] = []
        params: list[str] = []

        if search:
            conditions.append("(display_name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\')")
            pattern = f"%{_escape_like(search)}%"
            params.extend([pattern, pattern])
        if exclude_id:
            conditions.append("id != ?")
            params.append(exclude_id)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self.db.execute_query(
            f"SELECT {PROFILE_COLUMNS} FROM profiles {where} ORDER BY display_name COLLATE NOCASE ASC",
            tuple(params)
        )
        return [profile_from_row(row) for row in rows]

    def create_profile(
        self,
        profile_id: str,
        display_name: str,
        email: str | None = None,
        avatar_url: str | None = None,
    ) -> Profile:
        now = utc_now()
        self.db.execute_update(
            f"INSERT INTO profiles ({PROFILE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (profile_id, display_name, email, avatar_url, now.isoformat(), now.isoformat())
        )

        return Profile(
            id=profile_id,
            display_name=display_name,
            email=email,
            avatar_url=avatar_url,
            created_at=now,
            updated_at=now,
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
