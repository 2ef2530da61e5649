import sqlite3
from datetime import datetime

from app.db.database import Database, register_schema_sql
from app.db.profile_repo import profile_from_row
from app.models.kudo.models import Kudo, KudoPage, KudoWithUsers
from utils import utc_now


@register_schema_sql
def _create_kudos_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS kudos (
            id TEXT PRIMARY KEY,
            sender_id TEXT NOT NULL,
            recipient_id TEXT NOT NULL,
            message TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY (sender_id) REFERENCES profiles(id) ON DELETE CASCADE,
            FOREIGN KEY (recipient_id) REFERENCES profiles(id) ON DELETE CASCADE,
            CHECK (sender_id != recipient_id)
        )
    """


@register_schema_sql
def _create_kudos_created_at_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_kudos_created_at
        ON kudos(created_at DESC)
    """


# k.sender_id / k.recipient_id double as the `{prefix}id` columns read by profile_from_row
_KUDOS_WITH_USERS_QUERY = """
    SELECT
        k.id, k.sender_id, k.recipient_id, k.message, k.created_at, k.updated_at,
        s.display_name AS sender_display_name, s.email AS sender_email,
        s.avatar_url AS sender_avatar_url, s.created_at AS sender_created_at, s.updated_at AS sender_updated_at,
        r.display_name AS recipient_display_name, r.email AS recipient_email,
        r.avatar_url AS recipient_avatar_url, r.created_at AS recipient_created_at, r.updated_at AS recipient_updated_at
    FROM kudos k
    JOIN profiles s ON s.id = k.sender_id
    JOIN profiles r ON r.id = k.recipient_id
"""


def _kudo_from_row(row: sqlite3.Row) -> Kudo:
    return Kudo(
        id=row["id"],
        sender_id=row["sender_id"],
        recipient_id=row["recipient_id"],
        message=row["message"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _kudo_with_users_from_row(row: sqlite3.Row) -> KudoWithUsers:
    return KudoWithUsers(
        kudo=_kudo_from_row(row),
        sender=profile_from_row(row, prefix="sender_"),
        recipient=profile_from_row(row, prefix="recipient_"),
    )


class KudoRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def list_kudos(self, limit: int, offset: int) -> KudoPage:
        """List kudos newest first, with sender/recipient profiles and the total count"""
        rows = self.db.execute_query(
            f"{_KUDOS_WITH_USERS_QUERY} ORDER BY k.created_at DESC, k.id DESC LIMIT ? OFFSET ?",
            (limit, offset)
        )
        count_rows = self.db.execute_query("SELECT COUNT(*) AS total FROM kudos")

        return KudoPage(
            items=[_kudo_with_users_from_row(row) for row in rows],
            limit=limit,
            offset=offset,
            total=count_rows[0]["total"],
        )

    def get_kudo_by_id(self, kudo_id: str) -> Kudo | None:
        rows = self.db.execute_query(
            "SELECT id, sender_id, recipient_id, message, created_at, updated_at FROM kudos WHERE id = ?",
            (kudo_id,)
        )

        if not rows:
            return None
        return _kudo_from_row(rows[0])

    def get_kudo_with_users(self, kudo_id: str) -> KudoWithUsers | None:
        rows = self.db.execute_query(f"{_KUDOS_WITH_USERS_QUERY} WHERE k.id = ?", (kudo_id,))

        if not rows:
            return None
        return _kudo_with_users_from_row(rows[0])

    def create_kudo(self, kudo_id: str, sender_id: str, recipient_id: str, message: str) -> Kudo:
        now = utc_now()
        self.db.execute_update(
            "INSERT INTO kudos (id, sender_id, recipient_id, message, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
            (kudo_id, sender_id, recipient_id, message, now.isoformat(), now.isoformat())
        )

        return Kudo(
            id=kudo_id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            message=message,
            created_at=now,
            updated_at=now,
        )

    def delete_kudo(self, kudo_id: str) -> int:
        return self.db.execute_update("DELETE FROM kudos WHERE id = ?", (kudo_id,))
