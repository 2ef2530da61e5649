"""Tests for the SQLite repositories, settings wiring and logging setup."""

import logging
import sqlite3
from contextlib import closing

import pytest

from app.db.database import Database, DatabaseNotInitializedError
from app.services.llm.config.openrouter_config import OpenRouterConfig, config_data_from_settings
from app.core.logging import setup_logging
from app.settings import Settings


class TestDatabase:
    def test_queries_require_setup(self, tmp_path):
        db = Database(str(tmp_path / "fresh.db"))
        with pytest.raises(DatabaseNotInitializedError):
            db.execute_query("SELECT 1")

    def test_setup_creates_parent_directory(self, tmp_path):
        db = Database(str(tmp_path / "nested" / "dir" / "kudos.db"))
        db.setup()
        assert (tmp_path / "nested" / "dir" / "kudos.db").exists()

    def test_outdated_database_is_replaced(self, tmp_path):
        path = tmp_path / "old.db"
        with closing(sqlite3.connect(path)) as conn, conn:
            conn.execute("CREATE TABLE db_version (version INTEGER NOT NULL)")
            conn.execute("INSERT INTO db_version (version) VALUES (0)")
            conn.execute("CREATE TABLE leftovers (id INTEGER)")

        db = Database(str(path))
        db.setup()

        tables = {row["name"] for row in db.execute_query("SELECT name FROM sqlite_master WHERE type='table'")}
        assert "leftovers" not in tables
        assert {"profiles", "api_keys", "kudos"} <= tables

    def test_connection_is_closed_after_use(self, database):
        with database.connect() as conn:
            conn.execute("SELECT 1")

        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")

    def test_failed_block_is_rolled_back(self, database, profile_repo):
        with pytest.raises(sqlite3.IntegrityError):
            with database.connect() as conn:
                conn.execute(
                    "INSERT INTO profiles (id, display_name, created_at, updated_at) VALUES (?, ?, ?, ?)",
                    ("p-1", "Dana", "2025-01-01T00:00:00+00:00", "2025-01-01T00:00:00+00:00"),
                )
                conn.execute("INSERT INTO profiles (id) VALUES ('p-2')")

        assert profile_repo.get_profile_by_id("p-1") is None

    def test_unversioned_database_is_replaced(self, tmp_path):
        path = tmp_path / "legacy.db"
        with closing(sqlite3.connect(path)) as conn, conn:
            conn.execute("CREATE TABLE leftovers (id INTEGER)")

        db = Database(str(path))
        db.setup()

        tables = {row["name"] for row in db.execute_query("SELECT name FROM sqlite_master WHERE type='table'")}
        assert "leftovers" not in tables


class TestKudoRepo:
    def test_check_constraint_rejects_self_kudo(self, kudo_repo, alice):
        with pytest.raises(sqlite3.IntegrityError):
            kudo_repo.create_kudo("k-1", alice.profile.id, alice.profile.id, "Me again")

    def test_foreign_keys_enforced(self, kudo_repo, alice):
        with pytest.raises(sqlite3.IntegrityError):
            kudo_repo.create_kudo("k-1", alice.profile.id, "missing-profile", "Hello")

    def test_get_kudo_with_users(self, kudo_repo, alice, bob):
        kudo_repo.create_kudo("k-1", alice.profile.id, bob.profile.id, "Great demo")

        item = kudo_repo.get_kudo_with_users("k-1")

        assert item is not None
        assert item.sender.id == alice.profile.id
        assert item.sender.email == "alice@example.com"
        assert item.recipient.id == bob.profile.id
        assert item.recipient.display_name == "Bob Builder"

    def test_delete_returns_affected_rows(self, kudo_repo, alice, bob):
        kudo_repo.create_kudo("k-1", alice.profile.id, bob.profile.id, "Great demo")

        assert kudo_repo.delete_kudo("k-1") == 1
        assert kudo_repo.delete_kudo("k-1") == 0


class TestProfileRegistration:
    def test_api_key_is_stored_hashed(self, database, api_key_service, alice):
        rows = database.execute_query("SELECT key_hash FROM api_keys")

        assert [row["key_hash"] for row in rows] == [api_key_service.hash_key(alice.plaintext_key)]
        assert alice.plaintext_key.startswith("kudos_")

    def test_key_authenticates_its_profile(self, api_key_service, alice):
        key, error = api_key_service.validate_api_key(alice.plaintext_key)

        assert error is None
        assert key.profile_id == alice.profile.id


class TestSettings:
    def test_config_built_from_settings(self):
        settings = Settings(openrouter_api_key="sk-or-env", openrouter_timeout_ms=1500, _env_file=None)

        config = OpenRouterConfig(**config_data_from_settings(settings))

        assert config.api_key == "sk-or-env"
        assert config.timeout_ms == 1500
        assert config.site_url == "https://kudospace.dev"
        assert config.app_title == "KudoSpace"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-from-env")
        monkeypatch.setenv("OPENROUTER_TIMEOUT_MS", "900")

        settings = Settings(_env_file=None)

        assert settings.openrouter_api_key == "sk-or-from-env"
        assert settings.openrouter_timeout_ms == 900


class TestLogging:
    def test_setup_is_idempotent(self):
        logger = setup_logging("DEBUG", name="kudos.test.setup")
        setup_logging("DEBUG", name="kudos.test.setup")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
