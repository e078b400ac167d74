"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from stockroom.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert len(info.checksum) == 16

    def test_different_content_different_checksum(self, tmp_path: Path):
        first = tmp_path / "v001_a.sql"
        first.write_text("SELECT 1;")
        second = tmp_path / "v002_b.sql"
        second.write_text("SELECT 2;")

        assert MigrationInfo.from_file(first).checksum != MigrationInfo.from_file(second).checksum

    def test_invalid_filename(self, tmp_path: Path):
        bad = tmp_path / "initial.sql"
        bad.write_text("SELECT 1;")

        with pytest.raises(ValueError):
            MigrationInfo.from_file(bad)


class TestDiscoverMigrations:
    def test_bundled_migrations(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[0] == "001"
        assert versions == sorted(versions)

    def test_skips_invalid_names(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vbad.sql").write_text("SELECT 3;")

        assert [m.name for m in discover_migrations(tmp_path)] == ["first", "second"]


class TestInitializeDatabase:
    async def test_creates_schema(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert results
        assert all(r.success for r in results)

        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert set(REQUIRED_TABLES) <= tables
            assert await get_current_version(conn) == "001"

    async def test_idempotent(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)

        assert await initialize_database(temp_db_path) == []

    async def test_backup_removed_after_success(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        await initialize_database(temp_db_path)

        assert list(temp_db_path.parent.glob("*.backup_*")) == []

    async def test_applied_empty_before_migration(self, temp_db_path: Path):
        async with aiosqlite.connect(temp_db_path) as conn:
            assert await get_applied_migrations(conn) == {}


class TestBackup:
    def test_create_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "data.db"
        db_path.write_bytes(b"original")

        backup = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup)

        assert db_path.read_bytes() == b"original"


class TestStatusAndVerify:
    async def test_status_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "nope.db")

        assert status["exists"] is False
        assert "001" in status["pending_migrations"]

    async def test_status_after_migration(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)

        status = await get_migration_status(temp_db_path)

        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []

    async def test_verify_passes_on_fresh_schema(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)

        checks = await verify_schema_integrity(temp_db_path)

        assert {c.check for c in checks} == {
            "integrity",
            "foreign_keys",
            "required_tables",
            "movement_balance",
        }
        assert all(c.passed for c in checks)

    async def test_verify_reports_missing_tables(self, temp_db_path: Path):
        async with aiosqlite.connect(temp_db_path) as conn:
            await conn.execute("CREATE TABLE unrelated (id INTEGER)")
            await conn.commit()

        checks = {c.check: c for c in await verify_schema_integrity(temp_db_path)}

        assert checks["required_tables"].passed is False
        assert checks["required_tables"].status == "FAIL"
        assert "stock_items" in checks["required_tables"].details["missing"]
