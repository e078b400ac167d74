"""Tests for settings loading and logging setup."""

import logging

import structlog

from stockroom.config import configure_logging, get_settings, reset_settings
from stockroom.config import logging as logging_module


class TestSettings:
    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_ledger_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        ledger = get_settings().ledger

        assert ledger.default_min_quantity == 5
        assert ledger.movement_limit == 50
        assert ledger.activity_limit == 20
        assert ledger.uncategorized_label == "Uncategorized"
        assert ledger.deleted_item_label == "Deleted Item"

    def test_env_prefixes(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STORAGE_DB_NAME", "other.db")
        monkeypatch.setenv("LEDGER_MAX_CONFLICT_RETRIES", "7")

        settings = get_settings()

        assert settings.storage.db_path == tmp_path / "other.db"
        assert settings.ledger.max_conflict_retries == 7

    def test_cached_until_reset(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first


class TestConfigureLogging:
    def test_repeat_calls_are_noops(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging_module, "_configured", False)
        monkeypatch.setattr(structlog, "configure", lambda **kw: calls.append(kw))
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)

        configure_logging()
        configure_logging()

        assert len(calls) == 1

    def test_force_reconfigures(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging_module, "_configured", True)
        monkeypatch.setattr(structlog, "configure", lambda **kw: calls.append(kw))
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)

        configure_logging(level="debug", force=True)

        assert len(calls) == 1
