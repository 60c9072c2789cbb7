from __future__ import annotations

import json
import logging

from gtd_todo.config import Settings
from gtd_todo.infra.db.sqlite import make_database_url, normalize_database_url
from gtd_todo.observability.logging import JsonFormatter


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("STORAGE", "Memory")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_DIR", "")
    monkeypatch.setenv("JWT_TTL_MINUTES", "5")
    monkeypatch.delenv("DATABASE_URL", raising=False)

    s = Settings.from_env()

    assert s.storage == "memory"
    assert s.log_level == "DEBUG"
    assert s.log_dir is None
    assert s.jwt_ttl_minutes == 5
    assert s.database_url is None


def test_database_url_selection(tmp_path) -> None:
    assert normalize_database_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert normalize_database_url("postgresql+asyncpg://h/db") == "postgresql+asyncpg://h/db"
    assert make_database_url(None, str(tmp_path / "x.db")).startswith("sqlite+aiosqlite:///")
    assert make_database_url("sqlite+aiosqlite:///a.db", "ignored") == "sqlite+aiosqlite:///a.db"


def test_json_formatter_keeps_extras_only() -> None:
    record = logging.LogRecord("gtd.tasks", logging.INFO, __file__, 1, "task.reorder", None, None)
    record.category = "tasks"
    record.count = 3

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "task.reorder"
    assert payload["logger"] == "gtd.tasks"
    assert payload["level"] == "INFO"
    assert payload["category"] == "tasks"
    assert payload["count"] == 3
    assert "lineno" not in payload
    assert payload["ts"].endswith("Z")


def test_ports_module_has_docstring() -> None:
    from gtd_todo.domain import ports

    assert ports.__doc__ is not None
    assert "Protocols" in ports.__doc__
