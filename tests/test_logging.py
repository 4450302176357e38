# File: /tests/test_logging.py | Version: 1.0 | Title: Logging configuration
import json
import logging

from interface_engine.core.logging import JsonConsole, configure_logging


def test_json_formatter_keeps_engine_extras():
    record = logging.LogRecord("interface_engine.crud.view", logging.WARNING, __file__, 1, "view %s", ("v1",), None)
    record.view_id = "v1"
    out = json.loads(JsonConsole().format(record))
    assert out == {
        "level": "WARNING",
        "logger": "interface_engine.crud.view",
        "message": "view v1",
        "view_id": "v1",
    }


def test_engine_level_is_separate(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("ENGINE_LOG_LEVEL", "debug")
    try:
        configure_logging()
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("interface_engine").level == logging.DEBUG
    finally:
        monkeypatch.delenv("LOG_LEVEL")
        monkeypatch.delenv("ENGINE_LOG_LEVEL")
        configure_logging()
