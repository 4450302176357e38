# File: /interface_engine/core/logging.py | Version: 2.0 | Title: Logging setup (engine diagnostics; JSON optional)
import json
import logging
import logging.config
import os


def _boolenv(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _levelenv(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip().upper()


class JsonConsole(logging.Formatter):
    """One JSON object per line; extra fields set by the engine (page_id, view_id, ...) are kept."""

    EXTRA_KEYS = ("page_id", "view_id", "table_id", "query_code")

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                base[key] = getattr(record, key)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging() -> None:
    """
    LOG_LEVEL sets the root level, ENGINE_LOG_LEVEL the `interface_engine`
    loggers (config fallbacks, lossy filter conversions, store recovery).
    LOG_JSON=1 switches every root handler to JsonConsole.
    """
    level = _levelenv("LOG_LEVEL", "INFO")
    engine_level = _levelenv("ENGINE_LOG_LEVEL", level)
    use_json = _boolenv("LOG_JSON", False)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(levelname)s %(asctime)s %(name)s: %(message)s"},
            "json": {"()": JsonConsole},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if use_json else "plain",
                "level": level,
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            "interface_engine": {"level": engine_level},
            "sqlalchemy.engine": {"level": "WARNING"},
            "alembic": {"level": "INFO"},
            "httpx": {"level": "WARNING", "propagate": False},
            "uvicorn.access": {"level": level},
        },
    }

    logging.config.dictConfig(config)
