# src/dao_bridge/core/logging/builder.py
"""
Logging builder: turn Settings into a dictConfig mapping and apply it.

    from dao_bridge.config.settings import get_settings
    from dao_bridge.core.logging import setup_logging

    setup_logging(get_settings())

| LOG_TO_STDOUT | LOG_DIR set | Active handlers                    |
| ------------- | ----------- | ---------------------------------- |
| true          | any         | console + error_console            |
| false         | no          | console + error_console            |
| false         | yes         | console + file + error_file        |

The translation layer logs under the `dao_bridge` logger tree; SQLAlchemy's
engine logger is kept at WARNING unless ENABLE_SQL_LOGGING is on, because
echoed statements may carry bound parameter values.
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from dao_bridge.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import CorrelationIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

from dao_bridge.config.settings import Settings


def _file_logging_enabled(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping:
      - formatters: "standard" (color in text mode) and "json"
      - filters: "correlation_id", "redact"
      - handlers: see module table
      - loggers: root, dao_bridge, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="dao-bridge"),
        },
    }

    filters = {
        "correlation_id": {"()": CorrelationIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _file_logging_enabled(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "dao_bridge": {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # Echoed SQL may contain sensitive parameter values
            "sqlalchemy.engine": {
                "level": "INFO" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Create LOG_DIR when file logging is on, apply the dictConfig, and put a
    CorrelationIdFilter on the root logger so `%(correlation_id)s` is always safe.
    """
    if _file_logging_enabled(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(CorrelationIdFilter())
