import json
import logging
from pathlib import Path
from types import SimpleNamespace

from dao_bridge.core.logging.builder import make_dict_config, setup_logging
from dao_bridge.core.logging.filters import set_correlation_id, reset_correlation_id


def make_test_settings(tmp_path: Path | None, **overrides):
    # Lightweight duck-typed settings object
    s = SimpleNamespace()
    s.ENV = "testing"
    s.LOG_LEVEL = "INFO"
    s.LOG_FORMAT = "json"
    s.LOG_TO_STDOUT = False
    s.LOG_DIR = tmp_path
    s.LOG_MAX_BYTES = 1_000_000
    s.LOG_BACKUP_COUNT = 1
    s.ENABLE_SQL_LOGGING = False
    for key, value in overrides.items():
        setattr(s, key, value)
    return s


def test_make_dict_config_contains_file_handlers(tmp_path):
    cfg = make_dict_config(make_test_settings(tmp_path))

    assert set(cfg["handlers"]) == {"console", "file", "error_file"}
    assert cfg["handlers"]["file"]["filename"] == str(tmp_path / "dao_bridge.log")
    assert cfg["handlers"]["error_file"]["level"] == "ERROR"
    assert set(cfg["formatters"]) == {"standard", "json"}
    assert set(cfg["filters"]) == {"correlation_id", "redact"}


def test_make_dict_config_stdout_only(tmp_path):
    cfg = make_dict_config(make_test_settings(tmp_path, LOG_TO_STDOUT=True))

    assert set(cfg["handlers"]) == {"console", "error_console"}
    assert cfg["loggers"][""]["handlers"] == ["console", "error_console"]


def test_sql_logging_toggle(tmp_path):
    quiet = make_dict_config(make_test_settings(tmp_path))
    loud = make_dict_config(make_test_settings(tmp_path, ENABLE_SQL_LOGGING=True))

    assert quiet["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    assert loud["loggers"]["sqlalchemy.engine"]["level"] == "INFO"


def test_setup_logging_creates_log_dir(tmp_path, restore_logging):
    settings = make_test_settings(tmp_path / "logs")
    assert not settings.LOG_DIR.exists()

    setup_logging(settings)

    assert settings.LOG_DIR.exists()
    assert logging.getLogger().handlers


def test_translator_events_reach_the_log_file(tmp_path, restore_logging):
    """
    Records from the dao_bridge tree land in dao_bridge.log as JSON lines,
    stamped with the correlation id and with URL passwords masked.
    """
    settings = make_test_settings(tmp_path)
    setup_logging(settings)

    token = set_correlation_id("job-42")
    try:
        logging.getLogger("dao_bridge.exceptions.translator").info(
            "translator.native_translated", extra={"error_class": "DuplicateKeyError"}
        )
        logging.getLogger("dao_bridge.db.session").warning("connecting to %s", "postgresql://app:s3cret@db/app")
    finally:
        reset_correlation_id(token)

    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in (tmp_path / "dao_bridge.log").read_text().splitlines()]
    translated, connecting = lines[-2], lines[-1]

    assert translated["message"] == "translator.native_translated"
    assert translated["error_class"] == "DuplicateKeyError"
    assert translated["correlation_id"] == "job-42"
    assert translated["env"] == "testing"

    assert "s3cret" not in connecting["message"]
    assert connecting["message"] == "connecting to postgresql://app:***@db/app"
