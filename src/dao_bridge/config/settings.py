from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


def _normalized(value: str | None, upper: bool) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value.upper() if upper else value.lower()


class Settings(BaseSettings):
    """
    Settings loaded from environment (prefix DAO_BRIDGE_) and an optional .env file.

    Only the host's assembly code (dao_bridge.db.session) reads these; the translator
    and accessor receive plain constructor arguments.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database
    DATABASE_URL: str = "sqlite:///./dao_bridge.db"
    SQLALCHEMY_ECHO: bool = False
    POOL_PRE_PING: bool = True

    # Exception translation: build the low-level translator on first use
    EXCEPTION_TRANSLATOR_LAZY_INIT: bool = True

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/dao-bridge")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation,
        so `DAO_BRIDGE_LOG_LEVEL=debug` is accepted.
        """
        return _normalized(v, upper=True)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize LOG_FORMAT to lowercase.
        """
        return _normalized(v, upper=False)

    model_config = SettingsConfigDict(
        env_prefix="DAO_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Same environment -> same settings; cache the instance.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
