"""Configuration settings for payment-ledger.

Uses Pydantic Settings to load environment variables (and an optional .env
file) for logging and ledger storage.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", alias="PAYMENT_LEDGER_LOG_LEVEL"
    )
    json_logs: bool = Field(False, alias="PAYMENT_LEDGER_JSON_LOGS")

    # Ledger; None keeps state in memory for the lifetime of the process
    ledger_path: Path | None = Field(None, alias="PAYMENT_LEDGER_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
