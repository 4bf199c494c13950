"""
Configuration management using pydantic-settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from paypurse.constants import (
    DEFAULT_SATS_PER_KB,
    FUNDING_MARGIN,
    LOCK_TTL_SECONDS,
    MAX_FUNDING_ATTEMPTS,
    SELECTION_WINDOW,
    WHATSONCHAIN_MAINNET_URL,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    redis_url: str = "redis://localhost:6379/0"
    wif: str = ""
    network: Literal["mainnet", "testnet"] = "mainnet"

    # Fee and change
    sats_per_kb: int = Field(default=DEFAULT_SATS_PER_KB, ge=0)
    change_splits: int = Field(default=1, ge=0, le=50)

    # Selection and reservation
    selection_window: int = Field(default=SELECTION_WINDOW, ge=1)
    lock_ttl: int = Field(default=LOCK_TTL_SECONDS, ge=1, description="Lease in seconds")
    funding_margin: int = Field(default=FUNDING_MARGIN, ge=0)
    max_funding_attempts: int = Field(default=MAX_FUNDING_ATTEMPTS, ge=1)

    # Remote resync source
    woc_url: str = WHATSONCHAIN_MAINNET_URL
    remote_timeout: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()
