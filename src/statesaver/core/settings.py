"""Centralized configuration for StateSaver using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files in the working directory: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_STATE_NAME = "NewState"


class Settings(BaseSettings):
    """Typed configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `STATESAVER_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    store_path : Path
        Backing JSON file for all snapshots; maps from `STATESAVER_STORE_PATH`.
    default_state_name : str
        Name used when a capture is requested with an empty name; maps from
        `STATESAVER_DEFAULT_NAME`.
    """

    environment: EnvName = Field(default="dev", alias="STATESAVER_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    store_path: Path = Field(default=Path("StateData.json"), alias="STATESAVER_STORE_PATH")
    default_state_name: str = Field(default=DEFAULT_STATE_NAME, alias="STATESAVER_DEFAULT_NAME")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("default_state_name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:
        """A blank default would defeat the empty-name coercion."""
        v = v.strip()
        if not v:
            raise ValueError("default_state_name must not be blank")
        return v

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests can force a rebuild via `load_settings.cache_clear()` after
    mutating `os.environ`.
    """
    os.environ.setdefault("STATESAVER_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "statesaver") -> logging.Logger:
    """Return a process-global logger configured to the current log level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
