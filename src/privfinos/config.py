"""
PrivFinOS - Configuration

Settings are read from the process environment after loading the layered
.env files for the current APP_ENV. Values are validated with pydantic-settings
so a bad PORT or LOG_LEVEL is reported at startup instead of mid-request.

Env files, lowest to highest priority:
    .env                   base defaults (committed)
    .env.{APP_ENV}         environment specific (committed)
    .env.{APP_ENV}.local   local overrides for one environment (gitignored)
    .env.local             local overrides for every environment (gitignored)

Files are applied in override mode: their values replace variables already
set in the process environment.
"""

import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_ENVIRONMENTS = ("development", "production", "test")

# LOG_LEVEL names -> stdlib logging levels
LOG_LEVELS = {
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def env_file_chain(app_env: str) -> List[str]:
    """Return the env file names for app_env in increasing priority order."""
    return [
        ".env",
        f".env.{app_env}",
        f".env.{app_env}.local",
        ".env.local",
    ]


def load_env_files(base_dir: Optional[Path] = None) -> List[str]:
    """
    Load the layered .env files from base_dir (default: current directory).

    Later files override earlier ones, and file values override variables
    already set in the process environment.

    Returns:
        list: Names of the env files that were found and loaded
    """
    base_dir = Path(base_dir) if base_dir else Path.cwd()
    app_env = os.environ.get("APP_ENV", "development")

    merged = {}
    loaded = []
    for name in env_file_chain(app_env):
        path = base_dir / name
        if path.is_file():
            merged.update({k: v for k, v in dotenv_values(path).items() if v is not None})
            loaded.append(name)

    os.environ.update(merged)

    return loaded


class Settings(BaseSettings):
    """Application settings validated from environment variables."""

    model_config = SettingsConfigDict(extra="ignore")

    app_env: Literal["development", "production", "test"] = "development"
    host: str = "127.0.0.1"
    port: int = Field(default=3001, gt=0, le=65535)
    database_url: str = "sqlite:///data/privfinos.db"
    log_level: Literal["fatal", "error", "warn", "info", "debug", "trace"] = "info"
    cors_origin: str = "http://localhost:5173"
    web_dist_path: Path = Path("web") / "dist"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level]


def get_settings(base_dir: Optional[Path] = None) -> Settings:
    """Load the env files and build validated settings."""
    load_env_files(base_dir)
    return Settings()
