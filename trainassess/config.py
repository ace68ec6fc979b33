"""Application configuration module."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trainassess.common.exceptions import ConfigurationError
from trainassess.common.logger import app_logger

logger = app_logger.getChild("config")

DEFAULT_JWT_SECRET = "dev-secret-key"


class Settings(BaseSettings):
    """Application settings."""

    APP_NAME: str = "Trainee Assessment API"
    ENV: str = "development"

    # Document store settings
    STORE_URL: str = "sqlite+aiosqlite:///./trainassess.db"
    SQL_ECHO: bool = False
    DB_POOL_TIMEOUT: int = 30

    # Token settings
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    TOKEN_ISSUER: str = "trainassess-api"

    # Grading settings
    MAX_SCORE_PER_QUESTION: int = 10

    # Default superadmin created at startup when none exists
    SEED_DEFAULT_ADMIN: bool = True
    DEFAULT_ADMIN_NAME: str = "Super Admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@example.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # API settings
    ALLOW_ORIGINS: List[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("ENV")
    @classmethod
    def validate_env(cls, v: str) -> str:
        valid_envs = ['development', 'testing', 'staging', 'production']
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("MAX_SCORE_PER_QUESTION")
    @classmethod
    def validate_max_score(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_SCORE_PER_QUESTION must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _load_config_file(path: str) -> Dict[str, Any]:
    """
    Load settings overrides from a YAML file.

    Keys are setting names (``STORE_URL``, ``JWT_SECRET_KEY``...).
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}")
        return {}

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")
    return data


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Build settings from defaults, the optional YAML file and the environment.

    Values read from the file and explicit overrides take precedence over
    environment variables, matching how pydantic-settings treats init values.
    """
    config_path = config_path or os.environ.get("CONFIG_PATH")
    values: Dict[str, Any] = {}
    if config_path:
        values.update(_load_config_file(config_path))
    values.update(overrides)
    return Settings(**values)


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return load_settings()
