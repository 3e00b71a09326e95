"""Logging configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class LoggingConfig(BaseSettings):
    """Operator diagnostics settings."""

    log_level: str = Field(default="WARNING", alias="log_level")
    log_format: str = Field(default="console", alias="log_format")

    class Config:
        env_prefix = ""
        extra = "ignore"
