"""
Configuration for the ledger engine command line.

Values come from the environment with the LEDGER_ prefix, for example
LEDGER_LOG_LEVEL=INFO to see batch summaries.
"""

from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EngineConfig(BaseSettings):
    """Ledger engine configuration"""

    log_level: LogLevel = "WARNING"
    log_format: str = "%(levelname)s: %(message)s"

    model_config = SettingsConfigDict(env_prefix="LEDGER_", case_sensitive=False)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


# Global configuration instance, built on first use
config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get global configuration instance. Raises pydantic.ValidationError on bad settings."""
    global config
    if config is None:
        config = EngineConfig()
    return config


def reload_config() -> EngineConfig:
    """Reload configuration from environment"""
    global config
    config = EngineConfig()
    return config
