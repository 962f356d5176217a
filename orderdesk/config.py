from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Remote store
    store_url: str = "http://localhost:1337"
    store_token: Optional[str] = None
    store_timeout_seconds: float = 30.0
    default_store_kind: Literal["http", "memory"] = "http"

    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    operator_name: str = "Unidentified User"

    # Checkout
    exchange_rate: int = 4000

    # Business day / refresh
    business_day_start_hour: int = 4
    poll_interval_seconds: float = 5.0
    max_parallel_requests: int = 8

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
