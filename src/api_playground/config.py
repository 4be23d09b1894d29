"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from API_PLAYGROUND_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="API_PLAYGROUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Preferences (base URL + token), plaintext JSON
    preferences_path: Path = Path.home() / ".api-playground" / "preferences.json"
    preferences_scope: str = "default"

    # Endpoint descriptors
    store_dir: Path = Path("endpoints")

    # Proxy
    proxy_timeout: float | None = None  # None keeps the httpx default

    # Controller
    copied_reset_seconds: float = 2.0

    # Server
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
