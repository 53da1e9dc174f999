"""
Application Settings - Load from YAML configs + .env

Design Philosophy:
- Screener behaviour (pairs, timeframes, indicators, windows) → YAML file
  (public, versioned in git)
- Process environment (log level, paths) → .env / environment variables

Uses Pydantic for validation and type safety
"""

from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.loader import DEFAULT_CONFIG_PATH, ScreenerConfig, load_screener_config


class Settings(BaseSettings):
    """
    Application settings

    Architecture:
    - Screener config → config/providers/screener.yaml (loaded once, frozen)
    - Environment → .env

    Usage:
        from config.settings import get_settings

        settings = get_settings()
        print(settings.LOG_LEVEL)  # From .env
        print(settings.SCREENER.timeframes.primary)  # From screener.yaml
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
    )

    # ============================================
    # ENVIRONMENT (.env only)
    # ============================================
    ENVIRONMENT: str = Field(default="local", description="Environment: local, dev, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIR: str = Field(default="data/logs", description="Directory for rotating log files")

    # ============================================
    # SCREENER (YAML path from .env)
    # ============================================
    SCREENER_CONFIG_PATH: str = Field(
        default=DEFAULT_CONFIG_PATH, description="Path to screener.yaml"
    )

    _screener_config: ScreenerConfig | None = PrivateAttr(default=None)

    @property
    def SCREENER(self) -> ScreenerConfig:
        """Validated screener config from screener.yaml (loaded on first access)"""
        if self._screener_config is None:
            self._screener_config = load_screener_config(self.SCREENER_CONFIG_PATH)
        return self._screener_config

    @property
    def ERROR_LOG_FILE(self) -> str:
        """Rotating error log path"""
        return f"{self.LOG_DIR}/screener_errors.log"


# Singleton pattern
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance

    Example:
        >>> settings = get_settings()
        >>> print(settings.LOG_LEVEL)
        INFO
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
