from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # State scoping
    # Component used by '__current.' paths and counters when no componentId is given
    DEFAULT_COMPONENT_ID: str = "default"
    ALLOW_LEGACY_RESULT_PREFIX: bool = True

    # Reference host API delegate
    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT_SECONDS: float = 10.0

    # Auth flow (loginUser / logoutUser)
    LOGIN_ENDPOINT: str = "auth/login"
    LOGIN_REDIRECT_PATH: str = "/"
    LOGOUT_REDIRECT_PATH: str = "/login"
    LOGIN_REDIRECT_DELAY_SECONDS: float = 1.5
    LOGOUT_REDIRECT_DELAY_SECONDS: float = 1.0

    # Demo ticker (~60fps)
    HIGH_FREQUENCY_INTERVAL_SECONDS: float = 0.016
    HIGH_FREQUENCY_MAX_TICKS: int = 1000

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", env_prefix="XINGINE_", extra="ignore")

# Singleton instance
settings = Settings()
