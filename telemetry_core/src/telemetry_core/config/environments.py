from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TESTING = "testing"


class Settings(BaseSettings):
    """Configuration settings for the telemetry pipeline."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Realtime store (Firebase Realtime Database)
    FIREBASE_DB_URL: str = "http://localhost:9000"
    FIREBASE_AUTH_TOKEN: str = ""
    STORE_TIMEOUT_SEC: float = 10.0
    STREAM_READ_TIMEOUT_SEC: float = 90.0

    # Device selection / working set
    DEFAULT_DEVICE_ID: str = "6C:C8:40:35:32:F4"
    CHART_MAX_POINTS: int = 500
    MIN_WINDOW_POINTS: int = 20

    # Outlier filter for SO2
    FILTER_SO2_OUTLIERS: bool = False
    SO2_MIN: float = 0.0
    SO2_MAX: float = 3.5

    # Prediction service
    PREDICTION_API_URL: str = "http://localhost:5000"
    PREDICTION_TIMEOUT_SEC: float = 10.0
    PREDICTION_DEBOUNCE_SEC: float = 1.0
    PREDICTION_REFRESH_SEC: float = 60.0

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"


def get_settings() -> Settings:
    """Get settings based on environment."""
    import os

    env = os.getenv("TELEMETRY_ENV", "development").lower()

    if env == "production":
        return Settings(ENVIRONMENT=Environment.PRODUCTION, LOG_LEVEL="WARNING")
    elif env == "testing":
        return Settings(
            ENVIRONMENT=Environment.TESTING,
            DEFAULT_DEVICE_ID="test-device",
            API_PORT=8001,
            CHART_MAX_POINTS=50,
            MIN_WINDOW_POINTS=5,
            PREDICTION_DEBOUNCE_SEC=0.1,
            PREDICTION_REFRESH_SEC=5.0,
            LOG_LEVEL="DEBUG",
        )
    else:
        return Settings(ENVIRONMENT=Environment.DEVELOPMENT, LOG_LEVEL="DEBUG")
