"""Application configuration."""
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

def clean_int_value(v: Any) -> int:
    """Clean integer values from environment variables."""
    if isinstance(v, str):
        # Remove any comments and whitespace
        v = v.split('#')[0].strip()
    return int(v)

class Settings(BaseSettings):
    # Application settings
    PROJECT_NAME: str = "Pulse Events"
    ENVIRONMENT: str = "development"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Scheduler settings
    SCRAPE_HOUR: int = 10
    SCRAPE_TIMEZONE: str = "America/New_York"

    # Source adapter settings
    ADAPTER_TIMEOUT_SECONDS: float = 10.0
    ENDPOINT_CHECK_TIMEOUT_SECONDS: float = 10.0
    ENDPOINT_CHECKS_ENABLED: bool = True
    USER_AGENT: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
    HEALTHCHECK_USER_AGENT: str = "PulseSMS/1.0 HealthCheck"

    # Source health settings
    HEALTH_WARN_THRESHOLD: int = 3
    HEALTH_HISTORY_MAX: int = 7
    ALERT_COOLDOWN_HOURS: float = 6.0

    # Geocoder settings
    GEOCODER_USER_AGENT: str = "PulseSMS/1.0"
    GEOCODER_TIMEOUT_SECONDS: float = 5.0
    GEOCODER_MIN_INTERVAL_SECONDS: float = 1.1
    GEOCODER_ENABLED: bool = True
    GEOCODE_SANITY_RADIUS_KM: float = 40.0
    GEOCODE_BOROUGH_RADIUS_KM: float = 15.0

    # Venue persistence
    LEARNED_VENUES_PATH: str = "data/venues-learned.json"

    # Geo resolver settings
    NEIGHBORHOOD_MATCH_RADIUS_KM: float = 3.0
    PROXIMITY_CUTOFF_KM: float = 3.0
    UPCOMING_GRACE_HOURS: float = 2.0
    RESULT_LIMIT: int = 20

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Allow extra fields in the environment
    )

    # Validators for integer fields
    _clean_ints = field_validator('SCRAPE_HOUR', 'HEALTH_WARN_THRESHOLD', 'HEALTH_HISTORY_MAX',
                                  'RESULT_LIMIT', mode='before')(clean_int_value)

    @field_validator('SCRAPE_HOUR')
    @classmethod
    def _check_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("SCRAPE_HOUR must be between 0 and 23")
        return v

@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

settings = get_settings()
