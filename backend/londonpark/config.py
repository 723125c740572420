"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Booking core settings loaded from .env or environment."""

    BOUNDARY_BASE_URL: str = "http://localhost/london-park/"
    BOUNDARY_TIMEOUT_SECONDS: float = 10.0
    BOUNDARY_TIMEZONE: str = "Europe/London"  # IANA tz of naive SQL timestamps
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
