"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with MOVIEAPI_ prefix
(or a local .env file). The database URL and the JWT signing secret have
no defaults: constructing Settings without them raises, so the process
refuses to start on a half-configured environment.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All app configuration. Set via MOVIEAPI_* env vars."""

    # Database (required)
    database_url: str = Field(..., min_length=1)

    # Auth
    jwt_secret: str = Field(..., min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = Field(12, ge=4, le=31)

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # CORS
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_prefix="MOVIEAPI_",
        env_file=".env",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Load settings from the environment. Raises ValidationError if incomplete."""
    return Settings()
