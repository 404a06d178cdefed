"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with the
BREWERY_STREAM_ prefix. The listening port is the exception: it comes
from plain PORT, the way container platforms hand it out.

Learn: env_ignore_empty treats PORT="" the same as an unset PORT, so the
default (8080) applies in both cases.
"""

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via BREWERY_STREAM_* env vars (and PORT)."""

    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = Field(
        8080,
        validation_alias=AliasChoices("PORT", "BREWERY_STREAM_PORT"),
    )
    log_level: str = "info"
    shutdown_grace_seconds: float = 5.0

    # Upstream (OpenBreweryDB)
    upstream_base_url: str = "https://api.openbrewerydb.org/v1"
    fetch_timeout_seconds: float = 10.0

    # Streaming
    stream_interval_seconds: float = 3.0
    disconnect_poll_seconds: float = 0.5

    model_config = {
        "env_prefix": "BREWERY_STREAM_",
        "env_ignore_empty": True,
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_timings(self):
        """Reject timings that would spin the session loop or never time out."""
        for name in (
            "fetch_timeout_seconds",
            "stream_interval_seconds",
            "disconnect_poll_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(
                    f"BREWERY_STREAM_{name.upper()} must be greater than zero"
                )
        if self.shutdown_grace_seconds < 0:
            raise ValueError("BREWERY_STREAM_SHUTDOWN_GRACE_SECONDS must not be negative")
        return self


# Singleton — import this everywhere
settings = Settings()
