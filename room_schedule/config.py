"""Application configuration settings.

This module defines the ``Settings`` class using ``pydantic-settings`` to
load configuration from environment variables (and a ``.env`` file when
present). It centralises all runtime configuration for the viewer, such as
where the week files live, the timeline window and the building palette.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration values loaded from environment variables.

    Environment variable names map to fields by alias. Every value has a
    default so the viewer starts against ``data/bookings`` with no setup.
    """

    # Week file location
    bookings_source: str = Field(
        default="data/bookings",
        alias="BOOKINGS_SOURCE",
        description="Directory holding the week files, or an http(s) base URL serving them.",
    )
    partition_path_template: str = Field(
        default="{year}/week-{week}.json",
        alias="PARTITION_PATH_TEMPLATE",
        description="Path of one week file relative to the source, formatted with year and week.",
    )
    fetch_timeout_seconds: float = Field(
        default=10.0,
        alias="FETCH_TIMEOUT_SECONDS",
        description="Timeout for a single HTTP week file request.",
    )

    # Timeline behaviour
    timeline_start_hour: int = Field(default=7, alias="TIMELINE_START_HOUR")
    timeline_end_hour: int = Field(default=23, alias="TIMELINE_END_HOUR")
    min_gap_minutes: float = Field(
        default=5.0,
        alias="MIN_GAP_MINUTES",
        description="Minimum visual gap between adjacent blocks of one room.",
    )
    palette_size: int = Field(
        default=8,
        alias="PALETTE_SIZE",
        description="Number of building colours; building N uses colour N modulo this value.",
    )

    # Service
    enable_cors: bool = Field(default=False, alias="ENABLE_CORS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    class Config:
        extra = "ignore"
        env_file = ".env"
        populate_by_name = True

    @model_validator(mode="after")
    def _check_window(self) -> "Settings":
        if not 0 <= self.timeline_start_hour < self.timeline_end_hour <= 24:
            raise ValueError("timeline hours must satisfy 0 <= TIMELINE_START_HOUR < TIMELINE_END_HOUR <= 24")
        if self.min_gap_minutes < 0:
            raise ValueError("MIN_GAP_MINUTES must not be negative")
        if self.palette_size < 1:
            raise ValueError("PALETTE_SIZE must be at least 1")
        return self


# Instantiate settings at module import time. This allows other modules to
# import ``settings`` directly without repeatedly reading environment variables.
settings = Settings()
