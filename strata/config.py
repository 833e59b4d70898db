"""
Process-wide settings for strata.

Values come from environment variables (or a local .env file) so that
applications can point every model at a database file without threading the
path through their code.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_file: str = Field("strata.sqlite3", alias="STRATA_DB_FILE")

    # Logging
    log_level: str = Field("WARNING", alias="STRATA_LOG_LEVEL")
    json_logs: bool = Field(False, alias="STRATA_JSON_LOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
