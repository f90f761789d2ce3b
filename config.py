"""
Runtime configuration for the form intake backend.

Values come from the environment (or a local .env file). The connection
string is accepted under either DATABASE_URL or MONGO_URI.
"""

import logging
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 2 * 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("DATABASE_URL", "MONGO_URI", "database_url")
    )
    database_name: str = Field("formintake", validation_alias=AliasChoices("DATABASE_NAME", "database_name"))
    port: int = Field(5000, validation_alias=AliasChoices("PORT", "port"))
    max_upload_bytes: int = Field(
        MAX_UPLOAD_BYTES, validation_alias=AliasChoices("MAX_UPLOAD_BYTES", "max_upload_bytes")
    )
    cors_origins: List[str] = Field(["*"], validation_alias=AliasChoices("CORS_ORIGINS", "cors_origins"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
