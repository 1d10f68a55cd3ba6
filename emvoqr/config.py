"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class RecordDefaults(BaseModel):
    """Field values of the sample merchant record."""

    payload_format_indicator: str = Field(default="01", max_length=99)
    point_of_initiation_method: str = Field(default="11", max_length=99)
    merchant_id: str = Field(default="com.konai.konacard", max_length=99)
    secondary_id: str = Field(default="410790020044601", max_length=99)
    merchant_category_code: str = Field(default="3001", max_length=99)
    transaction_currency: str = Field(default="410", max_length=99)
    country_code: str = Field(default="KR", max_length=99)
    merchant_name: str = Field(default="KONA", max_length=99)
    merchant_city: str = Field(default="KONA", max_length=99)
    language: str = Field(default="KO", max_length=99)
    description: str = Field(default="테스트", max_length=99)
    location: str = Field(default="경기도", max_length=99)


class Settings(BaseSettings):
    """Central settings loaded from ``EMVOQR_``-prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EMVOQR_",
        env_nested_delimiter="__",
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
    )

    verify_checksum_on_parse: bool = Field(default=False)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    defaults: RecordDefaults = Field(default_factory=RecordDefaults)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
