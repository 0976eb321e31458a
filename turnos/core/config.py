# turnos/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./turnos.db")
    DATABASE_SSL: bool = False
    APP_NAME: str = "Turnos API"
    APP_DESC: str = "Queue ticket issuance for ManyChat flows"
    APP_VERSION: str = "3.0.0"

    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # comma separated, "*" allows every origin
    CORS_ORIGINS: str = "*"

    LABEL_STRATEGY: Literal["sequence", "count"] = "sequence"
    TIMEZONE: str = "UTC"
    # used for pdfUrl when the app sits behind a proxy
    PUBLIC_BASE_URL: str | None = None

    RECEIPT_TITLE: str = "TICKET RECEIPT"
    RECEIPT_SUBTITLE: str = "ManyChat Ticket System"
    RECEIPT_FOOTER: str = "This document is a ticket receipt. Keep it for future reference."

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        # Heroku/Railway style URLs
        if value.startswith("postgres://"):
            return "postgresql+psycopg://" + value[len("postgres://"):]
        if value.startswith("postgresql://"):
            return "postgresql+psycopg://" + value[len("postgresql://"):]
        return value

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
