"""
Application Settings

Environment-driven configuration for the UniFind backend and consoles.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "unifind-dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./unifind.db",
        description="SQLAlchemy connection URL",
        min_length=1,
    )
    SQLITE_BUSY_TIMEOUT: float = 30.0  # seconds a writer waits for the SQLite lock

    # Bearer tokens
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # Listing caps
    ADMIN_PAGE_SIZE: int = Field(default=200, gt=0)
    PUBLIC_PAGE_SIZE: int = Field(default=100, gt=0)
    CLAIM_PAGE_SIZE: int = Field(default=100, gt=0)

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Used by the Streamlit consoles
    API_BASE_URL: str = "http://localhost:8000"

    @field_validator("DATABASE_URL")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Convert postgresql:// to postgresql+psycopg2:// for SQLAlchemy"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def uses_default_secret(self) -> bool:
        return self.JWT_SECRET == DEFAULT_JWT_SECRET


settings = Settings()
