"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (ignored when DATABASE_URL is set)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "eduopps_user"
    postgres_password: str = "password"
    postgres_db: str = "eduopps_db"
    database_url: Optional[str] = None

    # MongoDB (GridFS file storage)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "eduopps_files"

    # File storage: "local" or "gridfs"
    file_storage_backend: str = "local"
    upload_dir: str = "uploads"
    max_upload_mb: int = 50

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440
    download_link_minutes: int = 60
    emailed_link_days: int = 7

    # SMTP (e-mail is skipped when smtp_host is empty)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_use_tls: bool = True
    smtp_timeout_seconds: int = 12

    # App
    public_base_url: str = "http://localhost:8000"
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    seed_on_startup: bool = True
    debug: bool = False

    @property
    def sqlalchemy_url(self) -> str:
        """Explicit DATABASE_URL wins, otherwise build the PostgreSQL URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
