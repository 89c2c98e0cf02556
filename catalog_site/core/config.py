from functools import lru_cache
from typing import Literal

from fastapi import Request
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = Field(default="Catalog Site")
    environment: Literal["development", "production"] = Field(default="production")
    secret_key: str = Field(...)

    storage_backend: Literal["memory", "sql"] = Field(default="memory")
    database_url: str | None = Field(default=None)
    data_file: str | None = Field(default=None)
    seed_default_content: bool = Field(default=True)
    admin_username: str | None = Field(default=None)
    admin_password: str | None = Field(default=None)

    session_cookie_name: str = Field(default="catalog_session")
    session_cookie_secure: bool = Field(default=False)
    session_cookie_max_age: int = Field(default=30 * 24 * 60 * 60)
    session_cookie_same_site: Literal["lax", "strict", "none"] = Field(default="lax")

    login_max_attempts: int = Field(default=5, ge=1)
    login_lock_minutes: int = Field(default=15, ge=1)
    password_hash_rounds: int = Field(default=12, ge=4, le=31)
    protected_user_id: int | None = Field(default=2)
    protected_username: str | None = Field(default=None)

    log_level: str = Field(default="INFO")
    smtp_host: str | None = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_sender: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    notification_email: str | None = Field(default=None)

    @model_validator(mode="after")
    def validate_security(self) -> "Settings":
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long.")
        if self.storage_backend == "sql":
            if not self.database_url or "://" not in self.database_url:
                raise ValueError("DATABASE_URL must be a valid connection string when STORAGE_BACKEND=sql.")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def login_lock_seconds(self) -> int:
        return self.login_lock_minutes * 60


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
