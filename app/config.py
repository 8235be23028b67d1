"""Application configuration, read from the environment (and ``.env``)."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="SynchoraHealth API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database (postgresql:// URLs are switched to asyncpg)
    database_url: str = Field(..., alias="DATABASE_URL")

    # Redis profile cache
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_timeout_seconds: float = Field(default=2.0, alias="REDIS_TIMEOUT_SECONDS")
    cache_namespace: str = Field(default="synchora", alias="CACHE_NAMESPACE")

    # Bearer tokens from the identity provider
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Overdue sweep (in-process, off unless enabled)
    overdue_sweep_enabled: bool = Field(default=False, alias="OVERDUE_SWEEP_ENABLED")
    overdue_sweep_interval_seconds: int = Field(
        default=60, ge=1, alias="OVERDUE_SWEEP_INTERVAL_SECONDS"
    )

    # Contact form delivery (Resend)
    resend_api_key: str = Field(default="", alias="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", alias="RESEND_API_URL")
    contact_sender: str = Field(
        default="SynchoraHealth <onboarding@resend.dev>", alias="CONTACT_SENDER"
    )
    contact_recipient: str = Field(default="info.remindcare@gmail.com", alias="CONTACT_RECIPIENT")

    # CORS, comma separated in the environment
    cors_origins_str: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @field_validator("jwt_audience", mode="before")
    @classmethod
    def empty_audience_is_none(cls, v: object) -> object:
        return v or None

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
