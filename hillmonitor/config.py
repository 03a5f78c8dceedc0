from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PLATFORM_API_URL = "https://api.hillmonitor.ca"


class Settings(BaseSettings):
    hillmonitor_api_url: str = DEFAULT_PLATFORM_API_URL
    hillmonitor_secret_key: str | None = None
    hillmonitor_webhook_secret: str | None = None
    hillmonitor_allowed_origins: str | None = None  # comma-separated
    hillmonitor_filter_by_user: bool = True
    hillmonitor_request_timeout_seconds: float = 30.0
    environment: str = "production"  # development | production
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None
    supabase_jwt_secret: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()


def is_development() -> bool:
    return settings.environment.strip().lower() == "development"
