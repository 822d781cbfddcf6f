from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Family Care API"
    app_env: str = "dev"
    log_level: str = "INFO"
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "famcare"
    jwt_audience: str = "famcare-clients"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 90
    database_url: str = "sqlite+aiosqlite:///./famcare.db"
    cors_allow_origins: str = "http://localhost:5173"
    login_max_attempts: int = 3
    login_window_seconds: int = 600
    invite_code_length: int = 12
    invite_code_max_attempts: int = 5

    @property
    def cors_origins(self) -> list[str]:
        return [x.strip() for x in self.cors_allow_origins.split(",") if x.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
