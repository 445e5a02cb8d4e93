from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Jot API"
    api_prefix: str = "/api"
    environment: str = "development"

    database_url: str = "sqlite:///./jot.db"

    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    session_token_expire_days: int = 7
    session_cookie_name: str = "token"

    password_min_length: int = 6
    otp_expire_seconds: int = 300
    otp_max_attempts: int = 3
    otp_log_to_terminal: bool = False

    auth_rate_limit_window_seconds: int = 300
    auth_rate_limit_otp_request_max_requests: int = 8
    auth_rate_limit_otp_verify_max_requests: int = 15
    auth_rate_limit_signup_max_requests: int = 8
    auth_rate_limit_login_max_requests: int = 12

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from_email: str | None = None
    smtp_from_name: str | None = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout_seconds: int = 15

    uploadthing_secret: str | None = None
    uploadthing_api_url: str = "https://api.uploadthing.com"
    uploadthing_timeout_seconds: float = 10.0

    max_request_size_bytes: int = 1_000_000
    security_enable_hsts: bool = False
    security_hsts_max_age_seconds: int = 31536000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_token_expire_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    return Settings()
