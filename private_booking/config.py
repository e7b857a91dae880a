"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DAY = 24 * 60 * 60


class TokenConfig(BaseModel):
    """
    Immutable token settings handed to the TokenService.

    Built once from Settings at startup; tests build their own.
    """

    model_config = {"frozen": True}

    secret_key: str
    algorithm: str = "HS256"
    audience: str

    access_token_lifespan: int = 60 * 60
    refresh_token_lifespan: int = 30 * DAY
    action_token_lifespans: dict[str, int] = Field(
        default_factory=lambda: {"register": 30 * DAY, "password-reset": 60 * 60}
    )

    refresh_hash_length: int = 64


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Public URL of the deployment: access-token audience and base of mailed links
    app_url: str = "http://localhost:8000"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    app_key: str = "dev-app-key-change-in-production"
    jwt_algorithm: str = "HS256"

    # Lifespans in seconds
    access_token_lifespan: int = 60 * 60
    refresh_token_lifespan: int = 30 * DAY
    register_token_lifespan: int = 30 * DAY
    password_reset_token_lifespan: int = 60 * 60

    bcrypt_rounds: int = Field(default=10, ge=10)

    # Browser session (local login)
    session_cookie: str = "private_booking_session"
    session_max_age: int = 14 * DAY

    # Created or promoted at startup when both are set
    admin_email: str = ""
    admin_name: str = "Administrator"
    admin_password: str = ""

    # ==========================================================================
    # Mail (AWS SES)
    # ==========================================================================

    mail_from_name: str = "Private Booking"
    mail_from_address: str = ""
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_ses(self) -> bool:
        """Whether mail should go out through AWS SES."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key and self.mail_from_address)

    @property
    def mail_sender(self) -> str:
        return f"{self.mail_from_name} <{self.mail_from_address}>"

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            secret_key=self.app_key,
            algorithm=self.jwt_algorithm,
            audience=self.app_url,
            access_token_lifespan=self.access_token_lifespan,
            refresh_token_lifespan=self.refresh_token_lifespan,
            action_token_lifespans={
                "register": self.register_token_lifespan,
                "password-reset": self.password_reset_token_lifespan,
            },
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
