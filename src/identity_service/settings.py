"""
identity_service.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (signing secret, seeded admin password, OAuth client secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Loaded once at process start; the signing secret and token lifetime are
    treated as immutable for the lifetime of the process.
    """

    model_config = SettingsConfigDict(env_prefix="IDENTITY_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "identity-service"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Tokens
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_lifetime: timedelta = timedelta(hours=1)

    # Passwords
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./identity.db"

    # Reference data seeded at startup (dev/test).
    seed_roles: list[str] = Field(default_factory=lambda: ["USER", "ADMIN"])
    seed_admin: bool = True
    admin_login: str = "ADMIN"
    admin_password: str = Field(default="password123", repr=False)
    admin_email: str = "admin@example.com"

    # Federated login (Google OAuth2 / OIDC)
    oauth_redirect_path: str = "/redirect"
    google_client_id: str = ""
    google_client_secret: str = Field(default="", repr=False)
    google_redirect_uri: str = "http://localhost:8080/login/oauth2/code/google"
    google_authorize_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_userinfo_url: str = "https://openidconnect.googleapis.com/v1/userinfo"
    provider_timeout_seconds: float = 10.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# jwt_lifetime accepts seconds or an ISO 8601 duration (e.g. IDENTITY_JWT_LIFETIME=PT30M).
