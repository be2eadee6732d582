"""
Shared configuration management for the ZEDLY client gateway.
"""

from typing import Optional

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ZEDLY_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Observability
    enable_metrics: bool = Field(default=True)


class ClientConfig(BaseConfig):
    """Configuration for the authenticated request gateway and session flows."""

    # ZEDLY API
    base_url: str = Field(default="http://localhost:3000")
    origin: Optional[str] = Field(default=None)
    request_timeout: Optional[float] = Field(default=None)

    # Endpoint layout
    api_prefix: str = Field(default="/api/")
    auth_prefix: str = Field(default="/api/auth/")
    login_endpoint: str = Field(default="/api/auth/login")
    refresh_endpoint: str = Field(default="/api/auth/refresh")
    logout_endpoint: str = Field(default="/api/auth/logout")
    change_password_endpoint: str = Field(default="/api/auth/change-password")
    me_endpoint: str = Field(default="/api/auth/me")

    # Host navigation
    login_page: str = Field(default="/login")

    # Storage keys
    access_token_key: str = Field(default="access_token")
    refresh_token_key: str = Field(default="refresh_token")
    user_key: str = Field(default="user")
    temp_token_key: str = Field(default="temp_token")
    remembered_username_key: str = Field(default="remembered_username")

    # Storage backend
    storage_backend: str = Field(default="memory")
    storage_path: str = Field(default="~/.zedly/session.json")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="zedly:session:")

    def resolved_origin(self) -> Optional[str]:
        """Origin used for the same-origin check, derived from base_url when unset."""
        if self.origin:
            return self.origin.rstrip("/")
        url = httpx.URL(self.base_url)
        if not url.is_absolute_url:
            return None
        host = f"[{url.host}]" if ":" in url.host else url.host
        port = f":{url.port}" if url.port is not None else ""
        return f"{url.scheme}://{host}{port}"


def get_config(**overrides) -> ClientConfig:
    """Get client configuration, with keyword overrides taking precedence over the environment."""
    return ClientConfig(**overrides)
