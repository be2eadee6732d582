"""
Endpoint classification for the authenticated gateway.
"""

from typing import Optional

import httpx

from shared.config import ClientConfig


def _normalize(path: str) -> str:
    return path.rstrip("/") or "/"


class EndpointRules:
    """Decides which calls the gateway intercepts and which 401s it may renew on."""

    def __init__(
        self,
        api_prefix: str = "/api/",
        auth_prefix: str = "/api/auth/",
        login_endpoint: str = "/api/auth/login",
        refresh_endpoint: str = "/api/auth/refresh",
        origin: Optional[str] = None,
    ):
        self.api_prefix = api_prefix
        self.auth_prefix = auth_prefix
        self.login_endpoint = _normalize(login_endpoint)
        self.refresh_endpoint = _normalize(refresh_endpoint)
        self.origin = origin.rstrip("/") if origin else None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "EndpointRules":
        return cls(
            api_prefix=config.api_prefix,
            auth_prefix=config.auth_prefix,
            login_endpoint=config.login_endpoint,
            refresh_endpoint=config.refresh_endpoint,
            origin=config.resolved_origin(),
        )

    def is_cross_origin(self, url: str) -> bool:
        """True for absolute URLs pointing away from the configured origin."""
        if self.origin is None:
            return False
        parsed = httpx.URL(url)
        if not parsed.is_absolute_url:
            return False
        target = httpx.URL(self.origin)
        return (parsed.scheme, parsed.host, parsed.port) != (target.scheme, target.host, target.port)

    def is_bypassed(self, url: str) -> bool:
        """Calls forwarded untouched: login, refresh, non-API paths and foreign origins."""
        if self.is_cross_origin(url):
            return True
        path = httpx.URL(url).path
        normalized = _normalize(path)
        if normalized in (self.login_endpoint, self.refresh_endpoint):
            return True
        return not path.startswith(self.api_prefix)

    def is_auth_endpoint(self, url: str) -> bool:
        """401s from auth endpoints are returned as-is, never renewed."""
        path = httpx.URL(url).path
        return path.startswith(self.auth_prefix) or _normalize(path) == _normalize(self.auth_prefix)
