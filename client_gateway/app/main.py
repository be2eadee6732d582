"""
Composition root for the ZEDLY client.

``ZedlyClient`` wires configuration, logging, metrics, the httpx transport,
credential storage, the renewal coordinator, the authenticated gateway, the
navigation port and the session flows into one async context manager.
"""

from typing import Any, Dict, Optional

import httpx

from shared.config import ClientConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector

from .gateway import AuthenticatedGateway, CredentialRenewer, EndpointRules, RenewalCoordinator
from .session import LocationNavigator, SessionManager
from .storage import CredentialStorage, create_storage
from .transport import HttpxTransport, RequestOptions


class ZedlyClient:
    """Authenticated client for the ZEDLY API."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        storage: Optional[CredentialStorage] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        navigator: Optional[LocationNavigator] = None,
        metrics: Optional[MetricsCollector] = None,
        configure_logs: bool = True,
    ):
        self.config = config or get_config()
        if configure_logs:
            configure_logging("client", self.config.log_level)
        self.logger = get_logger("client.main")

        self.metrics = metrics
        if self.metrics is None and self.config.enable_metrics:
            self.metrics = get_metrics_collector("client")

        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.request_timeout),
        )
        self.transport = HttpxTransport(self.http_client)
        self.storage = storage or create_storage(self.config)
        self.navigator = navigator or LocationNavigator(login_page=self.config.login_page)

        self.renewer = CredentialRenewer(
            self.transport,
            self.storage,
            refresh_endpoint=self.config.refresh_endpoint,
            metrics=self.metrics,
        )
        self.coordinator = RenewalCoordinator()
        self.gateway = AuthenticatedGateway(
            self.transport,
            self.storage,
            self.renewer,
            rules=EndpointRules.from_config(self.config),
            coordinator=self.coordinator,
            on_session_expired=self.navigator.redirect_to_login,
            metrics=self.metrics,
        )
        self.session = SessionManager(
            self.transport,
            self.gateway,
            self.storage,
            self.navigator,
            login_endpoint=self.config.login_endpoint,
            logout_endpoint=self.config.logout_endpoint,
            change_password_endpoint=self.config.change_password_endpoint,
            metrics=self.metrics,
        )

    async def start(self) -> None:
        await self.storage.start()
        self.logger.info("ZEDLY client started", base_url=self.config.base_url)

    async def stop(self) -> None:
        await self.storage.stop()
        if self._owns_http_client:
            await self.http_client.aclose()
        self.logger.info("ZEDLY client stopped")

    async def __aenter__(self) -> "ZedlyClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def fetch(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        """Gateway call with the transport's signature."""
        return await self.gateway(url, options)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        return await self.gateway(
            url,
            RequestOptions(method=method.upper(), headers=headers or {}, json=json, params=params),
        )
