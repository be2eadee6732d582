"""
Access credential renewal.

``CredentialRenewer.renew_credentials`` exchanges the stored refresh
credential for a new access credential. ``RenewalCoordinator`` makes sure
at most one such exchange is in flight: concurrent callers that hit a 401
share the pending renewal instead of starting their own.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx

from shared.errors import (
    NoRefreshCredentialError,
    RenewalRejectedError,
    RenewalUnavailableError,
)
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..storage import CredentialStorage
from ..transport import RequestOptions, Transport


class RenewalCoordinator:
    """Single slot holding the in-flight renewal task, if any."""

    def __init__(self):
        self._pending: Optional["asyncio.Task[str]"] = None
        self.logger = get_logger("client.gateway.renewal")

    @property
    def is_renewing(self) -> bool:
        return self._pending is not None

    async def run(self, renew: Callable[[], Awaitable[str]]) -> str:
        """Start ``renew`` unless a renewal is pending, then await the shared outcome.

        The slot is emptied before the task settles, so a caller arriving
        afterwards starts a fresh renewal. The shield keeps one cancelled
        caller from cancelling the renewal the others are waiting on.
        """
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._settle(renew))
            self.logger.debug("Renewal started")
        else:
            self.logger.debug("Renewal already in flight, waiting")
        return await asyncio.shield(self._pending)

    async def _settle(self, renew: Callable[[], Awaitable[str]]) -> str:
        try:
            return await renew()
        finally:
            self._pending = None


class CredentialRenewer:
    """Exchanges the refresh credential for a new access credential."""

    def __init__(
        self,
        transport: Transport,
        storage: CredentialStorage,
        refresh_endpoint: str = "/api/auth/refresh",
        metrics: Optional[MetricsCollector] = None,
    ):
        self.transport = transport
        self.storage = storage
        self.refresh_endpoint = refresh_endpoint
        self.metrics = metrics
        self.logger = get_logger("client.gateway.renewal")

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("credential_renewals_total", status=status)

    async def renew_credentials(self) -> str:
        """Renew the access credential and store it.

        Raises NoRefreshCredentialError, RenewalUnavailableError or
        RenewalRejectedError. The refresh credential itself is not rotated.
        """
        refresh_token = await self.storage.get_refresh_token()
        if not refresh_token:
            self._record("no_refresh_credential")
            self.logger.warning("No refresh token available")
            raise NoRefreshCredentialError()

        # Raw transport; the refresh call is never intercepted.
        try:
            response = await self.transport(
                self.refresh_endpoint,
                RequestOptions(
                    method="POST",
                    headers={"Content-Type": "application/json"},
                    json={"refresh_token": refresh_token},
                ),
            )
        except httpx.RequestError as e:
            # Covers undecodable bodies and redirect loops as well as network failures.
            self._record("unavailable")
            self.logger.error("Refresh request failed", error=str(e), error_type=type(e).__name__)
            raise RenewalUnavailableError(details={"error": str(e)}) from e

        if not response.is_success:
            await self.storage.clear_session()
            self._record("rejected")
            self.logger.warning("Refresh token rejected", status_code=response.status_code)
            raise RenewalRejectedError(details={"status_code": response.status_code})

        access_token = self._parse_access_token(response)
        if access_token is None:
            await self.storage.clear_session()
            self._record("rejected")
            self.logger.warning("Refresh response carried no access token", status_code=response.status_code)
            raise RenewalRejectedError(
                "Refresh response carried no access token",
                details={"status_code": response.status_code}
            )

        await self.storage.set_access_token(access_token)
        self._record("success")
        self.logger.info("Access token renewed")
        return access_token

    @staticmethod
    def _parse_access_token(response: httpx.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        token = data.get("access_token")
        if isinstance(token, str) and token:
            return token
        return None
