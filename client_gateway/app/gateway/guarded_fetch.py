"""
Authenticated request gateway for the ZEDLY API.

Wraps a transport and exposes the same call signature. Same-origin API
calls get the stored access token as a bearer header; a 401 triggers one
shared credential renewal and exactly one retry. When renewal fails the
session is torn down and the host is told through ``on_session_expired``.
"""

import time
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

from shared.errors import RenewalRejectedError, RenewalError, StorageError
from shared.logging import clear_user_context, get_logger, request_scope
from shared.metrics import MetricsCollector

from ..storage import CredentialStorage
from ..transport import RequestOptions, Transport
from .renewal import CredentialRenewer, RenewalCoordinator
from .routing import EndpointRules


class CallOutcome(Enum):
    """Terminal state of a single gateway call."""
    BYPASSED = "bypassed"
    OK = "ok"
    RETRIED_OK = "retried_ok"
    RETRIED_FAILED = "retried_failed"
    LOGGED_OUT = "logged_out"


SessionExpiredHandler = Callable[[], Awaitable[None]]


class AuthenticatedGateway:
    """Drop-in replacement for a transport that handles bearer credentials."""

    def __init__(
        self,
        transport: Transport,
        storage: CredentialStorage,
        renewer: CredentialRenewer,
        rules: Optional[EndpointRules] = None,
        coordinator: Optional[RenewalCoordinator] = None,
        on_session_expired: Optional[SessionExpiredHandler] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.transport = transport
        self.storage = storage
        self.renewer = renewer
        self.rules = rules or EndpointRules()
        self.coordinator = coordinator or RenewalCoordinator()
        self.on_session_expired = on_session_expired
        self.metrics = metrics
        self.logger = get_logger("client.gateway")
        self._expired_by: Optional[BaseException] = None

    async def __call__(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.guarded_fetch(url, options)

    async def guarded_fetch(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        """Send ``url`` through the transport with credential injection and renewal.

        Returns a response in every case except a transport failure on the
        caller's own request, which propagates unchanged. Log lines of one
        call, its renewal and its retry share a request ID.
        """
        with request_scope():
            return await self._send(url, options or RequestOptions())

    async def _send(self, url: str, options: RequestOptions) -> httpx.Response:
        started = time.monotonic()

        if self.rules.is_bypassed(url):
            response = await self.transport(url, options)
            self._record(CallOutcome.BYPASSED, started)
            return response

        access_token = await self.storage.get_access_token()
        if access_token:
            options = options.with_bearer(access_token, override=False)

        response = await self.transport(url, options)

        if response.status_code != 401 or self.rules.is_auth_endpoint(url):
            self._record(CallOutcome.OK, started)
            return response

        self.logger.info("Access token rejected, renewing", method=options.method, url=url)

        try:
            renewed_token = await self.coordinator.run(self._renew)
        except (RenewalError, StorageError) as e:
            self.logger.warning("Token refresh failed", url=url, code=e.code, error=e.message)
            await self._expire_session(e)
            self._record(CallOutcome.LOGGED_OUT, started)
            return response

        # Exactly one retry; whatever comes back goes to the caller.
        retried = await self.transport(url, options.with_bearer(renewed_token))
        outcome = CallOutcome.RETRIED_OK if retried.is_success else CallOutcome.RETRIED_FAILED
        if outcome is CallOutcome.RETRIED_FAILED:
            self.logger.warning(
                "Retried request failed",
                method=options.method,
                url=url,
                status_code=retried.status_code
            )
        self._record(outcome, started)
        return retried

    async def _renew(self) -> str:
        """Shared renewal task: renew, then read back the token every waiter retries with."""
        await self.renewer.renew_credentials()
        renewed_token = await self.storage.get_access_token()
        if not renewed_token:
            raise RenewalRejectedError("Renewed access token missing from storage")
        return renewed_token

    async def _expire_session(self, cause: BaseException) -> None:
        """Tear down the session; the host hand-off happens once per failed renewal."""
        try:
            await self.storage.clear_session()
        except StorageError as e:
            self.logger.error("Failed to clear session after renewal failure", error=e.message)
        clear_user_context()

        # Callers that shared one renewal all receive the same exception instance.
        if cause is self._expired_by:
            return
        self._expired_by = cause

        if self.metrics:
            self.metrics.increment_counter("session_expirations_total")
        if self.on_session_expired is not None:
            await self.on_session_expired()

    def _record(self, outcome: CallOutcome, started: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("gateway_calls_total", outcome=outcome.value)
        self.metrics.observe_histogram(
            "gateway_call_duration_seconds",
            time.monotonic() - started,
            outcome=outcome.value
        )
