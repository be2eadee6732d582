"""
HTTP transport primitive for the ZEDLY client.

A transport is any async callable ``(url, options) -> httpx.Response``. The
gateway wraps one and exposes the same signature, so callers can swap the
raw transport for the gateway without other changes.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from shared.logging import get_logger


@dataclass(frozen=True)
class RequestOptions:
    """Request descriptor: everything about a call except its URL."""

    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    json: Any = None
    content: Optional[Union[str, bytes]] = None
    params: Optional[Dict[str, Any]] = None

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key in self.headers)

    def with_header(self, name: str, value: str, override: bool = True) -> "RequestOptions":
        """Copy with ``name`` set to ``value``; an existing header is kept when ``override`` is false."""
        if not override and self.has_header(name):
            return self
        lowered = name.lower()
        headers = {key: val for key, val in self.headers.items() if key.lower() != lowered}
        headers[name] = value
        return replace(self, headers=headers)

    def with_bearer(self, token: str, override: bool = True) -> "RequestOptions":
        return self.with_header("Authorization", f"Bearer {token}", override=override)


Transport = Callable[[str, Optional[RequestOptions]], Awaitable[httpx.Response]]


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.logger = get_logger("client.transport")

    async def __call__(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        options = options or RequestOptions()
        try:
            response = await self.client.request(
                options.method,
                url,
                headers=options.headers or None,
                json=options.json,
                content=options.content,
                params=options.params,
            )
        except httpx.RequestError as e:
            self.logger.warning(
                "Request error",
                method=options.method,
                url=url,
                error=str(e)
            )
            raise

        self.logger.debug(
            "Request completed",
            method=options.method,
            url=url,
            status_code=response.status_code
        )
        return response
