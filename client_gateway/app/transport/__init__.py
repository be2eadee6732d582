"""
Transport package for the ZEDLY client.

Holds the request descriptor and the httpx-backed transport primitive that
both the gateway and the renewal routine send requests through.
"""

from .httpx_transport import HttpxTransport, RequestOptions, Transport

__all__ = [
    "HttpxTransport",
    "RequestOptions",
    "Transport",
]
