"""
Gateway package for the ZEDLY client.

- routing: which calls are intercepted and which 401s are renewable
- renewal: the renewal routine and the single-slot renewal coordinator
- guarded_fetch: the authenticated gateway itself
"""

from .guarded_fetch import AuthenticatedGateway, CallOutcome
from .renewal import CredentialRenewer, RenewalCoordinator
from .routing import EndpointRules

__all__ = [
    "AuthenticatedGateway",
    "CallOutcome",
    "CredentialRenewer",
    "RenewalCoordinator",
    "EndpointRules",
]
