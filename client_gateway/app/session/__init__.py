"""
Session package for the ZEDLY client: login, password change and logout
flows plus the navigation port the gateway reports session expiry to.
"""

from .manager import LoginResult, SessionManager, validate_credentials, validate_new_password
from .navigation import LocationNavigator

__all__ = [
    "LoginResult",
    "SessionManager",
    "LocationNavigator",
    "validate_credentials",
    "validate_new_password",
]
