"""
Session flows for the ZEDLY client: login, password change, logout.

These flows are the only writers of the credential pair besides the
renewal routine. Login and password change talk to the raw transport;
logout goes through the gateway like any other API call.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from shared.errors import (
    AuthenticationError,
    ExternalServiceError,
    ValidationError,
)
from shared.logging import clear_user_context, get_logger, set_user_context
from shared.metrics import MetricsCollector

from ..storage import CredentialStorage
from ..transport import RequestOptions, Transport
from .navigation import LocationNavigator

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6
NEW_PASSWORD_MIN_LENGTH = 8


@dataclass
class LoginResult:
    """Outcome of a login call."""
    user: Optional[Dict[str, Any]] = None
    must_change_password: bool = False


def validate_credentials(username: str, password: str) -> None:
    """Client-side login checks, applied before any network call."""
    if not username or not password:
        raise ValidationError("Username and password are required")
    if len(username) < USERNAME_MIN_LENGTH:
        raise ValidationError(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters",
            details={"field": "username"}
        )
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            details={"field": "password"}
        )


def validate_new_password(password: str) -> None:
    """Password policy for a new password: length, upper, lower and digit."""
    missing = []
    if len(password) < NEW_PASSWORD_MIN_LENGTH:
        missing.append("length")
    if not re.search(r"[A-Z]", password):
        missing.append("uppercase")
    if not re.search(r"[a-z]", password):
        missing.append("lowercase")
    if not re.search(r"[0-9]", password):
        missing.append("number")
    if missing:
        raise ValidationError(
            "New password does not meet the password policy",
            details={"field": "new_password", "unmet": missing}
        )


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _raise_for_response(response: httpx.Response, action: str) -> None:
    """Map a failed session-flow response onto the client error types."""
    body = _json_body(response)
    details = {"status_code": response.status_code, "error": body.get("error")}
    message = body.get("message")
    if response.status_code == 400:
        raise ValidationError(message or f"{action} request was invalid", details=details)
    if response.status_code in (401, 403):
        raise AuthenticationError(message or f"{action} failed", details=details)
    raise ExternalServiceError("zedly-api", message or f"{action} failed", details=details)


class SessionManager:
    """Login, password change and logout against the ZEDLY auth endpoints."""

    def __init__(
        self,
        transport: Transport,
        gateway: Transport,
        storage: CredentialStorage,
        navigator: LocationNavigator,
        login_endpoint: str = "/api/auth/login",
        logout_endpoint: str = "/api/auth/logout",
        change_password_endpoint: str = "/api/auth/change-password",
        metrics: Optional[MetricsCollector] = None,
    ):
        self.transport = transport
        self.gateway = gateway
        self.storage = storage
        self.navigator = navigator
        self.login_endpoint = login_endpoint
        self.logout_endpoint = logout_endpoint
        self.change_password_endpoint = change_password_endpoint
        self.metrics = metrics
        self.logger = get_logger("client.session")

    def _record(self, event: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("session_events_total", event=event)

    async def _post(self, url: str, options: RequestOptions, action: str) -> httpx.Response:
        try:
            return await self.transport(url, options)
        except httpx.RequestError as e:
            self.logger.error(f"{action} request failed", error=str(e))
            raise ExternalServiceError("zedly-api", "API unreachable", details={"error": str(e)}) from e

    async def login(self, username: str, password: str, remember: bool = False) -> LoginResult:
        """Authenticate and store the session."""
        username = username.strip()
        validate_credentials(username, password)

        response = await self._post(
            self.login_endpoint,
            RequestOptions(
                method="POST",
                headers={"Content-Type": "application/json"},
                json={"username": username, "password": password, "remember": remember},
            ),
            "Login",
        )
        if not response.is_success:
            self._record("login_failed")
            self.logger.warning("Login failed", username=username, status_code=response.status_code)
            _raise_for_response(response, "Login")

        data = _json_body(response)

        if remember:
            await self.storage.set(self.storage.keys.remembered_username, username)
        else:
            await self.storage.remove(self.storage.keys.remembered_username)

        if data.get("must_change_password"):
            temp_token = data.get("temp_token")
            if not temp_token:
                raise ExternalServiceError("zedly-api", "Password change required but no temporary token issued")
            await self.storage.set(self.storage.keys.temp_token, temp_token)
            self._record("password_change_required")
            self.logger.info("Login requires password change", username=username)
            return LoginResult(must_change_password=True)

        access_token = data.get("access_token")
        if not access_token:
            raise ExternalServiceError("zedly-api", "Login response carried no access token")

        await self.storage.set_access_token(access_token)
        if data.get("refresh_token"):
            await self.storage.set_refresh_token(data["refresh_token"])
        user = data.get("user") or {}
        await self.storage.set_user(user)

        set_user_context(
            user_id=str(user["id"]) if user.get("id") is not None else None,
            school_id=str(user["school_id"]) if user.get("school_id") is not None else None,
        )
        self._record("login")
        self.logger.info("Login successful", username=username, role=user.get("role"))
        return LoginResult(user=user)

    async def change_password(self, old_password: str, new_password: str) -> None:
        """Change the password and store the freshly issued credential pair."""
        if not old_password:
            raise ValidationError("Old password is required", details={"field": "old_password"})
        validate_new_password(new_password)

        token = await self.storage.get(self.storage.keys.temp_token)
        if not token:
            token = await self.storage.get_access_token()
        if not token:
            raise AuthenticationError("No credential available to authorize the password change")

        response = await self._post(
            self.change_password_endpoint,
            RequestOptions(
                method="POST",
                headers={"Content-Type": "application/json"},
                json={"old_password": old_password, "new_password": new_password},
            ).with_bearer(token),
            "Change password",
        )
        if not response.is_success:
            self._record("change_password_failed")
            _raise_for_response(response, "Change password")

        data = _json_body(response)
        if not data.get("access_token"):
            raise ExternalServiceError("zedly-api", "Password change response carried no access token")

        await self.storage.set_access_token(data["access_token"])
        if data.get("refresh_token"):
            await self.storage.set_refresh_token(data["refresh_token"])
        await self.storage.remove(self.storage.keys.temp_token)
        self._record("password_changed")
        self.logger.info("Password changed")

    async def logout(self) -> None:
        """Tell the API, then drop the session locally whatever the API said."""
        try:
            response = await self.gateway(self.logout_endpoint, RequestOptions(method="POST"))
            if not response.is_success:
                self.logger.warning("Logout call rejected", status_code=response.status_code)
        except httpx.RequestError as e:
            self.logger.warning("Logout call failed", error=str(e))

        await self.storage.clear_session()
        clear_user_context()
        self._record("logout")
        self.logger.info("Logged out")
        await self.navigator.redirect_to_login()

    async def current_user(self) -> Optional[Dict[str, Any]]:
        return await self.storage.get_user()

    async def is_authenticated(self) -> bool:
        return bool(await self.storage.get_access_token())

    async def remembered_username(self) -> Optional[str]:
        return await self.storage.get(self.storage.keys.remembered_username)
