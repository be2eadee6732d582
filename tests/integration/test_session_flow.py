"""
Integration tests for the client session flow against the mock ZEDLY API.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio

from client_gateway.app.main import ZedlyClient
from client_gateway.app.session import LocationNavigator
from client_gateway.app.storage import MemoryStorage
from mocks.zedly_api.server import MockZedlyServer
from shared.config import get_config
from shared.errors import AuthenticationError
from shared.metrics import MetricsCollector


class TestSessionFlow:
    """Integration tests for login, renewal, password change and logout."""

    @pytest.fixture
    def server(self):
        """Mock ZEDLY API."""
        return MockZedlyServer()

    @pytest.fixture
    def storage(self):
        return MemoryStorage()

    @pytest.fixture
    def navigator(self):
        return LocationNavigator(current_path="/dashboard")

    @pytest_asyncio.fixture
    async def client(self, server, storage, navigator):
        http_client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=server.app),
            base_url="http://testserver",
        )
        client = ZedlyClient(
            get_config(base_url="http://testserver"),
            storage=storage,
            http_client=http_client,
            navigator=navigator,
            metrics=MetricsCollector("integration"),
            configure_logs=False,
        )
        async with client:
            yield client
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_login_and_call_protected_endpoint(self, client):
        result = await client.session.login("student1", "Password123")

        assert result.user["role"] == "student"

        response = await client.request("GET", "/api/student/results")

        assert response.status_code == 200
        assert len(response.json()["results"]) == 2

    @pytest.mark.asyncio
    async def test_expired_access_token_is_renewed_transparently(self, server, storage, client):
        await client.session.login("teacher1", "Password123")
        old_access = await storage.get_access_token()
        refresh_token = await storage.get_refresh_token()

        server.expire_access_tokens()
        response = await client.request("GET", "/api/teacher/classes")

        assert response.status_code == 200
        assert response.json()["classes"][0]["name"] == "9-A"
        assert server.refresh_calls == 1
        assert await storage.get_access_token() != old_access
        assert await storage.get_refresh_token() == refresh_token

    @pytest.mark.asyncio
    async def test_concurrent_calls_after_expiry_all_succeed(self, server, client):
        await client.session.login("student1", "Password123")
        server.expire_access_tokens()

        responses = await asyncio.gather(*[
            client.request("GET", "/api/student/results") for _ in range(3)
        ])

        assert [response.status_code for response in responses] == [200, 200, 200]
        assert server.refresh_calls >= 1

    @pytest.mark.asyncio
    async def test_revoked_refresh_token_ends_session(self, server, storage, navigator, client):
        await client.session.login("teacher1", "Password123", remember=True)
        server.expire_access_tokens()
        server.refresh_enabled = False

        response = await client.request("GET", "/api/teacher/classes")

        assert response.status_code == 401
        assert await storage.get_access_token() is None
        assert await storage.get_refresh_token() is None
        assert await client.session.current_user() is None
        assert await client.session.remembered_username() == "teacher1"
        assert navigator.history == ["/login"]
        assert client.metrics.get_sample_value("session_expirations_total") == 1

    @pytest.mark.asyncio
    async def test_forbidden_is_not_a_renewal_trigger(self, server, client):
        await client.session.login("teacher1", "Password123")

        response = await client.request("GET", "/api/student/results")

        assert response.status_code == 403
        assert server.refresh_calls == 0

    @pytest.mark.asyncio
    async def test_auth_endpoint_401_is_returned_as_is(self, server, storage, client):
        await client.session.login("teacher1", "Password123")
        server.expire_access_tokens()

        response = await client.request("GET", "/api/auth/me")

        assert response.status_code == 401
        assert server.refresh_calls == 0
        assert await storage.get_refresh_token() is not None

    @pytest.mark.asyncio
    async def test_first_login_password_change(self, server, storage, client):
        result = await client.session.login("newteacher", "TempPass1")
        assert result.must_change_password is True

        await client.session.change_password("TempPass1", "NewPass123")

        assert await storage.get(storage.keys.temp_token) is None
        response = await client.request("GET", "/api/auth/me")
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "newteacher"

        result = await client.session.login("newteacher", "NewPass123")
        assert result.must_change_password is False

    @pytest.mark.asyncio
    async def test_wrong_password_and_disabled_account(self, client):
        with pytest.raises(AuthenticationError):
            await client.session.login("teacher1", "WrongPass1")

        with pytest.raises(AuthenticationError) as exc_info:
            await client.session.login("disabled", "Password123")

        assert exc_info.value.details["error"] == "account_disabled"

    @pytest.mark.asyncio
    async def test_logout(self, server, storage, navigator, client):
        await client.session.login("student1", "Password123")

        await client.session.logout()

        assert server.logout_calls == 1
        assert await client.session.is_authenticated() is False
        assert navigator.history == ["/login"]

        response = await client.request("GET", "/api/student/results")
        assert response.status_code == 401
