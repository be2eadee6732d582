"""
Test helper functions and factory methods for the ZEDLY client gateway.
"""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import httpx
import jwt


@dataclass
class TestUser:
    """Test user data."""
    __test__ = False

    user_id: int
    username: str
    role: str
    school_id: Optional[int]
    first_name: str
    last_name: str
    password: str = "Password123"
    is_active: bool = True
    must_change_password: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def public_record(self) -> Dict[str, Any]:
        """User record as the login endpoint returns it."""
        return {
            "id": self.user_id,
            "username": self.username,
            "role": self.role,
            "school_id": self.school_id,
            "full_name": self.full_name,
        }


@dataclass
class TestToken:
    """Test token data."""
    __test__ = False

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


class TestDataFactory:
    """Factory for creating test data."""
    __test__ = False

    @staticmethod
    def create_test_users() -> List[TestUser]:
        """One user per ZEDLY role, plus an account that must change its password."""
        return [
            TestUser(user_id=1, username="superadmin", role="superadmin", school_id=None,
                     first_name="Super", last_name="Admin"),
            TestUser(user_id=2, username="school.admin", role="school_admin", school_id=10,
                     first_name="Dilnoza", last_name="Karimova"),
            TestUser(user_id=3, username="teacher1", role="teacher", school_id=10,
                     first_name="Aziz", last_name="Rakhimov"),
            TestUser(user_id=4, username="student1", role="student", school_id=10,
                     first_name="Malika", last_name="Yusupova"),
            TestUser(user_id=5, username="newteacher", role="teacher", school_id=10,
                     first_name="Jasur", last_name="Tursunov", password="TempPass1",
                     must_change_password=True),
            TestUser(user_id=6, username="disabled", role="student", school_id=10,
                     first_name="Old", last_name="Account", is_active=False),
        ]

    @staticmethod
    def create_test_results() -> List[Dict[str, Any]]:
        """Student test results."""
        return [
            {"test_id": 101, "title": "Algebra I", "score": 86, "max_score": 100},
            {"test_id": 102, "title": "Physics: Motion", "score": 72, "max_score": 100},
        ]

    @staticmethod
    def create_test_classes() -> List[Dict[str, Any]]:
        """Teacher classes."""
        return [
            {"id": 201, "name": "9-A", "grade_level": 9, "student_count": 28},
            {"id": 202, "name": "10-B", "grade_level": 10, "student_count": 25},
        ]


class MockTokenGenerator:
    """Mock JWT token generator for testing."""

    def __init__(self, secret: str = "mock-secret", refresh_secret: str = "mock-refresh-secret"):
        self.secret = secret
        self.refresh_secret = refresh_secret
        self.algorithm = "HS256"

    def generate_access_token(self, user: TestUser, expires_in: int = 900, generation: int = 0,
                              token_type: str = "access") -> str:
        """Generate mock access token."""
        now = int(time.time())
        payload = {
            "id": user.user_id,
            "username": user.username,
            "role": user.role,
            "school_id": user.school_id,
            "type": token_type,
            "gen": generation,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def generate_refresh_token(self, user: TestUser, expires_in: int = 604800) -> str:
        """Generate mock refresh token."""
        now = int(time.time())
        payload = {
            "id": user.user_id,
            "type": "refresh",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def generate_token_pair(self, user: TestUser, generation: int = 0) -> TestToken:
        """Generate access and refresh token pair."""
        return TestToken(
            access_token=self.generate_access_token(user, generation=generation),
            refresh_token=self.generate_refresh_token(user),
            expires_in=900,
        )

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.refresh_secret, algorithms=[self.algorithm])


def json_response(status_code: int, body: Any = None) -> httpx.Response:
    """Canned JSON response."""
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(body if body is not None else {}),
        headers={"Content-Type": "application/json"},
    )


Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]


@dataclass
class ScriptedApi:
    """Route table for ``httpx.MockTransport`` that records every request it serves.

    Routes map ``(METHOD, path)`` to a handler or to a list of responses
    served in order (the last one repeats).
    """
    __test__ = False

    routes: Dict[Tuple[str, str], Union[Handler, List[httpx.Response]]] = field(default_factory=dict)
    requests: List[httpx.Request] = field(default_factory=list)

    def add(self, method: str, path: str, handler: Union[Handler, List[httpx.Response], httpx.Response]):
        if isinstance(handler, httpx.Response):
            handler = [handler]
        self.routes[(method.upper(), path)] = handler
        return self

    def calls_to(self, path: str, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            request for request in self.requests
            if request.url.path == path and (method is None or request.method == method.upper())
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return json_response(404, {"error": "not_found", "message": "Route not found"})
        if isinstance(route, list):
            canned = route.pop(0) if len(route) > 1 else route[0]
            return httpx.Response(canned.status_code, headers=canned.headers, content=canned.content)
        response = route(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def mock_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)
