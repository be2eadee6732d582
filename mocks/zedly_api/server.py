"""
Mock ZEDLY API providing the auth endpoints and two protected endpoints.

Only what the client gateway talks to is implemented: login, refresh,
logout, change-password, me, student results and teacher classes. Access
tokens carry a generation number; ``expire_access_tokens`` bumps it so every
previously issued access token starts getting 401 while refresh tokens stay
valid.
"""

from typing import Any, Dict, Optional, Tuple

import jwt
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger
from shared.test_helpers import MockTokenGenerator, TestDataFactory, TestUser


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


class MockZedlyServer:
    """Mock ZEDLY API implementation."""

    def __init__(self, port: int = 3000):
        self.port = port
        self.logger = get_logger("mock.zedly")
        self.app = FastAPI(title="Mock ZEDLY API", version="1.0.0")
        self.tokens = MockTokenGenerator()

        self.users: Dict[str, TestUser] = {
            user.username: user for user in TestDataFactory.create_test_users()
        }
        self.results = TestDataFactory.create_test_results()
        self.classes = TestDataFactory.create_test_classes()

        # Current access token generation; older tokens are rejected
        self.generation = 0
        self.refresh_calls = 0
        self.logout_calls = 0
        self.refresh_enabled = True

        self._setup_routes()

    def expire_access_tokens(self) -> None:
        """Invalidate every access token issued so far."""
        self.generation += 1

    def _user_by_id(self, user_id: Any) -> Optional[TestUser]:
        for user in self.users.values():
            if user.user_id == user_id:
                return user
        return None

    def _authenticate(self, request: Request, token_type: str = "access") -> Tuple[Optional[TestUser], Optional[JSONResponse]]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None, _error(401, "unauthorized", "No token provided")
        try:
            claims = self.tokens.decode_access_token(header[len("Bearer "):])
        except jwt.InvalidTokenError:
            return None, _error(401, "invalid_token", "Invalid or expired token")
        if claims.get("type") not in (token_type, "access"):
            return None, _error(401, "invalid_token", "Wrong token type")
        if claims.get("type") == "access" and claims.get("gen") != self.generation:
            return None, _error(401, "token_expired", "Token expired")
        user = self._user_by_id(claims.get("id"))
        if user is None:
            return None, _error(401, "user_not_found", "User no longer exists")
        return user, None

    def _setup_routes(self):
        """Set up mock ZEDLY routes."""

        @self.app.post("/api/auth/login")
        async def login(request: Request):
            body = await request.json()
            username = body.get("username")
            password = body.get("password")
            if not username or not password:
                return _error(400, "validation_error", "Username and password are required")

            user = self.users.get(username)
            if user is None or user.password != password:
                return _error(401, "invalid_credentials", "Invalid username or password")
            if not user.is_active:
                return _error(403, "account_disabled", "Your account has been disabled")

            if user.must_change_password:
                return {
                    "must_change_password": True,
                    "temp_token": self.tokens.generate_access_token(
                        user, generation=self.generation, token_type="temp"
                    ),
                    "message": "Password change required",
                }

            pair = self.tokens.generate_token_pair(user, generation=self.generation)
            self.logger.info("Mock login", username=username)
            return {
                "message": "Login successful",
                "user": user.public_record(),
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            }

        @self.app.post("/api/auth/refresh")
        async def refresh(request: Request):
            self.refresh_calls += 1
            body = await request.json()
            refresh_token = body.get("refresh_token")
            if not refresh_token:
                return _error(400, "validation_error", "Refresh token is required")
            if not self.refresh_enabled:
                return _error(401, "invalid_token", "Refresh token revoked")
            try:
                claims = self.tokens.decode_refresh_token(refresh_token)
            except jwt.InvalidTokenError as e:
                return _error(401, "invalid_token", str(e))

            user = self._user_by_id(claims.get("id"))
            if user is None:
                return _error(401, "user_not_found", "User no longer exists")
            if not user.is_active:
                return _error(403, "account_disabled", "Your account has been disabled")

            return {"access_token": self.tokens.generate_access_token(user, generation=self.generation)}

        @self.app.post("/api/auth/logout")
        async def logout(request: Request):
            user, error = self._authenticate(request)
            if error:
                return error
            self.logout_calls += 1
            return {"message": "Logout successful"}

        @self.app.post("/api/auth/change-password")
        async def change_password(request: Request):
            user, error = self._authenticate(request, token_type="temp")
            if error:
                return error
            body = await request.json()
            if body.get("old_password") != user.password:
                return _error(401, "invalid_password", "Current password is incorrect")
            user.password = body["new_password"]
            user.must_change_password = False
            pair = self.tokens.generate_token_pair(user, generation=self.generation)
            return {
                "message": "Password changed successfully",
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            }

        @self.app.get("/api/auth/me")
        async def me(request: Request):
            user, error = self._authenticate(request)
            if error:
                return error
            return {"user": user.public_record()}

        @self.app.get("/api/student/results")
        async def student_results(request: Request):
            user, error = self._authenticate(request)
            if error:
                return error
            if user.role != "student":
                return _error(403, "forbidden", "Students only")
            return {"results": self.results}

        @self.app.get("/api/teacher/classes")
        async def teacher_classes(request: Request):
            user, error = self._authenticate(request)
            if error:
                return error
            if user.role != "teacher":
                return _error(403, "forbidden", "Teachers only")
            return {"classes": self.classes}


def create_app():
    """Create mock ZEDLY application."""
    server = MockZedlyServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=3000)
