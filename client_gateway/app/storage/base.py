"""
Credential storage contract.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from shared.config import ClientConfig
from shared.errors import StorageError


@dataclass(frozen=True)
class StorageKeys:
    """Fixed key names the session lives under."""

    access_token: str = "access_token"
    refresh_token: str = "refresh_token"
    user: str = "user"
    temp_token: str = "temp_token"
    remembered_username: str = "remembered_username"

    @classmethod
    def from_config(cls, config: ClientConfig) -> "StorageKeys":
        return cls(
            access_token=config.access_token_key,
            refresh_token=config.refresh_token_key,
            user=config.user_key,
            temp_token=config.temp_token_key,
            remembered_username=config.remembered_username_key,
        )


class CredentialStorage(ABC):
    """Durable string key-value storage holding the credential pair and cached identity.

    Backends implement ``get``, ``set`` and ``remove``; the typed helpers and
    ``clear_session`` are built on top of them.
    """

    def __init__(self, keys: Optional[StorageKeys] = None):
        self.keys = keys or StorageKeys()

    async def start(self) -> None:
        """Open backend resources."""

    async def stop(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...

    async def get_access_token(self) -> Optional[str]:
        return await self.get(self.keys.access_token)

    async def set_access_token(self, token: str) -> None:
        await self.set(self.keys.access_token, token)

    async def get_refresh_token(self) -> Optional[str]:
        return await self.get(self.keys.refresh_token)

    async def set_refresh_token(self, token: str) -> None:
        await self.set(self.keys.refresh_token, token)

    async def get_user(self) -> Optional[Dict[str, Any]]:
        """Cached user identity, or None when absent."""
        raw = await self.get(self.keys.user)
        if raw is None:
            return None
        try:
            user = json.loads(raw)
        except ValueError as e:
            raise StorageError("Cached user record is not valid JSON", details={"error": str(e)})
        return user if isinstance(user, dict) else None

    async def set_user(self, user: Dict[str, Any]) -> None:
        await self.set(self.keys.user, json.dumps(user))

    async def clear_session(self) -> None:
        """Erase the credential pair and the cached identity together."""
        await self.remove(self.keys.access_token)
        await self.remove(self.keys.refresh_token)
        await self.remove(self.keys.user)
