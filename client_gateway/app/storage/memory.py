"""
In-process credential storage.
"""

from typing import Dict, Optional

from .base import CredentialStorage, StorageKeys


class MemoryStorage(CredentialStorage):
    """Dictionary-backed storage; lives as long as the process."""

    def __init__(self, keys: Optional[StorageKeys] = None, initial: Optional[Dict[str, str]] = None):
        super().__init__(keys)
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)
