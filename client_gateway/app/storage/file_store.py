"""
JSON file credential storage for the ZEDLY client.

The whole store is one small JSON object. Every write rewrites the file
through a temporary sibling and ``os.replace`` so a crash never leaves a
half-written session behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from shared.errors import StorageError
from shared.logging import get_logger

from .base import CredentialStorage, StorageKeys


class FileStorage(CredentialStorage):
    """Credential storage persisted to a JSON file readable only by its owner."""

    def __init__(self, path: Union[str, Path], keys: Optional[StorageKeys] = None):
        super().__init__(keys)
        self.path = Path(path).expanduser()
        self.logger = get_logger("client.storage.file")
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        if not self.path.exists():
            self._data = {}
            return self._data
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            self.logger.error("Failed to read session file", path=str(self.path), error=str(e))
            raise StorageError("Failed to read session file", details={"path": str(self.path), "error": str(e)})
        if not isinstance(data, dict):
            raise StorageError("Session file does not hold a JSON object", details={"path": str(self.path)})
        self._data = {str(key): str(value) for key, value in data.items()}
        return self._data

    def _flush(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".session-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, sort_keys=True)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            self.logger.error("Failed to write session file", path=str(self.path), error=str(e))
            raise StorageError("Failed to write session file", details={"path": str(self.path), "error": str(e)})
        self._data = data

    async def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data)

    async def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        data = dict(data)
        del data[key]
        self._flush(data)
