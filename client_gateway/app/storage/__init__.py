"""
Credential storage package for the ZEDLY client.

Backends share the ``CredentialStorage`` contract:
- memory: process-local dictionary (tests, embedded use)
- file: JSON file on disk (CLI sessions)
- redis: shared Redis keys (multi-process hosts)
"""

from shared.config import ClientConfig
from shared.errors import ValidationError

from .base import CredentialStorage, StorageKeys
from .file_store import FileStorage
from .memory import MemoryStorage
from .redis_store import RedisStorage


def create_storage(config: ClientConfig) -> CredentialStorage:
    """Build the storage backend selected by ``config.storage_backend``."""
    keys = StorageKeys.from_config(config)
    backend = config.storage_backend.lower()
    if backend == "memory":
        return MemoryStorage(keys)
    if backend == "file":
        return FileStorage(config.storage_path, keys)
    if backend == "redis":
        return RedisStorage(config.redis_url, config.redis_key_prefix, keys)
    raise ValidationError(
        f"Unknown storage backend: {config.storage_backend}",
        details={"allowed": ["memory", "file", "redis"]}
    )


__all__ = [
    "CredentialStorage",
    "StorageKeys",
    "MemoryStorage",
    "FileStorage",
    "RedisStorage",
    "create_storage",
]
