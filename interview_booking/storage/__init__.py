"""
Storage backends for the booking collections.

``build_storage`` picks the backend named by ``STORAGE_BACKEND`` in the settings.
"""

from interview_booking.base.config import AppConfig
from interview_booking.base.exceptions import ConfigError

from .base import StorageBackend
from .json_files import JsonFileStorage
from .memory import MemoryStorage
from .sql import SqlStorage


def build_storage(config: AppConfig) -> StorageBackend:
    if config.STORAGE_BACKEND == "json":
        return JsonFileStorage(config.DATA_DIR)
    if config.STORAGE_BACKEND == "sql":
        return SqlStorage(config.DATABASE_URL, echo=config.SQL_ECHO)
    if config.STORAGE_BACKEND == "memory":
        return MemoryStorage()
    raise ConfigError(f"Unknown storage backend: {config.STORAGE_BACKEND}")


__all__ = [
    "StorageBackend",
    "JsonFileStorage",
    "MemoryStorage",
    "SqlStorage",
    "build_storage",
]
