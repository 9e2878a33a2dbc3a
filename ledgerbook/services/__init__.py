"""Services package."""

from ledgerbook.services.backup import BackupError, BackupService
from ledgerbook.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    JsonStorage,
    KeyValueStore,
    StorageError,
    StorageWriteError,
)

__all__ = [
    # Backup
    "BackupError",
    "BackupService",
    # Storage services
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonStorage",
    "KeyValueStore",
    "StorageError",
    "StorageWriteError",
]
