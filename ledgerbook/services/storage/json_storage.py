"""
JSON Document Storage

Wraps a KeyValueStore with JSON encoding.

Recovery policy for corrupted values: the value is logged, removed from
the store, and reported as absent, so the caller falls back to an empty
collection and the next load does not fail the same way again.

Write failures are logged and reported as False, never raised.
"""

import json
from typing import Any, Optional

import structlog

from ledgerbook.activity import ActivityLogger
from ledgerbook.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)

# Written by some clients when a value was never set
_UNDEFINED = "undefined"


class JsonStorage:
    """load/save of JSON documents on top of a raw key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._activity = activity_logger or ActivityLogger()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def load(self, key: str) -> Optional[Any]:
        """
        Load and decode the document under a key.

        Returns:
            The decoded JSON value, or None if the key is absent or its
            value was corrupted (in which case it has been removed)
        """
        raw = self._store.get_item(key)
        if raw is None or raw == _UNDEFINED:
            return None

        try:
            return json.loads(raw)
        except ValueError as e:
            self._activity.log_storage_corruption(key, str(e))
            try:
                self._store.remove_item(key)
            except StorageError as remove_error:
                logger.error(
                    "corrupted_key_remove_failed",
                    key=key,
                    error=str(remove_error),
                )
            return None

    def save(self, key: str, value: Any) -> bool:
        """
        Encode and store a document, replacing whatever was there.

        Returns:
            True if the write succeeded
        """
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self._activity.log_save_failed(key, f"not JSON-serializable: {e}")
            return False

        try:
            self._store.set_item(key, raw)
        except StorageError as e:
            self._activity.log_save_failed(key, str(e))
            return False
        return True

    def load_raw(self, key: str) -> Optional[str]:
        """The undecoded value under a key (used by backups)."""
        return self._store.get_item(key)
