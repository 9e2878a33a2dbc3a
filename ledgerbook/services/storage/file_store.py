"""
File Storage Implementation

One file per key inside a data directory (``<data_dir>/<key>.json``).

Writes go to a temporary file in the same directory which is then
renamed over the target, so a reader sees either the old value or the
new one and never a half-written file.

TRADEOFFS:
- Two processes writing the same key: the later rename wins
- No locking across processes
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from ledgerbook.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


class FileKeyValueStore(KeyValueStore):
    """Directory-of-files key-value store."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self._data_dir}: {e}")

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            # An unreadable file is reported as its raw bytes being garbage;
            # the JSON layer treats it as corrupted and clears it.
            logger.warning("storage_read_failed", key=key, error=str(e))
            return ""

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"Failed to write {key}: {e}")

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {key}: {e}")

    def keys(self) -> list[str]:
        return sorted(
            p.name[: -len(_SUFFIX)]
            for p in self._data_dir.glob(f"*{_SUFFIX}")
            if not p.name.startswith(".")
        )
