"""
Backup and Restore

A backup is one JSON object with an entry per known storage key.
Restoring writes each known key back; anything else in the file is
ignored with a warning.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from ledgerbook.activity import ActivityLogger
from ledgerbook.models.activity import ActivityEventBuilder
from ledgerbook.services.storage.interface import ALL_KEYS
from ledgerbook.services.storage.json_storage import JsonStorage


logger = structlog.get_logger(__name__)

BACKUP_FILENAME_TEMPLATE = "ledgerbook-backup-{day}.json"


class BackupError(Exception):
    """A backup could not be written or restored."""
    pass


class BackupService:
    """Exports and restores every known storage key."""

    def __init__(
        self,
        storage: JsonStorage,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._activity = activity_logger or ActivityLogger()

    def export_backup(self) -> dict[str, Any]:
        """
        Snapshot of every known key.

        Values are decoded JSON. A value that is not valid JSON is kept
        as the raw string, and an absent key maps to None.
        """
        snapshot = {}
        for key in ALL_KEYS:
            raw = self._storage.load_raw(key)
            if raw is None:
                snapshot[key] = None
                continue
            try:
                snapshot[key] = json.loads(raw)
            except ValueError:
                snapshot[key] = raw
        return snapshot

    def write_backup(
        self,
        directory: Union[str, Path],
        today: Optional[date] = None,
    ) -> Path:
        """
        Write a backup file named ``ledgerbook-backup-YYYY-MM-DD.json``.

        Raises:
            BackupError: If the file could not be written
        """
        day = (today or date.today()).isoformat()
        path = Path(directory) / BACKUP_FILENAME_TEMPLATE.format(day=day)
        snapshot = self.export_backup()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(snapshot, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            self._activity.log(ActivityEventBuilder.backup_failed(str(e)))
            raise BackupError(f"Could not write backup to {path}: {e}") from e

        self._activity.log(ActivityEventBuilder.backup_exported(
            keys=[k for k, v in snapshot.items() if v is not None],
            path=str(path),
        ))
        return path

    def restore_backup(self, data: Any) -> int:
        """
        Write the known keys of a backup back into storage.

        Keys with a null value are left untouched.

        Returns:
            Number of keys restored

        Raises:
            BackupError: If the data is not an object or no key was restored
        """
        if not isinstance(data, dict):
            self._activity.log(ActivityEventBuilder.backup_failed("backup is not a JSON object"))
            raise BackupError("Backup must be a JSON object")

        restored = []
        skipped = []
        for key, value in data.items():
            if key not in ALL_KEYS:
                logger.warning("backup_unknown_key_skipped", key=key)
                skipped.append(key)
                continue
            if value is None:
                skipped.append(key)
                continue
            if self._storage.save(key, value):
                restored.append(key)
            else:
                skipped.append(key)

        if not restored:
            self._activity.log(ActivityEventBuilder.backup_failed("no known keys restored"))
            raise BackupError("Backup did not contain any restorable data")

        self._activity.log(ActivityEventBuilder.backup_restored(restored, skipped))
        return len(restored)

    def restore_file(self, path: Union[str, Path]) -> int:
        """
        Restore from a backup file.

        Raises:
            BackupError: If the file cannot be read or parsed, or holds no known keys
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._activity.log(ActivityEventBuilder.backup_failed(str(e)))
            raise BackupError(f"Could not read backup {path}: {e}") from e
        return self.restore_backup(data)
