"""
Persistence adapters for MCP Manager.

An adapter stores the raw JSON form of four collections (MCPs, profiles,
settings, backups). Backup creation and restore are built on top of the
collection getters and setters, so every backend shares the same snapshot
and retention semantics.

FileStorageAdapter handles:
- One JSON file per collection
- Atomic writes (temp file + rename) guarded by a lock file
- Corrupted or missing files read as empty defaults
"""

import copy
import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import BackupNotFoundError, PersistenceError
from models.backup import Backup
from models.settings import Settings
from utils import constants
from utils.constants import (
    BACKUP_RETENTION,
    BACKUPS_FILE_NAME,
    ERROR_MESSAGES,
    LOCK_FILE_NAME,
    LOCK_TIMEOUT_SECONDS,
    MCPS_FILE_NAME,
    PROFILES_FILE_NAME,
    SETTINGS_FILE_NAME,
    STORAGE_AVAILABLE_BYTES,
)

logger = logging.getLogger(__name__)


class PersistenceAdapter(ABC):
    """Pluggable key-value backend for the raw record collections."""

    @abstractmethod
    def get_mcps(self) -> List[dict]:
        """Return the stored MCP records."""

    @abstractmethod
    def save_mcps(self, mcps: List[dict]) -> None:
        """Replace the stored MCP records."""

    @abstractmethod
    def get_profiles(self) -> List[dict]:
        """Return the stored profiles."""

    @abstractmethod
    def save_profiles(self, profiles: List[dict]) -> None:
        """Replace the stored profiles."""

    @abstractmethod
    def get_settings(self) -> dict:
        """Return stored settings merged over the defaults."""

    @abstractmethod
    def save_settings(self, settings: dict) -> None:
        """Replace the stored settings."""

    @abstractmethod
    def get_backups(self) -> List[dict]:
        """Return stored backups, newest first."""

    @abstractmethod
    def save_backups(self, backups: List[dict]) -> None:
        """Replace the stored backups."""

    @abstractmethod
    def clear_all(self) -> None:
        """Remove every stored collection."""

    @abstractmethod
    def get_storage_info(self) -> Dict[str, Any]:
        """Return ``{"used": bytes, "available": bytes}`` plus backend details."""

    def create_backup(self, description: Optional[str] = None) -> dict:
        """
        Snapshot the current collections into the backup list.

        The newest BACKUP_RETENTION backups are kept; older ones are evicted.

        Args:
            description: Optional label; defaults to a timestamped label

        Returns:
            The stored backup record
        """
        now = datetime.now()
        backup = Backup(
            id=str(uuid.uuid4()),
            timestamp=now,
            description=description or f"Backup {now.strftime('%Y-%m-%d %H:%M:%S')}",
            data={
                "mcps": copy.deepcopy(self.get_mcps()),
                "profiles": copy.deepcopy(self.get_profiles()),
                "settings": copy.deepcopy(self.get_settings())
            }
        ).to_dict()

        backups = [backup] + self.get_backups()
        evicted = len(backups) - BACKUP_RETENTION
        if evicted > 0:
            logger.debug(f"Evicting {evicted} old backup(s)")
        self.save_backups(backups[:BACKUP_RETENTION])

        logger.info(f"Backup created: {backup['id']} ({backup['description']})")
        return backup

    def restore_from_backup(self, backup_id: str) -> None:
        """
        Overwrite the collections with a stored snapshot.

        Raises:
            BackupNotFoundError: If no backup has this id
        """
        backup = next((b for b in self.get_backups() if b.get("id") == backup_id), None)
        if backup is None:
            raise BackupNotFoundError(backup_id)

        data = backup.get("data") or {}
        self.save_mcps(data.get("mcps") or [])
        self.save_profiles(data.get("profiles") or [])
        self.save_settings(data.get("settings") or {})
        logger.info(f"Restored from backup: {backup_id}")


class MemoryStorageAdapter(PersistenceAdapter):
    """In-process adapter keeping deep copies of each collection."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def _get(self, key: str, default: Any) -> Any:
        return copy.deepcopy(self._data.get(key, default))

    def _set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def get_mcps(self) -> List[dict]:
        return self._get("mcps", [])

    def save_mcps(self, mcps: List[dict]) -> None:
        self._set("mcps", mcps)

    def get_profiles(self) -> List[dict]:
        return self._get("profiles", [])

    def save_profiles(self, profiles: List[dict]) -> None:
        self._set("profiles", profiles)

    def get_settings(self) -> dict:
        return {**Settings().to_dict(), **self._get("settings", {})}

    def save_settings(self, settings: dict) -> None:
        self._set("settings", settings)

    def get_backups(self) -> List[dict]:
        return self._get("backups", [])

    def save_backups(self, backups: List[dict]) -> None:
        self._set("backups", backups)

    def clear_all(self) -> None:
        self._data.clear()

    def get_storage_info(self) -> Dict[str, Any]:
        used = len(json.dumps(self._data, default=str).encode("utf-8"))
        return {"used": used, "available": STORAGE_AVAILABLE_BYTES}


class FileStorageAdapter(PersistenceAdapter):
    """Stores each collection as a JSON file in one directory."""

    def __init__(self, storage_dir: Optional[Path] = None):
        """Initialize file storage and ensure the directory exists."""
        self.storage_dir = Path(storage_dir) if storage_dir else constants.STORAGE_DIR
        self.files: Dict[str, Path] = {
            "mcps": self.storage_dir / MCPS_FILE_NAME,
            "profiles": self.storage_dir / PROFILES_FILE_NAME,
            "settings": self.storage_dir / SETTINGS_FILE_NAME,
            "backups": self.storage_dir / BACKUPS_FILE_NAME,
        }
        self.lock_file = self.storage_dir / LOCK_FILE_NAME
        self._ensure_storage_dir()

        logger.info(f"FileStorageAdapter initialized: {self.storage_dir}")

    def _ensure_storage_dir(self):
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create storage directory: {e}") from e

    def _acquire_lock(self, timeout: float = LOCK_TIMEOUT_SECONDS) -> bool:
        """
        Acquire the storage lock file.

        Args:
            timeout: Maximum time to wait for lock in seconds

        Returns:
            True if lock acquired, False otherwise
        """
        start_time = time.time()
        while time.time() - start_time < timeout:
            try:
                # exclusive create fails if another writer holds the lock
                with open(self.lock_file, "x", encoding="utf-8"):
                    pass
                logger.debug("Lock acquired")
                return True
            except FileExistsError:
                time.sleep(0.05)
            except OSError as e:
                logger.warning(f"Error acquiring lock: {e}")
                time.sleep(0.05)

        logger.error("Failed to acquire lock within timeout")
        return False

    def _release_lock(self):
        """Release the storage lock file."""
        try:
            if self.lock_file.exists():
                self.lock_file.unlink()
                logger.debug("Lock released")
        except OSError as e:
            logger.warning(f"Error releasing lock: {e}")

    def _read_json(self, key: str, default: Any) -> Any:
        """Read a collection file, returning default when missing or unreadable."""
        path = self.files[key]
        try:
            if not path.exists():
                return default
            content = path.read_text(encoding="utf-8")
            if not content.strip():
                return default
            return json.loads(content)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {path}, using default value: {e}")
            return default

    def _write_json(self, key: str, data: Any) -> None:
        """Write a collection file atomically (temp file + rename)."""
        path = self.files[key]
        if not self._acquire_lock():
            raise PersistenceError(ERROR_MESSAGES["STORAGE_LOCKED"])

        try:
            self._ensure_storage_dir()
            temp_file = path.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            temp_file.replace(path)
            logger.debug(f"Saved {path.name}")

        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(f"Failed to write {path}: {e}") from e

        finally:
            self._release_lock()

    def _read_list(self, key: str) -> List[dict]:
        data = self._read_json(key, [])
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed {key} collection (expected a list)")
            return []
        return [item for item in data if isinstance(item, dict)]

    def get_mcps(self) -> List[dict]:
        return self._read_list("mcps")

    def save_mcps(self, mcps: List[dict]) -> None:
        self._write_json("mcps", mcps)

    def get_profiles(self) -> List[dict]:
        return self._read_list("profiles")

    def save_profiles(self, profiles: List[dict]) -> None:
        self._write_json("profiles", profiles)

    def get_settings(self) -> dict:
        stored = self._read_json("settings", {})
        if not isinstance(stored, dict):
            stored = {}
        # Merge with defaults to ensure all properties exist
        return {**Settings().to_dict(), **stored}

    def save_settings(self, settings: dict) -> None:
        self._write_json("settings", settings)

    def get_backups(self) -> List[dict]:
        return self._read_list("backups")

    def save_backups(self, backups: List[dict]) -> None:
        self._write_json("backups", backups)

    def clear_all(self) -> None:
        if not self._acquire_lock():
            raise PersistenceError(ERROR_MESSAGES["STORAGE_LOCKED"])
        try:
            for path in self.files.values():
                if path.exists():
                    path.unlink()
            logger.info("All storage files removed")
        except OSError as e:
            raise PersistenceError(f"Failed to clear storage: {e}") from e
        finally:
            self._release_lock()

    def get_storage_info(self) -> Dict[str, Any]:
        used = 0
        files: Dict[str, int] = {}
        for key, path in self.files.items():
            try:
                size = path.stat().st_size if path.exists() else 0
            except OSError:
                size = 0
            files[key] = size
            used += size
        return {
            "used": used,
            "available": STORAGE_AVAILABLE_BYTES,
            "files": files,
            "path": str(self.storage_dir)
        }

    def is_writable(self) -> bool:
        """Check whether the storage directory accepts writes."""
        test_file = self.storage_dir / ".write-test"
        try:
            self._ensure_storage_dir()
            test_file.write_text("test", encoding="utf-8")
            test_file.unlink()
            return True
        except (OSError, PersistenceError):
            return False
