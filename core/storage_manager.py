"""
Storage Manager - typed access to a persistence adapter.

Converts between models and the adapter's raw JSON collections and
encrypts sensitive env values of MCP records on the way in, decrypting
them on the way out.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from core.crypto import encrypt_data, is_encryption_supported, safe_decrypt
from core.errors import EncryptionError, NotFoundError, PersistenceError
from core.persistence import PersistenceAdapter
from models.backup import Backup
from models.mcp import MCP
from models.profile import Profile
from models.settings import Settings
from utils.constants import ERROR_MESSAGES, SENSITIVE_KEY_PATTERNS

logger = logging.getLogger(__name__)

_SENSITIVE_PATTERNS = [re.compile(pattern, re.IGNORECASE) for pattern in SENSITIVE_KEY_PATTERNS]


def is_sensitive_key(key: str) -> bool:
    """Check if an environment variable name looks like it holds a secret."""
    return any(pattern.search(key) for pattern in _SENSITIVE_PATTERNS)


class StorageManager:
    """Encrypting, model-aware facade over a PersistenceAdapter."""

    def __init__(self, adapter: PersistenceAdapter, password: Optional[str] = None):
        self.adapter = adapter
        self._encryption_password: Optional[str] = None
        self._encryption_supported = is_encryption_supported()
        if password:
            self.set_encryption_password(password)

    def set_encryption_password(self, password: str) -> None:
        """Set the password used for sensitive env values."""
        self._encryption_password = password or None
        logger.info("Encryption password set")

    def clear_encryption_password(self) -> None:
        """Stop encrypting; values are written and read as-is."""
        self._encryption_password = None
        logger.info("Encryption password cleared")

    @property
    def encryption_active(self) -> bool:
        return bool(self._encryption_password) and self._encryption_supported

    def _encrypt_env(self, env: Dict[str, str]) -> Dict[str, str]:
        encrypted = {}
        for key, value in env.items():
            if is_sensitive_key(key) and value:
                try:
                    encrypted[key] = encrypt_data(value, self._encryption_password)
                except EncryptionError as e:
                    logger.error(f"Failed to encrypt {key}: {e}")
                    encrypted[key] = value  # Fall back to plain text
            else:
                encrypted[key] = value
        return encrypted

    def _decrypt_env(self, env: Dict[str, Any]) -> Dict[str, Any]:
        decrypted = {}
        for key, value in env.items():
            if is_sensitive_key(key) and isinstance(value, str) and value:
                decrypted[key] = safe_decrypt(value, self._encryption_password)
            else:
                decrypted[key] = value
        return decrypted

    def encrypt_record(self, record: dict) -> dict:
        """Return a copy of a raw MCP record with sensitive env values encrypted."""
        if not self.encryption_active or not record.get("env"):
            return record
        return {**record, "env": self._encrypt_env(record["env"])}

    def decrypt_record(self, record: dict) -> dict:
        """Return a copy of a raw MCP record with sensitive env values decrypted."""
        if not self.encryption_active or not isinstance(record.get("env"), dict) or not record["env"]:
            return record
        return {**record, "env": self._decrypt_env(record["env"])}

    def _read(self, collection: str, reader):
        try:
            return reader()
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to get {collection} from storage: {e}")
            raise PersistenceError(ERROR_MESSAGES["READ_FAILED"].format(collection=collection)) from e

    def _write(self, message_key: str, writer, *args):
        try:
            return writer(*args)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"{ERROR_MESSAGES[message_key]}: {e}")
            raise PersistenceError(f"{ERROR_MESSAGES[message_key]}: {e}") from e

    def get_mcps(self) -> List[MCP]:
        """Load all MCPs, decrypting sensitive env values."""
        records = self._read("MCPs", self.adapter.get_mcps)
        mcps = []
        for record in records:
            try:
                mcps.append(MCP.from_dict(self.decrypt_record(record)))
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Failed to parse MCP {record.get('id')}: {e}")
        return mcps

    def save_mcps(self, mcps: List[MCP]) -> None:
        """Persist the full MCP collection, encrypting sensitive env values."""
        records = [self.encrypt_record(mcp.to_dict()) for mcp in mcps]
        self._write("SAVE_MCPS_FAILED", self.adapter.save_mcps, records)
        logger.debug(f"Saved {len(records)} MCPs")

    def get_profiles(self) -> List[Profile]:
        records = self._read("profiles", self.adapter.get_profiles)
        profiles = []
        for record in records:
            try:
                profiles.append(Profile.from_dict(record))
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Failed to parse profile {record.get('id')}: {e}")
        return profiles

    def save_profiles(self, profiles: List[Profile]) -> None:
        self._write("SAVE_PROFILES_FAILED", self.adapter.save_profiles, [p.to_dict() for p in profiles])
        logger.debug(f"Saved {len(profiles)} profiles")

    def get_settings(self) -> Settings:
        return Settings.from_dict(self._read("settings", self.adapter.get_settings))

    def save_settings(self, settings: Settings) -> None:
        self._write("SAVE_SETTINGS_FAILED", self.adapter.save_settings, settings.to_dict())

    def get_backups(self) -> List[Backup]:
        return [Backup.from_dict(record) for record in self._read("backups", self.adapter.get_backups)]

    def create_backup(self, description: Optional[str] = None) -> Backup:
        """Snapshot the stored collections."""
        return Backup.from_dict(self._write("BACKUP_FAILED", self.adapter.create_backup, description))

    def restore_from_backup(self, backup_id: str) -> None:
        """
        Restore a stored snapshot.

        Raises:
            BackupNotFoundError: If the backup does not exist
        """
        self._write("RESTORE_FAILED", self.adapter.restore_from_backup, backup_id)

    def clear_all(self) -> None:
        self._write("CLEAR_FAILED", self.adapter.clear_all)

    def get_storage_info(self) -> Dict[str, Any]:
        try:
            return self.adapter.get_storage_info()
        except Exception as e:
            logger.warning(f"Failed to get storage info: {e}")
            return {"used": 0, "available": 0}
