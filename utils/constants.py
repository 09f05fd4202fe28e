"""Constants and defaults for MCP Manager."""

from pathlib import Path
from typing import List


# Paths
USER_HOME = Path.home()
STORAGE_DIR = USER_HOME / ".unified-mcp-manager"
MCPS_FILE_NAME = "mcps.json"
PROFILES_FILE_NAME = "profiles.json"
SETTINGS_FILE_NAME = "settings.json"
BACKUPS_FILE_NAME = "backups.json"
LOCK_FILE_NAME = "storage.lock"
LOG_FILE = STORAGE_DIR / "mcp-manager.log"

# Application
APP_NAME = "MCP Manager"
APP_VERSION = "1.0.0"
DEFAULT_PORT = 3000
PASSWORD_ENV_VAR = "MCP_MANAGER_PASSWORD"

# Storage
BACKUP_RETENTION = 10
LOCK_TIMEOUT_SECONDS = 5.0
STORAGE_AVAILABLE_BYTES = 1024 * 1024 * 1024  # file storage has no practical quota

# Crypto
KDF_ITERATIONS = 100000
SALT_LENGTH = 16
NONCE_LENGTH = 12
KEY_LENGTH = 32
SENSITIVE_KEY_PATTERNS: List[str] = [
    r"api[_-]?key",
    r"access[_-]?token",
    r"secret",
    r"password",
    r"auth",
    r"token",
    r"credential",
]

# Duplicate detection
MATCH_THRESHOLD = 0.3
DUPLICATE_THRESHOLD = 0.7
ARGS_SIMILARITY_THRESHOLD = 0.8
FUZZY_NAME_THRESHOLD = 0.7
FUZZY_NAME_WEIGHT = 0.6
UNIQUE_NAME_MAX_ATTEMPTS = 1000

# Connection testing
CONNECTION_TIMEOUT_SECONDS = 5

# Transport / export
EXPORT_FORMATS = ("claude", "gemini", "universal")
SERVERS_KEY = "mcpServers"
ALT_SERVERS_KEYS = ("servers",)

DEFAULT_CATEGORIES: List[str] = [
    "AI & Language",
    "Database",
    "Web Scraping",
    "Development Tools",
    "Testing",
    "File Management",
    "API Integration",
    "Analytics",
    "Security",
    "Other",
]

DEFAULT_PROFILE_NAME = "Default Profile"
DEFAULT_PROFILE_DESCRIPTION = "Automatically created default profile with all your MCPs"

# Error Messages (User-friendly)
ERROR_MESSAGES = {
    "NO_ACTIVE_PROFILE": "No active profile to save to",
    "INVALID_PROFILE_FORMAT": "Invalid profile format",
    "INVALID_JSON": "Invalid JSON: {error}",
    "UNRECOGNIZED_FORMAT": "Unrecognized import format",
    "STORAGE_LOCKED": "Storage is locked by another writer. Try again.",
    "SAVE_MCPS_FAILED": "Failed to save MCP data",
    "SAVE_PROFILES_FAILED": "Failed to save profile data",
    "SAVE_SETTINGS_FAILED": "Failed to save settings",
    "BACKUP_FAILED": "Failed to create backup",
    "RESTORE_FAILED": "Failed to restore from backup",
    "CLEAR_FAILED": "Failed to clear all data",
    "READ_FAILED": "Failed to read {collection} from storage",
    "ENCRYPT_FAILED": "Failed to encrypt data",
    "DECRYPT_FAILED": "Failed to decrypt data - invalid password or corrupted data",
}
