"""Exception types raised by the MCP Manager core."""


class MCPManagerError(Exception):
    """Base class for all MCP Manager errors."""
    pass


class ValidationError(MCPManagerError):
    """Record failed validation; the operation was not attempted."""
    pass


class NotFoundError(MCPManagerError):
    """An id did not resolve to a stored record."""

    kind = "Record"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"{self.kind} not found: {record_id}")
        self.record_id = record_id


class MCPNotFoundError(NotFoundError):
    kind = "MCP"


class ProfileNotFoundError(NotFoundError):
    kind = "Profile"


class BackupNotFoundError(NotFoundError):
    kind = "Backup"


class NoActiveProfileError(MCPManagerError):
    """An operation needed an active profile but none is selected."""
    pass


class PersistenceError(MCPManagerError):
    """The persistence backend failed to read or write."""
    pass


class EncryptionError(MCPManagerError):
    """A value could not be encrypted."""
    pass


class DecryptionError(MCPManagerError):
    """A value could not be decrypted (wrong password or corrupted data)."""
    pass


class ImportFormatError(MCPManagerError):
    """An import document is not valid JSON or matches no known dialect."""
    pass
