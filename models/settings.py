"""Settings data model for MCP Manager."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from utils.constants import DEFAULT_CATEGORIES, EXPORT_FORMATS


@dataclass
class Settings:
    """Process-wide application settings."""

    # Theme
    theme: Literal["light", "dark", "system"] = "system"

    # Profile applied as the active profile at startup
    default_profile: Optional[str] = None

    # Storage
    auto_backup: bool = True
    encryption_enabled: bool = True
    sync_enabled: bool = False

    # Export
    export_format: Literal["claude", "gemini", "universal"] = "universal"

    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "theme": self.theme,
            "autoBackup": self.auto_backup,
            "encryptionEnabled": self.encryption_enabled,
            "syncEnabled": self.sync_enabled,
            "exportFormat": self.export_format,
            "categories": list(self.categories)
        }
        if self.default_profile:
            data["defaultProfile"] = self.default_profile
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Create from dictionary loaded from JSON, filling gaps with defaults."""
        export_format = data.get("exportFormat", "universal")
        if export_format not in EXPORT_FORMATS:
            export_format = "universal"

        theme = data.get("theme", "system")
        if theme not in ("light", "dark", "system"):
            theme = "system"

        categories = data.get("categories")
        return cls(
            theme=theme,
            default_profile=data.get("defaultProfile") or None,
            auto_backup=bool(data.get("autoBackup", True)),
            encryption_enabled=bool(data.get("encryptionEnabled", True)),
            sync_enabled=bool(data.get("syncEnabled", False)),
            export_format=export_format,
            categories=list(categories) if isinstance(categories, list) else list(DEFAULT_CATEGORIES)
        )
