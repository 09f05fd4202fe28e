"""Backup snapshot data model for MCP Manager."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from utils.dates import format_timestamp, parse_timestamp


@dataclass(frozen=True)
class Backup:
    """
    Immutable snapshot of the persisted collections.

    ``data`` holds the raw stored form of ``mcps``, ``profiles`` and
    ``settings``; sensitive env values stay as they were stored.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    description: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def mcp_count(self) -> int:
        return len(self.data.get("mcps") or [])

    @property
    def profile_count(self) -> int:
        return len(self.data.get("profiles") or [])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "description": self.description,
            "data": {
                "mcps": list(self.data.get("mcps") or []),
                "profiles": list(self.data.get("profiles") or []),
                "settings": dict(self.data.get("settings") or {})
            }
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Backup":
        """Create from dictionary loaded from JSON."""
        snapshot = data.get("data") or {}
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            timestamp=parse_timestamp(data.get("timestamp"), datetime.now()),
            description=data.get("description"),
            data={
                "mcps": list(snapshot.get("mcps") or []),
                "profiles": list(snapshot.get("profiles") or []),
                "settings": dict(snapshot.get("settings") or {})
            }
        )
