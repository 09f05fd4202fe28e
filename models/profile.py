"""Profile data model for MCP Manager."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from utils.dates import format_timestamp, parse_timestamp


@dataclass
class Profile:
    """Named, ordered set of MCP ids that are enabled together."""

    name: str
    mcp_ids: List[str] = field(default_factory=list)  # may hold stale ids
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    description: str = ""
    is_default: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "mcpIds": list(self.mcp_ids),
            "isDefault": self.is_default,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        """Create from dictionary loaded from JSON."""
        now = datetime.now()
        created_at = parse_timestamp(data.get("createdAt"), now)
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            name=str(data.get("name", "")),
            description=data.get("description") or "",
            mcp_ids=[str(mcp_id) for mcp_id in data.get("mcpIds") or []],
            is_default=bool(data.get("isDefault", False)),
            created_at=created_at,
            updated_at=parse_timestamp(data.get("updatedAt"), created_at)
        )
