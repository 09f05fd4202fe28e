"""Filter state and operation result models for MCP Manager."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional


@dataclass
class MCPFilters:
    """List filter applied by the presentation layer."""

    search: str = ""
    category: str = ""
    status: Literal["all", "enabled", "disabled"] = "all"
    tags: List[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of an MCP import."""

    success: bool
    mcps_added: int = 0
    mcps_updated: int = 0
    errors: List[str] = field(default_factory=list)
    mcp_ids: List[str] = field(default_factory=list)  # ids of added/updated records, in document order

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "mcpsAdded": self.mcps_added,
            "mcpsUpdated": self.mcps_updated,
            "errors": list(self.errors)
        }


@dataclass
class ConnectionTestResult:
    """Outcome of a liveness probe against an MCP server."""

    success: bool
    message: str
    duration_ms: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "success": self.success,
            "message": self.message,
            "duration": self.duration_ms
        }
        if self.error:
            data["error"] = self.error
        return data
