"""MCP record data model for MCP Manager."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from core.errors import ValidationError
from utils.dates import format_timestamp, parse_timestamp
from utils.validators import coerce_string_map, validate_name, validate_string_map

logger = logging.getLogger(__name__)


@dataclass
class StdioTransport:
    """Local subprocess transport."""

    command: str = ""
    args: List[str] = field(default_factory=list)

    @property
    def type(self) -> str:
        return "stdio"


@dataclass
class RemoteTransport:
    """HTTP or SSE transport."""

    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    type: Literal["http", "sse"] = "http"


Transport = Union[StdioTransport, RemoteTransport]

# Python attribute name -> wire key, for partial updates
_WIRE_ALIASES = {
    "always_allow": "alwaysAllow",
    "usage_count": "usageCount",
    "last_used": "lastUsed",
    "transport_type": "type",
}


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value]


def transport_from_dict(data: dict) -> Transport:
    """
    Build the transport variant described by a wire record.

    An explicit ``type`` wins; without one, a URL selects http and anything
    else falls back to stdio.
    """
    explicit_type = data.get("type")
    url = data.get("url") or ""
    command = data.get("command") or ""

    if explicit_type == "stdio" and not command and url:
        logger.debug("Correcting record '%s' type to 'http' based on stored URL", data.get("name"))
        explicit_type = "http"

    if explicit_type in ("http", "sse") or (explicit_type is None and url):
        return RemoteTransport(
            url=str(url),
            headers=coerce_string_map(data.get("headers")),
            type="sse" if explicit_type == "sse" else "http"
        )

    return StdioTransport(command=str(command), args=_string_list(data.get("args")))


@dataclass
class MCP:
    """A named connection descriptor."""

    name: str
    transport: Transport = field(default_factory=StdioTransport)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    env: Dict[str, str] = field(default_factory=dict)
    always_allow: List[str] = field(default_factory=list)
    category: str = "Other"
    description: str = ""
    tags: List[str] = field(default_factory=list)
    disabled: bool = False
    usage_count: int = 0
    last_used: datetime = field(default_factory=datetime.now)
    source: str = "manual"
    version: Optional[str] = None

    @property
    def transport_type(self) -> str:
        return self.transport.type

    @property
    def command(self) -> Optional[str]:
        return self.transport.command if isinstance(self.transport, StdioTransport) else None

    @property
    def args(self) -> List[str]:
        return self.transport.args if isinstance(self.transport, StdioTransport) else []

    @property
    def url(self) -> Optional[str]:
        return self.transport.url if isinstance(self.transport, RemoteTransport) else None

    @property
    def headers(self) -> Dict[str, str]:
        return self.transport.headers if isinstance(self.transport, RemoteTransport) else {}

    @property
    def enabled(self) -> bool:
        return not self.disabled

    def to_dict(self) -> dict:
        """Convert to the camelCase wire record for JSON serialization."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.transport_type,
        }
        if isinstance(self.transport, StdioTransport):
            data["command"] = self.transport.command
            data["args"] = list(self.transport.args)
        else:
            data["url"] = self.transport.url
            data["headers"] = dict(self.transport.headers)

        data.update({
            "env": dict(self.env),
            "alwaysAllow": list(self.always_allow),
            "category": self.category,
            "description": self.description,
            "tags": list(self.tags),
            "disabled": self.disabled,
            "usageCount": self.usage_count,
            "lastUsed": format_timestamp(self.last_used),
            "source": self.source,
        })
        if self.version is not None:
            data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "MCP":
        """Create from a wire record loaded from JSON."""
        usage_count = data.get("usageCount", 0)
        try:
            usage_count = max(0, int(usage_count))
        except (TypeError, ValueError):
            usage_count = 0

        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            name=str(data.get("name", "")),
            transport=transport_from_dict(data),
            env=coerce_string_map(data.get("env")),
            always_allow=_string_list(data.get("alwaysAllow")),
            category=data.get("category") or "Other",
            description=data.get("description") or "",
            tags=_string_list(data.get("tags")),
            disabled=bool(data.get("disabled", False)),
            usage_count=usage_count,
            last_used=parse_timestamp(data.get("lastUsed"), datetime.now()),
            source=data.get("source") or "manual",
            version=data.get("version")
        )

    def merged(self, updates: Dict[str, Any]) -> "MCP":
        """
        Return a copy with a partial update applied.

        Keys may be wire keys (``alwaysAllow``) or attribute names
        (``always_allow``). ``transport`` replaces the transport variant
        wholesale; ``id`` never changes.
        """
        updates = dict(updates)
        transport = updates.pop("transport", None)
        data = self.to_dict()
        for key, value in updates.items():
            data[_WIRE_ALIASES.get(key, key)] = value
        data["id"] = self.id

        result = MCP.from_dict(data)
        if transport is not None:
            result.transport = transport
        return result

    def validate(self) -> None:
        """
        Check required fields for the record's transport type.

        Raises:
            ValidationError: If the record is incomplete
        """
        ok, error = validate_name(self.name)
        if not ok:
            raise ValidationError(error)

        if isinstance(self.transport, StdioTransport):
            if not self.transport.command or not self.transport.command.strip():
                raise ValidationError(f"MCP '{self.name}': command is required for stdio servers")
        else:
            if not self.transport.url or not self.transport.url.strip():
                raise ValidationError(
                    f"MCP '{self.name}': URL is required for {self.transport.type} servers"
                )
            ok, error = validate_string_map(self.transport.headers, "headers")
            if not ok:
                raise ValidationError(f"MCP '{self.name}': {error}")

        ok, error = validate_string_map(self.env, "env")
        if not ok:
            raise ValidationError(f"MCP '{self.name}': {error}")
