"""
Import/export conversion between MCP records and external JSON dialects.

Import dialects, tried in order:
- Named server map: {"mcpServers": {"<name>": {...}}} (also "servers")
- Direct single record: {"name"?, "command" | "url", ...}
- List of stored MCP records, as written into profile export files

Export always produces a named server map with default-valued fields
omitted.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from core.errors import ImportFormatError
from models.mcp import MCP, RemoteTransport, StdioTransport
from models.profile import Profile
from utils.constants import ALT_SERVERS_KEYS, ERROR_MESSAGES, EXPORT_FORMATS, SERVERS_KEY
from utils.dates import format_timestamp
from utils.validators import coerce_string_map

logger = logging.getLogger(__name__)


@dataclass
class ParsedImport:
    """Records recovered from an import document plus per-entry failures."""

    mcps: List[MCP] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    dialect: str = ""


def parse_document(data: Union[str, bytes, dict, list]) -> Any:
    """
    Decode an import document.

    Raises:
        ImportFormatError: If data is not valid JSON
    """
    if isinstance(data, (dict, list)):
        return data
    try:
        return json.loads(data)
    except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
        raise ImportFormatError(ERROR_MESSAGES["INVALID_JSON"].format(error=e)) from e


def _string_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be a list")
    return [str(item) for item in value]


def entry_to_mcp(name: str, config: dict, source_label: str = "JSON") -> MCP:
    """
    Convert one named-server-map entry to an MCP record.

    A URL selects http (sse when ``type`` says so), a command selects stdio,
    and an entry with neither becomes stdio with an empty command.

    Raises:
        ValueError: If the entry is not an object or has malformed fields
    """
    if not isinstance(config, dict):
        raise ValueError("server configuration must be an object")

    if config.get("url"):
        transport = RemoteTransport(
            url=str(config["url"]),
            headers=coerce_string_map(config.get("headers")),
            type="sse" if config.get("type") == "sse" else "http"
        )
    else:
        transport = StdioTransport(
            command=str(config.get("command") or ""),
            args=_string_list(config.get("args"), "args")
        )

    return MCP(
        name=name,
        transport=transport,
        env=coerce_string_map(config.get("env")),
        always_allow=_string_list(config.get("alwaysAllow"), "alwaysAllow"),
        category="Imported",
        description=f"Imported from {source_label}",
        tags=["imported"],
        disabled=bool(config.get("disabled", False)),
        source="import"
    )


def _find_servers_map(document: dict) -> Optional[dict]:
    for key in (SERVERS_KEY,) + ALT_SERVERS_KEYS:
        servers = document.get(key)
        if isinstance(servers, dict):
            return servers
    return None


def parse_import(data: Union[str, bytes, dict, list]) -> ParsedImport:
    """
    Parse an import document into MCP records.

    Failures of individual named-server-map entries are collected in
    ``errors`` without aborting the batch.

    Raises:
        ImportFormatError: If the document is invalid JSON or matches no dialect
    """
    document = parse_document(data)
    result = ParsedImport()

    if isinstance(document, dict):
        servers = _find_servers_map(document)
        if servers is not None:
            result.dialect = "named-server-map"
            for name, config in servers.items():
                try:
                    result.mcps.append(entry_to_mcp(str(name), config))
                except (ValueError, TypeError) as e:
                    message = f"Failed to import {name}: {e}"
                    logger.warning(message)
                    result.errors.append(message)
            return result

        if any(key in document for key in ("url", "command", "name")):
            result.dialect = "direct"
            name = document.get("name") or "Imported MCP"
            try:
                result.mcps.append(entry_to_mcp(str(name), document))
            except (ValueError, TypeError) as e:
                raise ImportFormatError(f"Failed to import {name}: {e}") from e
            return result

    if isinstance(document, list):
        result.dialect = "record-list"
        for index, record in enumerate(document):
            if not isinstance(record, dict):
                result.errors.append(f"Failed to import entry {index}: not an object")
                continue
            try:
                result.mcps.append(MCP.from_dict(record))
            except (ValueError, TypeError) as e:
                message = f"Failed to import {record.get('name', index)}: {e}"
                logger.warning(message)
                result.errors.append(message)
        return result

    raise ImportFormatError(ERROR_MESSAGES["UNRECOGNIZED_FORMAT"])


def mcp_to_server_config(mcp: MCP, export_format: str = "universal") -> Dict[str, Any]:
    """
    Build the minimal named-server-map entry for one record.

    Only the active transport's fields are emitted, empty values are
    omitted, ``type`` appears only for sse, and ``disabled`` only for the
    claude format when the record is disabled.
    """
    config: Dict[str, Any] = {}

    if isinstance(mcp.transport, RemoteTransport):
        if mcp.transport.url:
            config["url"] = mcp.transport.url
        if mcp.transport.headers:
            config["headers"] = dict(mcp.transport.headers)
        if mcp.transport.type == "sse":
            config["type"] = "sse"
    else:
        if mcp.transport.command:
            config["command"] = mcp.transport.command
        if mcp.transport.args:
            config["args"] = list(mcp.transport.args)

    if mcp.env:
        config["env"] = dict(mcp.env)
    if mcp.always_allow:
        config["alwaysAllow"] = list(mcp.always_allow)

    if export_format == "claude" and mcp.disabled:
        config["disabled"] = True

    return config


def export_document(mcps: List[MCP], export_format: str = "universal") -> Dict[str, Any]:
    """
    Export records as a named server map.

    Raises:
        ValueError: If export_format is unknown
    """
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {export_format}")

    servers: Dict[str, Any] = {}
    for mcp in mcps:
        if mcp.name in servers:
            logger.warning(f"Duplicate name '{mcp.name}' in export; later entry wins")
        servers[mcp.name] = mcp_to_server_config(mcp, export_format)
    return {SERVERS_KEY: servers}


def export_profile_document(profile: Profile, mcps: List[MCP]) -> Dict[str, Any]:
    """Package a profile and its member records as one document."""
    return {
        "profile": {
            "name": profile.name,
            "description": profile.description,
            "createdAt": format_timestamp(profile.created_at)
        },
        "mcps": [mcp.to_dict() for mcp in mcps]
    }


def parse_profile_document(data: Union[str, bytes, dict]) -> Dict[str, Any]:
    """
    Validate a profile export document.

    Returns:
        Dict with ``profile`` (name, description, createdAt) and ``mcps``
        (raw record list)

    Raises:
        ImportFormatError: If either section is missing or malformed
    """
    document = parse_document(data)
    if not isinstance(document, dict):
        raise ImportFormatError(ERROR_MESSAGES["INVALID_PROFILE_FORMAT"])

    profile = document.get("profile")
    mcps = document.get("mcps")
    if not isinstance(profile, dict) or not isinstance(mcps, list):
        raise ImportFormatError(ERROR_MESSAGES["INVALID_PROFILE_FORMAT"])

    return {
        "profile": {
            "name": str(profile.get("name") or f"Imported Profile {datetime.now():%Y-%m-%d %H:%M}"),
            "description": profile.get("description") or "",
            "createdAt": profile.get("createdAt")
        },
        "mcps": mcps
    }
