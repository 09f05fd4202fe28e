"""Tests for import/export normalization."""

import json

import pytest

from core.errors import ImportFormatError
from core.normalizer import (
    entry_to_mcp,
    export_document,
    export_profile_document,
    mcp_to_server_config,
    parse_import,
    parse_profile_document,
)
from models.mcp import MCP, RemoteTransport, StdioTransport
from models.profile import Profile


class TestParseImport:
    """Test dialect detection"""

    def test_named_server_map(self):
        """Test mcpServers documents"""
        parsed = parse_import({
            "mcpServers": {
                "github": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-github"],
                           "env": {"GITHUB_TOKEN": "t"}},
                "vercel": {"url": "https://mcp.vercel.com"},
                "linear": {"type": "sse", "url": "https://mcp.linear.app/sse"}
            }
        })

        assert parsed.dialect == "named-server-map"
        assert [m.name for m in parsed.mcps] == ["github", "vercel", "linear"]
        github, vercel, linear = parsed.mcps
        assert github.transport_type == "stdio"
        assert github.env == {"GITHUB_TOKEN": "t"}
        assert github.category == "Imported"
        assert github.tags == ["imported"]
        assert github.source == "import"
        assert vercel.transport_type == "http"
        assert linear.transport_type == "sse"

    def test_servers_key_accepted(self):
        """Test the alternative servers key"""
        parsed = parse_import('{"servers": {"fs": {"command": "node"}}}')
        assert parsed.mcps[0].command == "node"

    def test_entry_without_command_or_url(self):
        """Test empty entries become stdio with an empty command"""
        parsed = parse_import({"mcpServers": {"empty": {}}})
        assert parsed.mcps[0].transport_type == "stdio"
        assert parsed.mcps[0].command == ""

    def test_bad_entry_collected(self):
        """Test one malformed entry does not abort the batch"""
        parsed = parse_import({"mcpServers": {"bad": "oops", "good": {"command": "node"}}})
        assert [m.name for m in parsed.mcps] == ["good"]
        assert len(parsed.errors) == 1
        assert parsed.errors[0].startswith("Failed to import bad")

    def test_direct_record(self):
        """Test a single server object"""
        parsed = parse_import({"name": "solo", "url": "https://solo.example.com"})
        assert parsed.dialect == "direct"
        assert parsed.mcps[0].name == "solo"
        assert parsed.mcps[0].url == "https://solo.example.com"

    def test_direct_record_without_name(self):
        """Test a nameless single server gets a placeholder name"""
        parsed = parse_import({"command": "node"})
        assert parsed.mcps[0].name == "Imported MCP"

    def test_record_list(self):
        """Test a list of stored records"""
        record = MCP(name="fs", transport=StdioTransport("npx"), category="File Management").to_dict()
        parsed = parse_import([record, "junk"])
        assert parsed.dialect == "record-list"
        assert parsed.mcps[0].category == "File Management"
        assert len(parsed.errors) == 1

    def test_invalid_json(self):
        """Test unparseable text"""
        with pytest.raises(ImportFormatError, match="Invalid JSON"):
            parse_import("{nope")

    @pytest.mark.parametrize("document", [{"foo": "bar"}, 42, "\"text\""])
    def test_unrecognized(self, document):
        """Test documents matching no dialect"""
        with pytest.raises(ImportFormatError, match="Unrecognized"):
            parse_import(json.dumps(document) if not isinstance(document, str) else document)


class TestEntryToMcp:
    """Test single entry conversion"""

    def test_non_object_rejected(self):
        """Test entries must be objects"""
        with pytest.raises(ValueError):
            entry_to_mcp("x", ["not", "a", "dict"])

    def test_args_must_be_list(self):
        """Test malformed args"""
        with pytest.raises(ValueError, match="args"):
            entry_to_mcp("x", {"command": "node", "args": "one two"})

    def test_disabled_flag_kept(self):
        """Test claude-style disabled entries"""
        assert entry_to_mcp("x", {"command": "node", "disabled": True}).disabled is True


class TestExport:
    """Test named server map output"""

    def test_scenario_vercel_minimal(self):
        """Test a bare http record exports only its URL"""
        mcp = MCP(name="vercel", transport=RemoteTransport(url="https://mcp.vercel.com"))
        assert export_document([mcp]) == {"mcpServers": {"vercel": {"url": "https://mcp.vercel.com"}}}

    def test_sse_type_emitted(self):
        """Test sse records carry their type"""
        mcp = MCP(name="linear", transport=RemoteTransport(url="https://mcp.linear.app/sse", type="sse"))
        assert mcp_to_server_config(mcp) == {"url": "https://mcp.linear.app/sse", "type": "sse"}

    def test_stdio_fields(self):
        """Test stdio records emit command, args, env and alwaysAllow"""
        mcp = MCP(
            name="github",
            transport=StdioTransport("npx", ["-y", "pkg"]),
            env={"GITHUB_TOKEN": "t"},
            always_allow=["search"]
        )
        assert mcp_to_server_config(mcp) == {
            "command": "npx",
            "args": ["-y", "pkg"],
            "env": {"GITHUB_TOKEN": "t"},
            "alwaysAllow": ["search"]
        }

    def test_disabled_only_for_claude(self):
        """Test disabled is written only in the claude format"""
        mcp = MCP(name="off", transport=StdioTransport("node"), disabled=True)
        assert mcp_to_server_config(mcp, "claude")["disabled"] is True
        assert "disabled" not in mcp_to_server_config(mcp, "gemini")
        assert "disabled" not in mcp_to_server_config(mcp, "universal")

    def test_unknown_format(self):
        """Test unsupported formats raise"""
        with pytest.raises(ValueError):
            export_document([], "yaml")

    def test_round_trip(self):
        """Test export then import preserves transport, env and alwaysAllow"""
        mcps = [
            MCP(name="github", transport=StdioTransport("npx", ["-y", "pkg"]), env={"A": "1"}, always_allow=["x"]),
            MCP(name="notion", transport=RemoteTransport(url="https://mcp.notion.com", headers={"Authorization": "B"})),
            MCP(name="linear", transport=RemoteTransport(url="https://mcp.linear.app/sse", type="sse")),
        ]

        parsed = parse_import(json.dumps(export_document(mcps)))

        assert len(parsed.mcps) == len(mcps)
        for original, imported in zip(mcps, parsed.mcps):
            assert imported.name == original.name
            assert imported.transport == original.transport
            assert imported.env == original.env
            assert imported.always_allow == original.always_allow


class TestProfileDocuments:
    """Test profile export/import documents"""

    def test_export_profile_document(self):
        """Test document layout"""
        mcp = MCP(name="fs", transport=StdioTransport("npx"))
        profile = Profile(name="Dev", mcp_ids=[mcp.id], description="dev tools")

        document = export_profile_document(profile, [mcp])

        assert document["profile"]["name"] == "Dev"
        assert document["profile"]["description"] == "dev tools"
        assert document["profile"]["createdAt"]
        assert document["mcps"][0]["id"] == mcp.id

    def test_parse_profile_document(self):
        """Test a valid document parses"""
        parsed = parse_profile_document('{"profile": {"name": "Dev"}, "mcps": []}')
        assert parsed["profile"]["name"] == "Dev"
        assert parsed["profile"]["description"] == ""
        assert parsed["mcps"] == []

    def test_missing_name_gets_placeholder(self):
        """Test nameless profiles are named by import time"""
        parsed = parse_profile_document({"profile": {}, "mcps": []})
        assert parsed["profile"]["name"].startswith("Imported Profile")

    @pytest.mark.parametrize("document", [
        {"mcps": []},
        {"profile": {"name": "x"}},
        {"profile": "x", "mcps": []},
        {"profile": {"name": "x"}, "mcps": {}},
        [],
    ])
    def test_invalid_documents(self, document):
        """Test documents missing a section"""
        with pytest.raises(ImportFormatError, match="Invalid profile format"):
            parse_profile_document(document)
