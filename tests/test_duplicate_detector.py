"""Tests for duplicate detection."""

from unittest.mock import patch

import pytest

from core.duplicate_detector import (
    DuplicateMatch,
    check_for_duplicates,
    compare_mcps,
    format_duplicate_reason,
    generate_unique_name,
    jaccard_similarity,
    levenshtein_distance,
    string_similarity,
)
from models.mcp import MCP, RemoteTransport, StdioTransport


def stdio(name, command="npx", args=None):
    return MCP(name=name, transport=StdioTransport(command, args or []))


def remote(name, url, kind="http"):
    return MCP(name=name, transport=RemoteTransport(url=url, type=kind))


class TestSimilarity:
    """Test string and set similarity helpers"""

    def test_levenshtein(self):
        """Test edit distances"""
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_string_similarity(self):
        """Test normalized similarity"""
        assert string_similarity("abc", "abc") == 1.0
        assert string_similarity("", "abc") == 0.0
        assert string_similarity("abcd", "abcx") == pytest.approx(0.75)

    def test_jaccard(self):
        """Test Jaccard edge cases"""
        assert jaccard_similarity([], []) == 1.0
        assert jaccard_similarity(["a"], []) == 0.0
        assert jaccard_similarity(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)


class TestCompareMcps:
    """Test pairwise scoring"""

    def test_same_name_case_insensitive(self):
        """Test identical names score 1.0"""
        match = compare_mcps(stdio("GitHub"), stdio("github", command="other"))
        assert match.reason == "name"
        assert match.similarity == 1.0

    def test_same_command_and_args(self):
        """Test identical stdio command lines score 0.9"""
        match = compare_mcps(stdio("a", args=["-y", "pkg"]), stdio("b", args=["-y", "pkg"]))
        assert match.reason == "command"
        assert match.similarity == 0.9

    def test_same_command_different_args(self):
        """Test args overlap at or below 0.8 does not count"""
        match = compare_mcps(stdio("alpha", args=["-y", "one"]), stdio("omega", args=["-y", "two"]))
        assert match.similarity == 0.0

    def test_same_url_across_remote_types(self):
        """Test http and sse with the same URL score 0.9"""
        match = compare_mcps(remote("a", "https://x.example.com"), remote("b", "https://x.example.com", "sse"))
        assert match.reason == "url"
        assert match.similarity == 0.9

    def test_stdio_never_matches_remote_by_transport(self):
        """Test transports of different families do not compare"""
        match = compare_mcps(stdio("first"), remote("second", "https://x.example.com"))
        assert match.similarity == 0.0

    def test_fuzzy_name(self):
        """Test similar names score similarity * 0.6"""
        match = compare_mcps(stdio("filesystem", "a"), stdio("filesystems", "b"))
        assert match.similarity == pytest.approx(string_similarity("filesystem", "filesystems") * 0.6)


class TestCheckForDuplicates:
    """Test duplicate classification"""

    def test_no_existing(self):
        """Test empty collection"""
        result = check_for_duplicates(stdio("new"), [])
        assert result.is_duplicate is False
        assert result.suggested_name is None

    def test_name_duplicate_gets_suggestion(self):
        """Test exact name collision is a duplicate with a unique suggestion"""
        result = check_for_duplicates(stdio("github"), [stdio("github", command="node")])
        assert result.is_duplicate is True
        assert result.suggested_name == "github (1)"

    def test_fuzzy_match_is_never_duplicate(self):
        """Test fuzzy matches top out at 0.6 and stay below the duplicate threshold"""
        result = check_for_duplicates(stdio("filesystem", "a"), [stdio("filesystems", "b")])
        assert result.matches
        assert result.is_duplicate is False

    def test_matches_sorted_best_first(self):
        """Test ordering of matches"""
        existing = [stdio("filesystems", "b"), stdio("filesystem", "c")]
        result = check_for_duplicates(stdio("filesystem", "a"), existing)
        assert [m.similarity for m in result.matches] == sorted(
            (m.similarity for m in result.matches), reverse=True
        )
        assert result.matches[0].existing.name == "filesystem"

    def test_threshold_boundary(self):
        """Test a score equal to the duplicate threshold is not a duplicate"""
        exact = DuplicateMatch(stdio("x"), "name", 0.7)
        with patch("core.duplicate_detector.compare_mcps", return_value=exact):
            assert check_for_duplicates(stdio("y"), [stdio("x")]).is_duplicate is False


class TestGenerateUniqueName:
    """Test unique name generation"""

    def test_free_name_unchanged(self):
        """Test unused names are returned as-is"""
        assert generate_unique_name("fs", ["github"]) == "fs"

    def test_lowest_free_suffix(self):
        """Test the lowest free counter is used"""
        assert generate_unique_name("fs", ["fs", "fs (1)", "FS (2)"]) == "fs (3)"

    def test_accepts_records(self):
        """Test existing names may be given as MCP records"""
        assert generate_unique_name("fs", [stdio("fs")]) == "fs (1)"

    def test_timestamp_fallback(self):
        """Test the safety limit falls back to a timestamp suffix"""
        with patch("core.duplicate_detector.UNIQUE_NAME_MAX_ATTEMPTS", 2):
            with patch("core.duplicate_detector.time.time", return_value=1700000000.0):
                name = generate_unique_name("fs", ["fs", "fs (1)", "fs (2)"])
        assert name == "fs (1700000000000)"


class TestFormatReason:
    """Test human-readable match reasons"""

    def test_reasons(self):
        """Test each reason renders"""
        existing = stdio("github")
        assert format_duplicate_reason(DuplicateMatch(existing, "name", 1.0)) == 'Same name as "github" (100% match)'
        assert "Same command" in format_duplicate_reason(DuplicateMatch(existing, "command", 0.9))
        assert "Same URL" in format_duplicate_reason(DuplicateMatch(existing, "url", 0.9))
        assert format_duplicate_reason(DuplicateMatch(existing, "exact", 1.0)) == 'Exact duplicate of "github"'
