"""
Duplicate detection for MCP records.

Scores a candidate against every existing record by name, stdio command
line, remote URL and fuzzy name similarity.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional, Sequence, Union

from models.mcp import MCP
from utils.constants import (
    ARGS_SIMILARITY_THRESHOLD,
    DUPLICATE_THRESHOLD,
    FUZZY_NAME_THRESHOLD,
    FUZZY_NAME_WEIGHT,
    MATCH_THRESHOLD,
    UNIQUE_NAME_MAX_ATTEMPTS,
)

logger = logging.getLogger(__name__)

MatchReason = Literal["name", "command", "url", "exact"]


@dataclass
class DuplicateMatch:
    existing: MCP
    reason: MatchReason
    similarity: float


@dataclass
class DuplicateCheckResult:
    is_duplicate: bool
    matches: List[DuplicateMatch] = field(default_factory=list)
    suggested_name: Optional[str] = None


def levenshtein_distance(first: str, second: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(first) < len(second):
        first, second = second, first

    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                current[j - 1] + 1,
                previous[j] + 1,
                previous[j - 1] + cost
            ))
        previous = current
    return previous[-1]


def string_similarity(first: str, second: str) -> float:
    """Normalized Levenshtein similarity in [0, 1]."""
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0
    max_length = max(len(first), len(second))
    return (max_length - levenshtein_distance(first, second)) / max_length


def jaccard_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Jaccard index of two argument lists taken as sets."""
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0
    set_a, set_b = set(first), set(second)
    return len(set_a & set_b) / len(set_a | set_b)


def compare_mcps(candidate: MCP, existing: MCP) -> DuplicateMatch:
    """Score how likely candidate describes the same server as existing."""
    candidate_name = candidate.name.lower()
    existing_name = existing.name.lower()

    if candidate_name == existing_name:
        return DuplicateMatch(existing, "name", 1.0)

    if candidate.transport_type == "stdio" and existing.transport_type == "stdio":
        if candidate.command == existing.command:
            if jaccard_similarity(candidate.args, existing.args) > ARGS_SIMILARITY_THRESHOLD:
                return DuplicateMatch(existing, "command", 0.9)

    remote = ("http", "sse")
    if candidate.transport_type in remote and existing.transport_type in remote:
        if candidate.url == existing.url:
            return DuplicateMatch(existing, "url", 0.9)

    name_similarity = string_similarity(candidate_name, existing_name)
    if name_similarity > FUZZY_NAME_THRESHOLD:
        return DuplicateMatch(existing, "name", name_similarity * FUZZY_NAME_WEIGHT)

    return DuplicateMatch(existing, "name", 0.0)


def check_for_duplicates(candidate: MCP, existing_mcps: Iterable[MCP]) -> DuplicateCheckResult:
    """
    Check whether candidate duplicates any existing record.

    Matches scoring above MATCH_THRESHOLD are kept, best first; the
    candidate is a duplicate when the best score exceeds DUPLICATE_THRESHOLD.

    Args:
        candidate: Record about to be added
        existing_mcps: Records already stored

    Returns:
        DuplicateCheckResult with a suggested unique name when duplicate
    """
    existing_mcps = list(existing_mcps)
    matches = []
    for existing in existing_mcps:
        match = compare_mcps(candidate, existing)
        if match.similarity > MATCH_THRESHOLD:
            matches.append(match)

    matches.sort(key=lambda match: match.similarity, reverse=True)

    is_duplicate = bool(matches) and matches[0].similarity > DUPLICATE_THRESHOLD
    suggested_name = generate_unique_name(candidate.name, existing_mcps) if is_duplicate else None

    if is_duplicate:
        logger.debug(
            "'%s' looks like a duplicate of '%s' (%s, %.2f)",
            candidate.name, matches[0].existing.name, matches[0].reason, matches[0].similarity
        )

    return DuplicateCheckResult(is_duplicate=is_duplicate, matches=matches, suggested_name=suggested_name)


def generate_unique_name(base_name: str, existing: Iterable[Union[str, MCP]]) -> str:
    """
    Return base_name, or base_name with the lowest free " (n)" suffix.

    Names compare case-insensitively. After UNIQUE_NAME_MAX_ATTEMPTS the
    current timestamp in milliseconds is used as the suffix.
    """
    existing_names = {
        (item.name if isinstance(item, MCP) else str(item)).lower()
        for item in existing
    }

    if base_name.lower() not in existing_names:
        return base_name

    for counter in range(1, UNIQUE_NAME_MAX_ATTEMPTS + 1):
        unique_name = f"{base_name} ({counter})"
        if unique_name.lower() not in existing_names:
            return unique_name

    logger.warning("generate_unique_name: hit safety limit for '%s', using timestamp", base_name)
    return f"{base_name} ({int(time.time() * 1000)})"


def format_duplicate_reason(match: DuplicateMatch) -> str:
    """Describe a match for display."""
    similarity = round(match.similarity * 100)
    name = match.existing.name

    if match.reason == "name":
        return f'Same name as "{name}" ({similarity}% match)'
    if match.reason == "command":
        return f'Same command as "{name}" ({similarity}% match)'
    if match.reason == "url":
        return f'Same URL as "{name}" ({similarity}% match)'
    if match.reason == "exact":
        return f'Exact duplicate of "{name}"'
    return f'Similar to "{name}" ({similarity}% match)'
