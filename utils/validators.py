"""Input validation utilities for MCP Manager."""

import re
from typing import Dict, Tuple
from urllib.parse import urlparse


def validate_name(name: str) -> Tuple[bool, str]:
    """
    Validate an MCP or profile display name.

    Args:
        name: Name to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(name, str) or name.strip() == "":
        return False, "Name cannot be empty"
    return True, ""


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Validate an HTTP/HTTPS URL.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or url.strip() == "":
        return False, "URL cannot be empty"

    try:
        result = urlparse(url)

        # Must have scheme and netloc
        if not result.scheme:
            return False, "URL must have a scheme (http:// or https://)"

        if not result.netloc:
            return False, "URL must have a host"

        # Only allow HTTP and HTTPS
        if result.scheme not in ["http", "https"]:
            return False, f"URL scheme must be http or https, got: {result.scheme}"

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL: {str(e)}"


def validate_command(command: str, args: list) -> Tuple[bool, str]:
    """
    Validate command and arguments to prevent injection attacks.

    Args:
        command: Command to execute
        args: List of arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not command or command.strip() == "":
        return False, "Command cannot be empty"

    dangerous_chars = [";", "&", "|", "`", "$", "(", ")", "<", ">", "\n", "\r"]
    for char in dangerous_chars:
        if char in command:
            return False, f"Command contains dangerous character: {char}"

    for arg in args:
        if not isinstance(arg, str):
            return False, f"Argument must be a string, got: {type(arg).__name__}"

        injection_patterns = [
            r";\s*\w",
            r"&&",
            r"\|\|",
            r"`",
            r"\$\(",
        ]

        for pattern in injection_patterns:
            if re.search(pattern, arg):
                return False, f"Argument contains potential injection pattern: {pattern}"

    return True, ""


def validate_string_map(value: object, field_name: str) -> Tuple[bool, str]:
    """
    Validate a string -> string mapping such as env or headers.

    Args:
        value: Mapping to validate
        field_name: Field name used in the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, dict):
        return False, f"{field_name} must be an object"
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            return False, f"{field_name} entries must map strings to strings"
    return True, ""


def coerce_string_map(value: object) -> Dict[str, str]:
    """Best-effort conversion of a wire mapping into str -> str."""
    if not isinstance(value, dict):
        return {}
    return {str(key): "" if item is None else str(item) for key, item in value.items()}
