"""
Shared validators for input sanitization and security.
"""

import re
from urllib.parse import urlparse
from typing import Optional

# Hosts that should never appear in user-supplied image URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",
    "[::1]",
    "metadata.google",
]
BLOCKED_HOST_PREFIXES = tuple(f"172.{n}." for n in range(16, 32))

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

MAX_URL_LENGTH = 2048

PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")
DIGITS_PATTERN = re.compile(r"^[0-9]+$")


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and sanitize an image URL for restaurants and menu items.

    Returns:
        The validated URL or None when empty

    Raises:
        ValueError: If the URL is invalid or points at an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > MAX_URL_LENGTH:
        raise ValueError(f"URL too long (maximum {MAX_URL_LENGTH} characters)")

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no valid host")

    if any(blocked in host for blocked in BLOCKED_HOSTS) or host.startswith(BLOCKED_HOST_PREFIXES):
        raise ValueError("Internal URLs are not allowed")

    return url


def validate_phone(phone: str) -> str:
    """
    Normalize a phone number by stripping spaces and dashes.

    Raises:
        ValueError: If the result is not 7-15 digits with an optional leading +
    """
    normalized = re.sub(r"[\s\-()]", "", phone or "")
    if not PHONE_PATTERN.match(normalized):
        raise ValueError("Invalid phone number")
    return normalized


def validate_numeric_code(code: str, length: int) -> str:
    """
    Validate a one-time code made of exactly `length` digits.

    Raises:
        ValueError: If the code has the wrong length or non-digit characters
    """
    code = (code or "").strip()
    if len(code) != length or not DIGITS_PATTERN.match(code):
        raise ValueError(f"OTP must be exactly {length} digits")
    return code


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; escaping them keeps a user search
    term from turning into a pattern.
    """
    if not value:
        return value

    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def sanitize_search_term(term: str, max_length: int = 100) -> str:
    """Trim, truncate and strip control characters from a search term."""
    if not term:
        return ""

    term = term.strip()
    if len(term) > max_length:
        term = term[:max_length]

    return re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term)
