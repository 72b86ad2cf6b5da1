import re
from typing import Any
from urllib.parse import urlsplit

XSS_PATTERNS = (
    re.compile(r"(?is)<\s*script[^>]*>.*?<\s*/\s*script\s*>"),
    re.compile(r"(?i)javascript:"),
    re.compile(r"(?i)on\w+\s*="),
)

MAX_TEXT_LENGTH = 2_000
MAX_LINK_LENGTH = 500


def sanitize_text(value: str) -> str:
    """Remove XSS-like content and normalize plain text fields."""
    cleaned = value.replace("\x00", "").strip()
    for pattern in XSS_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = cleaned.replace("<", "").replace(">", "")
    return cleaned.strip()


def sanitize_and_validate_text(value: str, *, field_name: str = "value") -> str:
    """Sanitize a free-text input and reject it when nothing meaningful remains.

    Example:
        ```python
        reason = sanitize_and_validate_text("Travel conflict", field_name="reason")
        ```
    """
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    cleaned = sanitize_text(value)
    if not cleaned:
        raise ValueError(f"{field_name} must not be empty")
    if len(cleaned) > MAX_TEXT_LENGTH:
        raise ValueError(f"{field_name} must be at most {MAX_TEXT_LENGTH} characters")
    return cleaned


def sanitize_and_validate_payload(payload: Any) -> Any:
    """Recursively sanitize all text values from nested payloads."""
    if isinstance(payload, dict):
        return {key: sanitize_and_validate_payload(value) for key, value in payload.items()}
    if isinstance(payload, list):
        return [sanitize_and_validate_payload(item) for item in payload]
    if isinstance(payload, tuple):
        return tuple(sanitize_and_validate_payload(item) for item in payload)
    if isinstance(payload, str):
        return sanitize_text(payload)
    return payload


def validate_link(value: str, *, field_name: str = "link") -> str:
    """Accept only absolute http(s) URLs such as meeting links and report URLs."""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    candidate = value.strip()
    if len(candidate) > MAX_LINK_LENGTH:
        raise ValueError(f"{field_name} must be at most {MAX_LINK_LENGTH} characters")
    parts = urlsplit(candidate)
    if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"{field_name} must be an absolute http(s) URL")
    if any(char.isspace() for char in candidate) or "<" in candidate or ">" in candidate:
        raise ValueError(f"{field_name} contains invalid characters")
    return candidate
