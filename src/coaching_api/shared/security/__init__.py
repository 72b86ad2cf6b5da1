from coaching_api.shared.security.input_sanitizer import (
    sanitize_and_validate_payload,
    sanitize_and_validate_text,
    validate_link,
)

__all__ = [
    "sanitize_and_validate_payload",
    "sanitize_and_validate_text",
    "validate_link",
]
