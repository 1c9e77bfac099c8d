"""Input sanitization utilities."""
import re
from typing import Optional


# Maximum length constraints for security
MAX_TOKEN_LENGTH = 32
MAX_NAME_LENGTH = 120
MAX_CATEGORY_LENGTH = 80
MAX_EMAIL_LENGTH = 254

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Strips HTML tags and normalizes whitespace. Entities are not escaped since
    clients escape output when rendering.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Catches malformed tags left over after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def normalize_token(token: str) -> str:
    """
    Normalize a redemption token for lookup.

    Tokens are case-insensitive: they are trimmed and upper-cased before any
    comparison, so " ab12cd " and "AB12CD" are the same token.

    Raises:
        ValueError: If the token is empty, too long or has invalid characters
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    normalized = token.strip().upper()

    if not normalized:
        raise ValueError("Please enter a token")

    if len(normalized) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    if not re.match(r'^[A-Z0-9-]+$', normalized):
        raise ValueError("Token can only contain letters, numbers, and hyphens")

    return normalized


def sanitize_person_name(name: str) -> str:
    """Sanitize a contestant, judge or audience member name."""
    sanitized = sanitize_text(name, max_length=MAX_NAME_LENGTH)

    if not sanitized:
        raise ValueError("Name cannot be empty")

    return sanitized


def sanitize_category(category: str) -> str:
    """Sanitize a reel category label."""
    sanitized = sanitize_text(category, max_length=MAX_CATEGORY_LENGTH)

    if not sanitized:
        raise ValueError("Category cannot be empty")

    return sanitized


def validate_email(email: str) -> str:
    """Validate and lower-case an email address."""
    if not isinstance(email, str):
        raise ValueError("Email must be a string")

    normalized = email.strip().lower()

    if len(normalized) > MAX_EMAIL_LENGTH or not _EMAIL_PATTERN.match(normalized):
        raise ValueError("Invalid email address")

    return normalized
