from __future__ import annotations

import re
from urllib.parse import urlparse

from linkhub.errors import ValidationFailed

CATEGORIES = (
    "Projects",
    "Clubs",
    "Research",
    "Social Media",
    "Education",
    "Work",
    "Personal",
    "Other",
)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[a-z0-9-]{3,30}$")
USERNAME_RULES = (
    "Username must be 3-30 characters long and can only contain letters, "
    "numbers, and hyphens"
)


def normalize_username(raw: str | None) -> str:
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()


def is_valid_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.match(normalize_username(username)))


def text_field(value, label: str) -> str:
    """Stripped text of a form or JSON field; ``None`` counts as empty."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailed(f"{label} must be text")
    return value.strip()


def normalize_link_url(url: str | None) -> str:
    """Return ``url`` with an explicit scheme, or raise ``ValidationFailed``.

    A missing ``http://``/``https://`` prefix becomes ``https://``. The result
    must still parse as an absolute URL with a host.
    """
    candidate = text_field(url, "URL")
    if not candidate:
        raise ValidationFailed("URL is required")
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = "https://" + candidate

    if any(ch.isspace() for ch in candidate):
        raise ValidationFailed("Please enter a valid URL")
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port
    except ValueError:
        raise ValidationFailed("Please enter a valid URL") from None
    if not parsed.netloc or not hostname:
        raise ValidationFailed("Please enter a valid URL")
    return candidate


def clean_link_fields(title: str | None, url: str | None, category: str | None):
    clean_title = text_field(title, "Title")
    if not clean_title or not text_field(url, "URL"):
        raise ValidationFailed("Title and URL are required")
    clean_category = text_field(category, "Category")
    if clean_category and clean_category not in CATEGORIES:
        raise ValidationFailed(f"Unknown category: {clean_category}")
    return clean_title, normalize_link_url(url), clean_category
