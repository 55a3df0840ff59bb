"""
Numeris - Shared field checks for the pydantic models
"""

import re

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
DATE_FORMAT = "%Y-%m-%d"


def is_valid_email_format(email: str) -> bool:
    """Vérifie le format email basique"""
    if not email:
        return False
    return bool(re.match(EMAIL_PATTERN, email))


def require_text(value: str, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} cannot be empty")
    return value.strip()
