from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Optional[str]) -> str:
    """Basic ``local@domain.tld`` check; deliverability is not verified."""
    email = require_non_empty(value, "Email")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email
