import re
from typing import Optional

import bleach

from .errors import ValidationError

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_input(value: Optional[str]) -> str:
    """Clean a user-supplied display label (list name, product name) for storage.

    - Strips HTML tags using bleach.clean(..., strip=True)
    - Drops NUL and other control characters
    - Collapses runs of whitespace and trims the ends
    """
    if value is None:
        return ""
    val = _CONTROL_CHARS.sub(" ", value)
    val = bleach.clean(val, tags=[], strip=True)
    # labels are stored as plain text, not HTML
    val = val.replace("&amp;", "&")
    return _WHITESPACE.sub(" ", val).strip()


def require_label(value: Optional[str], field: str) -> str:
    cleaned = sanitize_input(value)
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned


def require_sku(value: Optional[str]) -> str:
    """Validate a SKU without rewriting it; SKUs are matched byte for byte."""
    if not value or not value.strip():
        raise ValidationError("sku must not be empty")
    if value != value.strip() or _CONTROL_CHARS.search(value):
        raise ValidationError("sku must not contain surrounding whitespace or control characters")
    return value
