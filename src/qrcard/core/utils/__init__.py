"""
Core utilities for contact field normalization
"""

from .phone_utils import normalize_phone
from .url_utils import parse_absolute_url, sanitize_url, sanitize_socials
from .vcard_text import escape_vcard_text, unescape_vcard_text

__all__ = [
    "normalize_phone",
    "parse_absolute_url",
    "sanitize_url",
    "sanitize_socials",
    "escape_vcard_text",
    "unescape_vcard_text",
]
