"""
validator.py: HSN code format validation.

HSN (Harmonized System of Nomenclature) codes are 4, 6 or 8 digit numeric
classification codes. We accept any 4-8 ASCII digit string after trimming
whitespace; anything else is a caller error and raises ValidationError.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from gadgify_gst.gst.errors import ValidationError

logger = logging.getLogger(__name__)

HSN_PATTERN = re.compile(r"[0-9]{4,8}")


def normalize_hsn(value: Any) -> str:
    """Trim surrounding whitespace. Non-strings normalize to an empty string."""
    if not isinstance(value, str):
        return ""
    return value.strip()


def is_valid_hsn(value: Any) -> bool:
    """Return True if value is a 4–8 digit HSN code (after trimming)."""
    return bool(HSN_PATTERN.fullmatch(normalize_hsn(value)))


def validate_hsn(value: Any) -> str:
    """
    Return the normalized HSN code.

    Raises:
        ValidationError: If value is not a string of 4–8 digits.
    """
    normalized = normalize_hsn(value)
    if not HSN_PATTERN.fullmatch(normalized):
        logger.debug("Rejected HSN code %r", value)
        raise ValidationError(f"Invalid HSN code format: {value!r} (expected 4-8 digits)")
    return normalized
