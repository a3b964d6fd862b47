from __future__ import annotations

import pytest

from gadgify_gst.gst.errors import ValidationError
from gadgify_gst.gst.validator import is_valid_hsn, validate_hsn


@pytest.mark.parametrize("hsn", ["8517", "851762", "85176290", " 4901 "])
def test_valid_codes(hsn: str) -> None:
    assert is_valid_hsn(hsn)
    assert validate_hsn(hsn) == hsn.strip()


@pytest.mark.parametrize(
    "hsn",
    ["12", "123", "123456789", "abcdefgh", "85a7", "85.17", "", None, 8517, "٨٥١٧", "８５１７", "8517\n8517"],
)
def test_invalid_codes_raise(hsn) -> None:
    assert not is_valid_hsn(hsn)
    with pytest.raises(ValidationError):
        validate_hsn(hsn)


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="Invalid HSN code format"):
        validate_hsn("12")
