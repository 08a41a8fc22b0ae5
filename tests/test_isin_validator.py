"""Tests for ISIN normalisation and Luhn validation."""

import pytest

from xray_src.xray_utils.isin_validator import (
    is_placeholder_isin,
    is_valid_isin,
    normalize_isin,
)


class TestIsValidIsin:
    @pytest.mark.parametrize("isin", ["US0378331005", "DE0007164600", "IE00B4L5Y983", " us0378331005 "])
    def test_valid(self, isin):
        assert is_valid_isin(isin)

    @pytest.mark.parametrize(
        "isin",
        [
            "US0378331006",  # wrong check digit
            "US037833100",  # too short
            "1S0378331005",  # country code not letters
            "US03783310AB",  # check digit not a digit
            "Apple Inc",
            "",
            None,
        ],
    )
    def test_invalid(self, isin):
        assert not is_valid_isin(isin)


class TestHelpers:
    def test_normalize(self):
        assert normalize_isin("  ie00b4l5y983 ") == "IE00B4L5Y983"
        assert normalize_isin(None) == ""

    @pytest.mark.parametrize("value", ["N/A", "n/a", "-", "", None, "NULL"])
    def test_placeholders(self, value):
        assert is_placeholder_isin(value)

    def test_real_isin_is_not_placeholder(self):
        assert not is_placeholder_isin("US0378331005")
