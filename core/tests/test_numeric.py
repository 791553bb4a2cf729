"""Unit tests for lenient numeric parsing."""

import math

import pytest

from eda_engine.services.numeric import extract_number, parse_threshold


class TestExtractNumber:
    """Test extraction of the first number in a cell."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("42", 42.0),
            ("-3.5", -3.5),
            ("45kg", 45.0),
            ("approx. 12.75 units", 12.75),
            ("10-20", 10.0),
            ("$1,200", 1.0),
        ],
    )
    def test_extracts_first_number(self, value, expected):
        assert extract_number(value) == expected

    def test_numbers_pass_through(self):
        assert extract_number(7) == 7.0
        assert extract_number(2.5) == 2.5

    def test_booleans_are_not_numbers(self):
        assert extract_number(True) is None

    @pytest.mark.parametrize("value", [None, "", "n/a", "abc"])
    def test_no_number(self, value):
        assert extract_number(value) is None


class TestParseThreshold:
    """Test parsing of filter thresholds."""

    def test_leading_prefix(self):
        assert parse_threshold("10000") == 10000.0
        assert parse_threshold("10k") == 10.0
        assert parse_threshold(" 2.5e3") == 2500.0

    def test_not_a_number(self):
        assert parse_threshold("abc") is None
        assert parse_threshold("$100") is None
        assert parse_threshold(None) is None

    def test_numeric_values(self):
        assert parse_threshold(15) == 15.0
        assert parse_threshold(float("nan")) is None
        assert math.isinf(parse_threshold(float("inf")))
