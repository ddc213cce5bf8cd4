"""
Unit tests for issue label normalization and period bucketing.
"""

import pytest
from datetime import date, datetime
from reviewlens.utils.normalizer import display_title, normalize_key, parse_date, period_of


def test_normalize_key_basic():
    """Test lower-casing and separator collapsing."""
    assert normalize_key("Login Bug!") == "login_bug"
    assert normalize_key("  app--crash  ") == "app_crash"
    assert normalize_key("slow_loading") == "slow_loading"


def test_normalize_key_variants_collapse():
    """Different spellings of the same tag share one key."""
    variants = ["Login bug", "login_bug", "LOGIN-BUG", "__login   bug__"]
    assert {normalize_key(v) for v in variants} == {"login_bug"}


def test_normalize_key_is_total():
    """Empty, None and punctuation-only input yield an empty key."""
    assert normalize_key("") == ""
    assert normalize_key(None) == ""
    assert normalize_key("!!!") == ""
    assert normalize_key(42) == "42"


def test_display_title():
    """Test separators become spaces and words are capitalized."""
    assert display_title("login_bug") == "Login Bug"
    assert display_title("dark mode") == "Dark Mode"
    assert display_title("") == ""


def test_parse_date_formats():
    """Test supported date inputs."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("2024-03-01T10:00:00Z") == date(2024, 3, 1)
    assert parse_date(datetime(2024, 5, 2, 8, 30)) == date(2024, 5, 2)
    assert parse_date(date(2024, 5, 2)) == date(2024, 5, 2)


def test_parse_date_invalid():
    """Unparseable values return None instead of raising."""
    assert parse_date(None) is None
    assert parse_date("") is None
    assert parse_date("yesterday") is None
    assert parse_date("2024-13-45") is None


def test_period_of():
    """Test zero-padded year-month buckets."""
    assert period_of("2024-01-15") == "2024-01"
    assert period_of(date(2023, 12, 31)) == "2023-12"
    assert period_of("not a date") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
