"""
Issue label normalization.

Canonicalizes free-text issue tags into stable lookup keys and display titles,
and derives the year-month period used for time bucketing.
"""

import re
from datetime import date, datetime
from typing import NewType, Optional

IssueKey = NewType("IssueKey", str)

SEPARATOR = "_"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WORD_START = re.compile(r"\b\w")


def normalize_key(tag) -> IssueKey:
    """
    Convert a free-text tag into its canonical IssueKey.

    Lower-cases, collapses every run of non [a-z0-9] characters into a single
    separator and trims leading/trailing separators. Never raises; None and
    empty input yield an empty key.

    Examples:
        "Login Bug!"   -> "login_bug"
        "  app--crash" -> "app_crash"
    """
    if tag is None:
        return IssueKey("")
    key = _NON_ALNUM.sub(SEPARATOR, str(tag).lower())
    return IssueKey(key.strip(SEPARATOR))


def display_title(tag) -> str:
    """
    Presentation form of a tag: separators become spaces, words capitalized.

    Not an inverse of normalize_key; only used for display.
    """
    if tag is None:
        return ""
    text = str(tag).replace(SEPARATOR, " ")
    return _WORD_START.sub(lambda m: m.group(0).upper(), text)


def parse_date(value) -> Optional[date]:
    """
    Parse a review date into a calendar date.

    Accepts date/datetime objects, "YYYY-MM-DD" strings and ISO-8601
    timestamps (a trailing "Z" is allowed). Returns None when the value
    cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def period_of(value) -> Optional[str]:
    """Year-month bucket ("YYYY-MM") for a date value, or None if unparseable."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


# Design Notes:
#
# 1. normalize_key is idempotent and is the only producer of IssueKeys.
#
# 2. period_of returns None rather than raising for unparseable input.
