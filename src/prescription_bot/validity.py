"""
Validity end date computation.

The issue date uses the fixed ``DD.MM.YYYY`` layout and the expiration
period is free text whose first whitespace-delimited token is a day count,
e.g. ``"30 days"`` or ``"90 дней"``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from .errors import DateParseError, PeriodFormatError

DATE_FORMAT = "%d.%m.%Y"

_DATE_RE = re.compile(r"[0-9]{2}\.[0-9]{2}\.[0-9]{4}")
_DAYS_RE = re.compile(r"[+-]?[0-9]+")


def parse_issue_date(value: str) -> datetime:
    """Parse an issue date, requiring zero-padded day and month."""
    if not _DATE_RE.fullmatch(value):
        raise DateParseError(f"Issue date {value!r} does not match DD.MM.YYYY")
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError as e:
        raise DateParseError(f"Issue date {value!r} is not a calendar date") from e


def parse_period_days(exp_period: str) -> int:
    """Return the day count carried by the first token of the period string."""
    fields = exp_period.split()
    if not fields:
        raise PeriodFormatError("Expiration period is empty")
    token = fields[0]
    if not _DAYS_RE.fullmatch(token):
        raise PeriodFormatError(f"Expiration period {exp_period!r} has no leading day count")
    return int(token)


def format_date(value: datetime) -> str:
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


def calculate_validity(date: str, exp_period: str) -> str:
    """
    Compute the validity end date as ``date + exp_period days``.

    Raises DateParseError for a malformed issue date and PeriodFormatError
    when the period has no numeric leading token or the result falls
    outside the supported calendar range.
    """
    issued = parse_issue_date(date)
    days = parse_period_days(exp_period)
    try:
        valid_until = issued + timedelta(days=days)
    except OverflowError as e:
        raise PeriodFormatError(f"Expiration period of {days} days is out of range") from e
    return format_date(valid_until)
