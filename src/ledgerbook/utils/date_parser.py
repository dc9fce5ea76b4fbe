"""Date parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_YEAR = re.compile(r"^\d{4}$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")

PERIODS = ("this-month", "last-month", "this-year", "last-year")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - German dates (day first): "15.01.2024", "15.1.24"
    - Relative dates: "today", "yesterday", "end of last month",
      "end of last year"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "end of last month": today.replace(day=1) - timedelta(days=1),
        "end of last year": today.replace(month=1, day=1) - timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    try:
        # Dotted dates are always day first
        return date_parser.parse(text, dayfirst="." in text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get first and last day of a period.

    Args:
        period: "this-month", "last-month", "this-year", "last-year", a year
            ("2024") or a month ("2024-03")

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-month":
        end_date = today.replace(day=1) - timedelta(days=1)
        return end_date.replace(day=1), end_date
    if period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return start_date, start_date.replace(month=12, day=31)

    if _YEAR.match(period):
        year = int(period)
        return date(year, 1, 1), date(year, 12, 31)

    match = _YEAR_MONTH.match(period)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month in period '{period}'")
        start_date = date(year, month, 1)
        return start_date, start_date + relativedelta(months=1) - timedelta(days=1)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}, YYYY, YYYY-MM"
    )
