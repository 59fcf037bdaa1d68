"""Date parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_DAYS_AGO = re.compile(r"^(\d+)\s+days?\s+ago$")


def parse_date(date_str: str, dayfirst: bool = False) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Bank statement dates: "15-01-2024", "15/01/2024" (day first)
    - Relative dates: "today", "yesterday", "3 days ago",
      "start of month", "start of year"

    Args:
        date_str: Date string
        dayfirst: Prefer day-first interpretation for ambiguous dates

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
        "start of month": today.replace(day=1),
        "start of year": today.replace(month=1, day=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    match = _DAYS_AGO.match(text)
    if match:
        return today - timedelta(days=int(match.group(1)))

    # dd-mm-yyyy and dd/mm/yyyy are always day first
    if re.match(r"^\d{1,2}[-/]\d{1,2}[-/]\d{4}$", text):
        dayfirst = True

    try:
        return date_parser.parse(text, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a reporting period.

    Args:
        period: this-month, last-month, this-quarter, this-year or last-year

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return today.replace(day=1), today
    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "this-quarter":
        first_month = 3 * ((today.month - 1) // 3) + 1
        return today.replace(month=first_month, day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-year":
        start = today.replace(month=1, day=1) - relativedelta(years=1)
        return start, today.replace(month=1, day=1) - timedelta(days=1)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: "
        "this-month, last-month, this-quarter, this-year, last-year"
    )
