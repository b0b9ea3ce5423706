import re
from datetime import date, datetime
from typing import Optional

import dateparser

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_date_string(date_str: Optional[str]) -> Optional[datetime]:
    """
    Parse a user-supplied date string into a timezone-aware local datetime.
    Handles:
      - YYYY-MM-DD (e.g., 2025-07-13), taken as local midnight
      - Natural language (e.g., 'tomorrow', 'next Friday 9am')
    Returns None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None
    text = date_str.strip()
    if _ISO_DATE.match(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d").astimezone()
        except ValueError:
            return None
    parsed = dateparser.parse(text, settings={"RETURN_AS_TIMEZONE_AWARE": True, "PREFER_DATES_FROM": "future"})
    if parsed is None:
        return None
    return parsed.astimezone()


def parse_day(date_str: Optional[str]) -> Optional[date]:
    parsed = parse_date_string(date_str)
    return parsed.date() if parsed else None


def format_due(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    value = value.astimezone()
    if (value.hour, value.minute, value.second) == (0, 0, 0):
        return value.strftime("%Y-%m-%d")
    return value.strftime("%Y-%m-%d %H:%M")


def progress_bar(progress: float, width: int = 20) -> str:
    filled = int(round(max(0.0, min(progress, 1.0)) * width))
    return "█" * filled + "░" * (width - filled)
