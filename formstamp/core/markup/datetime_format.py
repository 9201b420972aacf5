"""
Formatting for date/time stamp annotations.

Format strings use the pattern letters the stamp dialog offers
(``yyyy``, ``MMMM``, ``MMM``, ``MM``, ``dd``, ``EEEE``, ``HH``, ``hh``,
``mm``, ``ss``, ``a``). Text inside single quotes is literal, with ``''``
standing for one quote; ``a`` only counts on its own, not inside a word.
Anything else is copied through unchanged.
"""
import logging
import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "MM/dd/yyyy HH:mm:ss"

# (format, label) pairs offered by the stamp configuration step
DATE_TIME_FORMATS = [
    ("MM/dd/yyyy", "MM/DD/YYYY"),
    ("dd/MM/yyyy", "DD/MM/YYYY"),
    ("yyyy-MM-dd", "YYYY-MM-DD"),
    ("MMM dd, yyyy", "MMM DD, YYYY"),
    ("MMMM dd, yyyy", "MMMM DD, YYYY"),
    ("HH:mm:ss", "HH:MM:SS"),
    ("hh:mm:ss a", "HH:MM:SS AM/PM"),
    ("MM/dd/yyyy HH:mm", "MM/DD/YYYY HH:MM"),
    ("MM/dd/yyyy HH:mm:ss", "MM/DD/YYYY HH:MM:SS"),
    ("yyyy-MM-dd HH:mm:ss", "YYYY-MM-DD HH:MM:SS"),
    ("MMM dd, yyyy hh:mm a", "MMM DD, YYYY HH:MM AM/PM"),
    ("EEEE, MMMM dd, yyyy", "Day, MMMM DD, YYYY"),
]

# (zone, label); None means local time
TIMEZONES = [
    (None, "Local Time"),
    ("UTC", "UTC"),
    ("America/New_York", "Eastern Time (ET)"),
    ("America/Chicago", "Central Time (CT)"),
    ("America/Denver", "Mountain Time (MT)"),
    ("America/Los_Angeles", "Pacific Time (PT)"),
    ("Europe/London", "Greenwich Mean Time (GMT)"),
    ("Europe/Paris", "Central European Time (CET)"),
    ("Asia/Tokyo", "Japan Standard Time (JST)"),
    ("Asia/Shanghai", "China Standard Time (CST)"),
    ("Australia/Sydney", "Australian Eastern Time (AET)"),
]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Quoted literals first, then longest tokens so "MMMM" wins over "MM"
_TOKEN_RE = re.compile(
    r"'(?:[^']|'')*'"
    r"|yyyy|MMMM|MMM|MM|dd|EEEE|HH|hh|mm|ss"
    r"|(?<![A-Za-z])a(?![A-Za-z])"
)


def _render_token(token: str, value: datetime) -> str:
    if token.startswith("'"):
        if token == "''":
            return "'"
        return token[1:-1].replace("''", "'")
    if token == "yyyy":
        return f"{value.year:04d}"
    if token == "MMMM":
        return MONTH_NAMES[value.month - 1]
    if token == "MMM":
        return MONTH_NAMES[value.month - 1][:3]
    if token == "MM":
        return f"{value.month:02d}"
    if token == "dd":
        return f"{value.day:02d}"
    if token == "EEEE":
        return DAY_NAMES[value.weekday()]
    if token == "HH":
        return f"{value.hour:02d}"
    if token == "hh":
        return f"{value.hour % 12 or 12:02d}"
    if token == "mm":
        return f"{value.minute:02d}"
    if token == "ss":
        return f"{value.second:02d}"
    return "PM" if value.hour >= 12 else "AM"


def localize(value: datetime, timezone: Optional[str]) -> datetime:
    """
    Express ``value`` in the given IANA zone.

    Naive datetimes are taken as local time. An unknown zone name leaves
    the value untouched.
    """
    if not timezone:
        return value
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using local time", timezone)
        return value
    return value.astimezone(zone)


def format_date_time(value: datetime, fmt: str = DEFAULT_FORMAT,
                     timezone: Optional[str] = None) -> str:
    """
    Format a datetime with a stamp pattern.

    Args:
        value: Moment to display
        fmt: Pattern string, e.g. ``"MMM dd, yyyy hh:mm a"``
        timezone: Optional IANA zone name

    Returns:
        The formatted text
    """
    moment = localize(value, timezone)
    return _TOKEN_RE.sub(lambda m: _render_token(m.group(0), moment), fmt or DEFAULT_FORMAT)
