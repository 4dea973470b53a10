# services/time_utils.py
"""
Conversions between the 12-hour display strings stored on bookings
("6:30 pm") and 24-hour "HH:MM" values.

Malformed input never raises: callers get "" (or None from
parse_time_minutes) and treat it as "unknown".
"""

import re
from datetime import datetime

import pytz
from flask import current_app

IST = pytz.timezone('Asia/Kolkata')

MINUTES_PER_DAY = 24 * 60

_TWELVE_HOUR_RE = re.compile(r'^(\d{1,2}):(\d{2})(?::\d{2})?\s*(am|pm)$', re.IGNORECASE)
_TWENTY_FOUR_HOUR_RE = re.compile(r'^(\d{1,2}):(\d{2})(?::\d{2})?$')
_LENIENT_RE = re.compile(r'(\d{1,2}):(\d{2})\s*(am|pm)?', re.IGNORECASE)


def now_ist():
    """Current wall-clock time in the cafés' timezone, as a naive datetime."""
    return datetime.now(IST).replace(tzinfo=None)


def local_now(tz_name=None):
    """Naive wall-clock time in `tz_name`, falling back to IST."""
    if not tz_name:
        return now_ist()
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        return now_ist()
    return datetime.now(tz).replace(tzinfo=None)


def _hour_from_period(hours, period):
    period = period.lower()
    if period == 'pm' and hours != 12:
        return hours + 12
    if period == 'am' and hours == 12:
        return 0
    return hours


def to_24_hour(display):
    """Convert "6:30 pm" to "18:30". Returns "" if the input does not match."""
    if not display or not isinstance(display, str):
        return ""

    match = _TWELVE_HOUR_RE.match(display.strip())
    if not match:
        return ""

    hours, minutes, period = int(match.group(1)), int(match.group(2)), match.group(3)
    if not 1 <= hours <= 12 or minutes > 59:
        return ""

    return f"{_hour_from_period(hours, period):02d}:{minutes:02d}"


def format_12_hour(hours, minutes):
    period = 'pm' if hours >= 12 else 'am'
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def to_12_hour(value=None, now=None):
    """
    Convert "18:30" to "6:30 pm".

    With no value the current time is used ("start now"); pass `now` to
    make that deterministic.
    """
    if not value:
        current = now or now_ist()
        return format_12_hour(current.hour, current.minute)

    match = _TWENTY_FOUR_HOUR_RE.match(value.strip())
    if not match:
        return ""

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return ""
    return format_12_hour(hours, minutes)


def parse_time_minutes(text):
    """
    Minutes since midnight for a booking start time.

    The am/pm suffix is optional; without it the hour is taken as 24-hour.
    Returns None when no time can be found.
    """
    if not text or not isinstance(text, str):
        return None

    match = _LENIENT_RE.search(text)
    if not match:
        return None

    hours, minutes, period = int(match.group(1)), int(match.group(2)), match.group(3)
    if period:
        hours = _hour_from_period(hours, period)
    return hours * 60 + minutes


def minutes_to_12_hour(total_minutes):
    total_minutes %= MINUTES_PER_DAY
    return format_12_hour(total_minutes // 60, total_minutes % 60)


def end_time(start, duration_minutes):
    """End of a session as a 12-hour string, wrapping past midnight."""
    start_minutes = parse_time_minutes(start) or 0
    return minutes_to_12_hour(start_minutes + int(duration_minutes or 0))


def minutes_since_midnight(moment):
    return moment.hour * 60 + moment.minute


def cafe_now():
    """Wall-clock time in the configured CAFE_TIMEZONE."""
    return local_now(current_app.config.get('CAFE_TIMEZONE'))
