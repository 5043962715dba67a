import pytz
from datetime import datetime

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")
TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_date(value):
    """Parse a ride's departure_date; ISO timestamps are cut down to the date part."""
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    candidates = [value, value[:10]] if len(value) > 10 else [value]
    for candidate in candidates:
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def parse_time(value):
    if not value or not isinstance(value, str):
        return None
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    return None


def departure_datetime(departure_date, departure_time, tz_name="UTC"):
    """
    Combine a ride's date and time into an aware datetime in ``tz_name``.

    Returns None when either part is missing or can't be parsed.
    """
    day = parse_date(departure_date)
    at = parse_time(departure_time)
    if day is None or at is None:
        return None
    tz = pytz.timezone(tz_name)
    return tz.localize(datetime.combine(day, at))


def format_date(value):
    """Short dd.mm form used in chat messages; unparseable values pass through."""
    day = parse_date(value)
    if day is None:
        return value or ""
    return day.strftime("%d.%m")


def format_schedule(departure_date, departure_time):
    if departure_date:
        return f"{format_date(departure_date)}, {departure_time or ''}".strip(", ")
    return departure_time or ""
