from datetime import date, datetime, timedelta
from typing import List


def monday_of(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


def shift_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def list_week_dates(week_start: date) -> List[date]:
    """The seven consecutive calendar days starting at ``week_start``."""
    return [shift_days(week_start, i) for i in range(7)]


def is_date_in_range(d: date, start: date, end: date) -> bool:
    return start <= d <= end


def now_minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def minutes_to_time_string(minutes: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_string_to_minutes(value: str) -> int:
    """
    Parse ``HH:MM`` into minutes since midnight.

    Lenient like a form input: a missing or non-numeric part counts as zero,
    so ``"9"`` is 540 and ``""`` is 0.
    """
    parts = (value or "").split(":")

    def to_int(part: str) -> int:
        part = part.strip()
        return int(part) if part.isdigit() else 0

    hours = to_int(parts[0]) if parts else 0
    mins = to_int(parts[1]) if len(parts) > 1 else 0
    return hours * 60 + mins


def human_duration(minutes: int) -> str:
    """``90`` -> ``"1h 30m"``, ``120`` -> ``"2h"``, ``45`` -> ``"45m"``."""
    h, m = divmod(minutes, 60)
    if h and m:
        return f"{h}h {m}m"
    if h:
        return f"{h}h"
    return f"{m}m"


def format_week_range(week_start: date) -> str:
    end = shift_days(week_start, 6)
    if week_start.month == end.month:
        return f"{week_start:%b} {week_start.day}-{end.day}, {week_start.year}"
    return f"{week_start:%b} {week_start.day} - {end:%b} {end.day}, {week_start.year}"
