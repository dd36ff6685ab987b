"""Date/time normalization — pure business logic.

Everything the planner schedules sits on a quarter-hour grid, and every
date-picker string ("YYYY-MM-DDTHH:MM") is read and written from its local
calendar fields. Nothing here converts through UTC unless a timezone is
explicitly handed in for absolute-time arithmetic.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from weekplanner.config import settings

logger = logging.getLogger(__name__)

QUARTER_HOUR = 15
DEFAULT_DURATION_MINUTES = 30


def _configured_zone() -> tzinfo | None:
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return None


def local_now() -> datetime:
    """Naive wall-clock "now" in the configured zone (host local if unset)."""
    zone = _configured_zone()
    if zone is None:
        return datetime.now()
    return datetime.now(zone).replace(tzinfo=None)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local wall-clock time.

    Naive values are assumed to already be local and are returned unchanged.
    """
    if value.tzinfo is None:
        return value
    zone = _configured_zone()
    local = value.astimezone(zone) if zone is not None else value.astimezone()
    return local.replace(tzinfo=None)


def round_to_quarter_hour(value: datetime) -> datetime:
    """Round minutes half-up to 0/15/30/45, dropping seconds.

    A result of 60 minutes carries into the next hour (and day, if needed).
    Seconds do not take part in the rounding: 10:07:59 → 10:00.
    """
    # floor(m / 15 + 0.5) in integer math: 7 → 0, 8 → 15, 53 → 60
    rounded = (2 * value.minute + QUARTER_HOUR) // (2 * QUARTER_HOUR) * QUARTER_HOUR
    base = value.replace(minute=0, second=0, microsecond=0)
    return base + timedelta(minutes=rounded)


def format_local(value: datetime) -> str:
    """Render "YYYY-MM-DDTHH:MM" from the value's own calendar fields."""
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}"
    )


def parse_local(value: str, tz: tzinfo | None = None) -> datetime:
    """Parse "YYYY-MM-DDTHH:MM[:SS]" into a datetime built field by field.

    Args:
        value: Date-picker string.
        tz: Optional zone to attach. The wall-clock fields are kept as-is.

    Raises:
        ValueError: on malformed input.
    """
    text = value.strip()
    if "T" not in text:
        raise ValueError(f"Expected YYYY-MM-DDTHH:MM, got {value!r}")

    date_part, time_part = text.split("T", 1)
    try:
        year, month, day = (int(p) for p in date_part.split("-"))
        time_fields = [int(p) for p in time_part.split(":")]
    except ValueError as exc:
        raise ValueError(f"Invalid date/time string {value!r}") from exc

    if len(time_fields) not in (2, 3):
        raise ValueError(f"Invalid time part in {value!r}")
    hour, minute = time_fields[0], time_fields[1]
    second = time_fields[2] if len(time_fields) == 3 else 0

    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


def parse_local_rounded(value: str) -> datetime:
    """Parse a date-picker string and snap it to the quarter-hour grid."""
    return round_to_quarter_hour(parse_local(value))


def normalize_input(value: str) -> str:
    """Normalize a raw date-picker value onto the grid; "" stays ""."""
    if not value:
        return ""
    return format_local(parse_local_rounded(value))


def compute_end_time(
    start: str,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
    tz: tzinfo | None = None,
) -> str:
    """Return start + duration, rounded and formatted; "" for empty input.

    Without `tz` the addition is wall-clock arithmetic. With `tz` it is done
    in absolute time, so across a DST gap the result lands on the
    post-transition wall time (01:45 + 30 min on a spring-forward night in
    America/New_York gives 03:15, not the nonexistent 02:15).
    """
    if not start:
        return ""

    start_dt = parse_local(start, tz=tz)
    if tz is None:
        end_dt = start_dt + timedelta(minutes=duration_minutes)
    else:
        end_utc = start_dt.astimezone(timezone.utc) + timedelta(minutes=duration_minutes)
        end_dt = end_utc.astimezone(tz)
    return format_local(round_to_quarter_hour(end_dt))


def min_selectable_local(now: datetime | None = None) -> str:
    """Lower bound for date pickers: now, rounded to the quarter hour."""
    if now is None:
        now = local_now()
    return format_local(round_to_quarter_hour(now))


def parse_due_date(value: str | None) -> datetime | None:
    """Turn a "YYYY-MM-DD" due date into the end of that day (23:59:59)."""
    if not value:
        return None
    try:
        year, month, day = (int(p) for p in value.strip().split("-"))
    except ValueError as exc:
        raise ValueError(f"Invalid due date {value!r}") from exc
    return datetime(year, month, day, 23, 59, 59)


def start_of_week(value: datetime | date) -> datetime:
    """Monday 00:00 of the week containing `value`."""
    day = value.date() if isinstance(value, datetime) else value
    monday = day - timedelta(days=day.weekday())
    return datetime(monday.year, monday.month, monday.day)


def end_of_week(value: datetime | date) -> datetime:
    """Sunday 23:59:59.999999 of the week containing `value`."""
    return start_of_week(value) + timedelta(days=7) - timedelta(microseconds=1)


def week_days(start: datetime | date) -> list[date]:
    """The seven dates of the week beginning at `start`'s Monday."""
    monday = start_of_week(start).date()
    return [monday + timedelta(days=i) for i in range(7)]
