"""Week schedule helpers.

Maps a week start date to the metadata stored on a weekly menu:

  - week_number_for_date -> which template of the rotation applies (1..N)
  - order_deadline       -> cutoff after which orders for the week are refused
  - delivery_date        -> the day the week's boxes go out

Everything here is a pure function of its arguments. Dates are plain
``datetime.date`` values and all offsets are computed with ``timedelta`` so
month and year boundaries roll over correctly. Day boundaries are taken in the
business time zone (``MENU_TIMEZONE``, UTC unless configured).
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from menu.domain.errors import InvalidInput
from menu.utilities import config
from menu.utilities.constants import ORDER_DEADLINE_TIME

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
ROTATION_MODES = ("day_of_year", "epoch")

DateLike = Union[str, date, datetime]


class RotationPolicy:
    """How a calendar date maps onto the fixed template rotation.

    mode="day_of_year": weeks are counted from January 1st (days 1-7 are week 1,
        day 8 opens week 2) and the rotation restarts every year.
    mode="epoch": weeks are counted continuously from ``epoch``; the epoch date
        itself is slot 1.
    """

    def __init__(self, length: int = 4, mode: str = "day_of_year", epoch: date = date(2025, 1, 5)):
        if not isinstance(length, int) or length < 1:
            raise InvalidInput(f"Rotation length must be a positive integer, got {length!r}")
        if mode not in ROTATION_MODES:
            raise InvalidInput(f"Unknown rotation mode {mode!r} (expected one of {', '.join(ROTATION_MODES)})")
        self.length = length
        self.mode = mode
        self.epoch = parse_week_start(epoch)

    def __repr__(self) -> str:
        return f"RotationPolicy(length={self.length}, mode={self.mode!r}, epoch={self.epoch.isoformat()})"

    @classmethod
    def from_config(cls) -> "RotationPolicy":
        return cls(config.ROTATION_LENGTH, config.ROTATION_MODE, config.ROTATION_EPOCH)

    def slot_for(self, day: date) -> int:
        if self.mode == "epoch":
            return (day - self.epoch).days // 7 % self.length + 1
        day_of_year = day.timetuple().tm_yday
        week = math.ceil(day_of_year / 7)
        return (week - 1) % self.length + 1


def parse_week_start(value: Any) -> date:
    """Return ``value`` as a date or raise InvalidInput.

    Accepts a date, a datetime (its date part) or a strict YYYY-MM-DD string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Expected a YYYY-MM-DD date, got {type(value).__name__}")
    text = value.strip()
    if not DATE_PATTERN.match(text):
        raise InvalidInput(f"Invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise InvalidInput(f"Invalid date {value!r}: {e}") from e


def business_timezone(tz: Union[None, str, tzinfo] = None) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = tz or config.MENU_TIMEZONE
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInput(f"Unknown time zone {name!r}") from e


def today(tz: Union[None, str, tzinfo] = None) -> date:
    """Current calendar date in the business time zone."""
    return datetime.now(business_timezone(tz)).date()


def week_number_for_date(value: DateLike, policy: Optional[RotationPolicy] = None) -> int:
    day = parse_week_start(value)
    return (policy or RotationPolicy.from_config()).slot_for(day)


def template_for_week(value: DateLike, template_ids: Sequence[str],
                      policy: Optional[RotationPolicy] = None) -> str:
    """Pick the template id for the week of ``value`` from a full rotation."""
    policy = policy or RotationPolicy.from_config()
    if len(template_ids) != policy.length:
        raise InvalidInput(
            f"Rotation needs exactly {policy.length} templates, got {len(template_ids)}"
        )
    return template_ids[week_number_for_date(value, policy) - 1]


def week_start_for_date(value: DateLike, start_weekday: Optional[int] = None) -> date:
    """Start of the menu week containing ``value`` (Python weekday numbering)."""
    day = parse_week_start(value)
    weekday = config.WEEK_START_WEEKDAY if start_weekday is None else start_weekday
    return day - timedelta(days=(day.weekday() - weekday) % 7)


def order_deadline(week_start: DateLike, tz: Union[None, str, tzinfo] = None) -> datetime:
    """Cutoff for orders: three days after the week start at 23:59:59.999 local time."""
    start = parse_week_start(week_start)
    day = start + timedelta(days=config.ORDER_DEADLINE_OFFSET_DAYS)
    return datetime.combine(day, ORDER_DEADLINE_TIME, tzinfo=business_timezone(tz))


def delivery_date(week_start: DateLike) -> date:
    start = parse_week_start(week_start)
    return start + timedelta(days=config.DELIVERY_OFFSET_DAYS)


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2025-01-08T23:59:59.999Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    utc = dt.astimezone(timezone.utc)
    return utc.strftime('%Y-%m-%dT%H:%M:%S') + f".{utc.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Inverse of format_timestamp; naive values are read as UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (AttributeError, ValueError) as e:
        raise InvalidInput(f"Invalid timestamp {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_past_deadline(week_start: DateLike, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > order_deadline(week_start)


def upcoming_week_starts(count: int = 4, from_date: Optional[DateLike] = None,
                         start_weekday: Optional[int] = None) -> List[date]:
    """The next ``count`` week starts on or after ``from_date`` (today by default)."""
    if count < 0:
        raise InvalidInput("count must not be negative")
    origin = parse_week_start(from_date) if from_date is not None else today()
    weekday = config.WEEK_START_WEEKDAY if start_weekday is None else start_weekday
    first = origin + timedelta(days=(weekday - origin.weekday()) % 7)
    return [first + timedelta(weeks=i) for i in range(count)]


def week_schedule(week_start: DateLike, policy: Optional[RotationPolicy] = None) -> Dict[str, Any]:
    """Schedule metadata for a week, as stored on a weekly menu."""
    start = parse_week_start(week_start)
    return {
        "week_start_date": start.isoformat(),
        "week_number": week_number_for_date(start, policy),
        "order_deadline": format_timestamp(order_deadline(start)),
        "delivery_date": delivery_date(start).isoformat(),
    }


__all__ = [
    'RotationPolicy', 'parse_week_start', 'business_timezone', 'today',
    'week_number_for_date', 'template_for_week', 'week_start_for_date',
    'order_deadline', 'delivery_date', 'format_timestamp', 'parse_timestamp',
    'is_past_deadline', 'upcoming_week_starts', 'week_schedule',
]
