"""
Whole-Second Calendar Engine

The calendar primitives the microsecond core is built on. Every instant
handled here is a timezone-aware datetime truncated to whole seconds; the
sub-second part is owned by dtms.instant.Instant and never reaches this
module.

Arithmetic model:
    - years, months and days move the wall clock (dateutil.relativedelta),
      so "+1 month" on Jan 31 lands on the last day of February
    - hours, minutes and seconds are elapsed time, applied in UTC and
      converted back to the instant's zone

Differences are computed in UTC with relativedelta, which yields the same
year/month/day breakdown as a calendar subtraction of the two wall clocks
when both share a zone.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from ..errors import CalendarError

logger = logging.getLogger(__name__)

UTC = timezone.utc

_UTC_NAMES = ('UTC', 'Z', 'GMT', 'Etc/UTC')


def resolve_timezone(tz: Union[None, str, tzinfo] = None) -> tzinfo:
    """
    Resolve a timezone argument to a tzinfo.

    Args:
        tz: None (UTC), a tzinfo instance, or an IANA zone name

    Returns:
        tzinfo instance

    Raises:
        CalendarError: if the zone name is unknown
    """
    if tz is None:
        return UTC
    if isinstance(tz, tzinfo):
        return tz
    if tz in _UTC_NAMES:
        return UTC

    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise CalendarError(f"Unknown timezone: {tz!r}") from e


def whole_second(dt: datetime, tz: Union[None, str, tzinfo] = None) -> datetime:
    """Attach `tz` to a naive datetime and drop its sub-second part."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=resolve_timezone(tz))
    return dt.replace(microsecond=0)


def epoch_seconds(dt: datetime) -> int:
    """Whole seconds since the Unix epoch."""
    return calendar.timegm(dt.utctimetuple())


def shift_seconds(dt: datetime, seconds: int) -> datetime:
    """Move an instant by a signed number of elapsed seconds."""
    if not seconds:
        return dt
    moved = dt.astimezone(UTC) + timedelta(seconds=seconds)
    return moved.astimezone(dt.tzinfo)


@dataclass(frozen=True)
class CalendarOffset:
    """
    Signed calendar offset with whole-second granularity.

    Components may carry any sign; a negative offset moves backward.
    """
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def negated(self) -> "CalendarOffset":
        return CalendarOffset(
            -self.years, -self.months, -self.days,
            -self.hours, -self.minutes, -self.seconds,
        )

    def __add__(self, other: "CalendarOffset") -> "CalendarOffset":
        if not isinstance(other, CalendarOffset):
            return NotImplemented
        return CalendarOffset(
            self.years + other.years,
            self.months + other.months,
            self.days + other.days,
            self.hours + other.hours,
            self.minutes + other.minutes,
            self.seconds + other.seconds,
        )

    def is_zero(self) -> bool:
        return not any((self.years, self.months, self.days,
                        self.hours, self.minutes, self.seconds))


def apply_offset(dt: datetime, offset: CalendarOffset) -> datetime:
    """
    Add a calendar offset to a whole-second instant.

    Args:
        dt: aware datetime
        offset: signed calendar offset

    Returns:
        New aware datetime in the same zone
    """
    if offset.years or offset.months or offset.days:
        dt = dt + relativedelta(years=offset.years, months=offset.months, days=offset.days)
    elapsed = offset.hours * 3600 + offset.minutes * 60 + offset.seconds
    return shift_seconds(dt, elapsed)


def difference(start: datetime, end: datetime) -> Tuple[CalendarOffset, int, bool]:
    """
    Whole-second calendar difference from `start` to `end`.

    Returns:
        (breakdown, total_days, invert) where breakdown holds non-negative
        components and invert is True when `end` precedes `start`
    """
    a = start.astimezone(UTC).replace(microsecond=0)
    b = end.astimezone(UTC).replace(microsecond=0)
    invert = a > b
    earlier, later = (b, a) if invert else (a, b)

    rd = relativedelta(later, earlier)
    breakdown = CalendarOffset(
        years=rd.years, months=rd.months, days=rd.days,
        hours=rd.hours, minutes=rd.minutes, seconds=rd.seconds,
    )
    return breakdown, (later - earlier).days, invert


def now(tz: Optional[tzinfo] = None) -> datetime:
    """Current wall-clock time, with the platform's sub-second resolution."""
    return datetime.now(resolve_timezone(tz))
