"""
Microsecond-Precision Instants

An Instant pairs a whole-second calendar instant (an aware datetime from
the dtms.calendar engine, microsecond always 0) with a microsecond
fraction in [0, 999999]. Calendar work is delegated to the engine; this
module owns everything below one second:

    - carry/borrow between the fraction and the whole seconds
    - interval arithmetic that keeps the microsecond component
    - a trailing "+N micro" clause in relative-offset text
    - signed differences accurate to the microsecond
    - the 'u' and 'v' tokens when rendering

Arithmetic is done on integer microseconds, never on float seconds.

Usage:
    t = Instant('2015-08-08 10:10:10.123456')
    t.modify('+10 min +10 seconds +123456 micro')
    t.format('U.u')                      # '1439029220.246912'

    gap = Instant('2015-08-08 10:10:05.654321').diff(t)
    gap.format('%RPT%iM%sS')             # '+PT10M14.592591S'
"""

import functools
import logging
import re
from datetime import datetime, timedelta, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Union

from .calendar.engine import (
    apply_offset,
    difference,
    epoch_seconds,
    now as calendar_now,
    resolve_timezone,
    shift_seconds,
    whole_second,
)
from .calendar.formatting import iter_template, parse_iso, parse_with_format, render
from .calendar.relative import apply_relative, parse_relative
from .errors import InvalidArgument
from .interval import MICROSECONDS_PER_SECOND, Interval

logger = logging.getLogger(__name__)

MICROSECOND_CLAUSE = re.compile(r'(\+|-)([0-9]+)\s?(?:microseconds|microsecond|micro|mic)$')

# Handed to the calendar engine when only a microsecond clause was given
NEUTRAL_OFFSET = '0 seconds'

MICROSECOND_TOKEN = 'u'
MILLISECOND_TOKEN = 'v'

TimezoneArg = Union[None, str, tzinfo]


@functools.total_ordering
class Instant:
    """
    Calendar instant with microsecond precision.

    Instants are mutable: add(), sub(), modify(), add_microseconds(),
    sub_microseconds() and set_microseconds() change the instance in
    place and return it. Use copy() for an independent value.

    Args:
        time: 'now' or ISO 8601 text, optionally with fractional seconds
        tz: zone for naive text (name or tzinfo, default UTC)
    """

    ISO8601 = 'Y-m-d\\TH:i:s.u\\Z'
    ISO8601_OFFSET = 'Y-m-d\\TH:i:s.uP'

    __hash__ = None

    def __init__(self, time: str = 'now', tz: TimezoneArg = None):
        zone = resolve_timezone(tz)
        dt = calendar_now(zone) if time == 'now' else parse_iso(time, zone)
        self._base = whole_second(dt)
        self.microseconds = dt.microsecond

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def _from_parts(cls, base: datetime, microseconds: int) -> "Instant":
        instant = cls.__new__(cls)
        instant._base = base
        instant.microseconds = microseconds
        return instant

    @classmethod
    def now(cls, tz: TimezoneArg = None) -> "Instant":
        """Current time including the platform's sub-second resolution."""
        return cls('now', tz)

    @classmethod
    def from_datetime(cls, dt: datetime, tz: TimezoneArg = None) -> "Instant":
        """Build an Instant from a datetime, keeping its microseconds."""
        return cls._from_parts(whole_second(dt, tz), dt.microsecond)

    @classmethod
    def parse(cls, text: str, template: str = ISO8601, tz: TimezoneArg = None) -> "Instant":
        """
        Parse text with a format template.

        Args:
            text: text such as '2015-08-08T10:10:10.123456Z'
            template: format template (default ISO8601)
            tz: zone used when the text carries none (default UTC)

        Raises:
            CalendarError: if the text does not match the template
        """
        return cls.from_datetime(parse_with_format(text, template, tz))

    def copy(self) -> "Instant":
        return self._from_parts(self._base, self.microseconds)

    __copy__ = copy

    def __deepcopy__(self, memo):
        return self.copy()

    # ------------------------------------------------------------------
    # Microsecond store
    # ------------------------------------------------------------------

    def set_microseconds(self, value: Union[int, float, str]) -> "Instant":
        """
        Store a microsecond count, truncated to an integer.

        Numeric strings are accepted ('000123' -> 123). The value is not
        range-checked; the next carry/borrow normalizes it.
        """
        try:
            self.microseconds = int(Decimal(value.strip()) if isinstance(value, str) else value)
        except (InvalidOperation, ValueError, TypeError, OverflowError) as e:
            raise InvalidArgument(f"Microseconds must be numeric, got {value!r}") from e
        return self

    def get_microseconds(self, as_seconds: bool = False) -> Union[int, float]:
        """Microsecond fraction, as an int or as seconds rounded to 6 digits."""
        if as_seconds:
            return round(self.microseconds / MICROSECONDS_PER_SECOND, 6)
        return int(self.microseconds)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def base(self) -> datetime:
        """Whole-second calendar instant."""
        return self._base

    @property
    def timezone(self) -> tzinfo:
        return self._base.tzinfo

    def get_timestamp(self) -> int:
        """Whole seconds since the Unix epoch."""
        return epoch_seconds(self._base)

    def epoch_microseconds(self) -> int:
        return self.get_timestamp() * MICROSECONDS_PER_SECOND + self.microseconds

    def get_timestamp_with_microseconds(self) -> Decimal:
        """Exact epoch seconds with the microsecond fraction."""
        return Decimal(self.get_timestamp()) + Decimal(self.microseconds).scaleb(-6)

    def to_datetime(self) -> datetime:
        normalized = self.copy().add_microseconds(0)
        return normalized.base.replace(microsecond=normalized.microseconds)

    # ------------------------------------------------------------------
    # Carry / borrow
    # ------------------------------------------------------------------

    def _settle(self, total: int):
        seconds, remainder = divmod(total, MICROSECONDS_PER_SECOND)
        if seconds:
            logger.debug(f"Moving {seconds:+d}s into whole seconds, fraction {remainder:06d}")
            self._base = shift_seconds(self._base, seconds)
        self.microseconds = remainder

    def add_microseconds(self, amount: int) -> "Instant":
        """
        Move forward by `amount` microseconds, carrying into whole seconds.

        Raises:
            InvalidArgument: if amount is negative
        """
        if amount < 0:
            raise InvalidArgument('Value of microseconds should be positive.')
        self._settle(self.microseconds + int(amount))
        return self

    def sub_microseconds(self, amount: int) -> "Instant":
        """
        Move backward by `amount` microseconds, borrowing from whole seconds.

        Raises:
            InvalidArgument: if amount is negative
        """
        if amount < 0:
            raise InvalidArgument('Value of microseconds should be positive.')
        self._settle(self.microseconds - int(amount))
        return self

    # ------------------------------------------------------------------
    # Interval arithmetic
    # ------------------------------------------------------------------

    def _apply(self, interval: Union[Interval, timedelta], backward: bool) -> "Instant":
        if isinstance(interval, timedelta):
            interval = Interval.from_timedelta(interval)
        elif not isinstance(interval, Interval):
            raise InvalidArgument(f"Expected an Interval or timedelta, got {type(interval).__name__}")

        # XOR: an inverted interval reverses the direction of the operation
        moves_backward = interval.invert != backward
        offset = interval.calendar_offset()
        self._base = apply_offset(self._base, offset.negated() if moves_backward else offset)

        if moves_backward:
            return self.sub_microseconds(interval.microseconds)
        return self.add_microseconds(interval.microseconds)

    def add(self, interval: Union[Interval, timedelta]) -> "Instant":
        """Add an interval, microseconds included."""
        return self._apply(interval, backward=False)

    def sub(self, interval: Union[Interval, timedelta]) -> "Instant":
        """Subtract an interval, microseconds included."""
        return self._apply(interval, backward=True)

    # ------------------------------------------------------------------
    # Relative offsets
    # ------------------------------------------------------------------

    def modify(self, text: str) -> "Instant":
        """
        Apply relative-offset text such as '+1 day -10 min +250 micro'.

        A trailing '(+|-)N [microseconds|microsecond|micro|mic]' clause is
        handled here; everything before it goes to the calendar engine,
        which only moves the whole-second base. Time-reset keywords
        (midnight, today, ...) keep the microsecond fraction.

        Raises:
            CalendarError: if the remaining text is not a relative offset
        """
        match = MICROSECOND_CLAUSE.search(text)
        remainder = text[:match.start()] if match else text
        if not remainder.strip():
            remainder = NEUTRAL_OFFSET

        # Parse before mutating so a bad clause leaves the instant untouched
        relative = parse_relative(remainder)

        if match:
            sign, amount = match.group(1), int(match.group(2))
            if sign == '-':
                self.sub_microseconds(amount)
            else:
                self.add_microseconds(amount)

        self._base = apply_relative(self._base, relative)
        return self

    # ------------------------------------------------------------------
    # Difference
    # ------------------------------------------------------------------

    def diff(self, other: Union["Instant", datetime], absolute: bool = False) -> Interval:
        """
        Signed interval from this instant to `other`.

        The result is inverted when this instant is later than `other`,
        unless `absolute` is set. A naive datetime takes this instant's
        zone. Neither operand is modified.

        Raises:
            InvalidArgument: if other is neither an Instant nor a datetime
        """
        if isinstance(other, Instant):
            d2 = other.copy()
        elif isinstance(other, datetime):
            d2 = Instant.from_datetime(other, self.timezone)
        else:
            raise InvalidArgument('First argument must be an instance of datetime or Instant')
        d1 = self.copy().add_microseconds(0)
        d2.add_microseconds(0)

        negative = d1.epoch_microseconds() > d2.epoch_microseconds()
        u1, u2 = d1.microseconds, d2.microseconds
        if negative:
            borrow = u2 > u1
            u = u1 - u2
        else:
            borrow = u2 < u1
            u = u2 - u1
        if u < 0:
            u += MICROSECONDS_PER_SECOND

        # The fraction already accounts for one second of the gap
        other_base = d2.base
        if borrow:
            other_base = shift_seconds(other_base, 1 if negative else -1)

        breakdown, total_days, _ = difference(d1.base, other_base)
        logger.debug(
            f"diff {d1} -> {d2}: negative={negative} borrow={borrow} "
            f"breakdown={breakdown} microseconds={u}"
        )
        return Interval(
            years=breakdown.years,
            months=breakdown.months,
            days=breakdown.days,
            hours=breakdown.hours,
            minutes=breakdown.minutes,
            seconds=breakdown.seconds,
            microseconds=u,
            invert=negative and not absolute,
            total_days=total_days,
        )

    # ------------------------------------------------------------------
    # Rendering and comparison
    # ------------------------------------------------------------------

    def format(self, template: str) -> str:
        """
        Render with a format template.

        Unescaped 'u' tokens become the 6-digit microseconds and 'v' the
        3-digit milliseconds; '\\u' stays a literal 'u'. All other tokens
        are rendered by the calendar engine.
        """
        parts = []
        for c, is_token in iter_template(template):
            if not is_token:
                parts.append('\\' + c)
            elif c == MICROSECOND_TOKEN:
                parts.append(f"{self.microseconds:06d}")
            elif c == MILLISECOND_TOKEN:
                parts.append(f"{self.microseconds // 1000:03d}")
            else:
                parts.append(c)
        return render(self._base, ''.join(parts))

    def __str__(self) -> str:
        return self.format(self.ISO8601)

    def __repr__(self) -> str:
        return f"Instant({self.format(self.ISO8601_OFFSET)!r})"

    def __eq__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.epoch_microseconds() == other.epoch_microseconds()

    def __lt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.epoch_microseconds() < other.epoch_microseconds()
