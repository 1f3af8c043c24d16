"""
Intervals With Microseconds

Signed calendar durations: years, months, days, hours, minutes and whole
seconds, plus a microsecond component and an invert flag marking a
backward (negative) duration.

Text form (ISO 8601 duration extended with fractional seconds):

    P1Y2M3DT4H5M6.123456S     forward interval
    -PT1.999999S              inverted interval
    PT0S                      zero interval

Rendering with format() follows the familiar DateInterval tokens:

    %y %Y   years (Y: at least 2 digits)
    %m %M   months
    %d %D   days
    %a      total days (difference results only, otherwise "(unknown)")
    %h %H   hours
    %i %I   minutes
    %s %S   seconds, followed by ".ffffff" when microseconds are non-zero
    %f %F   microseconds (F: 6 digits)
    %R %r   sign ("+"/"-" and ""/"-")
    %%      literal percent
"""

import re
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Optional

from .calendar.engine import CalendarOffset
from .errors import CalendarError, InvalidArgument

MICROSECONDS_PER_SECOND = 1_000_000

_DURATION = re.compile(
    r'(?P<invert>-)?P'
    r'(?:(?P<years>\d+)Y)?'
    r'(?:(?P<months>\d+)M)?'
    r'(?:(?P<weeks>\d+)W)?'
    r'(?:(?P<days>\d+)D)?'
    r'(?:T'
    r'(?:(?P<hours>\d+)H)?'
    r'(?:(?P<minutes>\d+)M)?'
    r'(?:(?P<seconds>\d+)(?:[.,](?P<fraction>\d{1,6}))?S)?'
    r')?'
)

_CALENDAR_FIELDS = ('years', 'months', 'days', 'hours', 'minutes', 'seconds')


@dataclass(frozen=True)
class Interval:
    """
    Signed calendar duration with microsecond precision.

    Component values are magnitudes; direction lives in `invert`. Only
    the difference algorithm sets `total_days`.

    Usage:
        step = Interval.parse('PT1.5S')
        back = Interval(minutes=2, microseconds=250000, invert=True)
    """
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    microseconds: int = 0
    invert: bool = False
    total_days: Optional[int] = None

    def __post_init__(self):
        for name in _CALENDAR_FIELDS + ('microseconds',):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidArgument(f"Interval {name} must be a non-negative integer, got {value!r}")
        if self.microseconds >= MICROSECONDS_PER_SECOND:
            raise InvalidArgument(
                f"Interval microseconds must be below {MICROSECONDS_PER_SECOND}, got {self.microseconds}"
            )
        object.__setattr__(self, 'invert', bool(self.invert))

    @classmethod
    def parse(cls, text: str) -> "Interval":
        """
        Parse interval text such as 'PT1.123456S' or '-P1Y2M'.

        Raises:
            CalendarError: if the text is not a duration
        """
        match = _DURATION.fullmatch(text.strip())
        if match is None or text.strip().rstrip('T').lstrip('-') == 'P':
            raise CalendarError(f"Invalid interval text: {text!r}")
        # A time designator needs at least one time component after it
        if 'T' in text and not any(match.group(name) for name in ('hours', 'minutes', 'seconds')):
            raise CalendarError(f"Invalid interval text: {text!r}")

        values = {name: int(match.group(name) or 0) for name in _CALENDAR_FIELDS}
        values['days'] += 7 * int(match.group('weeks') or 0)
        fraction = match.group('fraction') or ''
        return cls(
            microseconds=int(fraction.ljust(6, '0')) if fraction else 0,
            invert=match.group('invert') is not None,
            **values,
        )

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "Interval":
        """Convert a timedelta into days, hours, minutes, seconds and microseconds."""
        invert = delta < timedelta(0)
        delta = abs(delta)
        hours, rest = divmod(delta.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return cls(
            days=delta.days, hours=hours, minutes=minutes, seconds=seconds,
            microseconds=delta.microseconds, invert=invert,
        )

    def absolute(self) -> "Interval":
        """The same interval with the invert flag cleared."""
        return replace(self, invert=False)

    def calendar_offset(self) -> CalendarOffset:
        """Whole-unit part as a forward calendar offset (ignores invert)."""
        return CalendarOffset(**{name: getattr(self, name) for name in _CALENDAR_FIELDS})

    def is_zero(self) -> bool:
        return self.calendar_offset().is_zero() and not self.microseconds

    def _seconds_text(self, width: int) -> str:
        text = f"{self.seconds:0{width}d}"
        if self.microseconds:
            text += f".{self.microseconds:06d}"
        return text

    def format(self, template: str) -> str:
        """Render the interval with %-tokens (see module docstring)."""
        tokens = {
            'y': str(self.years), 'Y': f"{self.years:02d}",
            'm': str(self.months), 'M': f"{self.months:02d}",
            'd': str(self.days), 'D': f"{self.days:02d}",
            'a': str(self.total_days) if self.total_days is not None else '(unknown)',
            'h': str(self.hours), 'H': f"{self.hours:02d}",
            'i': str(self.minutes), 'I': f"{self.minutes:02d}",
            's': self._seconds_text(1), 'S': self._seconds_text(2),
            'f': str(self.microseconds), 'F': f"{self.microseconds:06d}",
            'R': '-' if self.invert else '+',
            'r': '-' if self.invert else '',
            '%': '%',
        }
        out = []
        chars = iter(template)
        for c in chars:
            if c != '%':
                out.append(c)
                continue
            token = next(chars, None)
            if token is None:
                out.append('%')
            elif token in tokens:
                out.append(tokens[token])
            else:
                out.append('%' + token)
        return ''.join(out)

    def __str__(self) -> str:
        date_part = ''.join(
            f"{value}{unit}"
            for value, unit in ((self.years, 'Y'), (self.months, 'M'), (self.days, 'D'))
            if value
        )
        time_part = ''.join(
            f"{value}{unit}"
            for value, unit in ((self.hours, 'H'), (self.minutes, 'M'))
            if value
        )
        if self.seconds or self.microseconds or not (date_part or time_part):
            time_part += self._seconds_text(1) + 'S'
        text = 'P' + date_part + ('T' + time_part if time_part else '')
        return ('-' if self.invert else '') + text
