"""
Relative Offsets

Parser for relative-offset text such as "+1 month", "-3 days",
"+10 min +10 seconds", "2 weeks ago" or "tomorrow". Clauses are
applied together: time resets first (today, midnight, noon, tomorrow,
yesterday), then the accumulated calendar offset.

Grammar (case-insensitive, clauses separated by optional whitespace):
    clause   := number unit | ("next" | "last" | "previous") unit
              | "ago" | keyword
    number   := ("+" | "-")? digits
    unit     := sec | min | hour | day | week | fortnight | month | year
                (with the usual plural and long spellings)
    keyword  := now | today | midnight | noon | tomorrow | yesterday

"ago" negates every clause parsed before it. Sub-second units are not
part of this grammar.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import CalendarError
from .engine import CalendarOffset, apply_offset

logger = logging.getLogger(__name__)

_UNITS = {
    'sec': 'seconds', 'secs': 'seconds', 'second': 'seconds', 'seconds': 'seconds',
    'min': 'minutes', 'mins': 'minutes', 'minute': 'minutes', 'minutes': 'minutes',
    'hour': 'hours', 'hours': 'hours',
    'day': 'days', 'days': 'days',
    'week': 'weeks', 'weeks': 'weeks',
    'fortnight': 'fortnights', 'fortnights': 'fortnights',
    'month': 'months', 'months': 'months',
    'year': 'years', 'years': 'years',
}

# Longest spellings first so "minutes" is not read as "min" + "utes"
_UNIT_PATTERN = '|'.join(sorted(_UNITS, key=len, reverse=True))

_CLAUSE = re.compile(
    r'\s*(?:'
    rf'(?P<number>[+-]?\s*\d+)\s*(?P<unit>{_UNIT_PATTERN})\b'
    rf'|(?P<word>next|last|previous)\s+(?P<word_unit>{_UNIT_PATTERN})\b'
    r'|(?P<ago>ago)\b'
    r'|(?P<keyword>now|today|midnight|noon|tomorrow|yesterday)\b'
    r')\s*',
    re.IGNORECASE,
)

# keyword -> (day shift, hour of the reset wall clock)
_KEYWORDS = {
    'today': (0, 0),
    'midnight': (0, 0),
    'noon': (0, 12),
    'tomorrow': (1, 0),
    'yesterday': (-1, 0),
}


@dataclass(frozen=True)
class RelativeOffset:
    """
    Parsed relative-offset text.

    Attributes:
        offset: calendar offset to add
        reset_hour: if set, the wall clock is first reset to this hour
                    with zero minutes and seconds
    """
    offset: CalendarOffset = CalendarOffset()
    reset_hour: Optional[int] = None

    @property
    def resets_time(self) -> bool:
        return self.reset_hour is not None


def _unit_offset(unit: str, amount: int) -> CalendarOffset:
    name = _UNITS[unit.lower()]
    if name == 'weeks':
        return CalendarOffset(days=7 * amount)
    if name == 'fortnights':
        return CalendarOffset(days=14 * amount)
    return CalendarOffset(**{name: amount})


def parse_relative(text: str) -> RelativeOffset:
    """
    Parse relative-offset text.

    Raises:
        CalendarError: on empty text or any clause outside the grammar
    """
    if not text or not text.strip():
        raise CalendarError("Relative offset text is empty")

    offset = CalendarOffset()
    reset_hour = None
    pos = 0
    while pos < len(text):
        match = _CLAUSE.match(text, pos)
        if match is None or match.end() == pos:
            raise CalendarError(f"Invalid relative offset at {text[pos:]!r} in {text!r}")
        pos = match.end()

        if match.group('number') is not None:
            amount = int(match.group('number').replace(' ', ''))
            offset = offset + _unit_offset(match.group('unit'), amount)
        elif match.group('word') is not None:
            amount = 1 if match.group('word').lower() == 'next' else -1
            offset = offset + _unit_offset(match.group('word_unit'), amount)
        elif match.group('ago') is not None:
            offset = offset.negated()
        else:
            keyword = match.group('keyword').lower()
            if keyword in _KEYWORDS:
                days, reset_hour = _KEYWORDS[keyword]
                offset = offset + CalendarOffset(days=days)

    relative = RelativeOffset(offset=offset, reset_hour=reset_hour)
    logger.debug(f"Relative offset {text!r} -> {relative}")
    return relative


def reset_wall_clock(dt: datetime, relative: RelativeOffset) -> datetime:
    """Set the wall clock to the reset hour of `relative`, if it has one."""
    if not relative.resets_time:
        return dt
    return dt.replace(hour=relative.reset_hour, minute=0, second=0, microsecond=0)


def apply_relative(dt: datetime, relative: RelativeOffset) -> datetime:
    """Apply a parsed relative offset to a whole-second instant."""
    return apply_offset(reset_wall_clock(dt, relative), relative.offset)

