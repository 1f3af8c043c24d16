"""
Whole-second calendar engine for dtms.

Calendar arithmetic, differences, template rendering/parsing and
relative-offset parsing on timezone-aware datetimes without sub-second
state. The microsecond core in dtms.instant builds on these primitives.
"""

from .engine import (
    UTC,
    CalendarOffset,
    apply_offset,
    difference,
    epoch_seconds,
    resolve_timezone,
    shift_seconds,
    whole_second,
)
from .formatting import parse_iso, parse_with_format, render
from .relative import RelativeOffset, apply_relative, parse_relative, reset_wall_clock

__all__ = [
    'UTC',
    'CalendarOffset',
    'RelativeOffset',
    'apply_offset',
    'apply_relative',
    'difference',
    'epoch_seconds',
    'parse_iso',
    'parse_relative',
    'parse_with_format',
    'render',
    'reset_wall_clock',
    'resolve_timezone',
    'shift_seconds',
    'whole_second',
]
