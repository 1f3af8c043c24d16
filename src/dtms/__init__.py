"""
dtms: Microsecond-Precision Timestamps

Calendar timestamps that keep microseconds through every operation:
construction, interval arithmetic, relative-offset text ("+10 min +250
micro") and signed differences. Whole-second calendar work (month
lengths, leap years, timezones, templates) is done by dtms.calendar; the
Instant type layers the sub-second fraction on top with explicit
carry/borrow.

Architecture:
    Instant  = whole-second calendar instant + microseconds [0, 999999]
    Interval = y/m/d/h/i/s + microseconds + invert flag

    Instant.add/sub(Interval)      -> Instant  (mutated in place)
    Instant.diff(Instant|datetime) -> Interval

Version: 1.0.0
"""

__version__ = "1.0.0"

from .errors import CalendarError, DtmsError, InvalidArgument
from .instant import Instant
from .interval import Interval
from .config import DtmsConfig, load_config

__all__ = [
    "Instant",
    "Interval",
    "DtmsConfig",
    "load_config",
    "DtmsError",
    "InvalidArgument",
    "CalendarError",
    "__version__",
]
