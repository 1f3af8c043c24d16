"""
Exception types raised by dtms.

InvalidArgument covers caller mistakes in the microsecond core (negative
carry/borrow amounts, operands of the wrong type). CalendarError is raised
by the whole-second calendar engine for text it cannot parse. Both derive
from ValueError so existing `except ValueError` handlers keep working.
"""


class DtmsError(Exception):
    """Base class for all dtms errors."""


class InvalidArgument(DtmsError, ValueError):
    """An argument was outside the domain accepted by the operation."""


class CalendarError(DtmsError, ValueError):
    """Malformed timestamp, template, duration or relative-offset text."""
