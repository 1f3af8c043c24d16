"""
Format Templates

Rendering and parsing of instants with PHP date()-style templates. Each
template character is either a format token or a literal; a backslash
makes the next character literal.

Supported tokens:
    Day:      d D j l N S w z
    Week:     W
    Month:    F m M n t
    Year:     L o Y y
    Time:     a A g G h H i s u v
    Timezone: e I O P p T Z
    Full:     c r U

Names are English only. Parsing accepts the subset of tokens that carry a
value (d j m n M F Y y H G h g i s u v a A U e T O P p) and treats the
weekday tokens D and l as a skipped word.
"""

import calendar
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterator, List, Tuple, Union

from ..errors import CalendarError
from .engine import UTC, epoch_seconds, resolve_timezone

MONTH_NAMES = (
    'January', 'February', 'March', 'April', 'May', 'June', 'July',
    'August', 'September', 'October', 'November', 'December',
)
DAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

ESCAPE = '\\'


def iter_template(template: str) -> Iterator[Tuple[str, bool]]:
    """
    Split a template into (character, is_token) pairs.

    Escaped characters are yielded once with is_token False; the escaping
    backslash itself is dropped. A trailing lone backslash is a literal.
    """
    chars = iter(template)
    for c in chars:
        if c == ESCAPE:
            yield next(chars, ESCAPE), False
        else:
            yield c, True


def _ordinal_suffix(day: int) -> str:
    if day in (11, 12, 13):
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')


def _offset(dt: datetime, colon: bool) -> str:
    total = int(dt.utcoffset().total_seconds())
    sign = '-' if total < 0 else '+'
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}{':' if colon else ''}{minutes:02d}"


def _zone_name(dt: datetime) -> str:
    if dt.tzinfo is UTC:
        return 'UTC'
    return getattr(dt.tzinfo, 'key', None) or dt.tzname() or _offset(dt, True)


def _render_token(dt: datetime, c: str) -> str:
    hour12 = dt.hour % 12 or 12
    if c == 'd':
        return f"{dt.day:02d}"
    if c == 'D':
        return DAY_NAMES[dt.weekday()][:3]
    if c == 'j':
        return str(dt.day)
    if c == 'l':
        return DAY_NAMES[dt.weekday()]
    if c == 'N':
        return str(dt.isoweekday())
    if c == 'S':
        return _ordinal_suffix(dt.day)
    if c == 'w':
        return str(dt.isoweekday() % 7)
    if c == 'z':
        return str(dt.timetuple().tm_yday - 1)
    if c == 'W':
        return f"{dt.isocalendar()[1]:02d}"
    if c == 'F':
        return MONTH_NAMES[dt.month - 1]
    if c == 'm':
        return f"{dt.month:02d}"
    if c == 'M':
        return MONTH_NAMES[dt.month - 1][:3]
    if c == 'n':
        return str(dt.month)
    if c == 't':
        return str(calendar.monthrange(dt.year, dt.month)[1])
    if c == 'L':
        return '1' if calendar.isleap(dt.year) else '0'
    if c == 'o':
        return str(dt.isocalendar()[0])
    if c == 'Y':
        return f"{dt.year:04d}"
    if c == 'y':
        return f"{dt.year % 100:02d}"
    if c == 'a':
        return 'am' if dt.hour < 12 else 'pm'
    if c == 'A':
        return 'AM' if dt.hour < 12 else 'PM'
    if c == 'g':
        return str(hour12)
    if c == 'G':
        return str(dt.hour)
    if c == 'h':
        return f"{hour12:02d}"
    if c == 'H':
        return f"{dt.hour:02d}"
    if c == 'i':
        return f"{dt.minute:02d}"
    if c == 's':
        return f"{dt.second:02d}"
    if c == 'u':
        return f"{dt.microsecond:06d}"
    if c == 'v':
        return f"{dt.microsecond // 1000:03d}"
    if c == 'e':
        return _zone_name(dt)
    if c == 'I':
        dst = dt.dst()
        return '1' if dst else '0'
    if c == 'O':
        return _offset(dt, False)
    if c == 'P':
        return _offset(dt, True)
    if c == 'p':
        return 'Z' if not dt.utcoffset() else _offset(dt, True)
    if c == 'T':
        return dt.tzname() or _offset(dt, True)
    if c == 'Z':
        return str(int(dt.utcoffset().total_seconds()))
    if c == 'c':
        return render(dt, 'Y-m-d\\TH:i:sP')
    if c == 'r':
        return render(dt, 'D, d M Y H:i:s O')
    if c == 'U':
        return str(epoch_seconds(dt))
    return c


def render(dt: datetime, template: str) -> str:
    """
    Render an aware datetime with a format template.

    Args:
        dt: aware datetime
        template: format template, e.g. 'd.m.Y H:i:s'

    Returns:
        Formatted text
    """
    return ''.join(
        _render_token(dt, c) if is_token else c
        for c, is_token in iter_template(template)
    )


_NUMERIC_FIELDS: Dict[str, Tuple[str, str]] = {
    'd': ('day', r'\d{2}'),
    'j': ('day', r'\d{1,2}'),
    'm': ('month', r'\d{2}'),
    'n': ('month', r'\d{1,2}'),
    'Y': ('year', r'\d{4}'),
    'y': ('year2', r'\d{2}'),
    'H': ('hour', r'\d{2}'),
    'G': ('hour', r'\d{1,2}'),
    'h': ('hour12', r'\d{2}'),
    'g': ('hour12', r'\d{1,2}'),
    'i': ('minute', r'\d{2}'),
    's': ('second', r'\d{2}'),
    'u': ('fraction', r'\d{1,6}'),
    'v': ('millis', r'\d{3}'),
    'U': ('epoch', r'-?\d+'),
}

_TEXT_FIELDS: Dict[str, Tuple[str, str]] = {
    'M': ('month_name', r'[A-Za-z]{3}'),
    'F': ('month_name', r'[A-Za-z]+'),
    'a': ('meridiem', r'[AaPp][Mm]'),
    'A': ('meridiem', r'[AaPp][Mm]'),
    'e': ('zone', r'[A-Za-z_]+(?:/[A-Za-z_+\-0-9]+)*|[+-]\d{2}:?\d{2}'),
    'T': ('zone', r'[A-Za-z]+|[+-]\d{2}:?\d{2}'),
    'O': ('offset', r'Z|[+-]\d{2}:?\d{2}'),
    'P': ('offset', r'Z|[+-]\d{2}:?\d{2}'),
    'p': ('offset', r'Z|[+-]\d{2}:?\d{2}'),
}

_SKIPPED = {'D': r'[A-Za-z]{3}', 'l': r'[A-Za-z]+'}

_RESET_MARKERS = ('!', '|')


def _compile(template: str) -> "re.Pattern[str]":
    parts: List[str] = []
    fields: List[str] = []
    for c, is_token in iter_template(template):
        field = (_NUMERIC_FIELDS.get(c) or _TEXT_FIELDS.get(c)) if is_token else None
        if field:
            name, pattern = field
            if name in fields:
                parts.append(f"(?:{pattern})")
            else:
                fields.append(name)
                parts.append(f"(?P<{name}>{pattern})")
        elif is_token and c in _SKIPPED:
            parts.append(_SKIPPED[c])
        elif is_token and c in _RESET_MARKERS:
            continue
        else:
            parts.append(re.escape(c))
    return re.compile(''.join(parts))


def _parse_offset(text: str) -> tzinfo:
    if text == 'Z':
        return UTC
    sign = -1 if text[0] == '-' else 1
    digits = text[1:].replace(':', '')
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * delta) if delta else UTC


def _month_from_name(text: str) -> int:
    lowered = text.lower()
    for index, name in enumerate(MONTH_NAMES, start=1):
        if lowered in (name.lower(), name[:3].lower()):
            return index
    raise CalendarError(f"Unknown month name: {text!r}")


def parse_with_format(text: str, template: str,
                      tz: Union[None, str, tzinfo] = None) -> datetime:
    """
    Parse text according to a format template.

    Fields absent from the template default to the Unix epoch start
    (1970-01-01 00:00:00.000000). A zone or offset in the text wins over
    `tz`; an epoch token (U) overrides every date and time field.

    Args:
        text: text to parse
        template: format template
        tz: zone for text that carries none (default UTC)

    Returns:
        Aware datetime including the parsed microseconds

    Raises:
        CalendarError: if the text does not match the template
    """
    pattern = _compile(template)
    match = pattern.fullmatch(text)
    if match is None:
        raise CalendarError(f"Text {text!r} does not match format {template!r}")
    values = {k: v for k, v in match.groupdict().items() if v is not None}

    zone = resolve_timezone(tz)
    if 'offset' in values:
        zone = _parse_offset(values['offset'])
    elif 'zone' in values:
        raw = values['zone']
        zone = _parse_offset(raw) if raw[0] in '+-' else resolve_timezone(raw)

    microsecond = 0
    if 'fraction' in values:
        microsecond = int(values['fraction'].ljust(6, '0'))
    elif 'millis' in values:
        microsecond = int(values['millis']) * 1000

    if 'epoch' in values:
        base = datetime.fromtimestamp(int(values['epoch']), UTC).astimezone(zone)
        return base.replace(microsecond=microsecond)

    year = int(values.get('year', 1970))
    if 'year2' in values:
        short = int(values['year2'])
        year = 2000 + short if short < 70 else 1900 + short
    month = int(values['month']) if 'month' in values else 1
    if 'month_name' in values:
        month = _month_from_name(values['month_name'])

    hour = int(values.get('hour', 0))
    if 'hour12' in values:
        hour = int(values['hour12']) % 12
    if values.get('meridiem', '').lower() == 'pm' and hour < 12:
        hour += 12

    try:
        return datetime(
            year, month, int(values.get('day', 1)),
            hour, int(values.get('minute', 0)), int(values.get('second', 0)),
            microsecond, tzinfo=zone,
        )
    except ValueError as e:
        raise CalendarError(f"Invalid date {text!r}: {e}") from e


def parse_iso(text: str, tz: Union[None, str, tzinfo] = None) -> datetime:
    """
    Parse ISO 8601 text ('2015-08-08 10:10:10.123456', '...T...Z').

    Returns:
        Aware datetime; naive text takes `tz` (default UTC)
    """
    from dateutil.parser import isoparse
    from dateutil.tz import tzutc

    try:
        dt = isoparse(text.strip())
    except (ValueError, OverflowError) as e:
        raise CalendarError(f"Invalid timestamp text: {text!r}") from e
    if isinstance(dt.tzinfo, tzutc):
        dt = dt.replace(tzinfo=UTC)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=resolve_timezone(tz))
    return dt
