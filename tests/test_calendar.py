"""
Unit tests for the whole-second calendar engine.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dtms.calendar import (
    UTC,
    CalendarOffset,
    apply_offset,
    apply_relative,
    difference,
    epoch_seconds,
    parse_iso,
    parse_relative,
    parse_with_format,
    render,
    resolve_timezone,
    shift_seconds,
    whole_second,
)
from dtms.errors import CalendarError


def utc(*parts):
    return datetime(*parts, tzinfo=timezone.utc)


class TestEngine:
    """Offsets, shifts and differences."""

    def test_resolve_timezone(self):
        assert resolve_timezone(None) is UTC
        assert resolve_timezone('UTC') is UTC
        plus_one = timezone(timedelta(hours=1))
        assert resolve_timezone(plus_one) is plus_one

    def test_unknown_timezone(self):
        with pytest.raises(CalendarError):
            resolve_timezone('Not/AZone')

    def test_whole_second(self):
        dt = whole_second(datetime(2015, 8, 8, 10, 10, 10, 123456))
        assert dt == utc(2015, 8, 8, 10, 10, 10)
        assert dt.tzinfo is UTC

    def test_epoch_seconds(self, reference_datetime):
        assert epoch_seconds(reference_datetime) == 1439028610

    def test_shift_seconds(self):
        assert shift_seconds(utc(2015, 1, 1), -1) == utc(2014, 12, 31, 23, 59, 59)
        assert shift_seconds(utc(2015, 1, 1), 0) == utc(2015, 1, 1)

    def test_shift_keeps_zone(self):
        plus_two = timezone(timedelta(hours=2))
        moved = shift_seconds(datetime(2015, 8, 8, 12, 0, tzinfo=plus_two), 3600)
        assert moved.tzinfo is plus_two
        assert moved.hour == 13

    @pytest.mark.parametrize('start, offset, expected', [
        (utc(2015, 1, 31), CalendarOffset(months=1), utc(2015, 2, 28)),
        (utc(2016, 2, 29), CalendarOffset(years=1), utc(2017, 2, 28)),
        (utc(2015, 8, 8, 10, 10, 10), CalendarOffset(minutes=10, seconds=10), utc(2015, 8, 8, 10, 20, 20)),
        (utc(2015, 3, 1), CalendarOffset(days=-1), utc(2015, 2, 28)),
        (utc(2015, 8, 8), CalendarOffset(hours=-25), utc(2015, 8, 6, 23)),
    ])
    def test_apply_offset(self, start, offset, expected):
        assert apply_offset(start, offset) == expected

    def test_offset_negation_and_sum(self):
        offset = CalendarOffset(1, 2, 3, 4, 5, 6)
        assert (offset + offset.negated()).is_zero()
        assert offset.negated().negated() == offset

    def test_difference(self):
        breakdown, days, invert = difference(utc(1985, 11, 27, 10, 0, 5), utc(2017, 9, 28, 10, 0, 10))
        assert breakdown == CalendarOffset(years=31, months=10, days=1, seconds=5)
        assert days == 11628
        assert invert is False

    def test_difference_backward(self):
        breakdown, days, invert = difference(utc(2005, 12, 30, 23, 59, 1), utc(2005, 10, 10, 23, 59, 1))
        assert breakdown == CalendarOffset(months=2, days=20)
        assert days == 81
        assert invert is True

    def test_difference_ignores_sub_seconds(self):
        breakdown, _, _ = difference(utc(2015, 1, 1, 0, 0, 0), utc(2015, 1, 1, 0, 0, 0).replace(microsecond=999999))
        assert breakdown.is_zero()


class TestRelative:
    """Relative-offset text."""

    @pytest.mark.parametrize('text, expected', [
        ('+10 min +10 seconds', CalendarOffset(minutes=10, seconds=10)),
        ('-10 min -10 seconds ', CalendarOffset(minutes=-10, seconds=-10)),
        ('0 seconds', CalendarOffset()),
        ('+1 month', CalendarOffset(months=1)),
        ('3 days', CalendarOffset(days=3)),
        ('2 weeks ago', CalendarOffset(days=-14)),
        ('+1 fortnight', CalendarOffset(days=14)),
        ('next year', CalendarOffset(years=1)),
        ('last hour', CalendarOffset(hours=-1)),
        ('+1 Day -2 HOURS', CalendarOffset(days=1, hours=-2)),
        ('now', CalendarOffset()),
        ('+5sec', CalendarOffset(seconds=5)),
    ])
    def test_parse(self, text, expected):
        relative = parse_relative(text)
        assert relative.offset == expected
        assert not relative.resets_time

    @pytest.mark.parametrize('text, days, hour', [
        ('today', 0, 0),
        ('midnight', 0, 0),
        ('noon', 0, 12),
        ('tomorrow', 1, 0),
        ('yesterday noon', -1, 12),
    ])
    def test_reset_keywords(self, text, days, hour):
        relative = parse_relative(text)
        assert relative.offset == CalendarOffset(days=days)
        assert relative.reset_hour == hour

    @pytest.mark.parametrize('text', ['', '   ', 'bogus', '+10 micro', '+1 day and more', '++1 day'])
    def test_invalid(self, text):
        with pytest.raises(CalendarError):
            parse_relative(text)

    def test_apply_relative(self):
        relative = parse_relative('yesterday noon +30 min')
        assert relative.resets_time
        assert apply_relative(utc(2015, 8, 8, 10, 10, 10), relative) == utc(2015, 8, 7, 12, 30)

    def test_apply_without_reset_keeps_wall_clock(self):
        relative = parse_relative('+1 month')
        assert apply_relative(utc(2015, 1, 31, 10, 10, 10), relative) == utc(2015, 2, 28, 10, 10, 10)


class TestRender:
    """PHP-style templates."""

    @pytest.mark.parametrize('template, expected', [
        ('d.m.Y H:i:s', '08.08.2015 10:10:10'),
        ('D, d M Y', 'Sat, 08 Aug 2015'),
        ('l jS F Y', 'Saturday 8th August 2015'),
        ('N w z t L W o', '6 6 219 31 0 32 2015'),
        ('g:i a|h A|G', '10:10 am|10 AM|10'),
        ('y n j', '15 8 8'),
        ('u v', '000000 000'),
        ('e T P O p Z I', 'UTC UTC +00:00 +0000 Z 0 0'),
        ('c', '2015-08-08T10:10:10+00:00'),
        ('r', 'Sat, 08 Aug 2015 10:10:10 +0000'),
        ('U', '1439028610'),
        ('\\Y\\m\\d Y', 'Ymd 2015'),
        ('Y-m-d\\TH:i:s\\Z', '2015-08-08T10:10:10Z'),
    ])
    def test_render(self, reference_datetime, template, expected):
        assert render(reference_datetime, template) == expected

    def test_ordinal_suffixes(self):
        days = {1: '1st', 2: '2nd', 3: '3rd', 4: '4th', 11: '11th', 12: '12th', 13: '13th', 22: '22nd', 31: '31st'}
        for day, text in days.items():
            assert render(utc(2015, 1, day), 'jS') == text

    def test_afternoon_and_offset(self):
        minus_five = timezone(timedelta(hours=-5, minutes=-30))
        dt = datetime(2015, 8, 8, 0, 5, tzinfo=minus_five)
        assert render(dt, 'g A P O Z') == '12 AM -05:30 -0530 -19800'


class TestParse:
    """Template and ISO 8601 parsing."""

    def test_parse_with_format(self):
        dt = parse_with_format('08.08.2015 10:10:10.123456', 'd.m.Y H:i:s.u')
        assert dt == utc(2015, 8, 8, 10, 10, 10, 123456)

    def test_iso_template(self):
        dt = parse_with_format('2015-08-08T10:10:10.123456Z', 'Y-m-d\\TH:i:s.u\\Z')
        assert dt == utc(2015, 8, 8, 10, 10, 10, 123456)
        assert dt.tzinfo is UTC

    def test_epoch(self):
        assert parse_with_format('1439028610', 'U') == utc(2015, 8, 8, 10, 10, 10)

    def test_offset_wins_over_tz(self):
        dt = parse_with_format('2015-08-08T12:10:10+02:00', 'Y-m-d\\TH:i:sP', tz='UTC')
        assert dt.utcoffset() == timedelta(hours=2)
        assert epoch_seconds(dt) == 1439028610

    def test_names_and_meridiem(self):
        assert parse_with_format('Aug 8 2015 10:10 pm', 'M j Y g:i a') == utc(2015, 8, 8, 22, 10)
        assert parse_with_format('Saturday 12 am', 'l g a').hour == 0

    def test_missing_fields_default_to_epoch_start(self):
        assert parse_with_format('08.2015', 'm.Y') == utc(2015, 8, 1)
        assert parse_with_format('10:30', '!H:i') == utc(1970, 1, 1, 10, 30)

    def test_tz_for_naive_text(self):
        plus_one = timezone(timedelta(hours=1))
        assert parse_with_format('2015', 'Y', tz=plus_one).tzinfo is plus_one

    @pytest.mark.parametrize('text, template', [
        ('2015-08-08', 'd.m.Y'),
        ('31.02.2015', 'd.m.Y'),
        ('Foo 8 2015', 'M j Y'),
    ])
    def test_parse_errors(self, text, template):
        with pytest.raises(CalendarError):
            parse_with_format(text, template)

    def test_parse_iso(self):
        assert parse_iso('2015-08-08 10:10:10.123456') == utc(2015, 8, 8, 10, 10, 10, 123456)
        assert parse_iso('2015-08-08T10:10:10Z').tzinfo is UTC

    def test_parse_iso_invalid(self):
        with pytest.raises(CalendarError):
            parse_iso('not a date')
