"""
Unit tests for Interval parsing, rendering and validation.
"""

import dataclasses
from datetime import timedelta

import pytest

from dtms import CalendarError, Interval, InvalidArgument
from dtms.calendar import CalendarOffset


class TestIntervalParse:
    """Interval.parse text handling."""

    def test_fractional_seconds(self):
        interval = Interval.parse('PT1.123456S')
        assert interval.seconds == 1
        assert interval.microseconds == 123456
        assert interval.invert is False

    def test_short_fraction_is_right_padded(self):
        assert Interval.parse('PT0.5S').microseconds == 500000
        assert Interval.parse('PT0,25S').microseconds == 250000

    def test_all_components_and_sign(self):
        interval = Interval.parse('-P1Y2M3W4DT5H6M7.000008S')
        assert interval == Interval(
            years=1, months=2, days=25, hours=5, minutes=6, seconds=7,
            microseconds=8, invert=True,
        )

    @pytest.mark.parametrize('text', ['P', 'PT', '-P', '1D', 'PT1.1234567S', 'P1S', 'PT1H1D', '', 'P1YT', '-P2DT', 'P1Y2MT'])
    def test_invalid_text(self, text):
        with pytest.raises(CalendarError):
            Interval.parse(text)


class TestIntervalText:
    """Canonical text form."""

    @pytest.mark.parametrize('interval, expected', [
        (Interval(), 'PT0S'),
        (Interval(invert=True), '-PT0S'),
        (Interval(seconds=1, microseconds=999999, invert=True), '-PT1.999999S'),
        (Interval(years=1, days=2, minutes=3), 'P1Y2DT3M'),
        (Interval(months=4, days=4), 'P4M4D'),
        (Interval(microseconds=1), 'PT0.000001S'),
    ])
    def test_str(self, interval, expected):
        assert str(interval) == expected

    def test_str_parses_back(self):
        interval = Interval(years=31, months=10, days=1, seconds=5, microseconds=1, invert=True)
        assert Interval.parse(str(interval)) == interval


class TestIntervalFormat:
    """%-token rendering."""

    def test_tokens(self):
        interval = Interval(years=3, months=1, days=4, hours=6, minutes=8, seconds=5, microseconds=9999)
        assert interval.format('%Y %y|%M %m|%D %d|%H %h|%I %i') == '03 3|01 1|04 4|06 6|08 8'
        assert interval.format('%S %s|%F %f') == '05.009999 5.009999|009999 9999'

    def test_sign_tokens(self):
        assert Interval(seconds=1).format('%R%r') == '+'
        assert Interval(seconds=1, invert=True).format('%R%r') == '--'

    def test_whole_seconds_have_no_fraction(self):
        assert Interval(seconds=7).format('%s|%S') == '7|07'

    def test_literals(self):
        interval = Interval(days=2)
        assert interval.format('100%% in %d days') == '100% in 2 days'
        assert interval.format('%x %') == '%x %'

    def test_total_days(self):
        assert Interval().format('%a') == '(unknown)'
        assert Interval(days=3, total_days=3).format('%a') == '3'


class TestIntervalValue:
    """Validation, conversions and immutability."""

    @pytest.mark.parametrize('kwargs', [
        {'days': -1},
        {'seconds': 1.5},
        {'microseconds': 1_000_000},
        {'microseconds': -1},
    ])
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(InvalidArgument):
            Interval(**kwargs)

    def test_absolute_clears_invert_only(self):
        interval = Interval(hours=2, microseconds=5, invert=True, total_days=0)
        unsigned = interval.absolute()
        assert unsigned.invert is False
        assert dataclasses.replace(unsigned, invert=True) == interval

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Interval().seconds = 3

    def test_calendar_offset(self):
        interval = Interval(years=1, months=2, days=3, hours=4, minutes=5, seconds=6,
                            microseconds=7, invert=True)
        assert interval.calendar_offset() == CalendarOffset(1, 2, 3, 4, 5, 6)

    def test_from_timedelta(self):
        interval = Interval.from_timedelta(timedelta(hours=25, minutes=1, seconds=2, microseconds=3))
        assert interval == Interval(days=1, hours=1, minutes=1, seconds=2, microseconds=3)

    def test_from_negative_timedelta(self):
        interval = Interval.from_timedelta(timedelta(microseconds=-999999))
        assert interval == Interval(microseconds=999999, invert=True)

    def test_is_zero(self):
        assert Interval(invert=True).is_zero()
        assert not Interval(microseconds=1).is_zero()
