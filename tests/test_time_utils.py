from datetime import datetime

import pytest

from services.time_utils import end_time, parse_time_minutes, to_12_hour, to_24_hour


@pytest.mark.parametrize('display, expected', [
    ('6:30 pm', '18:30'),
    ('6:30 PM', '18:30'),
    ('12:00 am', '00:00'),
    ('12:15 pm', '12:15'),
    (' 9:05 am ', '09:05'),
    ('6:30:45 pm', '18:30'),
    ('11:59pm', '23:59'),
])
def test_to_24_hour(display, expected):
    assert to_24_hour(display) == expected


@pytest.mark.parametrize('display', ['', None, '18:30', '13:00 pm', '6:75 pm', 'half past six'])
def test_to_24_hour_returns_empty_for_malformed_input(display):
    assert to_24_hour(display) == ''


@pytest.mark.parametrize('value, expected', [
    ('18:30', '6:30 pm'),
    ('00:05', '12:05 am'),
    ('12:00', '12:00 pm'),
    ('09:00', '9:00 am'),
])
def test_to_12_hour(value, expected):
    assert to_12_hour(value) == expected


def test_to_12_hour_without_value_uses_now():
    assert to_12_hour(now=datetime(2024, 1, 1, 21, 7)) == '9:07 pm'
    assert to_12_hour(now=datetime(2024, 1, 1, 0, 0)) == '12:00 am'


def test_to_12_hour_rejects_garbage():
    assert to_12_hour('25:00') == ''
    assert to_12_hour('soon') == ''


@pytest.mark.parametrize('display', ['6:30 pm', '12:00 am', '12:45 pm', '1:05 am', '11:59 pm'])
def test_round_trip_is_identity(display):
    assert to_12_hour(to_24_hour(display)) == display


def test_every_minute_of_the_day_round_trips():
    for hour in range(24):
        for minute in range(60):
            value = f"{hour:02d}:{minute:02d}"
            assert to_24_hour(to_12_hour(value)) == value


def test_round_trip_normalizes_case_and_spacing():
    assert to_12_hour(to_24_hour('07:15PM')) == '7:15 pm'


def test_parse_time_minutes_accepts_missing_suffix():
    assert parse_time_minutes('6:30 pm') == 18 * 60 + 30
    assert parse_time_minutes('18:30') == 18 * 60 + 30
    assert parse_time_minutes('6:30') == 6 * 60 + 30
    assert parse_time_minutes('noon') is None
    assert parse_time_minutes(None) is None


def test_end_time_wraps_past_midnight():
    assert end_time('11:30 pm', 90) == '1:00 am'
    assert end_time('11:30 pm', 60) == '12:30 am'
    assert end_time('6:00 pm', 90) == '7:30 pm'
