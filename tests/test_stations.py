from datetime import datetime
from types import SimpleNamespace

from models.consoleType import ConsoleType
from services.stations import customer_display_name, live_status, parse_station_name, station_names


def test_station_names_follow_inventory():
    inventory = {ConsoleType.pool: 1, ConsoleType.ps5: 2}
    assert station_names(inventory) == ['PS5-01', 'PS5-02', 'POOL-01']


def test_parse_station_name():
    assert parse_station_name('PS5-03') == (ConsoleType.ps5, 3)
    assert parse_station_name('RACING_SIM-01') == (ConsoleType.racing_sim, 1)
    assert parse_station_name('GAMECUBE-01') is None
    assert parse_station_name('PS5') is None


def test_customer_display_name_fallbacks():
    assert customer_display_name('Meera Shah', 'Walk In', 'abc') == 'Meera Shah'
    assert customer_display_name(None, 'Walk In', None) == 'Walk In'
    assert customer_display_name(None, None, '1234567890abcdef') == 'User 12345678'
    assert customer_display_name() == 'Unknown'


def _session(id, console, quantity, start_time, duration=60, name='Ravi'):
    return SimpleNamespace(
        id=id,
        start_time=start_time,
        duration=duration,
        user_id=None,
        profile=None,
        is_walk_in=True,
        customer_name=name,
        items=[SimpleNamespace(console=console, quantity=quantity)],
    )


def test_live_status_assigns_units_in_order():
    inventory = {ConsoleType.ps5: 3, ConsoleType.pool: 1}
    now = datetime(2024, 5, 15, 18, 30)
    bookings = [
        _session('b1', ConsoleType.ps5, 2, '6:00 pm'),
        _session('b2', ConsoleType.pool, 1, '7:00 pm', name='Isha'),
    ]

    status = live_status(inventory, bookings, now)

    assert status['total'] == 4
    assert status['busy'] == 3
    assert status['free'] == 1
    by_id = {s['id']: s for s in status['stations']}
    assert by_id['PS5-01']['booking']['id'] == 'b1'
    assert by_id['PS5-02']['booking']['id'] == 'b1'
    assert by_id['PS5-03']['status'] == 'free'
    assert by_id['PS5-01']['booking']['end_time'] == '7:00 pm'
    assert by_id['PS5-01']['booking']['time_remaining'] == 30
    assert by_id['PS5-01']['booking']['has_started'] is True
    assert by_id['POOL-01']['booking']['customer_name'] == 'Isha'
    assert by_id['POOL-01']['booking']['has_started'] is False


def test_live_status_unknown_times():
    status = live_status({ConsoleType.pc: 1}, [_session('b1', ConsoleType.pc, 1, None)], datetime(2024, 5, 15, 18, 0))
    booking = status['stations'][0]['booking']
    assert booking['time_remaining'] == 999
    assert booking['end_time'] == '-'
    assert booking['start_time'] == '-'
