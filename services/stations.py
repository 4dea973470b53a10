# services/stations.py
"""
Station identities and the live floor view.

Stations are not stored: a café with {ps5: 3} has PS5-01, PS5-02, PS5-03.
"""

from models.consoleType import ConsoleType
from services.booking_sweep import minutes_remaining, session_end_minutes
from services.time_utils import minutes_to_12_hour, minutes_since_midnight, parse_time_minutes


def station_name(console_type, number):
    return f"{ConsoleType.parse(console_type).station_prefix}-{number:02d}"


def station_names(inventory):
    """Synthesized station names for an inventory map, in console-type order."""
    names = []
    for console_type in ConsoleType:
        for number in range(1, (inventory.get(console_type) or 0) + 1):
            names.append(station_name(console_type, number))
    return names


def parse_station_name(name):
    """'PS5-03' -> (ConsoleType.ps5, 3); None if it is not a station name."""
    if not name or '-' not in name:
        return None
    prefix, _, number = name.rpartition('-')
    console_type = ConsoleType.parse(prefix)
    if console_type is None or not number.isdigit():
        return None
    return console_type, int(number)


def customer_display_name(profile_name=None, customer_name=None, user_id=None):
    """Profile name, then walk-in name, then a synthesized user label."""
    if profile_name:
        return profile_name
    if customer_name:
        return customer_name
    if user_id:
        return f"User {str(user_id)[:8]}"
    return "Unknown"


def booking_display_name(booking):
    profile_name = booking.profile.full_name if booking.user_id and booking.profile else None
    if booking.is_walk_in and booking.customer_name:
        return booking.customer_name
    return customer_display_name(profile_name, booking.customer_name, booking.user_id)


def live_status(inventory, bookings, now):
    """
    Per-station busy/free view for a café.

    `bookings` are today's in-progress bookings. Each booking item claims
    `quantity` consecutive free units of its console type, in booking order.
    """
    current_minutes = minutes_since_midnight(now)
    claims = {}
    for booking in bookings:
        for item in booking.items:
            console_type = ConsoleType.parse(item.console)
            if console_type is None:
                continue
            units = claims.setdefault(console_type, [])
            units.extend([booking] * max(1, item.quantity or 1))

    stations = []
    busy_count = 0
    for console_type in ConsoleType:
        total = inventory.get(console_type) or 0
        claimed = claims.get(console_type, [])
        for unit in range(1, total + 1):
            entry = {
                'id': station_name(console_type, unit),
                'console_type': console_type.value,
                'console_number': unit,
                'status': 'free',
                'booking': None,
            }
            if unit <= len(claimed):
                booking = claimed[unit - 1]
                start = parse_time_minutes(booking.start_time)
                end = session_end_minutes(booking.start_time, booking.duration)
                entry['status'] = 'busy'
                entry['booking'] = {
                    'id': booking.id,
                    'customer_name': booking_display_name(booking),
                    'start_time': booking.start_time or '-',
                    'end_time': minutes_to_12_hour(end) if end is not None else '-',
                    'time_remaining': minutes_remaining(booking.start_time, booking.duration, now),
                    'has_started': start is not None and current_minutes >= start,
                }
                busy_count += 1
            stations.append(entry)

    return {
        'stations': stations,
        'busy': busy_count,
        'free': len(stations) - busy_count,
        'total': len(stations),
    }
