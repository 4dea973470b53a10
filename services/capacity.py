# services/capacity.py
from models.booking import Booking, BookingStatus
from models.consoleType import ConsoleType
from services.errors import CapacityExceeded, BookingValidationError
from services.time_utils import parse_time_minutes


def windows_overlap(start_a, duration_a, start_b, duration_b):
    return start_a < start_b + duration_b and start_b < start_a + duration_a


def aggregate_requested(items):
    """Sum requested quantities per console type, ignoring empty lines."""
    requested = {}
    for item in items:
        console_type = ConsoleType.parse(item.get('console'))
        quantity = int(item.get('quantity') or 0)
        if console_type is None or quantity <= 0:
            continue
        requested[console_type] = requested.get(console_type, 0) + quantity
    return requested


def booked_quantities(bookings, start_minutes, duration):
    """Units already claimed per console by bookings overlapping the window."""
    booked = {}
    for booking in bookings:
        other_start = parse_time_minutes(booking.start_time)
        if other_start is None:
            continue
        # Bookings without a duration are assumed to hold the same window length
        other_duration = booking.duration or duration
        if not windows_overlap(start_minutes, duration, other_start, other_duration):
            continue
        for item in booking.items:
            booked[item.console] = booked.get(item.console, 0) + (item.quantity or 0)
    return booked


def check_capacity(cafe, booking_date, start_time, duration, items):
    """
    Raise CapacityExceeded if the requested consoles are not free for
    [start_time, start_time + duration) on booking_date.
    """
    requested = aggregate_requested(items)
    if not requested:
        raise BookingValidationError("Please select at least one console.")

    start_minutes = parse_time_minutes(start_time)
    if start_minutes is None:
        raise BookingValidationError(f"Invalid start time '{start_time}'")

    query = Booking.query.filter(
        Booking.cafe_id == cafe.id,
        Booking.booking_date == booking_date,
        Booking.status != BookingStatus.CANCELLED.value,
    )
    booked = booked_quantities(query.all(), start_minutes, duration)
    inventory = cafe.inventory

    for console_type, quantity in requested.items():
        remaining = (inventory.get(console_type) or 0) - booked.get(console_type, 0)
        if quantity > remaining:
            if remaining > 0:
                raise CapacityExceeded(
                    f"Only {remaining} {console_type.label} setup(s) available for this time slot. "
                    f"Another booking overlaps with your selected time."
                )
            raise CapacityExceeded(
                f"No {console_type.label} setups available. All are booked for overlapping time slots."
            )
    return requested
