# services/booking_lifecycle.py
"""
Owner-driven booking transitions.

    pending   --confirm-->  confirmed      (online bookings only)
    confirmed --start---->  in-progress    (online bookings only, start_time := now)
    *         --sweep---->  completed      (system, see booking_sweep)
    *         --edit----->  anything       (escape hatch, no guards)
"""

from models.booking import BookingStatus, BookingSource
from services.errors import InvalidTransition
from services.time_utils import to_12_hour

CONFIRM = 'confirm'
START = 'start'
EDIT = 'edit'

_GUARDED_TRANSITIONS = {
    CONFIRM: (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value),
    START: (BookingStatus.CONFIRMED.value, BookingStatus.IN_PROGRESS.value),
}

ACTIVE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.IN_PROGRESS.value)


def can_apply(booking, action):
    if action == EDIT:
        return True
    if action not in _GUARDED_TRANSITIONS:
        return False
    required_status, _ = _GUARDED_TRANSITIONS[action]
    return booking.status == required_status and booking.source == BookingSource.ONLINE.value


def allowed_actions(booking):
    """Owner actions enabled for this booking's state and source."""
    return [action for action in (CONFIRM, START, EDIT) if can_apply(booking, action)]


def apply_transition(booking, action, now=None):
    """
    Mutate `booking` for a guarded action. The caller persists it.
    Raises InvalidTransition when the guard does not hold.
    """
    if action not in _GUARDED_TRANSITIONS:
        raise InvalidTransition(f"Unknown booking action '{action}'")
    if not can_apply(booking, action):
        raise InvalidTransition(
            f"Cannot {action} a {booking.source} booking in status '{booking.status}'"
        )

    _, target_status = _GUARDED_TRANSITIONS[action]
    booking.status = target_status
    if action == START:
        # The session starts now, not at the originally scheduled time
        booking.start_time = to_12_hour(now=now)
    return booking
