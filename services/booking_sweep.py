# services/booking_sweep.py
"""
Auto-complete bookings whose session time has elapsed.

Past-dated confirmed/in-progress bookings are always completed. Bookings
dated today are completed once `now` is past start_time + duration,
compared as minutes since midnight of the booking date.
"""

import logging

from db.extensions import db
from models.booking import Booking, BookingStatus
from services.booking_events import publish_booking_change
from services.booking_lifecycle import ACTIVE_STATUSES
from services.time_utils import parse_time_minutes, minutes_since_midnight, now_ist

logger = logging.getLogger(__name__)


def session_end_minutes(start_time, duration):
    """start_time + duration in minutes since midnight, None if unknown."""
    start_minutes = parse_time_minutes(start_time)
    if start_minutes is None or not duration:
        return None
    return start_minutes + int(duration)


def is_booking_ended(booking_date, start_time, duration, now):
    """True when a booking dated `booking_date` has run past its end at `now`."""
    today = now.date()
    if booking_date < today:
        return True
    if booking_date > today:
        return False

    end = session_end_minutes(start_time, duration)
    if end is None:
        return False
    return minutes_since_midnight(now) > end


def minutes_remaining(start_time, duration, now):
    """Minutes left in a session running today; 999 when it cannot be computed."""
    end = session_end_minutes(start_time, duration)
    if end is None:
        return 999
    return max(0, end - minutes_since_midnight(now))


def find_expired(bookings, now):
    """Active bookings from `bookings` that should be reclassified as completed."""
    return [
        b for b in bookings
        if b.status in ACTIVE_STATUSES
        and b.booking_date is not None
        and is_booking_ended(b.booking_date, b.start_time, b.duration, now)
    ]


class BookingSweepService:

    @staticmethod
    def sweep(cafe_ids, now=None):
        """
        Mark ended bookings for the given cafés as completed and commit.
        Returns the completed bookings.
        """
        if not cafe_ids:
            return []
        now = now or now_ist()

        candidates = Booking.query.filter(
            Booking.cafe_id.in_(cafe_ids),
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.booking_date <= now.date(),
        ).all()

        expired = find_expired(candidates, now)
        if not expired:
            return []

        old_rows = {booking.id: booking.to_dict() for booking in expired}
        try:
            for booking in expired:
                booking.status = BookingStatus.COMPLETED.value
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"❌ Booking sweep failed for cafés {cafe_ids}: {str(e)}")
            raise

        logger.info(f"Auto-completed {len(expired)} ended booking(s) for {len(cafe_ids)} café(s)")
        for booking in expired:
            publish_booking_change('UPDATE', booking, old_row=old_rows[booking.id])
        return expired
