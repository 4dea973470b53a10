# services/booking_service.py

from datetime import datetime
from flask import current_app
from sqlalchemy.orm import selectinload

from db.extensions import db
from models.booking import Booking, BookingItem, BookingStatus, BookingSource, PaymentMode
from models.cafe import Cafe
from models.consoleType import ConsoleType
from models.profile import Profile
from services import booking_lifecycle
from services.booking_events import publish_booking_change
from services.capacity import check_capacity
from services.errors import BookingNotFound, BookingValidationError
from services.pricing import resolve_price
from services.pricing_service import PricingService
from services.stations import booking_display_name
from services.time_utils import to_12_hour, to_24_hour, now_ist


def parse_booking_date(value, default=None):
    if not value:
        if default is not None:
            return default
        raise BookingValidationError("booking_date is required")
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except ValueError:
        raise BookingValidationError(f"Invalid booking_date '{value}', expected YYYY-MM-DD")


def normalize_start_time(value):
    """
    Accept "6:30 pm" or "18:30" and return the stored 12-hour form.
    """
    if not value or not isinstance(value, str):
        raise BookingValidationError("start_time is required")

    twenty_four = to_24_hour(value)
    if twenty_four:
        return to_12_hour(twenty_four)

    twelve = to_12_hour(value)
    if twelve:
        return twelve
    raise BookingValidationError(f"Invalid start_time '{value}'")


def parse_duration(value):
    try:
        duration = int(value)
    except (TypeError, ValueError):
        raise BookingValidationError("duration must be a number of minutes")
    if duration <= 0 or duration % 30 != 0:
        raise BookingValidationError("duration must be a positive multiple of 30 minutes")
    return duration


def parse_items(raw_items):
    items = []
    for raw in raw_items or []:
        console_type = ConsoleType.parse(raw.get('console'))
        if console_type is None:
            raise BookingValidationError(f"Unknown console type '{raw.get('console')}'")
        try:
            quantity = int(raw.get('quantity') or 1)
        except (TypeError, ValueError):
            raise BookingValidationError("quantity must be a number")
        if quantity < 1:
            raise BookingValidationError("quantity must be at least 1")
        items.append({'console': console_type, 'quantity': quantity})

    if not items:
        raise BookingValidationError("Please select at least one console.")
    return items


def parse_payment_mode(value, default):
    mode = (value or default).lower()
    if mode not in [m.value for m in PaymentMode]:
        raise BookingValidationError(f"Invalid payment_mode '{value}'")
    return mode


def enrich_booking(booking, cafe_names=None):
    """Booking row plus the display fields the dashboard tables need."""
    row = booking.to_dict()
    profile = booking.profile if booking.user_id else None
    row.update({
        'user_name': booking_display_name(booking),
        'user_phone': (profile.phone if profile else None) or booking.customer_phone,
        'cafe_name': (cafe_names or {}).get(booking.cafe_id),
        'allowed_actions': booking_lifecycle.allowed_actions(booking),
    })
    return row


class BookingService:

    @staticmethod
    def _price_items(cafe, items, duration):
        tier_table = PricingService.tier_table([cafe.id])
        for item in items:
            item['price'] = resolve_price(
                cafe.id, item['console'], item['quantity'], duration, tier_table, cafe.hourly_price
            )
        return sum(item['price'] for item in items)

    @staticmethod
    def _commit_new(booking, items):
        for item in items:
            booking.items.append(BookingItem(console=item['console'], quantity=item['quantity'],
                                             price=item.get('price')))
        try:
            db.session.add(booking)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to save booking for café {booking.cafe_id}: {str(e)}")
            raise

        publish_booking_change('INSERT', booking)
        return booking

    @staticmethod
    def create_online_booking(data, user_id=None):
        cafe = Cafe.query.get(data.get('cafe_id'))
        if not cafe or not cafe.is_active:
            raise BookingNotFound("Café not found")

        booking_date = parse_booking_date(data.get('booking_date'))
        start_time = normalize_start_time(data.get('start_time'))
        duration = parse_duration(data.get('duration', 60))
        items = parse_items(data.get('items'))

        if user_id and not Profile.query.get(user_id):
            raise BookingValidationError("Unknown user_id")
        if not user_id and not data.get('customer_name'):
            raise BookingValidationError("customer_name is required for bookings without an account")

        check_capacity(cafe, booking_date, start_time, duration, items)
        total = BookingService._price_items(cafe, items, duration)

        booking = Booking(
            cafe_id=cafe.id,
            user_id=user_id,
            booking_date=booking_date,
            start_time=start_time,
            duration=duration,
            total_amount=total,
            status=BookingStatus.PENDING.value,
            source=BookingSource.ONLINE.value,
            payment_mode=parse_payment_mode(data.get('payment_mode'), PaymentMode.ONLINE.value),
            customer_name=data.get('customer_name'),
            customer_phone=data.get('customer_phone'),
        )
        current_app.logger.info(
            f"New online booking for café {cafe.id} on {booking_date} at {start_time} ({duration} min)"
        )
        return BookingService._commit_new(booking, items)

    @staticmethod
    def create_walk_in(cafe, data, now=None):
        """
        Walk-ins without a start time begin now and are created in-progress;
        with an explicit start time they are created confirmed.
        """
        now = now or now_ist()
        customer_name = (data.get('customer_name') or '').strip()
        if not customer_name:
            raise BookingValidationError("customer_name is required for walk-in bookings")

        duration = parse_duration(data.get('duration', 60))
        items = parse_items(data.get('items'))
        booking_date = parse_booking_date(data.get('booking_date'), default=now.date())

        if data.get('start_time'):
            start_time = normalize_start_time(data['start_time'])
            status = BookingStatus.CONFIRMED.value
        else:
            start_time = to_12_hour(now=now)
            status = BookingStatus.IN_PROGRESS.value

        if data.get('total_amount') is not None:
            try:
                total = int(data['total_amount'])
            except (TypeError, ValueError):
                raise BookingValidationError("total_amount must be a number")
        else:
            total = BookingService._price_items(cafe, items, duration)

        booking = Booking(
            cafe_id=cafe.id,
            user_id=None,
            booking_date=booking_date,
            start_time=start_time,
            duration=duration,
            total_amount=total,
            status=status,
            source=BookingSource.WALK_IN.value,
            payment_mode=parse_payment_mode(data.get('payment_mode'), PaymentMode.CASH.value),
            customer_name=customer_name,
            customer_phone=data.get('customer_phone'),
        )
        current_app.logger.info(f"Walk-in booking for {customer_name} at café {cafe.id} ({status})")
        return BookingService._commit_new(booking, items)

    @staticmethod
    def get_owned_booking(booking_id, cafe_ids):
        booking = Booking.query.get(booking_id)
        if not booking or booking.cafe_id not in cafe_ids:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return booking

    @staticmethod
    def transition(booking_id, action, cafe_ids, now=None):
        booking = BookingService.get_owned_booking(booking_id, cafe_ids)
        booking_lifecycle.apply_transition(booking, action, now=now or now_ist())

        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to {action} booking {booking_id}: {str(e)}")
            raise

        current_app.logger.info(f"Booking {booking_id} -> {booking.status} ({action})")
        publish_booking_change('UPDATE', booking)
        return booking

    @staticmethod
    def edit(booking_id, data, cafe_ids):
        """
        Owner edit: may rewrite date, time, duration, console, controllers,
        amount, status and payment mode regardless of the current state.
        """
        booking = BookingService.get_owned_booking(booking_id, cafe_ids)
        old_row = booking.to_dict()

        try:
            if 'booking_date' in data:
                booking.booking_date = parse_booking_date(data['booking_date'])
            if data.get('start_time'):
                booking.start_time = normalize_start_time(data['start_time'])
            if 'duration' in data:
                booking.duration = parse_duration(data['duration'])
            if 'total_amount' in data:
                try:
                    booking.total_amount = int(data['total_amount']) if data['total_amount'] is not None else None
                except (TypeError, ValueError):
                    raise BookingValidationError("total_amount must be a number")
            if 'status' in data:
                if data['status'] not in [s.value for s in BookingStatus]:
                    raise BookingValidationError(f"Invalid status '{data['status']}'")
                booking.status = data['status']
            if 'payment_mode' in data:
                booking.payment_mode = parse_payment_mode(data['payment_mode'], PaymentMode.CASH.value)
            if 'customer_name' in data:
                booking.customer_name = data['customer_name']
            if 'customer_phone' in data:
                booking.customer_phone = data['customer_phone']

            if 'console' in data or 'controllers' in data:
                BookingService._edit_first_item(booking, data.get('console'), data.get('controllers'))

            if booking.user_id is None and not booking.customer_name:
                raise BookingValidationError("customer_name is required for bookings without an account")

            db.session.commit()
        except BookingValidationError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to update booking {booking_id}: {str(e)}")
            raise

        current_app.logger.info(f"Booking {booking_id} edited by owner")
        publish_booking_change('UPDATE', booking, old_row=old_row)
        return booking

    @staticmethod
    def _edit_first_item(booking, console, controllers):
        item = booking.items[0] if booking.items else None
        if item is None:
            item = BookingItem(quantity=1)
            booking.items.append(item)

        if console is not None:
            console_type = ConsoleType.parse(console)
            if console_type is None:
                raise BookingValidationError(f"Unknown console type '{console}'")
            item.console = console_type
        if controllers is not None:
            try:
                item.quantity = max(1, int(controllers))
            except (TypeError, ValueError):
                raise BookingValidationError("controllers must be a number")
        if item.console is None:
            raise BookingValidationError("console is required")

    @staticmethod
    def owner_bookings(cafes):
        cafe_names = {cafe.id: cafe.name for cafe in cafes}
        if not cafe_names:
            return []

        bookings = (
            Booking.query
            .options(selectinload(Booking.items), selectinload(Booking.profile))
            .filter(Booking.cafe_id.in_(list(cafe_names)))
            .order_by(Booking.created_at.desc())
            .all()
        )
        return [enrich_booking(b, cafe_names) for b in bookings]

    @staticmethod
    def todays_in_progress(cafe_id, today):
        return (
            Booking.query
            .options(selectinload(Booking.items), selectinload(Booking.profile))
            .filter(
                Booking.cafe_id == cafe_id,
                Booking.booking_date == today,
                Booking.status == BookingStatus.IN_PROGRESS.value,
            )
            .order_by(Booking.created_at)
            .all()
        )
