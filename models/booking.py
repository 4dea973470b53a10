# models/booking.py
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime
from models.consoleType import ConsoleType
import enum
import uuid
import pytz


IST = pytz.timezone('Asia/Kolkata')


class BookingStatus(str, enum.Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class BookingSource(str, enum.Enum):
    ONLINE = 'online'
    WALK_IN = 'walk-in'


class PaymentMode(str, enum.Enum):
    CASH = 'cash'
    UPI = 'upi'
    CARD = 'card'
    ONLINE = 'online'


def _now_ist():
    return datetime.now(IST).replace(tzinfo=None)


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cafe_id = Column(String(36), ForeignKey('cafes.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('profiles.id'), nullable=True, index=True)  # None for walk-ins

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(20), nullable=True)   # "6:30 pm"
    duration = Column(Integer, nullable=True)        # minutes
    total_amount = Column(Integer, nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    source = Column(String(20), nullable=False, default=BookingSource.ONLINE.value)
    payment_mode = Column(String(20), nullable=True)

    # Walk-in customer details, only used when user_id is None
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    # Timestamps stored as IST naive datetimes
    created_at = Column(DateTime, default=_now_ist, nullable=False)
    updated_at = Column(DateTime, default=_now_ist, onupdate=_now_ist, nullable=False)

    cafe = relationship('Cafe', back_populates='bookings')
    profile = relationship('Profile')
    items = relationship('BookingItem', back_populates='booking', cascade="all, delete-orphan",
                         order_by='BookingItem.id')

    @property
    def is_walk_in(self):
        return self.source == BookingSource.WALK_IN.value

    def __repr__(self):
        return f"<Booking id={self.id} cafe_id={self.cafe_id} status={self.status}>"

    def to_dict(self):
        return {
            'id': self.id,
            'cafe_id': self.cafe_id,
            'user_id': self.user_id,
            'booking_date': self.booking_date.isoformat() if self.booking_date else None,
            'start_time': self.start_time,
            'duration': self.duration,
            'total_amount': self.total_amount,
            'status': self.status,
            'source': self.source,
            'payment_mode': self.payment_mode,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'booking_items': [item.to_dict() for item in self.items],
        }


class BookingItem(db.Model):
    __tablename__ = 'booking_items'

    id = Column(Integer, primary_key=True)
    booking_id = Column(String(36), ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, index=True)
    console = Column(Enum(ConsoleType), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)  # units, or controllers for gaming consoles
    price = Column(Integer, nullable=True)

    booking = relationship('Booking', back_populates='items')

    def to_dict(self):
        return {
            'id': self.id,
            'console': self.console.value if self.console else None,
            'quantity': self.quantity,
            'price': self.price,
        }
