# models/consolePricing.py
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint, Enum
from sqlalchemy.orm import relationship
from db.extensions import db
from models.consoleType import ConsoleType


class ConsolePricing(db.Model):
    """
    Café specific price tier for a console type, unit/controller quantity
    and a duration bucket (30 or 60 minutes).
    """
    __tablename__ = 'console_pricing'

    id = Column(Integer, primary_key=True)
    cafe_id = Column(String(36), ForeignKey('cafes.id', ondelete='CASCADE'), nullable=False, index=True)
    console_type = Column(Enum(ConsoleType), nullable=False)
    quantity = Column(Integer, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Integer, nullable=True)

    cafe = relationship('Cafe', backref='console_pricing')

    __table_args__ = (
        UniqueConstraint('cafe_id', 'console_type', 'quantity', 'duration_minutes', name='uq_console_pricing_key'),
        CheckConstraint('duration_minutes IN (30, 60)', name='check_duration_bucket'),
        CheckConstraint('quantity >= 1', name='check_quantity_positive'),
    )

    def __repr__(self):
        return (f"<ConsolePricing cafe_id={self.cafe_id} type={self.console_type.value} "
                f"qty={self.quantity} {self.duration_minutes}min price={self.price}>")

    def to_dict(self):
        return {
            'cafe_id': self.cafe_id,
            'console_type': self.console_type.value,
            'quantity': self.quantity,
            'duration_minutes': self.duration_minutes,
            'price': self.price,
        }
