# models/stationPricing.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime


class StationPricing(db.Model):
    __tablename__ = 'station_pricing'

    id = Column(Integer, primary_key=True)
    cafe_id = Column(String(36), ForeignKey('cafes.id', ondelete='CASCADE'), nullable=False, index=True)
    station_name = Column(String(50), nullable=False)   # "PS5-01"
    station_type = Column(String(50), nullable=False)   # console type value
    station_number = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Non-gaming stations (pool, snooker, pc, ...)
    half_hour_rate = Column(Integer, nullable=True)
    hourly_rate = Column(Integer, nullable=True)

    # Gaming consoles, per controller count. Null for 2-4 means not offered.
    controller_1_half_hour = Column(Integer, nullable=True)
    controller_1_full_hour = Column(Integer, nullable=True)
    controller_2_half_hour = Column(Integer, nullable=True)
    controller_2_full_hour = Column(Integer, nullable=True)
    controller_3_half_hour = Column(Integer, nullable=True)
    controller_3_full_hour = Column(Integer, nullable=True)
    controller_4_half_hour = Column(Integer, nullable=True)
    controller_4_full_hour = Column(Integer, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    cafe = relationship('Cafe', backref='station_pricing')

    __table_args__ = (
        UniqueConstraint('cafe_id', 'station_name', name='uq_station_pricing_station'),
    )

    RATE_FIELDS = (
        'half_hour_rate', 'hourly_rate',
        'controller_1_half_hour', 'controller_1_full_hour',
        'controller_2_half_hour', 'controller_2_full_hour',
        'controller_3_half_hour', 'controller_3_full_hour',
        'controller_4_half_hour', 'controller_4_full_hour',
    )

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.RATE_FIELDS}
        data.update({
            'cafe_id': self.cafe_id,
            'station_name': self.station_name,
            'station_type': self.station_type,
            'station_number': self.station_number,
            'is_active': self.is_active,
        })
        return data
