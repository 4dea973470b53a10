# models/membershipPlan.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime

PLAN_TYPES = ('day_pass', 'hourly_package')
PLAYER_COUNTS = ('single', 'double')


class MembershipPlan(db.Model):
    __tablename__ = 'membership_plans'

    id = Column(Integer, primary_key=True)
    cafe_id = Column(String(36), ForeignKey('cafes.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    plan_type = Column(String(20), nullable=False)
    console_type = Column(String(50), nullable=False)
    player_count = Column(String(10), nullable=False, default='single')
    price = Column(Integer, nullable=False)
    hours = Column(Integer, nullable=True)          # allotment for hourly packages
    validity_days = Column(Integer, nullable=False, default=30)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    cafe = relationship('Cafe', backref='membership_plans')

    EDITABLE_FIELDS = (
        'name', 'plan_type', 'console_type', 'player_count', 'price',
        'hours', 'validity_days', 'description', 'is_active',
    )

    def __repr__(self):
        return f"<MembershipPlan id={self.id} cafe_id={self.cafe_id} type={self.plan_type}>"

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data.update({'id': self.id, 'cafe_id': self.cafe_id})
        return data
