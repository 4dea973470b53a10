# models/profile.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime
import uuid

OWNER_ROLES = ('owner', 'admin', 'super_admin')


class Profile(db.Model):
    __tablename__ = 'profiles'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default='customer')

    # Owner dashboard credentials
    username = Column(String(100), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    cafes = relationship('Cafe', back_populates='owner')

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part) or None

    @property
    def is_owner(self):
        return (self.role or '').lower() in OWNER_ROLES

    def __repr__(self):
        return f"<Profile id={self.id} role={self.role}>"
