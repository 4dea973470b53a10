# models/cafe.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum
from sqlalchemy.orm import relationship
from db.extensions import db
from datetime import datetime
from models.consoleType import ConsoleType
import uuid


class Cafe(db.Model):
    __tablename__ = 'cafes'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey('profiles.id'), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    opening_hours = Column(String(255), nullable=True)  # e.g. "Mon-Sun: 10:00 AM - 11:00 PM"
    peak_hours = Column(String(255), nullable=True)
    popular_games = Column(Text, nullable=True)
    offers = Column(Text, nullable=True)

    hourly_price = Column(Integer, nullable=True)
    cover_url = Column(String(500), nullable=True)

    # Technical specs shown on the café page
    monitor_details = Column(String(255), nullable=True)
    processor_details = Column(String(255), nullable=True)
    gpu_details = Column(String(255), nullable=True)
    ram_details = Column(String(255), nullable=True)
    accessories_details = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship('Profile', back_populates='cafes')
    consoles = relationship('CafeConsole', back_populates='cafe', cascade="all, delete-orphan")
    bookings = relationship('Booking', back_populates='cafe')
    images = relationship('GalleryImage', back_populates='cafe', cascade="all, delete-orphan")

    EDITABLE_FIELDS = (
        'name', 'slug', 'address', 'city', 'description', 'phone', 'email', 'website',
        'opening_hours', 'peak_hours', 'popular_games', 'offers', 'hourly_price',
        'monitor_details', 'processor_details', 'gpu_details', 'ram_details',
        'accessories_details', 'is_active',
    )

    @property
    def inventory(self):
        """Console inventory as {ConsoleType: count}, zero counts omitted."""
        return {c.console_type: c.count for c in self.consoles if c.count}

    def set_inventory(self, counts):
        """Replace inventory counts; `counts` maps ConsoleType (or its name) to int."""
        existing = {c.console_type: c for c in self.consoles}
        for key, count in counts.items():
            console_type = ConsoleType.parse(key)
            if console_type is None:
                raise ValueError(f"Unknown console type: {key}")
            count = int(count or 0)
            if count < 0:
                raise ValueError(f"Console count for {console_type.value} cannot be negative")

            if console_type in existing:
                existing[console_type].count = count
            else:
                self.consoles.append(CafeConsole(console_type=console_type, count=count))

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data.update({
            'id': self.id,
            'owner_id': self.owner_id,
            'cover_url': self.cover_url,
            'inventory': {console_type.value: count for console_type, count in self.inventory.items()},
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        })
        return data

    def __repr__(self):
        return f"<Cafe id={self.id} name='{self.name}'>"


class CafeConsole(db.Model):
    __tablename__ = 'cafe_consoles'

    id = Column(Integer, primary_key=True)
    cafe_id = Column(String(36), ForeignKey('cafes.id', ondelete='CASCADE'), nullable=False, index=True)
    console_type = Column(Enum(ConsoleType), nullable=False)
    count = Column(Integer, nullable=False, default=0)

    cafe = relationship('Cafe', back_populates='consoles')

    __table_args__ = (
        UniqueConstraint('cafe_id', 'console_type', name='uq_cafe_console_type'),
    )

    def __repr__(self):
        return f"<CafeConsole cafe_id={self.cafe_id} type={self.console_type.value} count={self.count}>"
