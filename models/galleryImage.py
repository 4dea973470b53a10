# models/galleryImage.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from db.extensions import db
from sqlalchemy.orm import relationship
from datetime import datetime


class GalleryImage(db.Model):
    __tablename__ = 'gallery_images'

    id = Column(Integer, primary_key=True)
    cafe_id = Column(String(36), ForeignKey('cafes.id'), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    public_id = Column(String(255), nullable=False)  # Cloudinary public id
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    cafe = relationship('Cafe', back_populates='images')

    def to_dict(self):
        return {'id': self.id, 'url': self.url, 'public_id': self.public_id}
