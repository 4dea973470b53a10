# services/cafe_service.py

import re
from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from db.extensions import db
from models.cafe import Cafe
from models.galleryImage import GalleryImage
from models.profile import Profile
from services.cloudinary_services import CloudinaryImageService
from services.errors import BookingValidationError, BookingNotFound


def slugify(name):
    slug = re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')
    return slug or None


def _unique_slug(name, cafe_id=None):
    base = slugify(name)
    if not base:
        return None
    slug, counter = base, 2
    while True:
        clash = Cafe.query.filter(Cafe.slug == slug, Cafe.id != cafe_id).first()
        if not clash:
            return slug
        slug = f"{base}-{counter}"
        counter += 1


class OwnerAuthService:

    @staticmethod
    def authenticate(username, password):
        """Return the owner Profile for valid credentials, else None."""
        profile = Profile.query.filter_by(username=username).first()
        if not profile or not profile.password_hash:
            return None
        if not check_password_hash(profile.password_hash, password):
            return None
        if not profile.is_owner:
            current_app.logger.warning(f"Login attempt by non-owner account {profile.id}")
            return None
        return profile

    @staticmethod
    def create_owner(username, password, first_name=None, last_name=None, email=None, phone=None, role='owner'):
        profile = Profile(
            username=username,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            role=role,
        )
        db.session.add(profile)
        db.session.commit()
        return profile


class CafeService:

    @staticmethod
    def owner_cafes(owner_id):
        return (
            Cafe.query
            .filter_by(owner_id=owner_id)
            .order_by(Cafe.created_at.desc())
            .all()
        )

    @staticmethod
    def get_owned_cafe(cafe_id, owner_id):
        cafe = Cafe.query.get(cafe_id)
        if not cafe or cafe.owner_id != owner_id:
            raise BookingNotFound("Café not found")
        return cafe

    @staticmethod
    def _apply_fields(cafe, data):
        for field in Cafe.EDITABLE_FIELDS:
            if field in data:
                setattr(cafe, field, data[field])

        if cafe.hourly_price is not None:
            try:
                cafe.hourly_price = int(cafe.hourly_price)
            except (TypeError, ValueError):
                raise BookingValidationError("hourly_price must be a whole number")
            if cafe.hourly_price < 0:
                raise BookingValidationError("hourly_price cannot be negative")

    @staticmethod
    def create_cafe(owner_id, data):
        if not (data.get('name') or '').strip():
            raise BookingValidationError("Café name is required")

        cafe = Cafe(owner_id=owner_id)
        try:
            CafeService._apply_fields(cafe, data)
            cafe.slug = data.get('slug') or _unique_slug(cafe.name)
            if data.get('inventory'):
                cafe.set_inventory(data['inventory'])
            db.session.add(cafe)
            db.session.commit()
        except ValueError as e:
            db.session.rollback()
            raise BookingValidationError(str(e))
        except BookingValidationError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to create café for owner {owner_id}: {str(e)}")
            raise

        current_app.logger.info(f"Café created with ID: {cafe.id}")
        return cafe

    @staticmethod
    def update_cafe(cafe, data):
        try:
            CafeService._apply_fields(cafe, data)
            if 'name' in data and 'slug' not in data and not cafe.slug:
                cafe.slug = _unique_slug(cafe.name, cafe.id)
            if 'inventory' in data:
                cafe.set_inventory(data['inventory'] or {})
            db.session.commit()
        except ValueError as e:
            db.session.rollback()
            raise BookingValidationError(str(e))
        except BookingValidationError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to update café {cafe.id}: {str(e)}")
            raise
        return cafe

    @staticmethod
    def update_cover(cafe, image_file):
        result = CloudinaryImageService.upload_cafe_image(image_file, cafe.name, cafe.id, kind='cover')
        if not result['success']:
            return result

        cafe.cover_url = result['url']
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to store cover for café {cafe.id}: {str(e)}")
            raise
        return result

    @staticmethod
    def add_gallery_image(cafe, image_file):
        result = CloudinaryImageService.upload_cafe_image(image_file, cafe.name, cafe.id, kind='gallery')
        if not result['success']:
            return result, None

        image = GalleryImage(cafe_id=cafe.id, url=result['url'], public_id=result['public_id'])
        try:
            db.session.add(image)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to store gallery image for café {cafe.id}: {str(e)}")
            raise
        return result, image

    @staticmethod
    def delete_gallery_image(cafe, image_id):
        image = GalleryImage.query.filter_by(id=image_id, cafe_id=cafe.id).first()
        if not image:
            raise BookingNotFound("Image not found or does not belong to this café")

        storage_result = CloudinaryImageService.delete_image(image.public_id)
        if not storage_result['success']:
            # Keep the row when storage deletion fails so it can be retried
            current_app.logger.warning(f"Cloudinary deletion failed for {image.public_id}: {storage_result['error']}")
            return storage_result

        try:
            db.session.delete(image)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to delete gallery image {image_id}: {str(e)}")
            raise
        return storage_result
