# services/cloudinary_services.py
"""
Cloudinary storage for café cover and gallery images.
Upload helpers return a result dict instead of raising so controllers can
report failures inline.
"""

import cloudinary
import cloudinary.uploader
from flask import current_app
from datetime import datetime
from werkzeug.utils import secure_filename

ALLOWED_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp', 'gif'}
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def allowed_image(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def _failure(error):
    return {'success': False, 'error': error, 'url': None, 'public_id': None}


class CloudinaryImageService:

    @staticmethod
    def is_cloudinary_configured():
        return all([
            current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            current_app.config.get('CLOUDINARY_API_KEY'),
            current_app.config.get('CLOUDINARY_API_SECRET')
        ])

    @staticmethod
    def configure_cloudinary():
        if not CloudinaryImageService.is_cloudinary_configured():
            current_app.logger.warning("Cloudinary credentials not configured")
            return False

        cloudinary.config(
            cloud_name=current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            api_key=current_app.config.get('CLOUDINARY_API_KEY'),
            api_secret=current_app.config.get('CLOUDINARY_API_SECRET'),
            secure=True,
        )
        return True

    @staticmethod
    def _file_size(image_file):
        image_file.seek(0, 2)
        size = image_file.tell()
        image_file.seek(0)
        return size

    @staticmethod
    def upload_cafe_image(image_file, cafe_name, cafe_id, kind='gallery'):
        """
        Upload a café image under <folder>/<cafe>_ID_<id>/.
        `kind` is 'cover' (overwritten in place) or 'gallery'.
        """
        if not image_file or image_file.filename == '':
            return _failure('No image file provided')

        if not allowed_image(image_file.filename):
            return _failure(f"Unsupported image type. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}")

        try:
            if CloudinaryImageService._file_size(image_file) > MAX_IMAGE_BYTES:
                return _failure('File too large (max 10MB)')
        except (OSError, AttributeError) as e:
            current_app.logger.warning(f"Could not check file size: {str(e)}")

        if not CloudinaryImageService.configure_cloudinary():
            return _failure('Cloudinary not configured')

        safe_cafe_name = secure_filename((cafe_name or 'cafe').replace(' ', '_').lower()) or 'cafe'
        folder = f"{current_app.config.get('CLOUDINARY_FOLDER', 'CAFES')}/{safe_cafe_name}_ID_{cafe_id}"
        if kind == 'cover':
            public_id = 'cover'
        else:
            public_id = f"gallery_{int(datetime.utcnow().timestamp() * 1000)}"

        try:
            upload_result = cloudinary.uploader.upload(
                image_file,
                folder=folder,
                public_id=public_id,
                resource_type="image",
                overwrite=(kind == 'cover'),
                quality="auto:good",
                transformation=[{'width': 1600, 'crop': 'limit'}],
            )
        except cloudinary.exceptions.Error as ce:
            current_app.logger.error(f"Cloudinary API error: {str(ce)}")
            return _failure(f"Cloudinary API error: {str(ce)}")

        if 'secure_url' not in upload_result or 'public_id' not in upload_result:
            current_app.logger.error(f"Missing required keys in Cloudinary response: {upload_result}")
            return _failure('Invalid response from Cloudinary - missing URL or public_id')

        current_app.logger.info(f"Café {kind} image uploaded: {upload_result['secure_url']}")
        return {
            'success': True,
            'url': upload_result['secure_url'],
            'public_id': upload_result['public_id'],
            'error': None
        }

    @staticmethod
    def delete_image(public_id):
        if not CloudinaryImageService.configure_cloudinary():
            return {'success': False, 'error': 'Cloudinary not configured'}

        try:
            result = cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error as ce:
            current_app.logger.error(f"Error deleting image {public_id}: {str(ce)}")
            return {'success': False, 'error': str(ce)}

        if result.get('result') in ('ok', 'not found'):
            current_app.logger.info(f"Deleted image: {public_id}")
            return {'success': True, 'error': None}

        current_app.logger.warning(f"Failed to delete image: {public_id}, result: {result}")
        return {'success': False, 'error': f"Delete failed: {result.get('result', 'unknown error')}"}
