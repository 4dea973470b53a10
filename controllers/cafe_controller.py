# controllers/cafe_controller.py

from flask import Blueprint, current_app, g, jsonify, request

from models.cafe import Cafe
from models.galleryImage import GalleryImage
from services.cafe_service import CafeService
from services.errors import BookingNotFound, BookingValidationError
from services.owner_session import owner_required

cafe_bp = Blueprint('cafe', __name__)


# Public listing

@cafe_bp.route('/cafes', methods=['GET'])
def list_cafes():
    query = Cafe.query.filter_by(is_active=True)
    city = request.args.get('city')
    if city:
        query = query.filter(Cafe.city.ilike(city))
    cafes = query.order_by(Cafe.name).all()
    return jsonify({'success': True, 'cafes': [cafe.to_dict() for cafe in cafes]}), 200


@cafe_bp.route('/cafes/<string:cafe_id>', methods=['GET'])
def get_cafe(cafe_id):
    cafe = Cafe.query.get(cafe_id)
    if not cafe or not cafe.is_active:
        raise BookingNotFound("Café not found")

    data = cafe.to_dict()
    data['images'] = [image.to_dict() for image in cafe.images]
    return jsonify({'success': True, 'cafe': data}), 200


# Owner management

@cafe_bp.route('/owner/cafes', methods=['GET'])
@owner_required
def owner_cafes():
    cafes = CafeService.owner_cafes(g.owner_id)
    return jsonify({'success': True, 'cafes': [cafe.to_dict() for cafe in cafes]}), 200


@cafe_bp.route('/owner/cafes', methods=['POST'])
@owner_required
def create_cafe():
    data = request.get_json(silent=True) or {}
    cafe = CafeService.create_cafe(g.owner_id, data)
    return jsonify({'success': True, 'message': 'Café created', 'cafe': cafe.to_dict()}), 201


@cafe_bp.route('/owner/cafes/<string:cafe_id>', methods=['GET'])
@owner_required
def owner_cafe_detail(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    return jsonify({'success': True, 'cafe': cafe.to_dict()}), 200


@cafe_bp.route('/owner/cafes/<string:cafe_id>', methods=['PUT'])
@owner_required
def update_cafe(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    data = request.get_json(silent=True) or {}
    cafe = CafeService.update_cafe(cafe, data)
    return jsonify({'success': True, 'message': 'Café updated', 'cafe': cafe.to_dict()}), 200


@cafe_bp.route('/owner/cafes/<string:cafe_id>/inventory', methods=['PUT'])
@owner_required
def update_inventory(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    data = request.get_json(silent=True) or {}
    inventory = data.get('inventory', data)
    if not isinstance(inventory, dict):
        raise BookingValidationError("inventory must be an object of console type to count")

    cafe = CafeService.update_cafe(cafe, {'inventory': inventory})
    return jsonify({
        'success': True,
        'inventory': {console_type.value: count for console_type, count in cafe.inventory.items()},
    }), 200


@cafe_bp.route('/owner/cafes/<string:cafe_id>/cover', methods=['POST'])
@owner_required
def upload_cover(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    if 'image' not in request.files:
        return jsonify({'success': False, 'message': 'No image file provided'}), 400

    result = CafeService.update_cover(cafe, request.files['image'])
    if not result['success']:
        return jsonify({'success': False, 'message': result['error']}), 400

    return jsonify({'success': True, 'cover_url': result['url']}), 200


@cafe_bp.route('/owner/cafes/<string:cafe_id>/gallery', methods=['GET'])
@owner_required
def list_gallery(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    images = (
        GalleryImage.query
        .filter_by(cafe_id=cafe.id)
        .order_by(GalleryImage.uploaded_at.desc())
        .all()
    )
    return jsonify({'success': True, 'images': [image.to_dict() for image in images]}), 200


@cafe_bp.route('/owner/cafes/<string:cafe_id>/gallery', methods=['POST'])
@owner_required
def add_gallery_image(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    if 'image' not in request.files:
        return jsonify({'success': False, 'message': 'No image file provided'}), 400

    result, image = CafeService.add_gallery_image(cafe, request.files['image'])
    if not result['success']:
        return jsonify({'success': False, 'message': result['error']}), 400

    current_app.logger.info(f"Gallery image {image.id} added to café {cafe.id}")
    return jsonify({'success': True, 'image': image.to_dict()}), 201


@cafe_bp.route('/owner/cafes/<string:cafe_id>/gallery/<int:image_id>', methods=['DELETE'])
@owner_required
def delete_gallery_image(cafe_id, image_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    result = CafeService.delete_gallery_image(cafe, image_id)
    if not result['success']:
        return jsonify({'success': False, 'message': f"Failed to delete image: {result['error']}"}), 502

    return jsonify({'success': True, 'message': 'Image deleted', 'image_id': image_id}), 200
