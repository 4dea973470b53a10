# controllers/pricing_controller.py

from flask import Blueprint, g, jsonify, request

from models.cafe import Cafe
from services.cafe_service import CafeService
from services.errors import BookingNotFound, BookingValidationError
from services.owner_session import owner_required
from services.pricing_service import PricingService, tier_table_to_json

pricing_bp = Blueprint('pricing', __name__)


@pricing_bp.route('/owner/cafes/<string:cafe_id>/console-pricing', methods=['GET'])
@owner_required
def get_console_pricing(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    table = tier_table_to_json(PricingService.tier_table([cafe.id]))
    return jsonify({'success': True, 'pricing': table.get(cafe.id, {})}), 200


@pricing_bp.route('/owner/cafes/<string:cafe_id>/console-pricing', methods=['PUT'])
@owner_required
def save_console_pricing(cafe_id):
    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    data = request.get_json(silent=True) or {}
    entries = data.get('pricing')
    if not isinstance(entries, list) or not entries:
        raise BookingValidationError("pricing must be a non-empty list")

    table = tier_table_to_json(PricingService.upsert_console_pricing(cafe, entries))
    return jsonify({'success': True, 'message': 'Pricing saved', 'pricing': table.get(cafe.id, {})}), 200


@pricing_bp.route('/owner/station-pricing', methods=['POST'])
@owner_required
def save_station_pricing():
    data = request.get_json(silent=True) or {}
    if not data.get('cafe_id'):
        raise BookingValidationError("cafe_id is required")

    cafe = CafeService.get_owned_cafe(data['cafe_id'], g.owner_id)
    records = data.get('stations') or []
    saved = PricingService.upsert_station_pricing(cafe, records, apply_to_all=bool(data.get('apply_to_all')))
    return jsonify({
        'success': True,
        'message': f'Pricing saved for {len(saved)} station(s)',
        'stations': [row.to_dict() for row in saved],
    }), 200


@pricing_bp.route('/cafes/<string:cafe_id>/tickets', methods=['GET'])
def cafe_tickets(cafe_id):
    cafe = Cafe.query.get(cafe_id)
    if not cafe or not cafe.is_active:
        raise BookingNotFound("Café not found")

    try:
        duration = int(request.args.get('duration', 60))
    except ValueError:
        raise BookingValidationError("duration must be a number of minutes")

    tickets = PricingService.tickets(cafe, duration)
    return jsonify({'success': True, 'cafe_id': cafe.id, 'duration': duration, 'tickets': tickets}), 200
