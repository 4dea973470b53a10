# controllers/membership_controller.py

from flask import Blueprint, g, jsonify, request

from services.cafe_service import CafeService
from services.errors import BookingValidationError
from services.membership_service import MembershipService
from services.owner_session import owner_required

membership_bp = Blueprint('membership', __name__)


@membership_bp.route('/cafes/<string:cafe_id>/membership-plans', methods=['GET'])
def list_membership_plans(cafe_id):
    plans = MembershipService.active_plans(cafe_id)
    return jsonify({'success': True, 'plans': [plan.to_dict() for plan in plans]}), 200


@membership_bp.route('/owner/membership-plans', methods=['POST'])
@owner_required
def save_membership_plan():
    data = request.get_json(silent=True) or {}
    if not data.get('cafe_id'):
        raise BookingValidationError("cafe_id is required")

    cafe = CafeService.get_owned_cafe(data['cafe_id'], g.owner_id)
    is_update = bool(data.get('id'))
    plan = MembershipService.save_plan(cafe, data)
    return jsonify({
        'success': True,
        'message': 'Plan updated' if is_update else 'Plan created',
        'plan': plan.to_dict(),
    }), 200 if is_update else 201


@membership_bp.route('/owner/membership-plans/<int:plan_id>', methods=['DELETE'])
@owner_required
def delete_membership_plan(plan_id):
    cafe_ids = [cafe.id for cafe in CafeService.owner_cafes(g.owner_id)]
    MembershipService.deactivate_plan(plan_id, cafe_ids)
    return jsonify({'success': True, 'message': 'Plan removed', 'plan_id': plan_id}), 200
