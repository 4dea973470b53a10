# controllers/owner_controller.py

import json
import time

from flask import Blueprint, Response, current_app, g, jsonify, request, stream_with_context

from services import booking_lifecycle
from services.booking_events import BookingEventSubscriber
from services.booking_service import BookingService, enrich_booking
from services.booking_sweep import BookingSweepService
from services.cafe_service import CafeService, OwnerAuthService
from services.dashboard_service import DashboardService
from services.errors import BookingValidationError
from services.notification_service import NotificationService
from services.owner_session import bearer_token, get_session_store, issue_session, owner_required
from services.stations import live_status
from services.time_utils import cafe_now

owner_bp = Blueprint('owner', __name__)


def _owned_cafes():
    cafes = CafeService.owner_cafes(g.owner_id)
    return cafes, [cafe.id for cafe in cafes]


@owner_bp.route('/owner/login', methods=['POST'])
def owner_login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        return jsonify({'success': False, 'message': 'Username and password are required'}), 400

    owner = OwnerAuthService.authenticate(username, password)
    if not owner:
        current_app.logger.warning(f"Failed owner login for '{username}'")
        return jsonify({'success': False, 'message': 'Invalid username or password'}), 401

    token = issue_session(get_session_store(), owner.id, owner.username)
    current_app.logger.info(f"🔑 Owner {owner.id} logged in")
    return jsonify({
        'success': True,
        'token': token,
        'owner': {'id': owner.id, 'username': owner.username, 'name': owner.full_name, 'role': owner.role},
        'expires_in': current_app.config.get('OWNER_SESSION_TTL_SECONDS'),
    }), 200


@owner_bp.route('/owner/logout', methods=['POST'])
def owner_logout():
    token = bearer_token()
    if token:
        get_session_store().clear(token)
    return jsonify({'success': True, 'message': 'Logged out'}), 200


@owner_bp.route('/owner/verify', methods=['GET'])
@owner_required
def owner_verify():
    return jsonify({'success': True, 'owner_id': g.owner_id, 'username': g.owner_username}), 200


@owner_bp.route('/owner/data', methods=['GET'])
@owner_required
def owner_dashboard_data():
    try:
        payload = DashboardService.load_owner_dashboard(g.owner_id, cafe_now())
    except Exception as e:
        current_app.logger.error(f"❌ Failed to load dashboard for owner {g.owner_id}: {str(e)}")
        return jsonify({'success': False, 'message': 'Failed to load dashboard data'}), 500

    return jsonify({'success': True, **payload}), 200


@owner_bp.route('/owner/bookings/sweep', methods=['POST'])
@owner_required
def sweep_bookings():
    _, cafe_ids = _owned_cafes()
    try:
        completed = BookingSweepService.sweep(cafe_ids, now=cafe_now())
    except Exception:
        return jsonify({'success': False, 'message': 'Failed to update booking statuses'}), 500

    return jsonify({'success': True, 'completed': [b.id for b in completed]}), 200


@owner_bp.route('/owner/bookings/<string:booking_id>/confirm', methods=['POST'])
@owner_required
def confirm_booking(booking_id):
    cafes, cafe_ids = _owned_cafes()
    booking = BookingService.transition(booking_id, booking_lifecycle.CONFIRM, cafe_ids, now=cafe_now())
    NotificationService.send_booking_confirmation(booking)
    return jsonify({
        'success': True,
        'message': 'Booking confirmed',
        'booking': enrich_booking(booking, {c.id: c.name for c in cafes}),
    }), 200


@owner_bp.route('/owner/bookings/<string:booking_id>/start', methods=['POST'])
@owner_required
def start_booking(booking_id):
    cafes, cafe_ids = _owned_cafes()
    booking = BookingService.transition(booking_id, booking_lifecycle.START, cafe_ids, now=cafe_now())
    return jsonify({
        'success': True,
        'message': f'Session started at {booking.start_time}',
        'booking': enrich_booking(booking, {c.id: c.name for c in cafes}),
    }), 200


@owner_bp.route('/owner/bookings/<string:booking_id>', methods=['PUT'])
@owner_required
def edit_booking(booking_id):
    data = request.get_json(silent=True) or {}
    cafes, cafe_ids = _owned_cafes()
    booking = BookingService.edit(booking_id, data, cafe_ids)
    return jsonify({
        'success': True,
        'message': 'Booking updated',
        'booking': enrich_booking(booking, {c.id: c.name for c in cafes}),
    }), 200


@owner_bp.route('/owner/walk-in', methods=['POST'])
@owner_required
def create_walk_in():
    data = request.get_json(silent=True) or {}
    if not data.get('cafe_id'):
        raise BookingValidationError("cafe_id is required")

    cafe = CafeService.get_owned_cafe(data['cafe_id'], g.owner_id)
    booking = BookingService.create_walk_in(cafe, data, now=cafe_now())
    return jsonify({
        'success': True,
        'message': 'Walk-in booking created',
        'booking': enrich_booking(booking, {cafe.id: cafe.name}),
    }), 201


@owner_bp.route('/owner/live-status', methods=['GET'])
@owner_required
def cafe_live_status():
    cafe_id = request.args.get('cafeId')
    if not cafe_id:
        raise BookingValidationError("cafeId is required")

    cafe = CafeService.get_owned_cafe(cafe_id, g.owner_id)
    now = cafe_now()
    bookings = BookingService.todays_in_progress(cafe.id, now.date())
    status = live_status(cafe.inventory, bookings, now)
    return jsonify({'success': True, 'cafe_id': cafe.id, 'as_of': now.isoformat(), **status}), 200


@owner_bp.route('/owner/bookings/stream', methods=['GET'])
@owner_required
def booking_stream():
    """Server-sent events with one `{type, new, old}` message per booking change."""
    _, cafe_ids = _owned_cafes()
    if not cafe_ids:
        return jsonify({'success': False, 'message': 'No cafés to watch'}), 404

    subscriber = BookingEventSubscriber(current_app.extensions['redis'], cafe_ids)
    keepalive_seconds = current_app.config.get('DASHBOARD_REFRESH_SECONDS', 10)

    def generate():
        last_sent = time.time()
        try:
            yield ": connected\n\n"
            for event in subscriber.events(timeout=1.0):
                if event is not None:
                    yield f"data: {json.dumps(event, default=str)}\n\n"
                    last_sent = time.time()
                elif time.time() - last_sent >= keepalive_seconds:
                    yield ": keep-alive\n\n"
                    last_sent = time.time()
        finally:
            subscriber.close()

    return Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
