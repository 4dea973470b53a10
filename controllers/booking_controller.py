# controllers/booking_controller.py

from flask import Blueprint, current_app, jsonify, request

from models.booking import Booking
from services.booking_service import BookingService, enrich_booking
from services.notification_service import NotificationService
from services.time_utils import cafe_now

booking_bp = Blueprint('booking', __name__)
cron_bp = Blueprint('cron', __name__)

# Contact details stay on the owner dashboard
PUBLIC_HIDDEN_FIELDS = ('user_phone', 'customer_phone')


@booking_bp.route('/bookings', methods=['POST'])
def create_booking():
    data = request.get_json(silent=True) or {}
    booking = BookingService.create_online_booking(data, user_id=data.get('user_id'))
    return jsonify({
        'success': True,
        'message': 'Booking received and awaiting confirmation',
        'booking': enrich_booking(booking, {booking.cafe_id: booking.cafe.name}),
    }), 201


@booking_bp.route('/bookings/<string:booking_id>', methods=['GET'])
def get_booking(booking_id):
    booking = Booking.query.get(booking_id)
    if not booking:
        return jsonify({'success': False, 'message': 'Booking not found'}), 404

    row = enrich_booking(booking, {booking.cafe_id: booking.cafe.name})
    for field in PUBLIC_HIDDEN_FIELDS:
        row.pop(field, None)
    return jsonify({'success': True, 'booking': row}), 200


@cron_bp.route('/cron/daily-report', methods=['POST'])
def daily_report():
    secret = current_app.config.get('CRON_SECRET')
    if not secret or request.headers.get('X-Cron-Secret') != secret:
        return jsonify({'success': False, 'message': 'Unauthorized'}), 401

    try:
        reports = NotificationService.send_daily_reports(cafe_now())
    except Exception as e:
        current_app.logger.error(f"❌ Daily report failed: {str(e)}")
        return jsonify({'success': False, 'message': 'Daily report failed'}), 500

    return jsonify({'success': True, 'reports': reports}), 200
