# services/notification_service.py

import logging
from collections import Counter
from datetime import timedelta
from threading import Thread

from flask import current_app
from flask_mail import Message

from db.extensions import mail
from models.booking import Booking, BookingStatus
from models.cafe import Cafe
from models.consoleType import ConsoleType
from models.profile import Profile
from services.time_utils import end_time

logger = logging.getLogger(__name__)

_TABLE_STYLE = "width:100%; border-collapse:collapse; margin-bottom:15px;"
_CELL_STYLE = "border:1px solid #ddd; padding:8px;"
_HEAD_STYLE = "border:1px solid #ddd; padding:8px; background:#f3f3f3; text-align:left;"


def send_async_email(app, msg):
    """Send email asynchronously in background thread"""
    with app.app_context():
        try:
            mail.send(msg)
            app.logger.info("✅ Email sent successfully in background")
        except Exception as e:
            app.logger.error(f"❌ Failed to send email asynchronously: {str(e)}")


def dispatch(msg):
    app = current_app._get_current_object()
    thread = Thread(target=send_async_email, args=(app, msg))
    thread.daemon = True
    thread.start()
    return thread


def _html_page(title, body):
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; color: #222; background: #fff; }}
        .main {{ max-width: 600px; margin: auto; padding: 20px; border: 1px solid #eee; }}
        h1 {{ font-size: 20px; margin-bottom: 0.5em; }}
        h2 {{ font-size: 16px; margin-top: 2em; border-bottom: 1px solid #eee; padding-bottom: 5px; }}
        .footer {{ color: #888; font-size: 11px; text-align: center; border-top: 1px solid #eee; margin-top: 30px; padding-top: 8px; }}
    </style>
</head>
<body>
<div class="main">
{body}
    <div class="footer">This is an automated message.</div>
</div>
</body>
</html>
"""


def _key_value_table(rows):
    cells = "".join(
        f'<tr><th style="{_HEAD_STYLE}">{label}</th><td style="{_CELL_STYLE}">{value}</td></tr>'
        for label, value in rows
    )
    return f'<table style="{_TABLE_STYLE}">{cells}</table>'


def summarize_day(rows, report_date):
    """
    Daily figures for one café from booking rows: non-cancelled bookings
    dated `report_date`, revenue, and breakdowns by console and payment mode.
    """
    day_rows = [
        row for row in rows
        if str(row.get('booking_date'))[:10] == report_date.isoformat()
        and row.get('status') != BookingStatus.CANCELLED.value
    ]

    by_console = Counter()
    by_payment = Counter()
    for row in day_rows:
        by_payment[row.get('payment_mode') or 'unknown'] += row.get('total_amount') or 0
        for item in row.get('booking_items') or []:
            console_type = ConsoleType.parse(item.get('console'))
            by_console[console_type.label if console_type else 'Other'] += item.get('quantity') or 1

    return {
        'date': report_date.isoformat(),
        'bookings': len(day_rows),
        'walk_ins': sum(1 for row in day_rows if row.get('source') == 'walk-in'),
        'completed': sum(1 for row in day_rows if row.get('status') == BookingStatus.COMPLETED.value),
        'revenue': sum(row.get('total_amount') or 0 for row in day_rows),
        'by_console': dict(by_console),
        'by_payment_mode': dict(by_payment),
    }


class NotificationService:

    @staticmethod
    def send_booking_confirmation(booking):
        """Mail the customer (or linked profile) when an online booking is confirmed."""
        profile = booking.profile if booking.user_id else None
        recipient = profile.email if profile else None
        if not recipient:
            logger.info(f"No e-mail on file for booking {booking.id}, skipping confirmation")
            return None

        cafe = booking.cafe
        items = ", ".join(
            f"{ConsoleType.parse(item.console).label} x{item.quantity}" for item in booking.items
        )
        details = [
            ('Booking ID', booking.id),
            ('Café', cafe.name if cafe else '-'),
            ('Date', booking.booking_date.strftime('%d %b %Y')),
            ('Time', f"{booking.start_time} - {end_time(booking.start_time, booking.duration)}"),
            ('Consoles', items or '-'),
            ('Amount', f"₹{booking.total_amount or 0}"),
        ]

        html_body = _html_page('Booking Confirmed', f"""
    <h1>Your booking is confirmed</h1>
    <p>Hi {profile.full_name or 'there'}, see you at {cafe.name if cafe else 'the café'}!</p>
    {_key_value_table(details)}
""")
        text_body = "Your booking is confirmed\n\n" + "\n".join(f"{label}: {value}" for label, value in details)

        msg = Message(
            subject=f"🎮 Booking confirmed - {cafe.name if cafe else 'Gaming Café'}",
            recipients=[recipient],
            body=text_body,
            html=html_body,
        )
        return dispatch(msg)

    @staticmethod
    def send_daily_reports(now):
        """
        Mail every active café's owner yesterday's summary. Returns one entry
        per café with the figures and whether a mail was queued.
        """
        report_date = (now - timedelta(days=1)).date()
        results = []

        cafes = Cafe.query.filter_by(is_active=True).all()
        for cafe in cafes:
            rows = [
                b.to_dict() for b in
                Booking.query.filter_by(cafe_id=cafe.id, booking_date=report_date).all()
            ]
            summary = summarize_day(rows, report_date)
            owner = Profile.query.get(cafe.owner_id)
            recipient = cafe.email or (owner.email if owner else None)

            queued = False
            if recipient:
                NotificationService._send_daily_report(cafe, recipient, summary)
                queued = True
            else:
                logger.warning(f"⚠️  No e-mail for café {cafe.id}, daily report not sent")

            results.append({'cafe_id': cafe.id, 'cafe_name': cafe.name, 'queued': queued, **summary})

        logger.info(f"Daily report for {report_date}: {sum(r['queued'] for r in results)}/{len(results)} café(s) mailed")
        return results

    @staticmethod
    def _send_daily_report(cafe, recipient, summary):
        overview = [
            ('Bookings', summary['bookings']),
            ('Walk-ins', summary['walk_ins']),
            ('Completed', summary['completed']),
            ('Revenue', f"₹{summary['revenue']}"),
        ]
        consoles = sorted(summary['by_console'].items()) or [('No sessions', '-')]
        payments = [(mode.upper(), f"₹{amount}") for mode, amount in sorted(summary['by_payment_mode'].items())]

        html_body = _html_page('Daily Report', f"""
    <h1>{cafe.name} - {summary['date']}</h1>
    {_key_value_table(overview)}
    <h2>Console usage</h2>
    {_key_value_table(consoles)}
    <h2>Payments</h2>
    {_key_value_table(payments or [('No payments', '-')])}
""")
        text_body = (
            f"{cafe.name} daily report for {summary['date']}\n\n"
            + "\n".join(f"{label}: {value}" for label, value in overview)
        )

        msg = Message(
            subject=f"📊 Daily report {summary['date']} - {cafe.name}",
            recipients=[recipient],
            body=text_body,
            html=html_body,
        )
        return dispatch(msg)
