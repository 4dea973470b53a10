# services/booking_events.py
"""
Booking change notifications.

Every booking insert/update is published on the Redis channel
`cafe_bookings:{cafe_id}` as {"type", "new", "old"}. Dashboards subscribe
for their cafés and fold events in with apply_booking_delta. When
BOOKING_EVENTS_WEBHOOK_URL is set the same event is also POSTed there.
"""

import json
import logging

import redis
import requests
from flask import current_app

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = 'cafe_bookings:'


def channel_for(cafe_id):
    return f'{CHANNEL_PREFIX}{cafe_id}'


class BookingEventPublisher:

    def __init__(self, client, webhook_url=None, webhook_timeout=2.5):
        self.client = client
        self.webhook_url = webhook_url
        self.webhook_timeout = webhook_timeout

    def publish(self, event_type, new_row=None, old_row=None):
        """Best effort: a failed notification never fails the booking write."""
        row = new_row or old_row or {}
        cafe_id = row.get('cafe_id')
        if not cafe_id:
            return

        payload = {'type': event_type, 'new': new_row, 'old': old_row}
        try:
            self.client.publish(channel_for(cafe_id), json.dumps(payload, default=str))
        except redis.exceptions.RedisError as e:
            logger.warning(f"⚠️  Could not publish booking {event_type} for café {cafe_id}: {str(e)}")

        if self.webhook_url:
            self._post_webhook(payload, row)

    def _post_webhook(self, payload, row):
        headers = {
            "Content-Type": "application/json",
            "X-Idempotency-Key": f"{row.get('id')}:{payload['type']}:{row.get('status')}",
        }
        try:
            requests.post(self.webhook_url, data=json.dumps(payload, default=str),
                          headers=headers, timeout=self.webhook_timeout)
        except requests.RequestException as e:
            logger.warning(f"⚠️  Booking webhook failed: {str(e)}")


class BookingEventSubscriber:
    """Iterate booking events for a set of cafés; close() releases the connection."""

    def __init__(self, client, cafe_ids):
        self.pubsub = client.pubsub(ignore_subscribe_messages=True)
        self.pubsub.subscribe(*[channel_for(cafe_id) for cafe_id in cafe_ids])

    def events(self, timeout=1.0):
        """Yield decoded events; yields None on idle so callers can send keep-alives."""
        while True:
            message = self.pubsub.get_message(timeout=timeout)
            if message is None:
                yield None
                continue
            try:
                yield json.loads(message['data'])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring malformed booking event: {message.get('data')!r}")

    def close(self):
        self.pubsub.close()


def get_event_publisher():
    return current_app.extensions['booking_events']


def publish_booking_change(event_type, booking, old_row=None):
    get_event_publisher().publish(event_type, new_row=booking.to_dict(), old_row=old_row)
