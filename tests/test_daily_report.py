from datetime import date, datetime

import pytest

from services.notification_service import summarize_day

REPORT_DATE = date(2024, 5, 15)


def test_summarize_day():
    rows = [
        {'booking_date': '2024-05-15', 'status': 'completed', 'source': 'walk-in', 'payment_mode': 'cash',
         'total_amount': 200, 'booking_items': [{'console': 'ps5', 'quantity': 2}]},
        {'booking_date': '2024-05-15', 'status': 'confirmed', 'source': 'online', 'payment_mode': 'upi',
         'total_amount': None, 'booking_items': [{'console': 'pool', 'quantity': 1}]},
        {'booking_date': '2024-05-15', 'status': 'cancelled', 'source': 'online', 'payment_mode': 'upi',
         'total_amount': 900, 'booking_items': [{'console': 'ps5', 'quantity': 1}]},
        {'booking_date': '2024-05-14', 'status': 'completed', 'source': 'online', 'payment_mode': 'card',
         'total_amount': 50, 'booking_items': []},
    ]

    summary = summarize_day(rows, REPORT_DATE)

    assert summary['bookings'] == 2
    assert summary['walk_ins'] == 1
    assert summary['completed'] == 1
    assert summary['revenue'] == 200
    assert summary['by_console'] == {'PS5': 2, 'Pool Table': 1}
    assert summary['by_payment_mode'] == {'cash': 200, 'upi': 0}


@pytest.fixture
def sent(monkeypatch):
    messages = []
    monkeypatch.setattr('services.notification_service.dispatch', messages.append)
    return messages


def test_cron_requires_secret(client, sent):
    assert client.post('/api/cron/daily-report').status_code == 401
    assert client.post('/api/cron/daily-report', headers={'X-Cron-Secret': 'wrong'}).status_code == 401
    assert sent == []


def test_cron_mails_previous_day(client, cafe, make_booking, sent, monkeypatch):
    monkeypatch.setattr('controllers.booking_controller.cafe_now', lambda: datetime(2024, 5, 16, 6, 0))
    make_booking(status='completed', total_amount=180)

    response = client.post('/api/cron/daily-report', headers={'X-Cron-Secret': 'test-cron-secret'})

    assert response.status_code == 200
    report = response.get_json()['reports'][0]
    assert report['cafe_id'] == cafe.id
    assert report['date'] == '2024-05-15'
    assert report['revenue'] == 180
    assert report['queued'] is True
    assert len(sent) == 1
    assert sent[0].recipients == ['owner@example.com']
