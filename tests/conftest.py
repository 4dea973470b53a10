from datetime import date, datetime

import pytest

from app import create_app
from app.config import TestConfig
from db.extensions import db
from models.booking import Booking, BookingItem
from models.cafe import Cafe
from models.consoleType import ConsoleType
from services.cafe_service import OwnerAuthService
from services.owner_session import MemorySessionStore

FIXED_NOW = datetime(2024, 5, 15, 19, 5)
OWNER_PASSWORD = 'secret123'


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, event_type, new_row=None, old_row=None):
        self.events.append((event_type, new_row, old_row))


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def app(publisher, session_store):
    app = create_app(TestConfig, session_store=session_store, event_publisher=publisher)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fixed_now(monkeypatch):
    monkeypatch.setattr('controllers.owner_controller.cafe_now', lambda: FIXED_NOW)
    monkeypatch.setattr('controllers.booking_controller.cafe_now', lambda: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture
def owner(app):
    return OwnerAuthService.create_owner(
        'owner1', OWNER_PASSWORD, first_name='Meera', last_name='Shah', email='owner@example.com'
    )


@pytest.fixture
def other_owner(app):
    return OwnerAuthService.create_owner('owner2', 'other-pass', first_name='Karan')


def _make_cafe(owner_id, name, **fields):
    cafe = Cafe(owner_id=owner_id, name=name, hourly_price=100, **fields)
    cafe.set_inventory({'ps5': 2, 'pool': 1})
    db.session.add(cafe)
    db.session.commit()
    return cafe


@pytest.fixture
def cafe(owner):
    return _make_cafe(owner.id, 'Pixel Den', city='Pune')


@pytest.fixture
def other_cafe(other_owner):
    return _make_cafe(other_owner.id, 'Rival Arcade')


@pytest.fixture
def auth_headers(client, owner):
    response = client.post('/api/owner/login', json={'username': 'owner1', 'password': OWNER_PASSWORD})
    token = response.get_json()['token']
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_booking(cafe):
    def _make(**overrides):
        items = overrides.pop('items', [('ps5', 1)])
        fields = {
            'cafe_id': cafe.id,
            'booking_date': date(2024, 5, 15),
            'start_time': '6:00 pm',
            'duration': 60,
            'total_amount': 100,
            'status': 'confirmed',
            'source': 'online',
            'payment_mode': 'upi',
            'customer_name': 'Asha',
        }
        fields.update(overrides)
        booking = Booking(**fields)
        for console, quantity in items:
            booking.items.append(BookingItem(console=ConsoleType.parse(console), quantity=quantity, price=100))
        db.session.add(booking)
        db.session.commit()
        return booking

    return _make
