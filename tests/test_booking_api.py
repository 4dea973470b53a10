from datetime import date

from db.extensions import db
from models.booking import Booking
from models.consolePricing import ConsolePricing
from models.consoleType import ConsoleType


def payload(cafe, **overrides):
    data = {
        'cafe_id': cafe.id,
        'booking_date': '2024-06-01',
        'start_time': '18:00',
        'duration': 60,
        'items': [{'console': 'ps5', 'quantity': 2}],
        'customer_name': 'Ravi',
        'customer_phone': '9876543210',
    }
    data.update(overrides)
    return data


def test_online_booking_is_created_pending(client, cafe, publisher):
    response = client.post('/api/bookings', json=payload(cafe))

    assert response.status_code == 201
    booking = response.get_json()['booking']
    assert booking['status'] == 'pending'
    assert booking['source'] == 'online'
    assert booking['start_time'] == '6:00 pm'
    assert booking['total_amount'] == 200
    assert booking['cafe_name'] == 'Pixel Den'
    assert booking['allowed_actions'] == ['confirm', 'edit']
    assert publisher.events[0][0] == 'INSERT'
    assert publisher.events[0][1]['id'] == booking['id']


def test_online_booking_uses_tier_price(client, cafe):
    db.session.add(ConsolePricing(cafe_id=cafe.id, console_type=ConsoleType.ps5, quantity=2,
                                  duration_minutes=60, price=250))
    db.session.commit()

    booking = client.post('/api/bookings', json=payload(cafe)).get_json()['booking']

    assert booking['total_amount'] == 250
    assert booking['booking_items'][0]['price'] == 250


def test_overlapping_booking_exceeding_inventory_is_rejected(client, cafe):
    assert client.post('/api/bookings', json=payload(cafe)).status_code == 201

    overlapping = client.post('/api/bookings', json=payload(cafe, start_time='6:30 pm',
                                                            items=[{'console': 'ps5', 'quantity': 1}]))
    assert overlapping.status_code == 409
    assert 'No PS5 setups available' in overlapping.get_json()['message']

    back_to_back = client.post('/api/bookings', json=payload(cafe, start_time='7:00 pm'))
    assert back_to_back.status_code == 201


def test_partial_capacity_message(client, cafe):
    client.post('/api/bookings', json=payload(cafe, items=[{'console': 'ps5', 'quantity': 1}]))

    response = client.post('/api/bookings', json=payload(cafe))

    assert response.status_code == 409
    assert response.get_json()['message'].startswith('Only 1 PS5 setup(s) available')


def test_cancelled_bookings_free_capacity(client, cafe, make_booking):
    make_booking(booking_date=date(2024, 6, 1), start_time='6:00 pm',
                 status='cancelled', items=[('ps5', 2)])
    assert client.post('/api/bookings', json=payload(cafe)).status_code == 201


def test_booking_validation(client, cafe):
    assert client.post('/api/bookings', json=payload(cafe, customer_name=None)).status_code == 400
    assert client.post('/api/bookings', json=payload(cafe, items=[{'console': 'gamecube'}])).status_code == 400
    assert client.post('/api/bookings', json=payload(cafe, items=[])).status_code == 400
    assert client.post('/api/bookings', json=payload(cafe, start_time='evening')).status_code == 400
    assert client.post('/api/bookings', json=payload(cafe, booking_date='01/06/2024')).status_code == 400
    assert client.post('/api/bookings', json=payload(cafe, cafe_id='nope')).status_code == 404
    assert Booking.query.count() == 0


def test_get_booking(client, cafe):
    created = client.post('/api/bookings', json=payload(cafe)).get_json()['booking']

    response = client.get(f"/api/bookings/{created['id']}")

    assert response.status_code == 200
    assert response.get_json()['booking']['customer_name'] == 'Ravi'
    assert client.get('/api/bookings/does-not-exist').status_code == 404


def test_unknown_user_id_is_rejected(client, cafe):
    response = client.post('/api/bookings', json=payload(cafe, user_id='no-such-profile', customer_name=None))

    assert response.status_code == 400
    assert Booking.query.count() == 0


def test_booking_for_existing_account(client, cafe, owner):
    response = client.post('/api/bookings', json=payload(cafe, user_id=owner.id, customer_name=None))

    assert response.status_code == 201
    assert response.get_json()['booking']['user_id'] == owner.id


def test_public_lookup_hides_contact_details(client, cafe):
    created = client.post('/api/bookings', json=payload(cafe)).get_json()['booking']
    assert created['customer_phone'] == '9876543210'

    booking = client.get(f"/api/bookings/{created['id']}").get_json()['booking']

    assert 'customer_phone' not in booking
    assert 'user_phone' not in booking
    assert booking['status'] == 'pending'
