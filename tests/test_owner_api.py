from datetime import date

from models.booking import Booking

WALK_IN = {
    'customer_name': 'Walk In Joe',
    'customer_phone': '9999999999',
    'items': [{'console': 'ps5', 'quantity': 1}],
    'duration': 60,
}


def test_owner_routes_require_login(client):
    assert client.get('/api/owner/data').status_code == 401
    assert client.post('/api/owner/walk-in', json=WALK_IN).status_code == 401


def test_walk_in_without_start_time_begins_now(client, auth_headers, cafe, fixed_now, publisher):
    response = client.post('/api/owner/walk-in', json={**WALK_IN, 'cafe_id': cafe.id}, headers=auth_headers)

    assert response.status_code == 201
    booking = response.get_json()['booking']
    assert booking['status'] == 'in-progress'
    assert booking['source'] == 'walk-in'
    assert booking['start_time'] == '7:05 pm'
    assert booking['booking_date'] == '2024-05-15'
    assert booking['total_amount'] == 100
    assert booking['payment_mode'] == 'cash'
    assert booking['user_name'] == 'Walk In Joe'
    assert booking['allowed_actions'] == ['edit']
    assert publisher.events[-1][0] == 'INSERT'


def test_walk_in_with_start_time_is_confirmed(client, auth_headers, cafe, fixed_now):
    payload = {**WALK_IN, 'cafe_id': cafe.id, 'start_time': '20:00', 'total_amount': 250}
    booking = client.post('/api/owner/walk-in', json=payload, headers=auth_headers).get_json()['booking']

    assert booking['status'] == 'confirmed'
    assert booking['start_time'] == '8:00 pm'
    assert booking['total_amount'] == 250


def test_walk_in_requires_customer_name(client, auth_headers, cafe, fixed_now, publisher):
    payload = {**WALK_IN, 'cafe_id': cafe.id, 'customer_name': '  '}
    response = client.post('/api/owner/walk-in', json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['success'] is False
    assert Booking.query.count() == 0
    assert publisher.events == []


def test_walk_in_for_someone_elses_cafe(client, auth_headers, other_cafe, fixed_now):
    response = client.post('/api/owner/walk-in', json={**WALK_IN, 'cafe_id': other_cafe.id}, headers=auth_headers)
    assert response.status_code == 404


def test_confirm_then_start_online_booking(client, auth_headers, make_booking, fixed_now, publisher):
    booking = make_booking(status='pending', start_time='8:00 pm')

    confirmed = client.post(f'/api/owner/bookings/{booking.id}/confirm', headers=auth_headers)
    assert confirmed.status_code == 200
    assert confirmed.get_json()['booking']['status'] == 'confirmed'

    started = client.post(f'/api/owner/bookings/{booking.id}/start', headers=auth_headers)
    assert started.status_code == 200
    assert started.get_json()['booking']['status'] == 'in-progress'
    assert started.get_json()['booking']['start_time'] == '7:05 pm'

    assert [event[0] for event in publisher.events] == ['UPDATE', 'UPDATE']


def test_confirm_twice_conflicts(client, auth_headers, make_booking, fixed_now):
    booking = make_booking(status='pending')
    client.post(f'/api/owner/bookings/{booking.id}/confirm', headers=auth_headers)

    response = client.post(f'/api/owner/bookings/{booking.id}/confirm', headers=auth_headers)

    assert response.status_code == 409
    assert Booking.query.get(booking.id).status == 'confirmed'


def test_walk_in_bookings_cannot_be_started(client, auth_headers, make_booking, fixed_now):
    booking = make_booking(status='confirmed', source='walk-in')
    response = client.post(f'/api/owner/bookings/{booking.id}/start', headers=auth_headers)
    assert response.status_code == 409


def test_cannot_touch_other_owners_bookings(client, auth_headers, other_cafe, make_booking, fixed_now):
    booking = make_booking(cafe_id=other_cafe.id, status='pending')
    response = client.post(f'/api/owner/bookings/{booking.id}/confirm', headers=auth_headers)
    assert response.status_code == 404


def test_edit_rewrites_fields_from_any_state(client, auth_headers, make_booking, publisher):
    booking = make_booking(status='completed')

    response = client.put(f'/api/owner/bookings/{booking.id}', headers=auth_headers, json={
        'booking_date': '2024-05-20',
        'start_time': '9:30 pm',
        'duration': 90,
        'console': 'ps4',
        'controllers': 3,
        'total_amount': 450,
        'status': 'cancelled',
        'payment_mode': 'card',
    })

    assert response.status_code == 200
    data = response.get_json()['booking']
    assert data['status'] == 'cancelled'
    assert data['booking_date'] == '2024-05-20'
    assert data['start_time'] == '9:30 pm'
    assert data['duration'] == 90
    assert data['total_amount'] == 450
    assert data['payment_mode'] == 'card'
    assert data['booking_items'][0]['console'] == 'ps4'
    assert data['booking_items'][0]['quantity'] == 3

    event_type, new_row, old_row = publisher.events[-1]
    assert event_type == 'UPDATE'
    assert old_row['status'] == 'completed'
    assert new_row['status'] == 'cancelled'


def test_edit_keeps_walk_in_name_invariant(client, auth_headers, make_booking):
    booking = make_booking(source='walk-in', customer_name='Asha')

    response = client.put(f'/api/owner/bookings/{booking.id}', headers=auth_headers, json={'customer_name': ''})

    assert response.status_code == 400
    assert Booking.query.get(booking.id).customer_name == 'Asha'


def test_edit_validation(client, auth_headers, make_booking):
    booking = make_booking()
    assert client.put(f'/api/owner/bookings/{booking.id}', headers=auth_headers,
                      json={'status': 'finished'}).status_code == 400
    assert client.put(f'/api/owner/bookings/{booking.id}', headers=auth_headers,
                      json={'duration': 45}).status_code == 400
    assert client.put('/api/owner/bookings/missing', headers=auth_headers,
                      json={'status': 'cancelled'}).status_code == 404


def test_dashboard_data_sweeps_and_aggregates(client, auth_headers, cafe, make_booking, fixed_now):
    old = make_booking(booking_date=date(2024, 5, 14), status='confirmed', total_amount=300)
    make_booking(status='pending', total_amount=None, start_time='9:00 pm')
    make_booking(status='cancelled', total_amount=999)

    response = client.get('/api/owner/data', headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['auto_completed'] == 1
    assert Booking.query.get(old.id).status == 'completed'
    assert [c['id'] for c in data['cafes']] == [cafe.id]
    assert len(data['bookings']) == 3
    assert data['bookings'][0]['cafe_name'] == 'Pixel Den'
    assert data['stats']['pending_bookings'] == 1
    assert data['stats']['bookings_today'] == 1
    assert data['stats']['total_revenue'] == 300
    assert data['stats']['cafes_count'] == 1


def test_sweep_endpoint(client, auth_headers, make_booking, fixed_now):
    ended = make_booking(status='in-progress', start_time='5:00 pm', duration=60)
    response = client.post('/api/owner/bookings/sweep', headers=auth_headers)
    assert response.get_json()['completed'] == [ended.id]


def test_live_status(client, auth_headers, cafe, fixed_now):
    client.post('/api/owner/walk-in', json={**WALK_IN, 'cafe_id': cafe.id}, headers=auth_headers)

    response = client.get(f'/api/owner/live-status?cafeId={cafe.id}', headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['total'] == 3
    assert data['busy'] == 1
    station = data['stations'][0]
    assert station['id'] == 'PS5-01'
    assert station['booking']['customer_name'] == 'Walk In Joe'
    assert station['booking']['time_remaining'] == 60


def test_live_status_requires_cafe(client, auth_headers):
    assert client.get('/api/owner/live-status', headers=auth_headers).status_code == 400
