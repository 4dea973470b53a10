import io

import cloudinary.uploader
import pytest

from db.extensions import db
from models.galleryImage import GalleryImage


@pytest.fixture
def cloudinary_stub(app, monkeypatch):
    app.config.update(CLOUDINARY_CLOUD_NAME='demo', CLOUDINARY_API_KEY='key', CLOUDINARY_API_SECRET='secret')
    calls = {'upload': [], 'destroy': []}

    def fake_upload(file, **options):
        calls['upload'].append(options)
        public_id = f"{options['folder']}/{options['public_id']}"
        return {'secure_url': f'https://res.cloudinary.com/demo/{public_id}.png', 'public_id': public_id}

    def fake_destroy(public_id):
        calls['destroy'].append(public_id)
        return {'result': 'ok'}

    monkeypatch.setattr(cloudinary.uploader, 'upload', fake_upload)
    monkeypatch.setattr(cloudinary.uploader, 'destroy', fake_destroy)
    return calls


def image(name='cover.png'):
    return {'image': (io.BytesIO(b'fake image bytes'), name)}


def test_create_cafe(client, auth_headers):
    response = client.post('/api/owner/cafes', headers=auth_headers, json={
        'name': 'Level Up Arena',
        'city': 'Mumbai',
        'hourly_price': '120',
        'inventory': {'ps5': 3, 'Pool': 1},
    })

    assert response.status_code == 201
    cafe = response.get_json()['cafe']
    assert cafe['slug'] == 'level-up-arena'
    assert cafe['hourly_price'] == 120
    assert cafe['inventory'] == {'ps5': 3, 'pool': 1}


def test_slugs_are_unique(client, auth_headers):
    client.post('/api/owner/cafes', headers=auth_headers, json={'name': 'Level Up'})
    second = client.post('/api/owner/cafes', headers=auth_headers, json={'name': 'Level Up!'})
    assert second.get_json()['cafe']['slug'] == 'level-up-2'


def test_create_cafe_validation(client, auth_headers):
    assert client.post('/api/owner/cafes', headers=auth_headers, json={}).status_code == 400
    assert client.post('/api/owner/cafes', headers=auth_headers,
                       json={'name': 'X', 'inventory': {'gamecube': 1}}).status_code == 400
    assert client.post('/api/owner/cafes', headers=auth_headers,
                       json={'name': 'X', 'hourly_price': -5}).status_code == 400


def test_update_cafe_and_inventory(client, auth_headers, cafe):
    response = client.put(f'/api/owner/cafes/{cafe.id}', headers=auth_headers,
                          json={'description': 'Late night LAN', 'peak_hours': '6 PM - 11 PM'})
    assert response.get_json()['cafe']['description'] == 'Late night LAN'

    inventory = client.put(f'/api/owner/cafes/{cafe.id}/inventory', headers=auth_headers,
                           json={'inventory': {'ps5': 4, 'pool': 0, 'vr': 1}})
    assert inventory.get_json()['inventory'] == {'ps5': 4, 'vr': 1}

    negative = client.put(f'/api/owner/cafes/{cafe.id}/inventory', headers=auth_headers, json={'ps5': -1})
    assert negative.status_code == 400


def test_owner_cannot_edit_other_cafes(client, auth_headers, other_cafe):
    assert client.put(f'/api/owner/cafes/{other_cafe.id}', headers=auth_headers,
                      json={'name': 'Mine now'}).status_code == 404


def test_public_listing_hides_inactive_cafes(client, cafe, other_cafe):
    other_cafe.is_active = False
    db.session.commit()

    listing = client.get('/api/cafes').get_json()['cafes']
    assert [c['id'] for c in listing] == [cafe.id]
    assert client.get(f'/api/cafes/{other_cafe.id}').status_code == 404
    assert client.get(f'/api/cafes/{cafe.id}').get_json()['cafe']['name'] == 'Pixel Den'


def test_cover_upload_without_cloudinary(client, auth_headers, cafe, app):
    app.config['CLOUDINARY_CLOUD_NAME'] = None
    response = client.post(f'/api/owner/cafes/{cafe.id}/cover', headers=auth_headers,
                           data=image(), content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Cloudinary not configured'


def test_cover_upload(client, auth_headers, cafe, cloudinary_stub):
    response = client.post(f'/api/owner/cafes/{cafe.id}/cover', headers=auth_headers,
                           data=image(), content_type='multipart/form-data')

    assert response.status_code == 200
    assert response.get_json()['cover_url'].endswith('/cover.png')
    assert cloudinary_stub['upload'][0]['overwrite'] is True
    assert cloudinary_stub['upload'][0]['folder'] == f'CAFES/pixel_den_ID_{cafe.id}'


def test_rejects_non_image_files(client, auth_headers, cafe, cloudinary_stub):
    response = client.post(f'/api/owner/cafes/{cafe.id}/gallery', headers=auth_headers,
                           data=image('menu.pdf'), content_type='multipart/form-data')
    assert response.status_code == 400
    assert cloudinary_stub['upload'] == []


def test_gallery_add_list_delete(client, auth_headers, cafe, cloudinary_stub):
    added = client.post(f'/api/owner/cafes/{cafe.id}/gallery', headers=auth_headers,
                        data=image('setup.jpg'), content_type='multipart/form-data')
    assert added.status_code == 201
    image_id = added.get_json()['image']['id']

    listing = client.get(f'/api/owner/cafes/{cafe.id}/gallery', headers=auth_headers)
    assert [i['id'] for i in listing.get_json()['images']] == [image_id]

    deleted = client.delete(f'/api/owner/cafes/{cafe.id}/gallery/{image_id}', headers=auth_headers)
    assert deleted.status_code == 200
    assert cloudinary_stub['destroy'] == [added.get_json()['image']['public_id']]
    assert GalleryImage.query.count() == 0

    missing = client.delete(f'/api/owner/cafes/{cafe.id}/gallery/{image_id}', headers=auth_headers)
    assert missing.status_code == 404
