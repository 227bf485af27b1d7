import io

import pytest

from uniprice.main import create_app
from uniprice.tests.fakes import FakeHTTP, FakeResponse, gemini_response


@pytest.fixture
def http_session():
    return FakeHTTP()


@pytest.fixture
def app(data_dir, http_session):
    return create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'DATA_DIR': data_dir,
        'FIREBASE_CREDENTIALS': None,
        'GEMINI_API_KEY': 'test-key',
        'ADMIN_USERNAME': 'admin',
        'ADMIN_PASSWORD_HASH': None,
        'BUNDLE_DUPLICATE_POLICY': 'allow',
        'BUNDLE_OVERFLOW_POLICY': 'keep',
    }, http_session=http_session)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def csrf(client):
    return client.get('/api/csrf').get_json()['csrf_token']


def post(client, csrf, url, data=None):
    return client.post(url, json=data or {}, headers={'X-CSRF-Token': csrf})


@pytest.fixture
def admin(client, csrf):
    resp = post(client, csrf, '/api/admin/login', {'username': 'admin', 'password': 'admin123'})
    assert resp.status_code == 200
    return csrf


CUSTOMER = {'name': 'Omar', 'phone': '0321', 'address': 'Plot 9', 'city': 'Karachi'}


def test_status_reports_local_mode_without_firestore(client):
    body = client.get('/api/status').get_json()
    assert body['mode'] == 'local'
    assert body['banner'] == 'Cloud Offline: Local Persistence Active'
    assert body['action'] is None
    assert body['remoteAvailable'] is False


def test_catalog_shows_seed_with_global_price(client):
    body = client.get('/api/products').get_json()
    assert len(body['products']) == 12
    assert {p['price'] for p in body['products']} == {100}
    assert body['bundlePrice'] == 540

    snacks = client.get('/api/products?category=Snacks').get_json()['products']
    assert snacks and all(p['category'] == 'Snacks' for p in snacks)
    assert client.get('/api/products?category=Toys').status_code == 400


def test_post_without_csrf_is_forbidden(client):
    resp = client.post('/api/cart/add', json={'productId': '1'})
    assert resp.status_code == 403


def test_cart_flow_and_checkout(client, csrf):
    post(client, csrf, '/api/cart/add', {'productId': '1'})
    post(client, csrf, '/api/cart/add', {'productId': '1'})
    body = post(client, csrf, '/api/cart/add', {'productId': '2'}).get_json()
    assert body['cart']['count'] == 3
    assert body['cart']['total'] == 300

    assert post(client, csrf, '/api/cart/add', {'productId': 'nope'}).status_code == 404

    resp = post(client, csrf, '/api/checkout', {'customer': {**CUSTOMER, 'phone': ''}})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'phone'

    resp = post(client, csrf, '/api/checkout', {'customer': CUSTOMER})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body['order']['id'].startswith('LOCAL-')
    assert 'Rs. 300' in body['mensaje']
    assert client.get('/api/cart').get_json()['cart']['count'] == 0


def test_bundle_completion_adds_discounted_line(client, csrf):
    for pid in ['1', '2', '3', '4', '5', '5']:
        post(client, csrf, '/api/bundle/add', {'productId': pid})

    bundle = client.get('/api/bundle').get_json()['bundle']
    assert bundle['isFull'] is True

    body = post(client, csrf, '/api/bundle/complete').get_json()
    assert body['completed'] is True
    assert body['cart']['total'] == 540
    assert body['bundle']['items'] == []


def test_favorites_toggle(client, csrf):
    post(client, csrf, '/api/favorites/toggle', {'productId': '3'})
    favorites = client.get('/api/products?category=Favorites').get_json()['products']
    assert [p['id'] for p in favorites] == ['3']


def test_concierge_endpoint(client, csrf, http_session):
    http_session.queue(gemini_response({'recommendedIds': ['2', '1'], 'explanation': 'Tasty'}))
    body = post(client, csrf, '/api/concierge', {'intent': 'snacks for a road trip'}).get_json()
    assert body['applied'] is True
    assert [i['id'] for i in body['bundle']['items']] == ['1', '2']

    http_session.queue(FakeResponse(500, {}))
    resp = post(client, csrf, '/api/concierge', {'intent': 'again'})
    assert resp.status_code == 502


def test_push_notifications(client, csrf):
    assert post(client, csrf, '/api/notifications/token', {'token': 'fcm-1'}).get_json()['registered'] is True
    body = post(client, csrf, '/api/notifications/foreground', {
        'notification': {'title': 'Hi', 'body': 'New stock'},
    }).get_json()
    assert body['alert'] == 'New Message: Hi - New stock'


# =========================================================================
# Administración
# =========================================================================

def test_admin_routes_require_login(client, csrf):
    assert client.get('/api/admin/orders').status_code == 401
    assert post(client, csrf, '/api/admin/login', {'username': 'admin', 'password': 'wrong'}).status_code == 401


def test_admin_price_change_applies_to_catalog(client, admin):
    resp = post(client, admin, '/api/admin/settings', {'itemPrice': 150, 'bundleItemCount': 4})
    assert resp.get_json()['config']['bundlePrice'] == 540

    body = client.get('/api/products').get_json()
    assert {p['price'] for p in body['products']} == {150}
    assert client.get('/api/bundle').get_json()['bundle']['maxItems'] == 4


def test_admin_product_crud(client, admin):
    resp = post(client, admin, '/api/admin/products', {
        'name': 'Notebook', 'category': 'Stationery', 'image': 'https://img.example/nb.jpg',
    })
    assert resp.status_code == 201
    product_id = resp.get_json()['product']['id']

    resp = client.put(f'/api/admin/products/{product_id}', json={
        'name': 'A5 Notebook', 'category': 'Stationery', 'image': 'https://img.example/nb.jpg',
    }, headers={'X-CSRF-Token': admin})
    assert resp.status_code == 200

    resp = client.delete(f'/api/admin/products/{product_id}', headers={'X-CSRF-Token': admin})
    assert resp.status_code == 200
    resp = client.delete(f'/api/admin/products/{product_id}', headers={'X-CSRF-Token': admin})
    assert resp.status_code == 404


def test_admin_import_csv(client, admin):
    data = {'file': (io.BytesIO(b'name,image\nKettle,https://img.example/k.jpg\n,\n'), 'items.csv')}
    resp = client.post('/api/admin/products/import', data=data,
                       content_type='multipart/form-data', headers={'X-CSRF-Token': admin})
    assert resp.get_json() == {'ok': True, 'imported': 1, 'skipped': 1, 'failed': 0}


def test_admin_orders_and_clear(client, csrf, admin):
    post(client, csrf, '/api/cart/add', {'productId': '1'})
    post(client, csrf, '/api/checkout', {'customer': CUSTOMER})

    orders = client.get('/api/admin/orders').get_json()['orders']
    assert len(orders) == 1

    body = post(client, admin, '/api/admin/orders/clear').get_json()
    assert body == {'ok': True, 'local': True}
    assert client.get('/api/admin/orders').get_json()['orders'] == []


def test_admin_image_upload_requires_drive(client, admin, http_session):
    data = {'file': (io.BytesIO(b'img'), 'a.png', 'image/png')}
    resp = client.post('/api/admin/images/upload', data=data,
                       content_type='multipart/form-data', headers={'X-CSRF-Token': admin})
    assert resp.status_code == 409
    assert resp.get_json()['auth_required'] is True

    post(client, admin, '/api/admin/drive/connect', {'accessToken': 'tok', 'expiresIn': 3600})
    http_session.queue(FakeResponse(200, {'id': 'f1'}), FakeResponse(200, {}))
    data = {'file': (io.BytesIO(b'img'), 'a.png', 'image/png')}
    resp = client.post('/api/admin/images/upload', data=data,
                       content_type='multipart/form-data', headers={'X-CSRF-Token': admin})
    assert resp.get_json()['url'] == 'https://lh3.googleusercontent.com/d/f1'


def test_unknown_route_is_json_404(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert resp.get_json()['ok'] is False


def test_large_cart_fits_in_session_cookie(app, client, csrf):
    inventory = app.extensions['uniprice'].inventory_service
    product_ids = []
    for i in range(40):
        created = inventory.create_product({
            'name': f'Handmade ceramic item number {i}',
            'category': 'Houseware',
            'image': f'https://drive.google.com/file/d/1aB2cD3eF4gH5iJ6kL7mN8oP9qR0sT{i:03d}/view?usp=sharing',
            'description': f'Glazed by hand in small batches, each piece is unique; lot {i * 7919}.' * 2,
        })
        product_ids.append(created['product']['id'])

    for product_id in product_ids:
        resp = post(client, csrf, '/api/cart/add', {'productId': product_id})

    assert resp.get_json()['cart']['count'] == 40
    assert len(resp.headers['Set-Cookie']) < 4093


def test_checkout_rejects_non_object_bodies(client, csrf):
    post(client, csrf, '/api/cart/add', {'productId': '1'})

    resp = client.post('/api/checkout', json=[CUSTOMER], headers={'X-CSRF-Token': csrf})
    assert resp.status_code == 400

    resp = post(client, csrf, '/api/checkout', {'customer': 'Omar, Karachi'})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'customer'
    assert client.get('/api/cart').get_json()['cart']['count'] == 1
