import pytest


@pytest.fixture
def shelf(seller, open_shop, add_product):
    shop = open_shop(seller)
    collar = add_product(seller, name='Collar', price=5, stock=5)
    bed = add_product(seller, name='Bed', price=40, stock=1)
    return shop, collar, bed


def place(client, user, shop_id, items, total=50, payment_method='cod'):
    return client.post('/api/orders', headers=user.headers, json={
        'shop': shop_id, 'items': items, 'paymentMethod': payment_method, 'total': total
    })


def stock_of(client, product_id):
    return client.get(f'/api/products/{product_id}').get_json()['stock']


def test_order_takes_stock(client, buyer, shelf):
    shop, collar, bed = shelf
    response = place(client, buyer, shop['id'], [
        {'product': collar['id'], 'quantity': 2},
        {'product': bed['id'], 'quantity': 1},
    ])
    assert response.status_code == 201
    order = response.get_json()
    assert order['status'] == 'Pending'
    assert order['buyer']['id'] == buyer.id
    assert [(i['product']['name'], i['quantity']) for i in order['items']] == [('Collar', 2), ('Bed', 1)]
    assert stock_of(client, collar['id']) == 3
    assert stock_of(client, bed['id']) == 0


def test_short_line_rolls_back_the_whole_order(client, buyer, shelf):
    shop, collar, bed = shelf
    response = place(client, buyer, shop['id'], [
        {'product': collar['id'], 'quantity': 2},
        {'product': bed['id'], 'quantity': 3},
    ])
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Insufficient stock for Bed'

    assert stock_of(client, collar['id']) == 5
    assert stock_of(client, bed['id']) == 1
    assert client.get('/api/orders/mine', headers=buyer.headers).get_json()['orders'] == []


def test_missing_product_rolls_back(client, buyer, shelf):
    shop, collar, _ = shelf
    response = place(client, buyer, shop['id'], [
        {'product': collar['id'], 'quantity': 1},
        {'product': 9999, 'quantity': 1},
    ])
    assert response.status_code == 404
    assert stock_of(client, collar['id']) == 5


def test_lines_must_come_from_the_ordered_shop(client, buyer, register, shelf, open_shop, add_product):
    shop, collar, _ = shelf
    other = register('seller')
    open_shop(other, name='Elsewhere')
    foreign = add_product(other, name='Foreign')
    response = place(client, buyer, shop['id'], [
        {'product': collar['id'], 'quantity': 1},
        {'product': foreign['id'], 'quantity': 1},
    ])
    assert response.status_code == 400
    assert stock_of(client, collar['id']) == 5
    assert stock_of(client, foreign['id']) == 10


def test_order_validation(client, buyer, shelf):
    shop, collar, _ = shelf
    assert place(client, buyer, shop['id'], []).status_code == 400
    assert place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 0}]).status_code == 400
    assert place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1.5}]).status_code == 400
    assert place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}],
                 payment_method='barter').status_code == 400
    assert place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}], total=0).status_code == 400
    assert place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}],
                 total='Infinity').status_code == 400
    assert place(client, buyer, 9999, [{'product': collar['id'], 'quantity': 1}]).status_code == 404
    assert stock_of(client, collar['id']) == 5


def test_status_updates_by_shop_owner(client, seller, buyer, admin, shelf):
    shop, collar, _ = shelf
    order = place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}]).get_json()
    url = f"/api/orders/{order['id']}/status"

    assert client.put(url, json={'status': 'Completed'}, headers=buyer.headers).status_code == 403

    invalid = client.put(url, json={'status': 'Shipped'}, headers=seller.headers)
    assert invalid.status_code == 400
    assert invalid.get_json()['message'] == 'Invalid status value'

    assert client.put(url, json={'status': 'Completed'}, headers=seller.headers).get_json()['status'] == 'Completed'
    assert client.put(url, json={'status': 'Cancelled'}, headers=admin.headers).get_json()['status'] == 'Cancelled'


def test_shop_order_listing(client, seller, buyer, register, shelf):
    shop, collar, _ = shelf
    place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}])

    missing = client.get('/api/orders', headers=seller.headers)
    assert missing.status_code == 400
    assert missing.get_json()['message'] == 'Missing seller (shopId) parameter'

    listing = client.get(f"/api/orders?shop={shop['id']}", headers=seller.headers).get_json()
    assert listing['pagination']['total'] == 1
    legacy = client.get(f"/api/orders?seller={shop['id']}&status=Pending", headers=seller.headers).get_json()
    assert len(legacy['orders']) == 1

    assert client.get(f"/api/orders?shop={shop['id']}", headers=register('seller').headers).status_code == 403


def test_order_detail_visibility(client, seller, buyer, register, shelf):
    shop, collar, _ = shelf
    order = place(client, buyer, shop['id'], [{'product': collar['id'], 'quantity': 1}]).get_json()
    url = f"/api/orders/{order['id']}"
    assert client.get(url, headers=buyer.headers).status_code == 200
    assert client.get(url, headers=seller.headers).status_code == 200
    assert client.get(url, headers=register('buyer').headers).status_code == 403
