import pytest


@pytest.fixture
def store(seller, open_shop, add_product, hire):
    shop = open_shop(seller)
    product = add_product(seller, name='Kibble', stock=10)
    employee = hire(seller, shop['id'])
    return shop, product, employee


def adjust(client, user, product_id, **fields):
    return client.post('/api/inventory/adjustments', headers=user.headers,
                       json=dict({'product': product_id}, **fields))


def stock_of(client, product_id):
    return client.get(f'/api/products/{product_id}').get_json()['stock']


def test_plain_restock_applies_immediately(client, store):
    _, product, employee = store
    response = adjust(client, employee, product['id'], type='restock', quantityChange=5)
    assert response.status_code == 201
    body = response.get_json()
    assert body['status'] == 'approved'
    assert body['previousStock'] == 10
    assert body['newStock'] == 15
    assert body['requiresApproval'] is False
    assert stock_of(client, product['id']) == 15


def test_client_supplied_new_stock_wins(client, store):
    _, product, employee = store
    body = adjust(client, employee, product['id'], type='adjustment', quantityChange=-1, newStock=4).get_json()
    assert body['newStock'] == 4
    assert stock_of(client, product['id']) == 4


def test_damaged_stock_waits_for_owner(client, seller, store):
    _, product, employee = store
    pending = adjust(client, employee, product['id'], type='damaged', quantityChange=0, damagedQuantity=3).get_json()
    assert pending['status'] == 'pending'
    assert pending['newStock'] == 7
    assert pending['requiresApproval'] is True
    assert stock_of(client, product['id']) == 10

    queue = client.get('/api/inventory/adjustments/pending', headers=seller.headers).get_json()
    assert [a['id'] for a in queue['adjustments']] == [pending['id']]

    url = f"/api/inventory/adjustments/{pending['id']}/status"
    approved = client.put(url, json={'status': 'approved'}, headers=seller.headers).get_json()
    assert approved['status'] == 'approved'
    assert approved['approvedBy']['id'] == seller.id
    assert stock_of(client, product['id']) == 7

    again = client.put(url, json={'status': 'approved'}, headers=seller.headers)
    assert again.status_code == 400
    assert again.get_json()['message'] == 'Adjustment is not pending'
    assert stock_of(client, product['id']) == 7
    assert client.get('/api/inventory/adjustments/pending', headers=seller.headers).get_json()['adjustments'] == []


def test_rejection_keeps_stock_and_needs_reason(client, seller, store):
    _, product, employee = store
    pending = adjust(client, employee, product['id'], type='expired', quantityChange=0, expiredQuantity=2).get_json()
    url = f"/api/inventory/adjustments/{pending['id']}/status"

    no_reason = client.put(url, json={'status': 'rejected'}, headers=seller.headers)
    assert no_reason.status_code == 400
    assert no_reason.get_json()['message'] == 'Rejection reason is required'

    rejected = client.put(url, json={'status': 'rejected', 'rejectionReason': 'Miscounted'},
                          headers=seller.headers).get_json()
    assert rejected['status'] == 'rejected'
    assert rejected['rejectionReason'] == 'Miscounted'
    assert stock_of(client, product['id']) == 10


def test_only_the_shop_owner_reviews(client, register, store, open_shop):
    _, product, employee = store
    pending = adjust(client, employee, product['id'], type='damaged', quantityChange=0, damagedQuantity=1).get_json()
    url = f"/api/inventory/adjustments/{pending['id']}/status"

    assert client.put(url, json={'status': 'approved'}, headers=employee.headers).status_code == 403

    other = register('seller')
    open_shop(other, name='Rival')
    assert client.put(url, json={'status': 'approved'}, headers=other.headers).status_code == 404
    assert client.put(url, json={'status': 'maybe'}, headers=other.headers).status_code == 400


def test_adjustment_permissions(client, seller, store, hire, register, open_shop, add_product):
    shop, product, _ = store
    assert adjust(client, seller, product['id'], type='restock', quantityChange=1).status_code == 403

    no_inventory = hire(seller, shop['id'], permissions={'canManageInventory': False})
    refused = adjust(client, no_inventory, product['id'], type='restock', quantityChange=1)
    assert refused.status_code == 403
    assert refused.get_json()['message'] == 'You do not have permission to manage inventory'

    other = register('seller')
    open_shop(other, name='Rival')
    foreign = add_product(other, name='Foreign')
    clerk = hire(seller, shop['id'])
    wrong_shop = adjust(client, clerk, foreign['id'], type='restock', quantityChange=1)
    assert wrong_shop.status_code == 404
    assert wrong_shop.get_json()['message'] == 'Product not found or not part of your shop'


def test_adjustment_validation(client, store):
    _, product, employee = store
    assert adjust(client, employee, product['id'], type='lost', quantityChange=1).status_code == 400
    assert adjust(client, employee, product['id'], type='restock').status_code == 400
    assert adjust(client, employee, product['id'], type='damaged', quantityChange=0,
                  damagedQuantity=-1).status_code == 400


def test_history_filters(client, seller, store):
    _, product, employee = store
    adjust(client, employee, product['id'], type='restock', quantityChange=2)
    adjust(client, employee, product['id'], type='damaged', quantityChange=0, damagedQuantity=1)

    history = client.get('/api/inventory/adjustments', headers=seller.headers).get_json()
    assert history['pagination']['total'] == 2
    assert [a['type'] for a in history['adjustments']] == ['damaged', 'restock']

    pending = client.get('/api/inventory/adjustments?status=pending', headers=employee.headers).get_json()
    assert [a['type'] for a in pending['adjustments']] == ['damaged']

    restocks = client.get('/api/inventory/adjustments?type=restock', headers=seller.headers).get_json()
    assert len(restocks['adjustments']) == 1

    future = client.get('/api/inventory/adjustments?startDate=2999-01-01', headers=seller.headers).get_json()
    assert future['adjustments'] == []

    assert client.get('/api/inventory/adjustments?endDate=whenever', headers=seller.headers).status_code == 400


def test_set_stock_directly(client, seller, buyer, store):
    _, product, employee = store
    url = f"/api/inventory/products/{product['id']}/stock"

    assert client.put(url, json={}, headers=seller.headers).get_json()['message'] == 'Stock value is required'
    assert client.put(url, json={'stock': -5}, headers=seller.headers).get_json()['stock'] == 0
    assert client.put(url, json={'stock': 12}, headers=employee.headers).get_json()['stock'] == 12
    assert client.put(url, json={'stock': 1}, headers=buyer.headers).status_code == 403


def test_new_stock_defaults_to_the_computed_level(client, store):
    _, product, employee = store
    counted = adjust(client, employee, product['id'], type='adjustment', quantityChange=4).get_json()
    assert counted['newStock'] == 14

    written_off = adjust(client, employee, product['id'], type='expired',
                         quantityChange=-2, expiredQuantity=20).get_json()
    assert written_off['previousStock'] == 14
    assert written_off['newStock'] == 0
    assert written_off['status'] == 'pending'
