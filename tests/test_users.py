from tests.conftest import PASSWORD, auth


def test_register_returns_token_and_profile(client):
    response = client.post('/api/users/register', json={
        'username': 'alice', 'email': 'Alice@Example.com', 'password': PASSWORD
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body['token']
    assert body['user']['email'] == 'alice@example.com'
    assert body['user']['role'] == 'buyer'
    assert 'password' not in body['user']


def test_register_rejects_duplicate_email(client, buyer):
    response = client.post('/api/users/register', json={
        'username': 'again', 'email': buyer.email, 'password': PASSWORD
    })
    assert response.status_code == 400
    assert response.get_json()['message'] == 'User already exists'


def test_register_validates_input(client):
    short = client.post('/api/users/register', json={'username': 'a', 'email': 'a@b.co', 'password': '123'})
    assert short.status_code == 400
    assert short.get_json()['errors'][0]['field'] == 'password'

    bad_email = client.post('/api/users/register', json={'username': 'a', 'email': 'nope', 'password': PASSWORD})
    assert bad_email.status_code == 400

    missing = client.post('/api/users/register', json={'email': 'a@b.co'})
    assert missing.status_code == 400
    assert {e['field'] for e in missing.get_json()['errors']} == {'username', 'password'}

    numeric_name = client.post('/api/users/register', json={'username': 5, 'email': 'a@b.co', 'password': PASSWORD})
    assert numeric_name.status_code == 400
    assert numeric_name.get_json()['errors'] == [{'field': 'username', 'message': 'must be a non-empty string'}]

    numeric_email = client.post('/api/users/register', json={'username': 'a', 'email': 42, 'password': PASSWORD})
    assert numeric_email.status_code == 400


def test_employee_accounts_cannot_self_register(client):
    response = client.post('/api/users/register', json={
        'username': 'sneaky', 'email': 'sneaky@example.com', 'password': PASSWORD, 'role': 'employee'
    })
    assert response.status_code == 400


def test_login(client, buyer):
    ok = client.post('/api/users/login', json={'email': buyer.email, 'password': PASSWORD})
    assert ok.status_code == 200
    assert ok.get_json()['user']['id'] == buyer.id

    wrong = client.post('/api/users/login', json={'email': buyer.email, 'password': 'wrong-password'})
    assert wrong.status_code == 400
    assert wrong.get_json()['message'] == 'Invalid credentials'


def test_me_requires_token(client):
    response = client.get('/api/users/me')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'No token, authorization denied'

    garbage = client.get('/api/users/me', headers=auth('not-a-jwt'))
    assert garbage.status_code == 401
    assert garbage.get_json()['message'] == 'Token is not valid'


def test_me_lists_role_permissions(client, seller):
    response = client.get('/api/users/me', headers=seller.headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['role'] == 'seller'
    assert 'create_pet' in body['permissions']
    assert 'create_rescue' not in body['permissions']


def test_update_profile(client, buyer, seller):
    response = client.put('/api/users/me', headers=buyer.headers, json={
        'firstName': 'Ann', 'bio': 'Cat person', 'ngoDetails': {'registrationNumber': 'X'}
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body['firstName'] == 'Ann'
    assert body['bio'] == 'Cat person'
    assert body['ngoDetails'] is None

    taken = client.put('/api/users/me', headers=buyer.headers, json={'email': seller.email})
    assert taken.status_code == 400
    assert taken.get_json()['message'] == 'Email already taken'


def test_ngo_details_are_kept_for_ngo_accounts(client, ngo):
    response = client.put('/api/users/me', headers=ngo.headers, json={'ngoDetails': {'registrationNumber': 'NGO-1'}})
    assert response.get_json()['ngoDetails'] == {'registrationNumber': 'NGO-1'}


def test_change_password(client, buyer):
    wrong = client.put('/api/users/change-password', headers=buyer.headers,
                       json={'currentPassword': 'wrong-one', 'newPassword': 'another1'})
    assert wrong.status_code == 400
    assert wrong.get_json()['message'] == 'Current password is incorrect'

    ok = client.put('/api/users/change-password', headers=buyer.headers,
                    json={'currentPassword': PASSWORD, 'newPassword': 'another1'})
    assert ok.status_code == 200
    login = client.post('/api/users/login', json={'email': buyer.email, 'password': 'another1'})
    assert login.status_code == 200


def test_public_profile_lists_available_pets(client, seller, make_pet):
    make_pet(seller)
    response = client.get(f'/api/users/{seller.id}')
    assert response.status_code == 200
    body = response.get_json()
    assert 'email' not in body['user']
    assert len(body['listings']['pets']) == 1
    assert client.get('/api/users/9999').status_code == 404


def test_favorites(client, buyer, seller, make_pet):
    pet = make_pet(seller)
    added = client.post('/api/users/favorites', headers=buyer.headers, json={'type': 'pet', 'id': pet['id']})
    assert added.status_code == 200
    assert added.get_json()['pets'] == [pet['id']]

    again = client.post('/api/users/favorites', headers=buyer.headers, json={'type': 'pet', 'id': pet['id']})
    assert again.status_code == 400

    bad_type = client.post('/api/users/favorites', headers=buyer.headers, json={'type': 'rescue', 'id': 1})
    assert bad_type.status_code == 400
    assert bad_type.get_json()['message'] == 'Invalid favorite type'

    removed = client.delete('/api/users/favorites', headers=buyer.headers, json={'type': 'pet', 'id': pet['id']})
    assert removed.get_json()['pets'] == []


def test_cart_merges_lines_and_totals(client, buyer, seller, open_shop, add_product):
    open_shop(seller)
    product = add_product(seller, price=12.5)

    client.post('/api/users/cart/items', headers=buyer.headers, json={'product': product['id']})
    cart = client.post('/api/users/cart/items', headers=buyer.headers,
                       json={'product': product['id'], 'quantity': 2}).get_json()
    assert len(cart['items']) == 1
    assert cart['items'][0]['quantity'] == 3
    assert cart['total'] == 37.5

    updated = client.put(f"/api/users/cart/items/{product['id']}", headers=buyer.headers, json={'quantity': 1})
    assert updated.get_json()['total'] == 12.5

    assert client.put('/api/users/cart/items/9999', headers=buyer.headers,
                      json={'quantity': 1}).status_code == 404
    fractional = client.put(f"/api/users/cart/items/{product['id']}", headers=buyer.headers, json={'quantity': 1.5})
    assert fractional.status_code == 400
    assert fractional.get_json()['message'] == 'quantity must be an integer'

    cleared = client.delete('/api/users/cart', headers=buyer.headers)
    assert cleared.get_json() == {'items': [], 'total': 0}
