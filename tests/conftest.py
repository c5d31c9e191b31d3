import itertools
from types import SimpleNamespace

import pytest

from pet_market import create_app, db
from pet_market.config import TestConfig

PASSWORD = 'secret123'

PET = {
    'name': 'Rex',
    'species': 'dog',
    'breed': 'Labrador',
    'age': 3,
    'gender': 'male',
    'size': 'large',
    'color': 'black',
    'description': 'Friendly and house trained',
}

APPLICATION = {
    'livingArrangement': 'house',
    'hasYard': True,
    'hasChildren': False,
    'reasonForAdoption': 'Looking for a companion',
}

SHOP = {
    'name': 'Paws Corner',
    'description': 'Food and toys',
    'address': {'street': '1 Main St', 'city': 'Dhaka', 'state': 'Dhaka', 'zipCode': '1207', 'country': 'BD'},
    'contactInfo': {'phone': '+880100000', 'email': 'shop@example.com'},
}

RESCUE = {
    'title': 'Street dogs at the river bank',
    'description': 'Three injured dogs need transport',
    'location': {'city': 'Dhaka', 'state': 'Dhaka', 'country': 'Bangladesh'},
    'rescueDate': {'planned': '2026-11-01T09:00:00'},
    'animals': [{'species': 'dog', 'count': 3, 'condition': 'poor'}],
    'funding': {'required': 500},
}


def auth(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register an account through the API and return its id, token and headers."""
    counter = itertools.count(1)

    def _register(role='buyer', **extra):
        n = next(counter)
        payload = {'username': f'{role}{n}', 'email': f'{role}{n}@example.com', 'password': PASSWORD, 'role': role}
        payload.update(extra)
        response = client.post('/api/users/register', json=payload)
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return SimpleNamespace(id=body['user']['id'], token=body['token'], headers=auth(body['token']),
                               email=payload['email'])
    return _register


@pytest.fixture
def buyer(register):
    return register('buyer')


@pytest.fixture
def seller(register):
    return register('seller')


@pytest.fixture
def ngo(register):
    return register('ngo')


@pytest.fixture
def admin(register):
    return register('admin')


@pytest.fixture
def make_pet(client):
    def _make_pet(provider, **overrides):
        response = client.post('/api/pets', json=dict(PET, **overrides), headers=provider.headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make_pet


@pytest.fixture
def apply_for(client):
    def _apply(applicant, pet_id, **details):
        return client.post('/api/adoptions', headers=applicant.headers, json={
            'petId': pet_id,
            'applicationDetails': dict(APPLICATION, **details),
        })
    return _apply


@pytest.fixture
def open_shop(client):
    def _open_shop(owner, **overrides):
        response = client.post('/api/shops', json=dict(SHOP, **overrides), headers=owner.headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _open_shop


@pytest.fixture
def add_product(client):
    def _add_product(owner, name='Dog food', price=10.0, stock=10, **extra):
        response = client.post('/api/products', headers=owner.headers,
                               json=dict({'name': name, 'price': price, 'stock': stock}, **extra))
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _add_product


@pytest.fixture
def hire(client):
    """Register an employee for the owner's shop and log them in."""
    counter = itertools.count(1)

    def _hire(owner, shop_id, permissions=None):
        n = next(counter)
        payload = {
            'firstName': 'Staff',
            'lastName': f'Member{n}',
            'email': f'staff{n}@example.com',
            'password': PASSWORD,
            'phone': '+880111111',
            'shopId': shop_id,
        }
        if permissions is not None:
            payload['permissions'] = permissions
        response = client.post('/api/employees/register', json=payload, headers=owner.headers)
        assert response.status_code == 201, response.get_json()
        employee = response.get_json()
        login = client.post('/api/employees/login', json={'email': payload['email'], 'password': PASSWORD})
        assert login.status_code == 200, login.get_json()
        token = login.get_json()['token']
        return SimpleNamespace(id=employee['id'], user_id=employee['user'], token=token, headers=auth(token),
                               email=payload['email'])
    return _hire


@pytest.fixture
def create_rescue(client):
    def _create_rescue(owner, **overrides):
        response = client.post('/api/rescues', json=dict(RESCUE, **overrides), headers=owner.headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create_rescue
