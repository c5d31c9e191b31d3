from tests.conftest import PET


def test_only_providers_can_list_pets(client, buyer, seller, ngo, make_pet):
    response = client.post('/api/pets', json={'name': 'Tom'}, headers=buyer.headers)
    assert response.status_code == 403
    assert response.get_json()['message'] == 'Only sellers, NGOs and admins can list pets'

    assert make_pet(seller)['status'] == 'available'
    assert make_pet(ngo)['provider']['role'] == 'ngo'


def test_create_pet_validates_fields(client, seller):
    missing = client.post('/api/pets', json={'name': 'Tom'}, headers=seller.headers)
    assert missing.status_code == 400
    assert 'species' in {e['field'] for e in missing.get_json()['errors']}

    bad_species = client.post('/api/pets', headers=seller.headers, json={
        'name': 'Tom', 'species': 'dragon', 'breed': 'x', 'age': 1, 'gender': 'male',
        'size': 'small', 'color': 'red', 'description': 'Fiery'
    })
    assert bad_species.status_code == 400

    endless_fee = client.post('/api/pets', json=dict(PET, adoptionFee='Infinity'), headers=seller.headers)
    assert endless_fee.status_code == 400
    assert endless_fee.get_json()['errors'] == [{'field': 'adoptionFee', 'message': 'must be a finite number'}]


def test_created_pet_ignores_client_status(client, seller):
    response = client.post('/api/pets', json=dict(PET, status='adopted'), headers=seller.headers)
    assert response.get_json()['status'] == 'available'


def test_list_filters_and_pagination(client, seller, make_pet):
    make_pet(seller, name='A', age=1)
    make_pet(seller, name='B', age=5, species='cat')
    make_pet(seller, name='C', age=8)

    page = client.get('/api/pets?limit=2').get_json()
    assert page['pagination'] == {'total': 3, 'pages': 2, 'currentPage': 1, 'perPage': 2}
    assert [p['name'] for p in page['pets']] == ['C', 'B']

    dogs = client.get('/api/pets?species=dog&minAge=2').get_json()
    assert [p['name'] for p in dogs['pets']] == ['C']

    by_name = client.get('/api/pets?sort=name').get_json()
    assert [p['name'] for p in by_name['pets']] == ['A', 'B', 'C']

    assert client.get('/api/pets?sort=password').status_code == 400
    assert client.get('/api/pets?limit=1000').status_code == 400


def test_get_pet(client, seller, make_pet):
    pet = make_pet(seller)
    assert client.get(f"/api/pets/{pet['id']}").get_json()['name'] == 'Rex'
    response = client.get('/api/pets/9999')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Pet not found'


def test_update_pet_by_owner_only(client, seller, register, make_pet):
    pet = make_pet(seller)
    other = register('seller')

    forbidden = client.put(f"/api/pets/{pet['id']}", json={'name': 'Max'}, headers=other.headers)
    assert forbidden.status_code == 403

    ok = client.put(f"/api/pets/{pet['id']}", json={'name': 'Max', 'vaccinated': True}, headers=seller.headers)
    assert ok.status_code == 200
    assert ok.get_json()['name'] == 'Max'
    assert ok.get_json()['vaccinated'] is True


def test_generic_update_cannot_touch_adoption_fields(client, seller, admin, make_pet):
    pet = make_pet(seller)
    for headers in (seller.headers, admin.headers):
        response = client.put(f"/api/pets/{pet['id']}", json={'status': 'adopted'}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cannot update status directly'
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'available'


def test_delete_pet(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    apply_for(buyer, pet['id'])
    blocked = client.delete(f"/api/pets/{pet['id']}", headers=seller.headers)
    assert blocked.status_code == 400
    assert blocked.get_json()['message'] == 'Cannot delete pet with active adoption applications'

    spare = make_pet(seller, name='Spare')
    assert client.delete(f"/api/pets/{spare['id']}", headers=buyer.headers).status_code == 403
    deleted = client.delete(f"/api/pets/{spare['id']}", headers=seller.headers)
    assert deleted.get_json() == {'message': 'Pet removed'}
    assert client.get(f"/api/pets/{spare['id']}").status_code == 404


def test_images(client, seller, make_pet):
    pet = make_pet(seller)
    url = f"/api/pets/{pet['id']}/images"
    assert client.post(url, json={'images': []}, headers=seller.headers).get_json()['message'] == 'No images provided'

    added = client.post(url, json={'images': ['a.jpg', 'b.jpg']}, headers=seller.headers).get_json()
    assert added['images'] == ['a.jpg', 'b.jpg']

    removed = client.delete(url, json={'imageUrl': 'a.jpg'}, headers=seller.headers).get_json()
    assert removed['images'] == ['b.jpg']


def test_provider_stats_and_recent(client, seller, buyer, make_pet, apply_for):
    first = make_pet(seller, name='First')
    make_pet(seller, name='Second')
    apply_for(buyer, first['id'])

    stats = client.get('/api/pets/stats', headers=seller.headers).get_json()
    assert stats == {'totalPets': 2, 'availablePets': 1, 'adoptedPets': 0, 'pendingAdoptions': 1}

    recent = client.get('/api/pets/recent', headers=seller.headers).get_json()
    assert [p['name'] for p in recent] == ['Second', 'First']

    assert client.get('/api/pets/stats', headers=buyer.headers).status_code == 403
