def status(client, user, adoption_id, value, **extra):
    return client.put(f'/api/adoptions/{adoption_id}/status', headers=user.headers,
                      json=dict({'status': value}, **extra))


def test_full_adoption_flow(client, seller, buyer, register, make_pet, apply_for):
    pet = make_pet(seller)

    applied = apply_for(buyer, pet['id'])
    assert applied.status_code == 201
    adoption = applied.get_json()
    assert adoption['status'] == 'pending'
    assert adoption['provider']['id'] == seller.id
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'pending'

    late = apply_for(register('buyer'), pet['id'])
    assert late.status_code == 400
    assert late.get_json()['message'] == 'Pet is not available for adoption'

    assert status(client, buyer, adoption['id'], 'approved').status_code == 403

    approved = status(client, seller, adoption['id'], 'approved')
    assert approved.get_json()['status'] == 'approved'
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'pending'

    completed = status(client, seller, adoption['id'], 'completed', notes='Home visit went well')
    body = completed.get_json()
    assert body['status'] == 'completed'
    assert body['completionDate'] is not None
    assert [n['content'] for n in body['notes']] == ['Home visit went well']

    adopted = client.get(f"/api/pets/{pet['id']}").get_json()
    assert adopted['status'] == 'adopted'
    assert adopted['adoptedBy'] == buyer.id
    assert adopted['adoptionDate'] is not None

    again = status(client, seller, adoption['id'], 'rejected')
    assert again.status_code == 400
    assert again.get_json()['message'] == 'Can only reject applications that are pending'

    follow_up = client.post(f"/api/adoptions/{adoption['id']}/follow-up", headers=buyer.headers,
                            json={'notes': 'Settling in', 'images': ['rex.jpg']})
    assert follow_up.status_code == 200
    assert follow_up.get_json()[0]['notes'] == 'Settling in'


def test_completed_adoption_is_final(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    status(client, seller, adoption['id'], 'approved')
    status(client, seller, adoption['id'], 'completed')
    adopted = client.get(f"/api/pets/{pet['id']}").get_json()

    cancel = status(client, buyer, adoption['id'], 'cancelled')
    assert cancel.status_code == 400
    assert cancel.get_json()['message'] == 'Can only cancel applications that are pending or approved'

    twice = status(client, seller, adoption['id'], 'completed')
    assert twice.status_code == 400
    assert twice.get_json()['message'] == 'Can only complete applications that are approved'

    after = client.get(f"/api/pets/{pet['id']}").get_json()
    assert after['status'] == 'adopted'
    assert after['adoptedBy'] == buyer.id
    assert after['adoptionDate'] == adopted['adoptionDate']
    assert client.get(f"/api/adoptions/{adoption['id']}", headers=buyer.headers).get_json()['status'] == 'completed'


def test_rejection_returns_pet_to_listing(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    rejected = status(client, seller, adoption['id'], 'rejected')
    assert rejected.get_json()['status'] == 'rejected'
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'available'


def test_applicant_can_cancel_but_not_add_notes(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    cancelled = status(client, buyer, adoption['id'], 'cancelled', notes='Changed my mind')
    body = cancelled.get_json()
    assert body['status'] == 'cancelled'
    assert body['notes'] == []
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'available'


def test_complete_requires_approval_first(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    response = status(client, seller, adoption['id'], 'completed')
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Can only complete applications that are approved'
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'pending'


def test_unknown_status_value(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    assert status(client, seller, adoption['id'], 'shipped').status_code == 400


def test_application_details_are_validated(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    response = apply_for(buyer, pet['id'], livingArrangement='boat', hasYard='yes')
    assert response.status_code == 400
    fields = {e['field'] for e in response.get_json()['errors']}
    assert fields == {'applicationDetails.livingArrangement', 'applicationDetails.hasYard'}
    assert client.get(f"/api/pets/{pet['id']}").get_json()['status'] == 'available'


def test_duplicate_application_is_refused(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    apply_for(buyer, pet['id'])
    # The pet is pending now, so availability fails first
    assert apply_for(buyer, pet['id']).status_code == 400


def test_visibility_is_limited_to_the_parties(client, seller, buyer, register, admin, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    url = f"/api/adoptions/{adoption['id']}"

    assert client.get(url, headers=buyer.headers).status_code == 200
    assert client.get(url, headers=seller.headers).status_code == 200
    assert client.get(url, headers=admin.headers).status_code == 200
    assert client.get(url, headers=register('buyer').headers).status_code == 403
    assert client.get('/api/adoptions/9999', headers=buyer.headers).status_code == 404


def test_list_is_scoped_by_role(client, seller, buyer, register, admin, make_pet, apply_for):
    other_seller = register('seller')
    apply_for(buyer, make_pet(seller)['id'])
    apply_for(register('buyer'), make_pet(other_seller)['id'])

    assert client.get('/api/adoptions', headers=buyer.headers).get_json()['pagination']['total'] == 1
    assert client.get('/api/adoptions', headers=seller.headers).get_json()['pagination']['total'] == 1
    assert client.get('/api/adoptions', headers=admin.headers).get_json()['pagination']['total'] == 2
    pending = client.get('/api/adoptions?status=pending', headers=admin.headers).get_json()
    assert len(pending['adoptions']) == 2


def test_messages_between_parties(client, seller, buyer, register, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    url = f"/api/adoptions/{adoption['id']}/messages"

    client.post(url, headers=buyer.headers, json={'message': 'Is he good with cats?'})
    messages = client.post(url, headers=seller.headers, json={'message': 'Yes'}).get_json()
    assert [m['sender'] for m in messages] == [buyer.id, seller.id]

    assert client.post(url, headers=register('buyer').headers, json={'message': 'Hi'}).status_code == 403
    assert client.post(url, headers=buyer.headers, json={}).status_code == 400


def test_follow_up_needs_completed_adoption(client, seller, buyer, make_pet, apply_for):
    pet = make_pet(seller)
    adoption = apply_for(buyer, pet['id']).get_json()
    response = client.post(f"/api/adoptions/{adoption['id']}/follow-up", headers=buyer.headers,
                           json={'notes': 'Too early'})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Can only add follow-ups for completed adoptions'
