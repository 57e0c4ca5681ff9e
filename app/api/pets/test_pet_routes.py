# app/api/pets/test_pet_routes.py
from dateutil.relativedelta import relativedelta

from app.utils.datetime_utils import DateTimeUtils

PET = {"name": "Mochi", "species": "Dog", "birth_date": "2023-05-01", "gender": "Female",
       "breed": "Shiba Inu", "weight": 9.5}


def test_requires_token(client):
    assert client.get('/api/pets/').status_code == 401


def test_pet_crud_flow(client, auth_headers):
    headers = auth_headers("user-1")

    resp = client.post('/api/pets/', json=PET, headers=headers)
    assert resp.status_code == 201
    created = resp.get_json()
    assert created['species'] == "dog"
    assert created['species_label'] == "Dog"
    assert created['weight'] == "9.5"
    assert created['gender'] == "female"
    assert "year" in created['age']

    pet_url = f"/api/pets/{created['pet_id']}"
    assert [p['pet_id'] for p in client.get('/api/pets/', headers=headers).get_json()] == [created['pet_id']]

    resp = client.patch(pet_url, json={"species": "reptile:gecko"}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['species_label'] == "Gecko (Reptile)"

    assert client.get(pet_url, headers=auth_headers("user-2")).status_code == 404
    assert client.delete(pet_url, headers=auth_headers("user-2")).status_code == 404
    assert client.delete(pet_url, headers=headers).status_code == 204
    assert client.get(pet_url, headers=headers).status_code == 404


def test_age_is_computed_at_read_time(client, auth_headers):
    birth = DateTimeUtils.today() - relativedelta(months=6)
    resp = client.post('/api/pets/', json={**PET, "birth_date": birth.isoformat()}, headers=auth_headers("user-1"))
    assert resp.get_json()['age'] == "6 months"


def test_rejects_future_birth_date_and_unknown_species(client, auth_headers):
    future = (DateTimeUtils.today() + relativedelta(days=10)).isoformat()
    resp = client.post('/api/pets/', json={**PET, "birth_date": future, "species": "dragon:red"},
                       headers=auth_headers("user-1"))
    assert resp.status_code == 400
    details = resp.get_json()['details']
    assert 'birth_date' in details
    assert 'species' in details


def test_empty_update_is_rejected(client, auth_headers):
    headers = auth_headers("user-1")
    created = client.post('/api/pets/', json=PET, headers=headers).get_json()
    resp = client.patch(f"/api/pets/{created['pet_id']}", json={}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error_code'] == "EMPTY_UPDATE"
