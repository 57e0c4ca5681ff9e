# app/api/pets/test_pet_service.py
from datetime import date
from unittest.mock import MagicMock

import pytest

from app.models.pet import PetType, PetGender
from app.services.record_store import InMemoryRecordStore
from app.api.pets.services import PetService


@pytest.fixture
def service():
    return PetService(InMemoryRecordStore('pets'))


def new_pet(**overrides):
    data = {'name': "Mochi", 'species': "dog", 'birth_date': date(2023, 5, 1), 'gender': "female",
            'breed': "Shiba Inu", 'weight': "9.5"}
    data.update(overrides)
    return data


def test_add_and_list_only_own_pets(service):
    mine = service.add_pet("user-1", new_pet())
    service.add_pet("user-2", new_pet(name="Kiko"))

    assert [p.pet_id for p in service.list_pets("user-1")] == [mine.pet_id]
    assert len(service.list_all()) == 2
    assert service.store.get(mine.pet_id)['birth_date'] == "2023-05-01"


def test_foreign_pet_is_indistinguishable_from_missing(service):
    pet = service.add_pet("user-1", new_pet())

    assert service.get_pet(pet.pet_id, "user-2") is None
    assert service.update_pet(pet.pet_id, "user-2", {'name': "Stolen"}) is None
    assert service.delete_pet(pet.pet_id, "user-2") is False
    assert service.get_pet(pet.pet_id, "user-1").name == "Mochi"


def test_update_reptile_subtype(service):
    pet = service.add_pet("user-1", new_pet())

    updated = service.update_pet(pet.pet_id, "user-1", {'species': "reptile:gecko", 'weight': "0.1"})

    assert updated.species.pet_type is PetType.REPTILE
    assert updated.species.label == "Gecko (Reptile)"
    record = service.store.get(pet.pet_id)
    assert record['species'] == "reptile:gecko"
    assert record['type'] == "reptile"
    assert record['updated_at']


def test_update_ignores_unknown_fields_and_rejects_empty(service):
    pet = service.add_pet("user-1", new_pet())
    with pytest.raises(ValueError):
        service.update_pet(pet.pet_id, "user-1", {'owner_id': "user-2"})
    assert service.get_pet(pet.pet_id, "user-1").owner_id == "user-1"


def test_delete_own_pet(service):
    pet = service.add_pet("user-1", new_pet(gender="male"))
    assert pet.gender is PetGender.MALE
    assert service.delete_pet(pet.pet_id, "user-1") is True
    assert service.list_pets("user-1") == []


def test_store_failure_is_reported(service):
    service.store.insert = MagicMock(side_effect=OSError("disk full"))
    with pytest.raises(RuntimeError):
        service.add_pet("user-1", new_pet())
