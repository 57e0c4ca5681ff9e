# app/api/pets/services.py
import logging
import uuid
from typing import Dict, Any, List, Optional

from app.models.pet import Pet, PetGender, PetSpecies
from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils


class PetService:
    """
    반려동물 프로필 관리를 전담하는 서비스.
    모든 조회/수정/삭제는 owner_id 일치 조건을 거치며, 다른 사용자의 반려동물은 없는 것과 동일하게 취급합니다.
    """

    UPDATABLE_FIELDS = ('name', 'species', 'breed', 'weight', 'birth_date', 'gender')

    def __init__(self, store: RecordStore):
        self.store = store
        logging.info("PetService initialized.")

    def list_pets(self, owner_id: str) -> List[Pet]:
        return self._to_pets(self.store.list({'owner_id': owner_id}))

    def list_all(self) -> List[Pet]:
        """[관리자] 전체 반려동물 목록."""
        return self._to_pets(self.store.list())

    def get_pet(self, pet_id: str, owner_id: str) -> Optional[Pet]:
        record = self.store.get(pet_id)
        if not record or record.get('owner_id') != owner_id:
            return None
        return Pet.from_record(record)

    def add_pet(self, owner_id: str, pet_data: Dict[str, Any]) -> Pet:
        new_pet = Pet(
            pet_id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=pet_data['name'],
            species=PetSpecies.parse(pet_data['species']),
            birth_date=pet_data['birth_date'],
            gender=PetGender(pet_data['gender']),
            breed=pet_data.get('breed'),
            weight=pet_data.get('weight'),
            created_at=DateTimeUtils.now(),
        )
        try:
            self.store.insert(new_pet.to_record())
        except Exception as e:
            logging.error(f"Pet registration failed for user {owner_id}: {e}", exc_info=True)
            raise RuntimeError("반려동물 등록에 실패했습니다. 다시 시도해주세요.")
        logging.info(f"Pet {new_pet.pet_id} registered for user {owner_id}")
        return new_pet

    def update_pet(self, pet_id: str, owner_id: str, update_data: Dict[str, Any]) -> Optional[Pet]:
        """
        반려동물 정보를 부분 업데이트합니다.
        대상이 없거나 소유자가 다르면 None을 반환합니다.
        """
        pet = self.get_pet(pet_id, owner_id)
        if not pet:
            return None
        fields = {k: v for k, v in update_data.items() if k in self.UPDATABLE_FIELDS}
        if not fields:
            raise ValueError("수정할 데이터가 제공되지 않았습니다.")

        if 'species' in fields:
            species = PetSpecies.parse(fields['species'])
            fields['species'] = species.encode()
            fields['type'] = species.pet_type.value
        if 'birth_date' in fields:
            fields['birth_date'] = DateTimeUtils.to_date_string(fields['birth_date'])
        fields['updated_at'] = DateTimeUtils.to_iso_string(DateTimeUtils.now())

        self.store.update(pet_id, fields)
        logging.info(f"Pet profile updated for {pet_id} with fields: {list(fields.keys())}")
        return self.get_pet(pet_id, owner_id)

    def delete_pet(self, pet_id: str, owner_id: str) -> bool:
        if not self.get_pet(pet_id, owner_id):
            return False
        deleted = self.store.delete(pet_id)
        if deleted:
            logging.info(f"Pet {pet_id} deleted by owner {owner_id}")
        return deleted

    def _to_pets(self, records: List[Dict[str, Any]]) -> List[Pet]:
        pets = []
        for record in records:
            try:
                pets.append(Pet.from_record(record))
            except (KeyError, ValueError) as e:
                logging.warning(f"Skipping malformed pet record {record.get('id')}: {e}")
        return pets
