# app/models/pet.py
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Dict, Any
from enum import Enum
import logging

from app.utils.datetime_utils import DateTimeUtils


class PetGender(Enum):
    MALE = "male"
    FEMALE = "female"


class PetType(Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    RABBIT = "rabbit"
    HAMSTER = "hamster"
    FISH = "fish"
    REPTILE = "reptile"
    OTHER = "other"


@dataclass(frozen=True)
class PetSpecies:
    """
    반려동물 종 정보.
    저장소에는 "dog", "other" 또는 "reptile:<subtype>" 형태의 복합 문자열로 기록됩니다.
    """
    pet_type: PetType
    subtype: Optional[str] = None

    @classmethod
    def parse(cls, value: Any) -> "PetSpecies":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        kind, _, subtype = text.partition(":")
        try:
            pet_type = PetType(kind)
        except ValueError:
            # 목록에 없는 종은 "other"로 두고 원래 이름을 subtype으로 보존
            return cls(PetType.OTHER, text or None)
        if pet_type is PetType.REPTILE and subtype:
            return cls(pet_type, subtype.strip())
        return cls(pet_type)

    def encode(self) -> str:
        if self.pet_type is PetType.REPTILE and self.subtype:
            return f"reptile:{self.subtype}"
        return self.pet_type.value

    @property
    def label(self) -> str:
        """화면 표시용 이름 (예: Gecko (Reptile))"""
        if self.pet_type is PetType.REPTILE and self.subtype:
            return f"{self.subtype.capitalize()} (Reptile)"
        if self.pet_type is PetType.OTHER and self.subtype:
            return self.subtype.capitalize()
        return self.pet_type.value.capitalize()


@dataclass
class Pet:
    """
    'pets' 컬렉션 문서 구조.
    나이는 저장하지 않고 조회 시점에 birth_date로부터 다시 계산합니다.
    """
    pet_id: str
    owner_id: str
    name: str
    species: PetSpecies
    birth_date: date
    gender: PetGender
    breed: Optional[str] = None
    weight: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: Optional[datetime] = None

    @property
    def age(self) -> str:
        return DateTimeUtils.calculate_age(self.birth_date)

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.pet_id,
            'owner_id': self.owner_id,
            'name': self.name,
            'type': self.species.pet_type.value,
            'species': self.species.encode(),
            'breed': self.breed,
            'weight': self.weight,
            'birth_date': DateTimeUtils.to_date_string(self.birth_date),
            'gender': self.gender.value,
            'created_at': DateTimeUtils.to_iso_string(self.created_at),
            'updated_at': DateTimeUtils.to_iso_string(self.updated_at) if self.updated_at else None,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Pet":
        """
        저장소에서 받은 딕셔너리로부터 Pet 인스턴스를 생성합니다.
        species가 비어 있으면 type 필드로 대체합니다.
        """
        gender_str = str(data.get('gender') or "").lower()
        try:
            gender = PetGender(gender_str)
        except ValueError:
            logging.warning(f"Invalid PetGender value '{gender_str}' for pet {data.get('id')}. Defaulting to male.")
            gender = PetGender.MALE

        created_at = data.get('created_at')
        updated_at = data.get('updated_at')
        weight = data.get('weight')

        return cls(
            pet_id=data['id'],
            owner_id=data.get('owner_id') or data.get('ownerId'),
            name=data.get('name', ""),
            species=PetSpecies.parse(data.get('species') or data.get('type')),
            birth_date=DateTimeUtils.validate_date_field(data.get('birth_date') or data.get('birthDate'), 'birth_date'),
            gender=gender,
            breed=data.get('breed'),
            weight=str(weight) if weight is not None else None,
            created_at=DateTimeUtils.validate_datetime_field(created_at) if created_at else DateTimeUtils.now(),
            updated_at=DateTimeUtils.validate_datetime_field(updated_at) if updated_at else None,
        )
