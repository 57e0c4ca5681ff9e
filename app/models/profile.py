# app/models/profile.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


class UserRole(Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


@dataclass
class Profile:
    """
    'profiles' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    인증 서비스의 세션 정보와는 별개로, 가입 시 복제되어 저장되는 계정 정보입니다.
    """
    profile_id: str
    name: str
    email: str
    role: UserRole = UserRole.CUSTOMER
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.profile_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'role': self.role.value,
            'created_at': DateTimeUtils.to_iso_string(self.created_at),
            'updated_at': DateTimeUtils.to_iso_string(self.updated_at) if self.updated_at else None,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Profile":
        try:
            role = UserRole(str(data.get('role') or UserRole.CUSTOMER.value).lower())
        except ValueError:
            role = UserRole.CUSTOMER
        created_at = data.get('created_at')
        updated_at = data.get('updated_at')
        return cls(
            profile_id=data['id'],
            name=data.get('name', ""),
            email=data.get('email', ""),
            role=role,
            phone=data.get('phone'),
            address=data.get('address'),
            created_at=DateTimeUtils.validate_datetime_field(created_at) if created_at else DateTimeUtils.now(),
            updated_at=DateTimeUtils.validate_datetime_field(updated_at) if updated_at else None,
        )
