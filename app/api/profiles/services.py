# app/api/profiles/services.py
import logging
from typing import Dict, Any, List, Optional

from app.models.profile import Profile, UserRole
from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils


class ProfileService:
    """
    계정 프로필 관리 서비스.
    가입은 외부 인증 서비스가 처리하며, 여기서는 그 계정을 'profiles' 컬렉션에 복제해 둡니다.
    역할(role)은 생성 시점에 정해지고 이후 변경하지 않습니다.
    """

    EDITABLE_FIELDS = ('name', 'phone', 'address')

    def __init__(self, store: RecordStore):
        self.store = store

    def get_profile(self, user_id: str) -> Optional[Profile]:
        record = self.store.get(user_id)
        return Profile.from_record(record) if record else None

    def ensure_profile(self, user_id: str, name: str, email: str) -> Profile:
        """프로필이 없으면 customer 역할로 생성하고, 있으면 그대로 반환합니다."""
        existing = self.get_profile(user_id)
        if existing:
            return existing
        profile = Profile(
            profile_id=user_id,
            name=name,
            email=email,
            role=UserRole.CUSTOMER,
            created_at=DateTimeUtils.now(),
        )
        self.store.insert(profile.to_record())
        logging.info(f"Profile created for user {user_id}")
        return profile

    def update_profile(self, user_id: str, update_data: Dict[str, Any]) -> Optional[Profile]:
        """이름/연락처/주소만 수정합니다. 프로필이 없으면 None."""
        fields = {k: v for k, v in update_data.items() if k in self.EDITABLE_FIELDS}
        if not fields:
            raise ValueError("수정할 데이터가 제공되지 않았습니다.")
        fields['updated_at'] = DateTimeUtils.to_iso_string(DateTimeUtils.now())
        if not self.store.update(user_id, fields):
            return None
        logging.info(f"Profile updated for {user_id} with fields: {list(fields.keys())}")
        return self.get_profile(user_id)

    def list_profiles(self) -> List[Profile]:
        """[관리자] 전체 프로필 목록 (최근 가입순)."""
        return [Profile.from_record(r) for r in self.store.list()]

    def is_admin(self, user_id: str) -> bool:
        profile = self.get_profile(user_id)
        return bool(profile and profile.is_admin)
