# app/api/notifications/services.py
from typing import Dict, List, Optional, Tuple

from app.models.appointment import Appointment
from app.models.pet import Pet


class NotificationSourceService:
    """
    알림 계산에 필요한 사용자별 (예약, 반려동물) 묶음을 만들어 주는 서비스.
    예약은 owner_id가 같거나, 비로그인 예약이라도 프로필 이메일이 같으면 그 사용자의 것으로 봅니다.
    """

    def __init__(self, appointment_service, pet_service, profile_service):
        self.appointment_service = appointment_service
        self.pet_service = pet_service
        self.profile_service = profile_service

    def for_user(self, user_id: str) -> Tuple[List[Appointment], List[Pet]]:
        pets = self.pet_service.list_pets(user_id)
        profile = self.profile_service.get_profile(user_id)
        email = profile.email if profile else None
        appointments = [a for a in self.appointment_service.list() if a.is_owned_by(user_id, email)]
        return appointments, pets

    def snapshot(self) -> Dict[str, Tuple[List[Appointment], List[Pet]]]:
        """
        알림 대상이 될 수 있는 모든 사용자의 묶음. 백그라운드 폴러가 주기적으로 호출합니다.
        대상: 반려동물 보호자, 로그인 예약의 owner_id, 비로그인 예약 이메일과 프로필 이메일이 같은 사용자
        """
        pets_by_owner: Dict[str, List[Pet]] = {}
        for pet in self.pet_service.list_all():
            pets_by_owner.setdefault(pet.owner_id, []).append(pet)

        appointments = self.appointment_service.list()
        emails: Dict[str, Optional[str]] = {p.profile_id: p.email for p in self.profile_service.list_profiles()}

        user_ids = set(pets_by_owner)
        user_ids.update(a.owner_id for a in appointments if a.owner_id)
        guest_emails = {(a.email or "").strip().lower() for a in appointments if not a.owner_id and a.email}
        user_ids.update(uid for uid, email in emails.items()
                        if email and email.strip().lower() in guest_emails)

        result = {}
        for user_id in user_ids:
            email = emails.get(user_id)
            mine = [a for a in appointments if a.is_owned_by(user_id, email)]
            result[user_id] = (mine, pets_by_owner.get(user_id, []))
        return result
