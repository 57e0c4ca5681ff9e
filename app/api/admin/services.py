# app/api/admin/services.py
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional, Iterable

from app.models.appointment import Appointment, AppointmentStatus
from app.models.pet import Pet
from app.models.profile import Profile
from app.utils.datetime_utils import DateTimeUtils

STATUS_COLORS = {
    AppointmentStatus.PENDING: '#3b82f6',
    AppointmentStatus.CONFIRMED: '#f59e0b',
    AppointmentStatus.RESCHEDULED: '#8b5cf6',
    AppointmentStatus.COMPLETED: '#10b981',
    AppointmentStatus.CANCELLED: '#ef4444',
}
DEFAULT_STATUS_COLOR = '#6b7280'

RECENT_APPOINTMENTS = 10
RECENT_PROFILES = 5
RECENT_PETS = 5
RECENT_ACTIVITY_LIMIT = 8


def _percent_change(current: int, previous: int) -> int:
    # 지난 달이 0이면 증감률은 0으로 고정
    if not previous:
        return 0
    return round((current - previous) / previous * 100)


def _count_windows(created: Iterable[datetime], current_start: datetime, previous_start: datetime):
    current = previous = 0
    for created_at in created:
        if created_at >= current_start:
            current += 1
        elif created_at >= previous_start:
            previous += 1
    return current, previous


class DashboardService:
    """
    관리자 대시보드 집계 서비스.
    예약/반려동물/프로필 목록을 받아 월별 통계, 상태·서비스별 분포, 최근 활동을 계산합니다.
    집계 함수들은 저장소에 접근하지 않으며, build()만 각 도메인 서비스에서 데이터를 읽어옵니다.
    """

    def __init__(self, appointment_service, pet_service, profile_service):
        self.appointment_service = appointment_service
        self.pet_service = pet_service
        self.profile_service = profile_service
        logging.info("DashboardService initialized.")

    def build(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """대시보드 화면 전체 데이터를 한 번에 구성합니다."""
        appointments = self.appointment_service.list()
        pets = self.pet_service.list_all()
        profiles = self.profile_service.list_profiles()
        return {
            'stats': self.stats_for_window(appointments, pets, profiles, now),
            'appointments_by_status': self.group_by_status(appointments),
            'appointments_by_service': self.group_by_service(appointments),
            'recent_activity': self.recent_activity(appointments, profiles, pets),
        }

    @staticmethod
    def stats_for_window(appointments: List[Appointment], pets: List[Pet], profiles: List[Profile],
                         now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        이번 달(1일 ~ 현재)과 지난 달(1일 ~ 말일)의 신규 건수를 created_at 기준으로 비교합니다.

        :return: total_* (이번 달 건수), *_change (증감률 %, 지난 달 0이면 0),
                 *_is_new (지난 달 0건이고 이번 달에 생긴 경우 True)
        """
        current_start, previous_start = DateTimeUtils.month_windows(now or DateTimeUtils.now())
        stats: Dict[str, Any] = {}
        groups = (
            ('appointments', [a.created_at for a in appointments]),
            ('pets', [p.created_at for p in pets]),
            ('clients', [p.created_at for p in profiles]),
        )
        for key, created in groups:
            current, previous = _count_windows(created, current_start, previous_start)
            stats[f'total_{key}'] = current
            stats[f'{key}_change'] = _percent_change(current, previous)
            stats[f'{key}_is_new'] = previous == 0 and current > 0
        return stats

    @staticmethod
    def group_by_status(appointments: List[Appointment]) -> List[Dict[str, Any]]:
        """상태별 예약 수. 처음 등장한 순서를 유지합니다."""
        counts: Dict[AppointmentStatus, int] = {}
        for appointment in appointments:
            counts[appointment.status] = counts.get(appointment.status, 0) + 1
        return [
            {'name': status.value, 'count': count, 'color': STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)}
            for status, count in counts.items()
        ]

    @staticmethod
    def group_by_service(appointments: List[Appointment]) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for appointment in appointments:
            label = appointment.service.label
            counts[label] = counts.get(label, 0) + 1
        return [{'service': label, 'count': count} for label, count in counts.items()]

    @staticmethod
    def recent_activity(appointments: List[Appointment], profiles: List[Profile], pets: List[Pet],
                        limit: int = RECENT_ACTIVITY_LIMIT) -> List[Dict[str, Any]]:
        """
        최근 예약 10건, 가입 5건, 반려동물 등록 5건을 합쳐 최신순으로 limit건 반환합니다.
        각 목록은 이미 최신순으로 정렬되어 있다고 가정합니다.
        """
        activities = []
        for appointment in appointments[:RECENT_APPOINTMENTS]:
            activities.append({
                'id': f"apt-{appointment.appointment_id}",
                'type': 'appointment',
                'title': "New appointment booked",
                'description': f"{appointment.owner_name} booked {appointment.service.label} for {appointment.pet_name}",
                'timestamp': appointment.created_at,
            })
        for profile in profiles[:RECENT_PROFILES]:
            activities.append({
                'id': f"profile-{profile.profile_id}",
                'type': 'registration',
                'title': "New client registered",
                'description': f"{profile.name} created a new account",
                'timestamp': profile.created_at,
            })
        for pet in pets[:RECENT_PETS]:
            activities.append({
                'id': f"pet-{pet.pet_id}",
                'type': 'pet_added',
                'title': "Pet registered",
                'description': f"New {pet.species.label} named {pet.name} was added",
                'timestamp': pet.created_at,
            })

        activities.sort(key=lambda a: a['timestamp'], reverse=True)
        for activity in activities:
            activity['timestamp'] = DateTimeUtils.to_iso_string(activity['timestamp'])
        return activities[:limit]
