# app/models/appointment.py
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Dict, Any
import logging
import re

from app.utils.datetime_utils import DateTimeUtils, UTC


class ServiceType(Enum):
    """예약 가능한 진료 서비스"""
    CHECKUP = "checkup"
    VACCINATION = "vaccination"
    GROOMING = "grooming"
    SURGERY = "surgery"
    DEWORMING = "deworming"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any) -> "ServiceType":
        """
        예약 폼의 열거값과 관리자 화면의 자유 입력 문자열을 하나의 서비스로 정규화합니다.
        인식하지 못한 문자열은 OTHER로 분류됩니다.
        """
        if isinstance(value, cls):
            return value
        text = re.sub(r"[^a-z]+", " ", str(value or "").lower()).strip()
        if not text:
            return cls.OTHER
        for member in cls:
            if text == member.value:
                return member
        for keyword, member in _SERVICE_SYNONYMS:
            if keyword in text:
                return member
        return cls.OTHER


_SERVICE_SYNONYMS = (
    ("vaccin", ServiceType.VACCINATION),
    ("vaccine", ServiceType.VACCINATION),
    ("rabies", ServiceType.VACCINATION),
    ("shot", ServiceType.VACCINATION),
    ("deworm", ServiceType.DEWORMING),
    ("parasite", ServiceType.DEWORMING),
    ("groom", ServiceType.GROOMING),
    ("bath", ServiceType.GROOMING),
    ("surg", ServiceType.SURGERY),
    ("spay", ServiceType.SURGERY),
    ("neuter", ServiceType.SURGERY),
    ("check", ServiceType.CHECKUP),
    ("consult", ServiceType.CHECKUP),
    ("exam", ServiceType.CHECKUP),
)


class TimeSlot(Enum):
    """하루 3개의 고정 예약 시간대"""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @property
    def clock_time(self) -> time:
        return _SLOT_CLOCK_TIMES[self]

    @property
    def display_time(self) -> str:
        t = self.clock_time
        hour = t.hour % 12 or 12
        suffix = "AM" if t.hour < 12 else "PM"
        return f"{hour}:{t.minute:02d} {suffix}"


_SLOT_CLOCK_TIMES = {
    TimeSlot.MORNING: time(9, 0),
    TimeSlot.AFTERNOON: time(13, 0),
    TimeSlot.EVENING: time(17, 0),
}


class AppointmentStatus(Enum):
    """예약 상태 라벨"""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    RESCHEDULED = "Rescheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: Any) -> "AppointmentStatus":
        """저장소에 남아있는 소문자/레거시 상태 문자열까지 허용하여 변환합니다."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if key == member.value.lower():
                return member
        if key in _LEGACY_STATUSES:
            return _LEGACY_STATUSES[key]
        raise ValueError(f"알 수 없는 예약 상태입니다: {value}")


_LEGACY_STATUSES = {
    "scheduled": AppointmentStatus.PENDING,
    "canceled": AppointmentStatus.CANCELLED,
    "in-progress": AppointmentStatus.CONFIRMED,
}


@dataclass
class Appointment:
    """
    'appointments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    예약 폼(보호자)과 관리자 화면이 공유하는 예약 한 건을 표현합니다.
    """
    appointment_id: str
    owner_name: str
    pet_name: str
    service: ServiceType
    date: date
    time_slot: TimeSlot
    status: AppointmentStatus = AppointmentStatus.PENDING
    owner_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    pet_gender: Optional[str] = None
    pet_age: Optional[str] = None
    diagnosis: Optional[str] = None
    additional_info: Optional[str] = None
    is_urgent: bool = False
    is_first_time: bool = False
    grooming_package: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: Optional[datetime] = None

    @property
    def time(self) -> str:
        """화면 표시용 시각 (예: 9:00 AM)"""
        return self.time_slot.display_time

    @property
    def scheduled_at(self) -> datetime:
        """예약 날짜와 시간대를 결합한 UTC 시각"""
        return datetime.combine(self.date, self.time_slot.clock_time).replace(tzinfo=UTC)

    def is_owned_by(self, user_id: Optional[str], email: Optional[str] = None) -> bool:
        """
        owner_id가 같으면 본인 예약입니다.
        비로그인 예약(owner_id 없음)은 예약 이메일이 사용자의 프로필 이메일과 같을 때만 본인 것으로 봅니다.
        """
        if not user_id:
            return False
        if self.owner_id:
            return self.owner_id == user_id
        return bool(email) and (self.email or "").strip().lower() == email.strip().lower()

    def to_record(self) -> Dict[str, Any]:
        """저장소에 기록할 딕셔너리 (영속 필드명 사용)"""
        return {
            'id': self.appointment_id,
            'owner_id': self.owner_id,
            'owner_name': self.owner_name,
            'pet_name': self.pet_name,
            'email': self.email,
            'phone': self.phone,
            'pet_gender': self.pet_gender,
            'pet_age': self.pet_age,
            'service': self.service.value,
            'appointment_date': DateTimeUtils.to_date_string(self.date),
            'time_slot': self.time_slot.value,
            'time': self.time,
            'status': self.status.value,
            'diagnosis': self.diagnosis,
            'additional_info': self.additional_info,
            'is_urgent': self.is_urgent,
            'is_first_time': self.is_first_time,
            'grooming_package': self.grooming_package,
            'created_at': DateTimeUtils.to_iso_string(self.created_at),
            'updated_at': DateTimeUtils.to_iso_string(self.updated_at) if self.updated_at else None,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Appointment":
        """
        저장소에서 읽은 딕셔너리로부터 Appointment 인스턴스를 생성합니다.
        문자열로 저장된 Enum 값과 날짜를 변환하고, 구버전 필드명(date/timeSlot)도 허용합니다.
        """
        raw_slot = data.get('time_slot') or data.get('timeSlot')
        try:
            time_slot = TimeSlot(str(raw_slot).lower())
        except ValueError:
            logging.warning(f"Invalid time slot '{raw_slot}' for appointment {data.get('id')}. Defaulting to morning.")
            time_slot = TimeSlot.MORNING

        created_at = data.get('created_at') or data.get('createdAt')
        updated_at = data.get('updated_at')

        return cls(
            appointment_id=data['id'],
            owner_id=data.get('owner_id'),
            owner_name=data.get('owner_name') or data.get('ownerName') or "",
            pet_name=data.get('pet_name') or data.get('petName') or "",
            email=data.get('email'),
            phone=data.get('phone'),
            pet_gender=data.get('pet_gender'),
            pet_age=data.get('pet_age'),
            service=ServiceType.parse(data.get('service')),
            date=DateTimeUtils.validate_date_field(data.get('appointment_date') or data.get('date'), 'appointment_date'),
            time_slot=time_slot,
            status=AppointmentStatus.parse(data.get('status') or AppointmentStatus.PENDING.value),
            diagnosis=data.get('diagnosis'),
            additional_info=data.get('additional_info'),
            is_urgent=bool(data.get('is_urgent', False)),
            is_first_time=bool(data.get('is_first_time', False)),
            grooming_package=data.get('grooming_package'),
            created_at=DateTimeUtils.validate_datetime_field(created_at) if created_at else DateTimeUtils.now(),
            updated_at=DateTimeUtils.validate_datetime_field(updated_at) if updated_at else None,
        )
