# app/api/appointments/services.py
import logging
import uuid
from datetime import date, timedelta
from typing import Dict, Any, List, Optional

from app.models.appointment import Appointment, AppointmentStatus, ServiceType, TimeSlot
from app.services.record_store import RecordStore
from app.utils.datetime_utils import DateTimeUtils
from .status_machine import AppointmentStatusMachine


class AppointmentService:
    """예약 레코드의 생성/조회/상태 변경/재예약/삭제를 전담하는 서비스."""

    def __init__(self, store: RecordStore):
        self.store = store
        logging.info("AppointmentService initialized.")

    def create(self, data: Dict[str, Any], owner_id: Optional[str] = None) -> Appointment:
        """
        새 예약을 생성합니다. 필수 필드 검증은 호출 측(스키마)에서 끝난 상태여야 합니다.
        ID와 생성 시각을 부여하고, 상태는 항상 Pending으로 시작합니다.
        """
        appointment = Appointment(
            appointment_id=str(uuid.uuid4()),
            owner_id=owner_id,
            owner_name=data['owner_name'],
            pet_name=data['pet_name'],
            email=data.get('email'),
            phone=data.get('phone'),
            pet_gender=data.get('pet_gender'),
            pet_age=data.get('pet_age'),
            service=ServiceType.parse(data['service']),
            date=data['date'],
            time_slot=TimeSlot(data['time_slot']),
            status=AppointmentStatus.PENDING,
            diagnosis=data.get('diagnosis'),
            additional_info=data.get('additional_info'),
            is_urgent=data.get('is_urgent', False),
            is_first_time=data.get('is_first_time', False),
            grooming_package=data.get('grooming_package') or None,
            created_at=DateTimeUtils.now(),
        )
        self.store.insert(appointment.to_record())
        logging.info(f"Appointment created: {appointment.appointment_id} ({appointment.service.value}, {appointment.date} {appointment.time_slot.value})")
        return appointment

    def list(self, email: Optional[str] = None, owner_id: Optional[str] = None,
             status: Optional[AppointmentStatus] = None) -> List[Appointment]:
        """
        전체 예약을 읽은 뒤 메모리에서 필터링합니다.
        - email: 대소문자를 무시한 정확히 일치
        - owner_id: 동일한 값
        - status: 관리자 목록의 상태 필터
        """
        appointments = self._load_all()
        if email:
            needle = email.strip().lower()
            appointments = [a for a in appointments if (a.email or "").strip().lower() == needle]
        if owner_id:
            appointments = [a for a in appointments if a.owner_id == owner_id]
        if status:
            appointments = [a for a in appointments if a.status is status]
        return appointments

    def get(self, appointment_id: str) -> Optional[Appointment]:
        record = self.store.get(appointment_id)
        return Appointment.from_record(record) if record else None

    def update_status(self, appointment_id: str, new_status: AppointmentStatus) -> bool:
        """
        예약 상태를 변경합니다.
        대상 예약이 없으면 아무것도 바꾸지 않고 False를 반환합니다.
        허용되지 않은 전이는 InvalidStatusTransition을 발생시킵니다.
        """
        appointment = self.get(appointment_id)
        if not appointment:
            logging.warning(f"Status update skipped, appointment not found: {appointment_id}")
            return False

        status = AppointmentStatusMachine.apply(appointment.status, new_status)
        updated = self.store.update(appointment_id, {
            'status': status.value,
            'updated_at': DateTimeUtils.to_iso_string(DateTimeUtils.now()),
        })
        if updated:
            logging.info(f"Appointment {appointment_id} status: {appointment.status.value} -> {status.value}")
        return updated

    def reschedule(self, appointment_id: str, new_date: date, new_time_slot: TimeSlot,
                   owner_id: Optional[str] = None, owner_email: Optional[str] = None) -> Appointment:
        """
        날짜/시간대를 덮어쓰고 상태를 Rescheduled로 바꿉니다.
        같은 시간대의 다른 예약과의 충돌은 검사하지 않으며, 이전 일정은 보존되지 않습니다.
        owner_id가 주어지면 본인 예약(비로그인 예약은 owner_email 일치)인지 확인합니다.
        """
        appointment = self.get(appointment_id)
        if not appointment:
            raise LookupError("재예약할 예약을 찾을 수 없습니다.")
        if owner_id and not appointment.is_owned_by(owner_id, owner_email):
            raise PermissionError("예약을 변경할 권한이 없습니다.")

        status = AppointmentStatusMachine.apply(appointment.status, AppointmentStatus.RESCHEDULED)
        appointment.date = new_date
        appointment.time_slot = new_time_slot
        appointment.status = status
        appointment.updated_at = DateTimeUtils.now()

        self.store.update(appointment_id, {
            'appointment_date': DateTimeUtils.to_date_string(new_date),
            'time_slot': new_time_slot.value,
            'time': appointment.time,
            'status': status.value,
            'updated_at': DateTimeUtils.to_iso_string(appointment.updated_at),
        })
        logging.info(f"Appointment {appointment_id} rescheduled to {new_date} {new_time_slot.value}")
        return appointment

    def delete(self, appointment_id: str) -> bool:
        deleted = self.store.delete(appointment_id)
        if deleted:
            logging.info(f"Appointment deleted: {appointment_id}")
        return deleted

    def seed_sample_data(self) -> int:
        """예약이 하나도 없을 때 예시 예약 두 건을 추가합니다."""
        if self.store.list():
            return 0
        today = DateTimeUtils.today()
        samples = [
            Appointment(
                appointment_id="sample1", owner_name="John Doe", pet_name="Max",
                email="john@example.com", phone="09123456789", pet_gender="male", pet_age="3 years",
                service=ServiceType.CHECKUP, date=today, time_slot=TimeSlot.MORNING,
                status=AppointmentStatus.CONFIRMED, additional_info="Annual checkup",
            ),
            Appointment(
                appointment_id="sample2", owner_name="Jane Smith", pet_name="Buddy",
                email="jane@example.com", phone="09987654321", pet_gender="male", pet_age="2 years",
                service=ServiceType.VACCINATION, date=today + timedelta(days=1), time_slot=TimeSlot.AFTERNOON,
                status=AppointmentStatus.PENDING, additional_info="Rabies shot", is_first_time=True,
            ),
        ]
        for sample in samples:
            self.store.insert(sample.to_record())
        logging.info(f"Seeded {len(samples)} sample appointments.")
        return len(samples)

    def _load_all(self) -> List[Appointment]:
        appointments = []
        for record in self.store.list():
            try:
                appointments.append(Appointment.from_record(record))
            except (KeyError, ValueError) as e:
                logging.warning(f"Skipping malformed appointment record {record.get('id')}: {e}")
        return appointments
