# app/services/notification_service.py
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from app.models.appointment import Appointment, AppointmentStatus, ServiceType
from app.models.notification import Notification, NotificationType
from app.models.pet import Pet
from app.utils.datetime_utils import DateTimeUtils

REMINDER_WINDOW_HOURS = 24
VACCINATION_MIN_AGE_MONTHS = 6
VACCINATION_LOOKBACK = timedelta(days=365)
PROMOTION_ID = "promotion-grooming"

_INACTIVE = (AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED)


def _appointment_reminder(appointment: Appointment, now: datetime) -> Optional[Notification]:
    hours = DateTimeUtils.hours_until(appointment.scheduled_at, now)
    if not 0 < hours <= REMINDER_WINDOW_HOURS:
        return None

    what = f"{appointment.pet_name}'s {appointment.service.value} appointment"
    if hours < 1:
        message = f"{what} starts in less than an hour ({appointment.time})."
    elif appointment.date == now.date():
        message = f"{what} is today at {appointment.time}."
    else:
        message = f"{what} is tomorrow at {appointment.time}."

    return Notification(
        notification_id=f"appointment-{appointment.appointment_id}",
        type=NotificationType.APPOINTMENT_REMINDER,
        title="Upcoming Appointment",
        message=message,
        target_id=appointment.appointment_id,
        created_at=now,
        # 재예약으로 일정이 바뀌면 새 알림으로 취급
        dedupe_key=f"appointment-{appointment.appointment_id}@{appointment.scheduled_at.isoformat()}",
    )


def _had_recent_vaccination(pet: Pet, appointments: Iterable[Appointment], now: datetime) -> bool:
    pet_name = pet.name.strip().lower()
    window_start = (now - VACCINATION_LOOKBACK).date()
    for appointment in appointments:
        if appointment.service is not ServiceType.VACCINATION:
            continue
        if appointment.status is AppointmentStatus.CANCELLED:
            continue
        if appointment.pet_name.strip().lower() != pet_name:
            continue
        if appointment.owner_id and appointment.owner_id != pet.owner_id:
            continue
        if window_start <= appointment.date <= now.date():
            return True
    return False


def derive_notifications(appointments: List[Appointment], pets: List[Pet],
                         now: Optional[datetime] = None) -> List[Notification]:
    """
    예약/반려동물 컬렉션 전체를 스캔해 현재 시각 기준 알림을 만듭니다.

    - 24시간 이내(0 < h <= 24) 예약 알림. 취소/완료된 예약은 제외
    - 생후 6개월(30일 근사) 이상이면서 최근 365일 내 예방접종 예약이 없는 반려동물 알림
    - 반려동물이 한 마리라도 있으면 미용 프로모션 알림
    호출 측은 notification_id로 중복을 제거해야 합니다.
    """
    now = now or DateTimeUtils.now()
    notifications: List[Notification] = []

    for appointment in appointments:
        if appointment.status in _INACTIVE:
            continue
        reminder = _appointment_reminder(appointment, now)
        if reminder:
            notifications.append(reminder)

    for pet in pets:
        if DateTimeUtils.approx_age_months(pet.birth_date, now) < VACCINATION_MIN_AGE_MONTHS:
            continue
        if _had_recent_vaccination(pet, appointments, now):
            continue
        notifications.append(Notification(
            notification_id=f"vaccination-{pet.pet_id}",
            type=NotificationType.VACCINATION_DUE,
            title="Vaccination Reminder",
            message=f"{pet.name} may be due for vaccination. Book a vaccination appointment to keep them protected.",
            target_id=pet.pet_id,
            created_at=now,
        ))

    if pets:
        notifications.append(Notification(
            notification_id=PROMOTION_ID,
            type=NotificationType.PROMOTION,
            title="Special Offer",
            message="Get 10% off on grooming services this month!",
            created_at=now,
        ))

    return notifications


class NotificationInbox:
    """
    사용자별로 아직 전달되지 않은 알림을 보관하는 메모리 우편함.
    한 번 들어온 알림(delivery_key 기준)은 다시 들어오지 않습니다.
    """

    def __init__(self):
        self._pending: Dict[str, List[Notification]] = {}
        self._seen: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def push(self, user_id: str, notifications: Iterable[Notification],
             prune: bool = False) -> List[Notification]:
        """
        새 알림만 저장하고, 저장된 알림 목록을 반환합니다.

        :param prune: True이면 notifications를 현재 시점의 전체 목록으로 보고,
                      여기에 없는 키(기간을 벗어난 알림)는 전달 기록에서 지웁니다.
        """
        notifications = list(notifications)
        added = []
        with self._lock:
            seen = self._seen.setdefault(user_id, set())
            pending = self._pending.setdefault(user_id, [])
            for notification in notifications:
                if notification.delivery_key in seen:
                    continue
                seen.add(notification.delivery_key)
                pending.append(notification)
                added.append(notification)
            if prune:
                seen.intersection_update(n.delivery_key for n in notifications)
        return added

    def drain(self, user_id: str) -> List[Notification]:
        with self._lock:
            return self._pending.pop(user_id, [])

    def clear(self, user_id: str):
        with self._lock:
            self._pending.pop(user_id, None)
            self._seen.pop(user_id, None)


Snapshot = Dict[str, Tuple[List[Appointment], List[Pet]]]


class NotificationPoller:
    """
    일정 간격으로 알림을 다시 계산하는 취소 가능한 백그라운드 작업.

    :param load_snapshot: 사용자 ID -> (예약 목록, 반려동물 목록)을 반환하는 함수
    :param inbox: 새 알림을 전달할 NotificationInbox
    :param interval_seconds: 재계산 주기 (초)
    """

    def __init__(self, load_snapshot: Callable[[], Snapshot], inbox: NotificationInbox,
                 interval_seconds: float = 60.0):
        self.load_snapshot = load_snapshot
        self.inbox = inbox
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self, now: Optional[datetime] = None) -> int:
        """한 번 스캔하고 우편함에 새로 들어간 알림 수를 반환합니다."""
        delivered = 0
        for user_id, (appointments, pets) in self.load_snapshot().items():
            added = self.inbox.push(user_id, derive_notifications(appointments, pets, now), prune=True)
            delivered += len(added)
        if delivered:
            logging.info(f"NotificationPoller delivered {delivered} new notifications.")
        return delivered

    def _run(self):
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logging.error(f"알림 재계산 중 오류 발생: {e}", exc_info=True)
            self._stop_event.wait(self.interval_seconds)

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="notification-poller")
        self._thread.daemon = True  # 메인 프로세스 종료 시 함께 종료
        self._thread.start()
        logging.info(f"NotificationPoller started (interval: {self.interval_seconds}s).")

    def stop(self, timeout: Optional[float] = 5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logging.info("NotificationPoller stopped.")
