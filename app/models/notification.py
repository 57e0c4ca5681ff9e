# app/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    VACCINATION_DUE = "VACCINATION_DUE"
    PROMOTION = "PROMOTION"


@dataclass
class Notification:
    """
    예약/반려동물 컬렉션을 현재 시각 기준으로 스캔해 만들어지는 알림.
    저장되지 않으며, notification_id로 중복 표시를 방지합니다.
    """
    notification_id: str   # "appointment-<id>", "vaccination-<petId>" ...
    type: NotificationType
    title: str
    message: str
    target_id: Optional[str] = None  # 알림 대상 객체 ID (appointment_id, pet_id)
    is_read: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    dedupe_key: Optional[str] = None  # 우편함 중복 판단 키 (없으면 notification_id)

    @property
    def delivery_key(self) -> str:
        return self.dedupe_key or self.notification_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'notification_id': self.notification_id,
            'type': self.type.value,
            'title': self.title,
            'message': self.message,
            'target_id': self.target_id,
            'is_read': self.is_read,
            'created_at': DateTimeUtils.to_iso_string(self.created_at),
        }
