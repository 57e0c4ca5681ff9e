# app/api/appointments/status_machine.py
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from app.models.appointment import AppointmentStatus


class InvalidStatusTransition(ValueError):
    """허용되지 않은 예약 상태 전이"""


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    status: AppointmentStatus
    reason: Optional[str] = None


S = AppointmentStatus

# Completed/Cancelled는 종료 상태
TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.RESCHEDULED, S.COMPLETED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.CONFIRMED, S.RESCHEDULED, S.COMPLETED, S.CANCELLED}),
    S.RESCHEDULED: frozenset({S.CONFIRMED, S.RESCHEDULED, S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}


class AppointmentStatusMachine:
    """예약 상태 전이 규칙. 관리자 상태 변경과 보호자 재예약이 모두 이 규칙을 거칩니다."""

    @staticmethod
    def transition(current: AppointmentStatus, target: AppointmentStatus) -> TransitionResult:
        if target in TRANSITIONS[current]:
            return TransitionResult(ok=True, status=target)
        if not TRANSITIONS[current]:
            reason = f"'{current.value}' 상태의 예약은 더 이상 변경할 수 없습니다."
        else:
            reason = f"'{current.value}'에서 '{target.value}'(으)로 변경할 수 없습니다."
        return TransitionResult(ok=False, status=current, reason=reason)

    @staticmethod
    def apply(current: AppointmentStatus, target: AppointmentStatus) -> AppointmentStatus:
        """전이가 허용되면 새 상태를, 아니면 InvalidStatusTransition을 발생시킵니다."""
        result = AppointmentStatusMachine.transition(current, target)
        if not result.ok:
            raise InvalidStatusTransition(result.reason)
        return result.status

    @staticmethod
    def is_terminal(status: AppointmentStatus) -> bool:
        return not TRANSITIONS[status]

    @staticmethod
    def can_reschedule(status: AppointmentStatus) -> bool:
        return S.RESCHEDULED in TRANSITIONS[status]
