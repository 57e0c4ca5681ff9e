# app/api/appointments/schemas.py
from marshmallow import Schema, fields, validate, pre_load, validates_schema, ValidationError

from app.models.appointment import ServiceType, TimeSlot, AppointmentStatus
from .status_machine import AppointmentStatusMachine

BOOKABLE_SERVICES = [s.value for s in ServiceType if s is not ServiceType.OTHER]
TIME_SLOTS = [t.value for t in TimeSlot]
STATUSES = [s.value for s in AppointmentStatus]
# 관리자가 직접 지정하는 상태. Rescheduled는 재예약 흐름에서만, Pending은 생성 시에만 설정
ADMIN_SETTABLE_STATUSES = [s.value for s in (
    AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED
)]


class AppointmentCreateSchema(Schema):
    """POST /api/appointments/ 예약 생성 요청 스키마."""
    owner_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    pet_name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True)
    phone = fields.Str(required=True, validate=validate.Length(min=5, max=30))
    service = fields.Str(required=True, validate=validate.OneOf(BOOKABLE_SERVICES))
    date = fields.Date(required=True, format="%Y-%m-%d")
    time_slot = fields.Str(required=True, validate=validate.OneOf(TIME_SLOTS))
    pet_gender = fields.Str(validate=validate.OneOf(['male', 'female']), allow_none=True)
    pet_age = fields.Str(allow_none=True)
    diagnosis = fields.Str(allow_none=True, validate=validate.Length(max=500))
    additional_info = fields.Str(allow_none=True, validate=validate.Length(max=1000))
    is_urgent = fields.Bool(load_default=False)
    is_first_time = fields.Bool(load_default=False)
    grooming_package = fields.Str(allow_none=True)
    send_confirmation = fields.Bool(load_default=True)

    @pre_load
    def normalize(self, data, **kwargs):
        """대소문자가 섞여 들어오는 선택형 값 정리."""
        processed = dict(data or {})
        for key in ('service', 'time_slot', 'pet_gender'):
            if isinstance(processed.get(key), str):
                processed[key] = processed[key].strip().lower()
        return processed

    @validates_schema
    def validate_grooming_package(self, data, **kwargs):
        if data.get('grooming_package') and data.get('service') != ServiceType.GROOMING.value:
            raise ValidationError("grooming_package는 grooming 예약에만 지정할 수 있습니다.", 'grooming_package')


class AppointmentRescheduleSchema(Schema):
    """PATCH /api/appointments/<id>/reschedule 요청 스키마."""
    date = fields.Date(required=True, format="%Y-%m-%d")
    time_slot = fields.Str(required=True, validate=validate.OneOf(TIME_SLOTS))


class AppointmentStatusUpdateSchema(Schema):
    """PATCH /api/admin/appointments/<id>/status 요청 스키마."""
    status = fields.Str(required=True, validate=validate.OneOf(ADMIN_SETTABLE_STATUSES))


class AppointmentQuerySchema(Schema):
    """예약 목록 조회 쿼리 파라미터."""
    email = fields.Email()
    status = fields.Str(validate=validate.OneOf(STATUSES))


class AppointmentResponseSchema(Schema):
    """예약 응답 스키마."""
    appointment_id = fields.Str(dump_only=True)
    owner_id = fields.Str(allow_none=True)
    owner_name = fields.Str()
    pet_name = fields.Str()
    email = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    pet_gender = fields.Str(allow_none=True)
    pet_age = fields.Str(allow_none=True)
    service = fields.Function(lambda a: a.service.value)
    service_label = fields.Function(lambda a: a.service.label)
    date = fields.Date()
    time_slot = fields.Function(lambda a: a.time_slot.value)
    time = fields.Str()
    status = fields.Function(lambda a: a.status.value)
    can_reschedule = fields.Function(lambda a: AppointmentStatusMachine.can_reschedule(a.status))
    diagnosis = fields.Str(allow_none=True)
    additional_info = fields.Str(allow_none=True)
    is_urgent = fields.Bool()
    is_first_time = fields.Bool()
    grooming_package = fields.Str(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime(allow_none=True)
