# app/api/appointments/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.models.appointment import TimeSlot
from app.services.email_service import EmailDeliveryError
from .schemas import (
    AppointmentCreateSchema, AppointmentRescheduleSchema, AppointmentQuerySchema, AppointmentResponseSchema
)
from .status_machine import InvalidStatusTransition

appointments_bp = Blueprint('appointments_bp', __name__)


@appointments_bp.route('/', methods=['POST'])
@jwt_required(optional=True)
def create_appointment():
    """
    예약 생성 API. 로그인하지 않은 방문자도 예약할 수 있습니다.
    send_confirmation이 참이면 확인 메일을 보내며, 메일 실패는 예약 생성을 되돌리지 않습니다.
    """
    user_id = get_jwt_identity()
    appointment_service = current_app.services['appointments']
    try:
        data = AppointmentCreateSchema().load(request.get_json() or {})
        appointment = appointment_service.create(data, owner_id=user_id)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Appointment creation API error: {e}", exc_info=True)
        return jsonify({"error_code": "APPOINTMENT_CREATION_FAILED", "message": "예약 생성 중 오류가 발생했습니다."}), 500

    response = AppointmentResponseSchema().dump(appointment)
    response['email_sent'] = False
    if data.get('send_confirmation'):
        try:
            current_app.services['email'].send_appointment_confirmation(
                owner_name=appointment.owner_name,
                email=appointment.email,
                pet_name=appointment.pet_name,
                service=appointment.service.label,
                appointment_date=appointment.date,
                time_slot=appointment.time,
                diagnosis=appointment.diagnosis,
            )
            response['email_sent'] = True
        except EmailDeliveryError as e:
            logging.warning(f"확인 메일 미발송 (appointment_id: {appointment.appointment_id}): {e}")
            response['email_warning'] = "예약은 완료되었지만 확인 메일을 보내지 못했습니다."
    return jsonify(response), 201


@appointments_bp.route('/', methods=['GET'])
@jwt_required(optional=True)
def list_my_appointments():
    """
    내 예약 목록. 로그인 사용자는 owner_id로, 그 외에는 ?email= 로 조회합니다.
    """
    user_id = get_jwt_identity()
    try:
        query = AppointmentQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    email = query.get('email')
    if not user_id and not email:
        return jsonify({"error_code": "MISSING_IDENTITY", "message": "로그인하거나 이메일을 입력해주세요."}), 400

    appointment_service = current_app.services['appointments']
    if user_id:
        appointments = appointment_service.list(owner_id=user_id)
        if email:
            appointments = [a for a in appointments if (a.email or "").lower() == email.lower()]
    else:
        appointments = appointment_service.list(email=email)
    return jsonify(AppointmentResponseSchema(many=True).dump(appointments)), 200


def _profile_email(user_id: str):
    """비로그인 예약의 본인 확인에 쓰는 프로필 이메일"""
    profile = current_app.services['profiles'].get_profile(user_id)
    return profile.email if profile else None


@appointments_bp.route('/<string:appointment_id>', methods=['GET'])
@jwt_required()
def get_appointment(appointment_id: str):
    user_id = get_jwt_identity()
    appointment = current_app.services['appointments'].get(appointment_id)
    # 다른 사용자의 예약은 존재하지 않는 것과 동일하게 취급
    if not appointment or not appointment.is_owned_by(user_id, _profile_email(user_id)):
        return jsonify({"error_code": "APPOINTMENT_NOT_FOUND", "message": "예약을 찾을 수 없습니다."}), 404
    return jsonify(AppointmentResponseSchema().dump(appointment)), 200


@appointments_bp.route('/<string:appointment_id>/reschedule', methods=['PATCH'])
@jwt_required()
def reschedule_appointment(appointment_id: str):
    """예약 날짜/시간대 변경. 완료되었거나 취소된 예약은 변경할 수 없습니다."""
    user_id = get_jwt_identity()
    try:
        data = AppointmentRescheduleSchema().load(request.get_json() or {})
        appointment = current_app.services['appointments'].reschedule(
            appointment_id, data['date'], TimeSlot(data['time_slot']),
            owner_id=user_id, owner_email=_profile_email(user_id)
        )
        return jsonify(AppointmentResponseSchema().dump(appointment)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "APPOINTMENT_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except InvalidStatusTransition as e:
        return jsonify({"error_code": "INVALID_STATUS_TRANSITION", "message": str(e)}), 409
    except Exception as e:
        logging.error(f"Reschedule API error (appointment_id: {appointment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "재예약 중 오류가 발생했습니다."}), 500
