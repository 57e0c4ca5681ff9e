# app/api/admin/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from app.core.security import admin_required
from app.models.appointment import AppointmentStatus
from app.api.appointments.schemas import (
    AppointmentStatusUpdateSchema, AppointmentQuerySchema, AppointmentResponseSchema
)
from app.api.appointments.status_machine import InvalidStatusTransition
from app.api.pets.schemas import PetResponseSchema
from app.api.profiles.schemas import ProfileResponseSchema

admin_bp = Blueprint('admin_bp', __name__)


@admin_bp.route('/dashboard', methods=['GET'])
@admin_required
def get_dashboard():
    """월별 통계, 상태/서비스별 분포, 최근 활동을 한 번에 반환합니다."""
    try:
        return jsonify(current_app.services['dashboard'].build()), 200
    except Exception as e:
        logging.error(f"Dashboard aggregation error: {e}", exc_info=True)
        return jsonify({"error_code": "DASHBOARD_FAILED", "message": "대시보드 데이터를 불러오는 중 오류가 발생했습니다."}), 500


@admin_bp.route('/appointments', methods=['GET'])
@admin_required
def list_appointments():
    """[관리자] 전체 예약 목록. ?status= 로 상태 필터링."""
    try:
        query = AppointmentQuerySchema().load(request.args)
        status = AppointmentStatus(query['status']) if query.get('status') else None
        appointments = current_app.services['appointments'].list(email=query.get('email'), status=status)
        return jsonify(AppointmentResponseSchema(many=True).dump(appointments)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


@admin_bp.route('/appointments/<string:appointment_id>/status', methods=['PATCH'])
@admin_required
def update_appointment_status(appointment_id: str):
    appointment_service = current_app.services['appointments']
    try:
        data = AppointmentStatusUpdateSchema().load(request.get_json() or {})
        if not appointment_service.update_status(appointment_id, AppointmentStatus(data['status'])):
            return jsonify({"error_code": "APPOINTMENT_NOT_FOUND", "message": "예약을 찾을 수 없습니다."}), 404
        appointment = appointment_service.get(appointment_id)
        return jsonify(AppointmentResponseSchema().dump(appointment)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except InvalidStatusTransition as e:
        return jsonify({"error_code": "INVALID_STATUS_TRANSITION", "message": str(e)}), 409
    except Exception as e:
        logging.error(f"Status update API error (appointment_id: {appointment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "예약 상태 변경 중 오류가 발생했습니다."}), 500


@admin_bp.route('/appointments/<string:appointment_id>', methods=['DELETE'])
@admin_required
def delete_appointment(appointment_id: str):
    if not current_app.services['appointments'].delete(appointment_id):
        return jsonify({"error_code": "APPOINTMENT_NOT_FOUND", "message": "예약을 찾을 수 없습니다."}), 404
    return '', 204


@admin_bp.route('/pets', methods=['GET'])
@admin_required
def list_all_pets():
    pets = current_app.services['pets'].list_all()
    return jsonify(PetResponseSchema(many=True).dump(pets)), 200


@admin_bp.route('/profiles', methods=['GET'])
@admin_required
def list_profiles():
    profiles = current_app.services['profiles'].list_profiles()
    return jsonify(ProfileResponseSchema(many=True).dump(profiles)), 200
