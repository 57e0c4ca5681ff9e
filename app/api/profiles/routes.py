# app/api/profiles/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from .schemas import ProfileCreateSchema, ProfileUpdateSchema, ProfileResponseSchema

profiles_bp = Blueprint('profiles_bp', __name__)


@profiles_bp.route('/me', methods=['POST'])
@jwt_required()
def ensure_my_profile():
    """가입 직후 호출되어 현재 사용자의 프로필을 생성합니다 (이미 있으면 그대로 반환)."""
    user_id = get_jwt_identity()
    profile_service = current_app.services['profiles']
    try:
        data = ProfileCreateSchema().load(request.get_json() or {})
        existed = profile_service.get_profile(user_id) is not None
        profile = profile_service.ensure_profile(user_id, data['name'], data['email'])
        return jsonify(ProfileResponseSchema().dump(profile)), 200 if existed else 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"프로필 생성 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_CREATION_FAILED", "message": "프로필 생성 중 오류가 발생했습니다."}), 500


@profiles_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_profile():
    user_id = get_jwt_identity()
    profile = current_app.services['profiles'].get_profile(user_id)
    if not profile:
        return jsonify({"error_code": "PROFILE_NOT_FOUND", "message": "프로필을 찾을 수 없습니다."}), 404
    return jsonify(ProfileResponseSchema().dump(profile)), 200


@profiles_bp.route('/me', methods=['PATCH'])
@jwt_required()
def update_my_profile():
    """현재 사용자의 이름/연락처/주소를 수정합니다."""
    user_id = get_jwt_identity()
    profile_service = current_app.services['profiles']
    try:
        data = ProfileUpdateSchema().load(request.get_json() or {})
        profile = profile_service.update_profile(user_id, data)
        if not profile:
            return jsonify({"error_code": "PROFILE_NOT_FOUND", "message": "프로필을 찾을 수 없습니다."}), 404
        return jsonify(ProfileResponseSchema().dump(profile)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "EMPTY_UPDATE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"프로필 수정 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필 수정 중 서버 오류가 발생했습니다."}), 500
