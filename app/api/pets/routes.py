# app/api/pets/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from .schemas import PetCreateSchema, PetUpdateSchema, PetResponseSchema

pets_bp = Blueprint('pets_bp', __name__)


@pets_bp.route('/', methods=['GET'])
@jwt_required()
def list_my_pets():
    """로그인한 사용자의 반려동물 목록을 조회합니다."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    try:
        pets = pet_service.list_pets(user_id)
        return jsonify(PetResponseSchema(many=True).dump(pets)), 200
    except Exception as e:
        logging.error(f"List pets API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "반려동물 목록 조회 중 오류가 발생했습니다."}), 500


@pets_bp.route('/', methods=['POST'])
@jwt_required()
def add_pet():
    """반려동물 등록 API."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    try:
        validated_data = PetCreateSchema().load(request.get_json() or {})
        new_pet = pet_service.add_pet(user_id, validated_data)
        return jsonify(PetResponseSchema().dump(new_pet)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Pet registration API error: {e}", exc_info=True)
        return jsonify({"error_code": "PET_REGISTRATION_FAILED", "message": str(e)}), 500


@pets_bp.route('/<string:pet_id>', methods=['GET'])
@jwt_required()
def get_pet(pet_id: str):
    """[소유자 전용] 특정 반려동물의 프로필을 조회합니다."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    pet = pet_service.get_pet(pet_id, user_id)
    if not pet:
        return jsonify({"error_code": "PET_NOT_FOUND", "message": "반려동물을 찾을 수 없습니다."}), 404
    return jsonify(PetResponseSchema().dump(pet)), 200


@pets_bp.route('/<string:pet_id>', methods=['PATCH'])
@jwt_required()
def update_pet(pet_id: str):
    """[소유자 전용] 특정 반려동물의 정보를 수정합니다 (부분 업데이트)."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    try:
        update_data = PetUpdateSchema().load(request.get_json() or {})
        updated_pet = pet_service.update_pet(pet_id, user_id, update_data)
        if not updated_pet:
            return jsonify({"error_code": "PET_NOT_FOUND", "message": "반려동물을 찾을 수 없습니다."}), 404
        return jsonify(PetResponseSchema().dump(updated_pet)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "EMPTY_UPDATE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"Update pet API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "반려동물 정보 수정 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>', methods=['DELETE'])
@jwt_required()
def delete_pet(pet_id: str):
    """[소유자 전용] 반려동물을 삭제합니다."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    try:
        if not pet_service.delete_pet(pet_id, user_id):
            return jsonify({"error_code": "PET_NOT_FOUND", "message": "반려동물을 찾을 수 없습니다."}), 404
        return '', 204
    except Exception as e:
        logging.error(f"Delete pet API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "반려동물 삭제 중 오류가 발생했습니다."}), 500
