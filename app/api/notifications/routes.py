# app/api/notifications/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from app.services.notification_service import derive_notifications

notifications_bp = Blueprint('notifications_bp', __name__)


@notifications_bp.route('/', methods=['GET'])
@jwt_required()
def get_my_notifications():
    """현재 시점 기준으로 예약/접종/프로모션 알림을 계산해 반환합니다."""
    user_id = get_jwt_identity()
    try:
        appointments, pets = current_app.services['notification_sources'].for_user(user_id)
        notifications = derive_notifications(appointments, pets)
        return jsonify([n.to_dict() for n in notifications]), 200
    except Exception as e:
        logging.error(f"알림 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "알림을 불러오는 중 오류가 발생했습니다."}), 500


@notifications_bp.route('/inbox', methods=['GET'])
@jwt_required()
def drain_my_inbox():
    """백그라운드 폴러가 전달한 새 알림을 꺼내옵니다. 한 번 꺼낸 알림은 다시 오지 않습니다."""
    user_id = get_jwt_identity()
    notifications = current_app.services['notification_inbox'].drain(user_id)
    return jsonify([n.to_dict() for n in notifications]), 200
