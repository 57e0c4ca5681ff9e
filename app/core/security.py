# app/core/security.py
from functools import wraps
from flask import jsonify, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity


def admin_required(f):
    """
    관리자 전용 엔드포인트 데코레이터.
    토큰은 외부 인증 서비스가 발급하며, 역할은 저장된 프로필(role == admin)에서 확인합니다.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        user_id = get_jwt_identity()
        if not current_app.services['profiles'].is_admin(user_id):
            return jsonify({"error_code": "FORBIDDEN", "message": "관리자만 접근할 수 있습니다."}), 403
        return f(*args, **kwargs)

    return decorated_function
