# app/api/assistant/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, validate, ValidationError

from app.services.openai_service import AssistantError, AssistantAuthError, AssistantRateLimitError

assistant_bp = Blueprint('assistant_bp', __name__)


class ChatRequestSchema(Schema):
    message = fields.Str(required=True, validate=validate.Length(min=1, max=2000))


@assistant_bp.route('/chat', methods=['POST'])
@jwt_required(optional=True)
def chat():
    """
    병원 안내 챗봇. 사용자의 OpenAI 키는 X-OpenAI-Key 헤더로 받고 서버에 저장하지 않습니다.
    서버에 설정된 키는 로그인한 사용자가 헤더 없이 요청할 때만 사용합니다.
    """
    try:
        data = ChatRequestSchema().load(request.get_json() or {})
        reply = current_app.services['openai'].ask(
            data['message'],
            api_key=request.headers.get('X-OpenAI-Key'),
            allow_default_key=get_jwt_identity() is not None,
        )
        return jsonify({"reply": reply}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AssistantAuthError as e:
        return jsonify({"error_code": "INVALID_API_KEY", "message": str(e)}), 401
    except AssistantRateLimitError as e:
        return jsonify({"error_code": "RATE_LIMITED", "message": str(e)}), 429
    except AssistantError as e:
        logging.error(f"Assistant upstream error: {e}")
        return jsonify({"error_code": "ASSISTANT_UNAVAILABLE", "message": str(e)}), 502
