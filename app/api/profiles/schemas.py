# app/api/profiles/schemas.py
from marshmallow import Schema, fields, validate


class ProfileCreateSchema(Schema):
    """
    POST /api/profiles/me
    인증 서비스 가입 직후 프로필을 복제 생성할 때 사용하는 스키마.
    """
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True)


class ProfileUpdateSchema(Schema):
    """PATCH /api/profiles/me 요청 스키마. role은 수정할 수 없습니다."""
    name = fields.Str(validate=validate.Length(min=1, max=100))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=30))
    address = fields.Str(allow_none=True, validate=validate.Length(max=255))


class ProfileResponseSchema(Schema):
    profile_id = fields.Str(dump_only=True)
    name = fields.Str()
    email = fields.Str()
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    role = fields.Function(lambda p: p.role.value)
    created_at = fields.DateTime()
