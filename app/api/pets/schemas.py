# app/api/pets/schemas.py
from marshmallow import Schema, fields, validate, validates, ValidationError, pre_load

from app.models.pet import PetGender, PetType, PetSpecies
from app.utils.datetime_utils import DateTimeUtils


def validate_species(value: str):
    """'dog', 'cat', 'other', 'reptile:<subtype>' 형태만 허용합니다."""
    kind, sep, subtype = value.partition(":")
    if kind not in [t.value for t in PetType]:
        raise ValidationError(f"'{value}'은(는) 지원하지 않는 종입니다.")
    if sep and (kind != PetType.REPTILE.value or not subtype.strip()):
        raise ValidationError("세부 종은 'reptile:<subtype>' 형식으로만 지정할 수 있습니다.")


class _PetFieldsMixin:
    @pre_load
    def normalize(self, data, **kwargs):
        processed = dict(data or {})
        for key in ('species', 'gender'):
            if isinstance(processed.get(key), str):
                processed[key] = processed[key].strip().lower()
        # 숫자로 들어온 체중도 문자열로 저장
        if isinstance(processed.get('weight'), (int, float)):
            processed['weight'] = str(processed['weight'])
        return processed

    @validates('birth_date')
    def validate_birth_date(self, value, **kwargs):
        if value > DateTimeUtils.today():
            raise ValidationError("생년월일은 미래일 수 없습니다.")


class PetCreateSchema(_PetFieldsMixin, Schema):
    """POST /api/pets/ 반려동물 등록 요청 스키마."""
    name = fields.Str(required=True, validate=validate.Length(min=1, max=30))
    species = fields.Str(required=True, validate=validate_species)
    birth_date = fields.Date(required=True, format="%Y-%m-%d")
    gender = fields.Str(required=True, validate=validate.OneOf([e.value for e in PetGender]))
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50))
    weight = fields.Str(allow_none=True, validate=validate.Length(max=20))


class PetUpdateSchema(_PetFieldsMixin, Schema):
    """PATCH /api/pets/<pet_id> 정보 수정을 위한 스키마 (부분 업데이트용)."""
    name = fields.Str(validate=validate.Length(min=1, max=30))
    species = fields.Str(validate=validate_species)
    birth_date = fields.Date(format="%Y-%m-%d")
    gender = fields.Str(validate=validate.OneOf([e.value for e in PetGender]))
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50))
    weight = fields.Str(allow_none=True, validate=validate.Length(max=20))


class PetResponseSchema(Schema):
    """반려동물 응답 스키마 (조회 시점에 계산한 나이 포함)."""
    pet_id = fields.Str(dump_only=True)
    owner_id = fields.Str(dump_only=True)
    name = fields.Str()
    type = fields.Function(lambda p: p.species.pet_type.value)
    species = fields.Function(lambda p: p.species.encode())
    species_label = fields.Function(lambda p: p.species.label)
    breed = fields.Str(allow_none=True)
    weight = fields.Str(allow_none=True)
    birth_date = fields.Date()
    gender = fields.Function(lambda p: p.gender.value)
    age = fields.Str()
    created_at = fields.DateTime()
