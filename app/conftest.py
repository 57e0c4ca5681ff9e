# app/conftest.py
"""
API 테스트 공용 픽스처. 메모리 저장소를 사용하는 testing 설정으로 앱을 만듭니다.
"""

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.models.profile import Profile, UserRole


@pytest.fixture
def app():
    return create_app('testing')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """user_id로 서명된 Bearer 헤더를 만들어 주는 함수."""
    def _make(user_id: str):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def admin_headers(app, auth_headers):
    """관리자 프로필을 저장소에 직접 넣고 그 관리자의 헤더를 반환합니다."""
    admin = Profile(profile_id="admin-1", name="Clinic Admin", email="admin@clinic.test", role=UserRole.ADMIN)
    app.services['profiles'].store.insert(admin.to_record())
    return auth_headers("admin-1")
