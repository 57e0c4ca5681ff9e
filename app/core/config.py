# app/core/config.py

import os


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 외부 인증 서비스와 공유하는 서명 키. 토큰 발급은 이 서버의 역할이 아닙니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 레코드 저장소: 'firestore' | 'file' | 'memory'
    RECORD_STORE_BACKEND = os.getenv('RECORD_STORE_BACKEND', 'firestore')
    RECORD_STORE_PATH = os.getenv('RECORD_STORE_PATH', 'data')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 예약 확인 메일 (Resend)
    RESEND_API_KEY = os.getenv('RESEND_API_KEY')
    EMAIL_FROM_ADDRESS = os.getenv('EMAIL_FROM_ADDRESS', 'PetCare Clinic <onboarding@resend.dev>')

    # 병원 안내 챗봇. 사용자 키가 없을 때만 서버 키를 사용합니다.
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-3.5-turbo')

    CLINIC_NAME = os.getenv('CLINIC_NAME', 'PetCare Clinic')
    CLINIC_EMERGENCY_PHONE = os.getenv('CLINIC_EMERGENCY_PHONE', '(123) 456-7890')

    # 알림 재계산 주기 (60~300초)
    NOTIFICATION_POLLING_ENABLED = _env_flag('NOTIFICATION_POLLING_ENABLED', 'true')
    NOTIFICATION_POLL_SECONDS = min(max(int(os.getenv('NOTIFICATION_POLL_SECONDS', '60')), 60), 300)

    SEED_SAMPLE_DATA = _env_flag('SEED_SAMPLE_DATA')


class DevelopmentConfig(Config):
    """개발 환경. 별도 설정이 없으면 로컬 JSON 파일 저장소와 예시 예약을 사용합니다."""
    DEBUG = True
    RECORD_STORE_BACKEND = os.getenv('RECORD_STORE_BACKEND', 'file')
    SEED_SAMPLE_DATA = _env_flag('SEED_SAMPLE_DATA', 'true')


class TestingConfig(Config):
    """테스트 환경. 메모리 저장소를 사용하고 백그라운드 작업은 끕니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = 'test-secret-key-with-at-least-32-bytes!'
    RECORD_STORE_BACKEND = 'memory'
    NOTIFICATION_POLLING_ENABLED = False
    SEED_SAMPLE_DATA = False
    RESEND_API_KEY = None
    OPENAI_API_KEY = None


class ProductionConfig(Config):
    DEBUG = False


# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
