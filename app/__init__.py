# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import atexit
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager

# - 설정
from app.core.config import config_by_name

# - API 블루프린트
from app.api.appointments.routes import appointments_bp
from app.api.pets.routes import pets_bp
from app.api.profiles.routes import profiles_bp
from app.api.notifications.routes import notifications_bp
from app.api.assistant.routes import assistant_bp
from app.api.admin.routes import admin_bp

# - 서비스 모듈
from app.services.record_store import create_record_store
from app.services.email_service import EmailService
from app.services.openai_service import OpenAIService
from app.services.notification_service import NotificationInbox, NotificationPoller
from app.api.appointments.services import AppointmentService
from app.api.pets.services import PetService
from app.api.profiles.services import ProfileService
from app.api.notifications.services import NotificationSourceService
from app.api.admin.services import DashboardService


def _init_firebase(app: Flask):
    import firebase_admin
    from firebase_admin import credentials

    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    firebase_admin.initialize_app(credentials.Certificate(cred_path))


def create_app(config_name=None, config_overrides=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param config_overrides: 테스트 등에서 설정 클래스 값을 덮어쓸 딕셔너리
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if config_overrides:
        app.config.update(config_overrides)
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if app.config['RECORD_STORE_BACKEND'] == 'firestore':
        _init_firebase(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 외부 연동 서비스
    email_instance = EmailService()
    email_instance.init_app(app)
    app.services['email'] = email_instance

    openai_instance = OpenAIService()
    openai_instance.init_app(app)
    app.services['openai'] = openai_instance

    # 5-2. 컬렉션별 저장소를 주입받는 도메인 서비스
    app.services['appointments'] = AppointmentService(create_record_store('appointments', app.config))
    app.services['pets'] = PetService(create_record_store('pets', app.config))
    app.services['profiles'] = ProfileService(create_record_store('profiles', app.config))

    # 5-3. 다른 도메인 서비스를 조합하는 서비스
    app.services['notification_sources'] = NotificationSourceService(
        appointment_service=app.services['appointments'],
        pet_service=app.services['pets'],
        profile_service=app.services['profiles']
    )
    app.services['dashboard'] = DashboardService(
        appointment_service=app.services['appointments'],
        pet_service=app.services['pets'],
        profile_service=app.services['profiles']
    )

    app.services['notification_inbox'] = NotificationInbox()
    poller = NotificationPoller(
        load_snapshot=app.services['notification_sources'].snapshot,
        inbox=app.services['notification_inbox'],
        interval_seconds=app.config['NOTIFICATION_POLL_SECONDS']
    )
    app.services['notification_poller'] = poller

    if app.config.get('SEED_SAMPLE_DATA'):
        app.services['appointments'].seed_sample_data()

    if app.config.get('NOTIFICATION_POLLING_ENABLED'):
        poller.start()
        atexit.register(poller.stop)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(appointments_bp, url_prefix='/api/appointments')
    app.register_blueprint(pets_bp, url_prefix='/api/pets')
    app.register_blueprint(profiles_bp, url_prefix='/api/profiles')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(assistant_bp, url_prefix='/api/assistant')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리 (404 등 HTTP 예외는 그대로 전달)
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
