"""
GadgetSwap Application
Flask 기반 가젯 대여 마켓플레이스 서버
"""

from flask import Flask
from flask_cors import CORS
import logging
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from common.extensions import api, connect_mongo, connect_redis
import common.extensions as extensions
from common.utils.logging_utils import setup_logger

OPENAPI_SETTINGS = {
    'API_TITLE': 'GadgetSwap API',
    'API_VERSION': 'v1',
    'OPENAPI_VERSION': '3.0.3',
    'OPENAPI_URL_PREFIX': '/',
    'OPENAPI_SWAGGER_UI_PATH': '/swagger',
    'OPENAPI_SWAGGER_UI_URL': 'https://cdn.jsdelivr.net/npm/swagger-ui-dist/',
    # 쿠키 대신 Authorization 헤더를 쓰는 클라이언트용 보안 스킴
    'API_SPEC_OPTIONS': {
        'components': {
            'securitySchemes': {
                'BearerAuth': {
                    'type': 'http',
                    'scheme': 'bearer',
                    'bearerFormat': 'JWT'
                }
            }
        }
    }
}


def create_app(config_name='default', mongo_client=None):
    """
    Application Factory Pattern

    mongo_client 를 넘기면 연결 확인 없이 그대로 사용 (테스트에서 mongomock 주입)
    """
    app = Flask(__name__)

    from common.config.config import config
    app.config.from_object(config.get(config_name, config['default']))
    app.config.update(OPENAPI_SETTINGS)

    app.json.ensure_ascii = False

    if app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration(), RedisIntegration()],
            environment=app.config.get('SENTRY_ENVIRONMENT', 'development'),
            traces_sample_rate=app.config.get('SENTRY_TRACES_SAMPLE_RATE', 1.0),
            send_default_pii=False,
            attach_stacktrace=True,
        )

    logger = setup_logger(
        app,
        getattr(logging, app.config.get('LOG_LEVEL', 'INFO')),
        log_to_file=app.config.get('LOG_TO_FILE', True),
        log_dir=app.config.get('LOG_DIR', 'logs')
    )

    if not app.config.get('TESTING'):
        missing = [k for k in ('SECRET_KEY', 'JWT_SECRET_KEY') if not app.config.get(k)]
        if missing:
            raise RuntimeError(f"환경변수 누락: {missing}")

    CORS(app,
         supports_credentials=True,
         origins=app.config['CORS_ORIGINS'],
         allow_headers=["Content-Type", "Authorization", "Accept", "X-Requested-With"],
         methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
         max_age=3600)

    api.init_app(app)

    # NOTE : 서비스는 요청마다 app.mongo 로 생성 (전역 DB 핸들 없음)
    app.mongo_client = mongo_client or connect_mongo(app.config)
    app.mongo = app.mongo_client[app.config['MONGO_DB_NAME']]

    extensions.redis_client = connect_redis(app.config) if app.config.get('REDIS_ENABLED') else None

    if app.config.get('SCHEDULER_ENABLED'):
        from common.scheduler import init_scheduler
        init_scheduler(app)

    from app.routes import (
        base_blueprint, auth_blueprint, users_blueprint, gadgets_blueprint,
        rentals_blueprint, messages_blueprint, admin_blueprint
    )

    for blueprint in (
        base_blueprint, auth_blueprint, users_blueprint, gadgets_blueprint,
        rentals_blueprint, messages_blueprint, admin_blueprint
    ):
        api.register_blueprint(blueprint)

    from common.exception.error_handler import register_error_handlers
    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {
            'status': 'healthy',
            'service': 'gadgetswap'
        }, 200

    logger.info(f"GadgetSwap app created (config={config_name})")
    return app
