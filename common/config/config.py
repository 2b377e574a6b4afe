import os
from datetime import timedelta


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY')

    MONGO_USERNAME = os.getenv('MONGO_USERNAME')
    MONGO_PASSWORD = os.getenv('MONGO_PASSWORD')
    MONGO_HOST = os.getenv('MONGO_HOST', 'localhost')
    MONGO_PORT = int(os.getenv('MONGO_PORT', 27017))
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'GadgetSwapApplicationSystemDB')

    # NOTE : 설정 시 HOST/PORT/USERNAME 보다 우선 (mongodb+srv:// 클러스터 등)
    MONGODB_URI = os.getenv('MONGODB_URI')

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    AUTH_COOKIE_NAME = os.getenv('AUTH_COOKIE_NAME', 'token')
    AUTH_COOKIE_SECURE = _env_bool('AUTH_COOKIE_SECURE', False)
    AUTH_COOKIE_SAMESITE = os.getenv('AUTH_COOKIE_SAMESITE', 'Lax')

    REDIS_ENABLED = _env_bool('REDIS_ENABLED', True)
    REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
    REDIS_PORT = int(os.getenv('REDIS_PORT', 6379))
    REDIS_DB = int(os.getenv('REDIS_DB', 0))
    REDIS_PASSWORD = os.getenv('REDIS_PASSWORD')
    REDIS_URL = os.getenv('REDIS_URL')

    SENTRY_DSN = os.getenv('SENTRY_DSN')
    SENTRY_ENVIRONMENT = os.getenv('SENTRY_ENVIRONMENT', 'development')
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv('SENTRY_TRACES_SAMPLE_RATE', 1.0))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:5173,https://agadgetswap.netlify.app'
        ).split(',')
        if origin.strip()
    ]

    # 로그인 시도 제한 (기본: 3회 실패 시 10분 제한, 제한은 안내용)
    LOGIN_MAX_FAILED_ATTEMPTS = int(os.getenv('LOGIN_MAX_FAILED_ATTEMPTS', 3))
    LOGIN_RESTRICTION_MINUTES = int(os.getenv('LOGIN_RESTRICTION_MINUTES', 10))
    LOGIN_LOCKOUT_ENFORCED = _env_bool('LOGIN_LOCKOUT_ENFORCED', False)

    GADGET_LOCK_TIMEOUT_SECONDS = int(os.getenv('GADGET_LOCK_TIMEOUT_SECONDS', 10))

    SAGA_STALE_AFTER_MINUTES = int(os.getenv('SAGA_STALE_AFTER_MINUTES', 10))
    SAGA_LOG_RETENTION_DAYS = int(os.getenv('SAGA_LOG_RETENTION_DAYS', 30))

    SCHEDULER_ENABLED = _env_bool('SCHEDULER_ENABLED', True)
    SCHEDULER_API_ENABLED = False
    SCHEDULER_TIMEZONE = 'UTC'
    SAGA_RECOVERY_INTERVAL_MINUTES = int(os.getenv('SAGA_RECOVERY_INTERVAL_MINUTES', 5))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_TO_FILE = _env_bool('LOG_TO_FILE', True)
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = 'WARNING'
    AUTH_COOKIE_SECURE = True
    AUTH_COOKIE_SAMESITE = 'None'


class TestingConfig(Config):
    TESTING = True
    MONGO_DB_NAME = 'gadgetswap_test'
    JWT_SECRET_KEY = 'gadgetswap-test-secret'
    REDIS_ENABLED = False
    SENTRY_DSN = None
    SCHEDULER_ENABLED = False
    LOG_TO_FILE = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
