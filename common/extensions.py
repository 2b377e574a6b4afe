from flask_smorest import Api
from flask_apscheduler import APScheduler
from pymongo import MongoClient
import redis

from common.utils.logging_utils import get_logger

logger = get_logger('extensions')

api = Api()

# NOTE : 연결 실패 시 None (토큰 블랙리스트 비활성, 가젯 락은 프로세스 내부 락 사용)
redis_client = None

scheduler = APScheduler()


def build_mongo_uri(config) -> str:
    if config.get('MONGODB_URI'):
        return config['MONGODB_URI']

    host = config.get('MONGO_HOST', 'localhost')
    port = config.get('MONGO_PORT', 27017)
    username = config.get('MONGO_USERNAME')
    password = config.get('MONGO_PASSWORD')

    if username and password:
        from urllib.parse import quote_plus
        return f"mongodb://{quote_plus(username)}:{quote_plus(password)}@{host}:{port}/"

    return f"mongodb://{host}:{port}/"


def connect_mongo(config) -> MongoClient:
    client = MongoClient(
        build_mongo_uri(config),
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000
    )
    # 연결 실패는 앱 기동 실패로 처리
    client.admin.command('ping')
    logger.info(f"MongoDB 연결 성공 (db={config['MONGO_DB_NAME']})")
    return client


def connect_redis(config):
    """Redis 연결, 실패하면 None"""
    if config.get('REDIS_URL'):
        client = redis.from_url(config['REDIS_URL'], decode_responses=True, socket_connect_timeout=5)
        target = 'REDIS_URL'
    else:
        client = redis.Redis(
            host=config.get('REDIS_HOST', 'localhost'),
            port=config.get('REDIS_PORT', 6379),
            db=config.get('REDIS_DB', 0),
            password=config.get('REDIS_PASSWORD') or None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        target = f"{config.get('REDIS_HOST')}:{config.get('REDIS_PORT')}"

    try:
        client.ping()
    except redis.AuthenticationError as e:
        logger.warning(f"Redis 인증 실패 ({target}): {e} - REDIS_PASSWORD 확인 필요")
        return None
    except redis.RedisError as e:
        logger.warning(f"Redis 연결 실패 ({target}): {e} - 토큰 블랙리스트, 분산 락 비활성화")
        return None

    logger.info(f"Redis 연결 성공 ({target})")
    return client
