import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = 'gadgetswap'

LOG_FORMAT = '[%(asctime)s] %(levelname)s in %(name)s (%(filename)s:%(lineno)d): %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 10MB 단위 로테이션, 최대 5개 파일
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def _rotating_handler(path: Path, level, formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(app=None, log_level=None, log_to_file=True, log_dir='logs'):
    """
    'gadgetswap' 로거 설정

    get_logger() 로 만든 하위 로거는 모두 여기로 전파된다.
    핸들러는 프로세스당 한 번만 붙이고, 이후 호출은 레벨만 갱신한다.
    """
    if log_level is None:
        log_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    if app:
        app.logger.setLevel(log_level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        logger.addHandler(_rotating_handler(path / 'gadgetswap.log', log_level, formatter))
        #NOTE: 보상 실패(CRITICAL) 등 운영자가 확인할 로그는 error.log 에도 남김
        logger.addHandler(_rotating_handler(path / 'error.log', logging.ERROR, formatter))

    return logger


def get_logger(name=None):
    if name:
        return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
    return logging.getLogger(ROOT_LOGGER_NAME)
