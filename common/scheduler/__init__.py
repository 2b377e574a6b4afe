"""
백그라운드 작업 스케줄러 (Flask-APScheduler)
사가 복구, 사가 로그 정리
"""
import os

from common.extensions import scheduler
from common.utils.logging_utils import get_logger

logger = get_logger('scheduler')


def init_scheduler(app):
    # NOTE : debug 리로더 부모 프로세스에서는 잡을 띄우지 않음 (잡 중복 실행 방지)
    if app.debug and os.environ.get('WERKZEUG_RUN_MAIN') != 'true':
        logger.info("리로더 부모 프로세스, 스케줄러 시작 생략")
        return

    scheduler.init_app(app)

    from common.scheduler.tasks import register_scheduled_tasks
    register_scheduled_tasks(app.config)

    if not scheduler.running:
        scheduler.start()
        logger.info(f"스케줄러 시작 (timezone={app.config['SCHEDULER_TIMEZONE']})")


__all__ = ['init_scheduler']
