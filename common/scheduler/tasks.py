"""
스케줄 작업 정의 및 등록
- 멈춘 사가 복구 (보상 트랜잭션 재실행)
- 오래된 사가 로그 정리
"""

from common import extensions
from common.extensions import scheduler
from common.scheduler.jobs import SagaRecoveryJob, SagaLogCleanupJob
from common.utils.gadget_lock import GadgetCalendarLock
from common.utils.logging_utils import get_logger

logger = get_logger('scheduler_tasks')


def register_scheduled_tasks(config):
    recovery_minutes = config.get('SAGA_RECOVERY_INTERVAL_MINUTES', 5)

    scheduler.add_job(
        id='recover_stale_sagas',
        func=execute_saga_recovery_job,
        trigger='interval',
        minutes=recovery_minutes,
        max_instances=1,
        replace_existing=True
    )

    # 매일 04:00 (SCHEDULER_TIMEZONE 기준)
    scheduler.add_job(
        id='cleanup_saga_logs',
        func=execute_saga_log_cleanup_job,
        trigger='cron',
        hour=4,
        minute=0,
        replace_existing=True
    )

    logger.info(f"스케줄 작업 등록: 사가 복구 {recovery_minutes}분 간격, 사가 로그 정리 매일 04:00")


def execute_saga_recovery_job():
    """멈춘 사가 복구 Job 실행 (Flask 앱 컨텍스트 내에서)"""
    app = scheduler.app
    with app.app_context():
        try:
            job = SagaRecoveryJob(
                app.mongo,
                gadget_lock=GadgetCalendarLock(
                    extensions.redis_client,
                    timeout=app.config['GADGET_LOCK_TIMEOUT_SECONDS']
                ),
                stale_after_minutes=app.config['SAGA_STALE_AFTER_MINUTES']
            )
            recovered = job.execute()
            if recovered:
                logger.info(f"사가 복구 작업 완료: {recovered}건")
        except Exception as e:
            logger.error(f"사가 복구 작업 실패: {str(e)}", exc_info=True)


def execute_saga_log_cleanup_job():
    """사가 로그 정리 Job 실행"""
    app = scheduler.app
    with app.app_context():
        try:
            job = SagaLogCleanupJob(app.mongo, retention_days=app.config['SAGA_LOG_RETENTION_DAYS'])
            job.execute()
        except Exception as e:
            logger.error(f"사가 로그 정리 작업 실패: {str(e)}", exc_info=True)
