from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository
from common.utils.logging_utils import get_logger

logger = get_logger('saga_log_cleanup_job')


class SagaLogCleanupJob:

    def __init__(self, db, retention_days: int = 30):
        self.retention_days = retention_days
        self.saga_repo = SagaTransactionLogRepository(db)

    def execute(self) -> int:
        # NOTE: completed / compensated 로그만 삭제, failed 는 수동 확인을 위해 유지
        deleted_count = self.saga_repo.delete_old_logs(days=self.retention_days)
        logger.info(f"{self.retention_days}일 이전 사가 로그 {deleted_count}건 삭제")
        return deleted_count
