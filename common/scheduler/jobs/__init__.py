"""
스케줄러 Job 클래스 모듈
"""

from .saga_recovery_job import SagaRecoveryJob
from .saga_log_cleanup_job import SagaLogCleanupJob

__all__ = [
    'SagaRecoveryJob',
    'SagaLogCleanupJob'
]
