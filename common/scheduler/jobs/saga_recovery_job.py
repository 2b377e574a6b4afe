from datetime import timedelta
from typing import Callable, Dict

from app.models.mongodb.activity_history_chain import ActivityHistoryChainRepository
from app.models.mongodb.gadget import GadgetRepository
from app.models.mongodb.message_chain import MessageChainRepository
from app.models.mongodb.notification_chain import NotificationChainRepository
from app.models.mongodb.rental_order import RentalOrderRepository
from app.models.mongodb.saga_transaction_log import SagaTransactionLog, SagaTransactionLogRepository, StepStatus
from app.models.mongodb.user import UserRepository
from common.exception.exceptions import SagaCompensationError
from common.saga import run_compensations
from common.utils.clock import Clock, system_clock
from common.utils.gadget_lock import GadgetCalendarLock
from common.utils.logging_utils import get_logger

logger = get_logger('saga_recovery_job')


class SagaRecoveryJob:
    """
    프로세스 중단 등으로 in_progress / compensating 상태에 멈춘 사가를
    사가 로그의 compensation_data 로 역순 보상
    """

    def __init__(
        self,
        db,
        gadget_lock: GadgetCalendarLock = None,
        stale_after_minutes: int = 10,
        clock: Clock = system_clock
    ):
        self.clock = clock
        self.stale_after = timedelta(minutes=stale_after_minutes)
        self.gadget_lock = gadget_lock or GadgetCalendarLock()
        self.saga_repo = SagaTransactionLogRepository(db)

        user_repo = UserRepository(db)
        message_chain_repo = MessageChainRepository(db)
        notification_chain_repo = NotificationChainRepository(db)
        activity_history_chain_repo = ActivityHistoryChainRepository(db)
        rental_order_repo = RentalOrderRepository(db)
        self.gadget_repo = GadgetRepository(db)

        # saga_name -> step_name -> 보상 함수
        self.compensators: Dict[str, Dict[str, Callable]] = {
            'onboard_user': {
                'insert_user': user_repo.compensate_insert,
                'insert_message_chain': message_chain_repo.compensate_insert,
                'insert_notification_chain': notification_chain_repo.compensate_insert,
                'insert_activity_history_chain': activity_history_chain_repo.compensate_insert,
            },
            'offboard_user': {
                'delete_activity_history_chain': activity_history_chain_repo.compensate_delete,
                'delete_notification_chain': notification_chain_repo.compensate_delete,
                'delete_message_chain': message_chain_repo.compensate_delete,
                'delete_user': user_repo.compensate_delete,
            },
            'book_rental': {
                'insert_rental_order': rental_order_repo.compensate_insert,
                'apply_renter_stats': user_repo.compensate_apply_rental,
                'block_gadget_dates': self._unblock_gadget_dates,
            },
        }

    def _unblock_gadget_dates(self, compensation_data):
        with self.gadget_lock.hold(compensation_data['gadget_id']):
            self.gadget_repo.compensate_block_dates(compensation_data)

    def _recover(self, saga_log: SagaTransactionLog):
        step_compensators = self.compensators.get(saga_log.saga_name, {})

        # NOTE : 완료 상태로 기록된 단계만 보상 (보상 완료된 단계는 건너뜀)
        entries = [
            (i, step.name, step_compensators.get(step.name), step.compensation_data)
            for i, step in enumerate(saga_log.steps)
            if step.status == StepStatus.COMPLETED
        ]

        run_compensations(self.saga_repo, saga_log.transaction_id, entries)

    def execute(self) -> int:
        before = self.clock.now() - self.stale_after
        stale_sagas = self.saga_repo.find_stale(before)

        if not stale_sagas:
            return 0

        logger.warning(f"멈춘 사가 {len(stale_sagas)}건 복구 시작")

        recovered = 0
        for saga_log in stale_sagas:
            try:
                self._recover(saga_log)
                recovered += 1
            except SagaCompensationError as e:
                # NOTE: 사가 로그는 failed 로 남고 수동 정리 대상이 됨
                logger.critical(e.message)

        logger.info(f"사가 복구 완료: {recovered}/{len(stale_sagas)}건")
        return recovered
