import uuid
from typing import Callable, List, Dict, Any, Optional, Tuple
from datetime import datetime
from dataclasses import dataclass
from pymongo.errors import PyMongoError
from common.exception.exceptions import SagaCompensationError
from common.utils.logging_utils import get_logger

from app.models.mongodb.saga_transaction_log import (
    SagaTransactionLog,
    SagaTransactionLogRepository,
    SagaStatus,
    StepStatus
)

logger = get_logger('saga_orchestrator')


@dataclass
class SagaStepDefinition:
    name: str
    # execute(context) -> result
    execute: Callable
    # compensate(compensation_data), None이면 되돌릴 것이 없는 단계
    compensate: Optional[Callable] = None
    # extract_compensation_data(result) -> dict (사가 로그에 저장됨)
    extract_compensation_data: Optional[Callable] = None


class SagaContext:

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        self.step_results: Dict[str, Any] = {}  # 각 단계의 결과 저장

    def save_result(self, step_name: str, result: Any):
        """단계 결과 저장"""
        self.step_results[step_name] = result

    def get_result(self, step_name: str) -> Any:
        """단계 결과 조회"""
        return self.step_results.get(step_name)


# (단계 인덱스, 단계 이름, 보상 함수, 보상 데이터)
CompensationEntry = Tuple[int, str, Optional[Callable], Dict[str, Any]]


def _write_log(description: str, write: Callable, *args) -> bool:
    """사가 로그 기록. 실패해도 예외를 올리지 않고 False 반환 (보상 진행을 막지 않음)"""
    try:
        write(*args)
        return True
    except PyMongoError as log_error:
        logger.error(f"Saga log write failed ({description}): {log_error}")
        return False


def run_compensations(
    saga_repo: SagaTransactionLogRepository,
    transaction_id: str,
    entries: List[CompensationEntry],
    original_error: Optional[Exception] = None
):
    """
    완료된 단계들을 역순으로 보상

    하나의 보상이 실패해도 나머지 단계의 보상은 계속 시도하고,
    실패한 단계가 하나라도 있으면 SagaCompensationError 를 발생시킨다.
    보상은 성공했지만 보상 완료를 로그에 남기지 못한 단계도 실패로 본다.
    (로그상 completed 로 남으면 복구 잡이 같은 보상을 한 번 더 실행함)
    """
    logger.warning(f"Starting compensation for {len(entries)} steps: {transaction_id}")

    _write_log('start_compensation', saga_repo.start_compensation, transaction_id)

    failed_steps: List[str] = []

    for i, name, compensate, compensation_data in reversed(entries):
        if compensate is not None:
            try:
                logger.debug(f"Compensating step: {name}")
                compensate(compensation_data)
            except Exception as comp_error:
                # NOTE: 보상 실패는 심각한 문제 - 수동 개입 필요
                logger.error(f"Compensation failed for {name}: {comp_error}")
                _write_log(
                    f'{name} compensation_failed',
                    saga_repo.mark_step_compensation_failed, transaction_id, i, str(comp_error)
                )
                failed_steps.append(name)
                continue

        if not _write_log(f'{name} compensated', saga_repo.mark_step_compensated, transaction_id, i):
            failed_steps.append(name)
            continue

        logger.debug(f"Step compensated: {name}")

    if failed_steps:
        _write_log('mark_failed', saga_repo.mark_failed, transaction_id)
        raise SagaCompensationError(
            transaction_id=transaction_id,
            failed_steps=failed_steps,
            original_error=original_error
        )

    _write_log('complete_compensation', saga_repo.complete_compensation, transaction_id)
    logger.warning(f"Compensation completed: {transaction_id}")


class SagaOrchestrator:

    def __init__(
        self,
        saga_repo: SagaTransactionLogRepository,
        saga_name: str,
        transaction_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        self.saga_repo = saga_repo
        self.saga_name = saga_name
        self.transaction_id = transaction_id or str(uuid.uuid4())
        self.metadata = metadata or {}
        self.steps: List[SagaStepDefinition] = []
        self.context = SagaContext(self.transaction_id)
        # 실패한 단계 이름 (호출자가 에러 매핑에 사용)
        self.failed_step: Optional[str] = None

        # 사가 로그 초기화
        self.saga_log = SagaTransactionLog(
            transaction_id=self.transaction_id,
            saga_name=saga_name,
            status=SagaStatus.PENDING,
            metadata=self.metadata
        )

    def add_step(
        self,
        name: str,
        execute: Callable,
        compensate: Optional[Callable] = None,
        extract_compensation_data: Optional[Callable] = None
    ) -> 'SagaOrchestrator':
        step_def = SagaStepDefinition(
            name=name,
            execute=execute,
            compensate=compensate,
            extract_compensation_data=extract_compensation_data
        )
        self.steps.append(step_def)

        # 로그에도 단계 추가 (초기 상태)
        self.saga_log.add_step(step_name=name)
        return self

    def _fail(self, executed_steps: List[CompensationEntry], error: Exception) -> Tuple[bool, Exception]:
        try:
            run_compensations(
                self.saga_repo,
                self.transaction_id,
                executed_steps,
                original_error=error
            )
        except SagaCompensationError as comp_error:
            logger.critical(comp_error.message)
            return False, comp_error

        logger.error(f"Transaction failed: {self.transaction_id} - {error}")
        return False, error

    def execute(self) -> Tuple[bool, Optional[Exception]]:
        """
        모든 단계를 순서대로 실행

        Returns:
            (True, None): 전체 성공
            (False, error): 실패. 보상이 깨끗하게 끝났으면 원래 에러,
                            보상 자체가 실패했으면 SagaCompensationError
        """
        logger.info(f"Starting {self.saga_name} transaction: {self.transaction_id}")

        self.saga_log.status = SagaStatus.IN_PROGRESS
        try:
            self.saga_repo.insert(self.saga_log)
        except PyMongoError as log_error:
            # 아직 실행된 단계가 없으므로 보상 없이 실패
            logger.error(f"Saga log insert failed: {self.transaction_id} - {log_error}")
            return False, log_error

        executed_steps: List[CompensationEntry] = []

        for i, step_def in enumerate(self.steps):
            logger.debug(f"Executing step {i + 1}/{len(self.steps)}: {step_def.name}")

            try:
                self.saga_repo.update_step(
                    self.transaction_id,
                    i,
                    {
                        'status': StepStatus.PENDING.value,
                        'started_at': datetime.utcnow()
                    }
                )

                result = step_def.execute(self.context)
                self.context.save_result(step_def.name, result)

                compensation_data = {}
                if step_def.extract_compensation_data:
                    compensation_data = step_def.extract_compensation_data(result)

                # 실행된 단계는 이후 로그 기록 성공 여부와 무관하게 보상 대상
                executed_steps.append((i, step_def.name, step_def.compensate, compensation_data))

                self.saga_repo.update_step(
                    self.transaction_id,
                    i,
                    {
                        'status': StepStatus.COMPLETED.value,
                        'completed_at': datetime.utcnow(),
                        'compensation_data': compensation_data
                    }
                )

                logger.debug(f"Step {i + 1} completed: {step_def.name}")

            except Exception as step_error:
                logger.error(f"Step {i + 1} failed: {step_def.name} - {step_error}")
                self.failed_step = step_def.name
                _write_log(
                    f'{step_def.name} failed',
                    self.saga_repo.mark_step_failed, self.transaction_id, i, str(step_error)
                )
                return self._fail(executed_steps, step_error)

        try:
            self.saga_repo.complete_saga(self.transaction_id)
        except PyMongoError as log_error:
            # NOTE : in_progress 로 남은 사가는 복구 잡이 나중에 보상하므로 지금 되돌림
            logger.error(f"Saga completion write failed: {self.transaction_id} - {log_error}")
            return self._fail(executed_steps, log_error)

        logger.info(f"Transaction completed successfully: {self.transaction_id}")
        return True, None
