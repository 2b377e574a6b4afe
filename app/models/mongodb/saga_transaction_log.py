from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class SagaStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    COMPENSATING = "compensating"
    COMPENSATED = "compensated"  # 롤백 완료, 잔여 데이터 없음
    FAILED = "failed"  # 보상 실패, 잔여 데이터 수동 정리 필요


class StepStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"


# 복구 대상 (프로세스가 중간에 죽으면 이 상태로 남음)
UNFINISHED_STATUSES = (SagaStatus.IN_PROGRESS, SagaStatus.COMPENSATING)

# 보관 기간이 지나면 삭제해도 되는 상태
FINISHED_STATUSES = (SagaStatus.COMPLETED, SagaStatus.COMPENSATED)


@dataclass
class SagaStep:
    name: str
    status: StepStatus = StepStatus.PENDING

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    compensated_at: Optional[datetime] = None
    error_message: Optional[str] = None

    # 보상 함수에 그대로 넘길 데이터 (삭제할 _id, 되돌릴 증감값, 삭제 전 도큐먼트 등)
    compensation_data: Dict[str, Any] = field(default_factory=dict)

    TIMESTAMP_KEYS = ('started_at', 'completed_at', 'compensated_at')

    def to_dict(self) -> Dict:
        doc = {key: getattr(self, key) for key in self.TIMESTAMP_KEYS}
        doc.update({
            'name': self.name,
            'status': self.status.value,
            'error_message': self.error_message,
            'compensation_data': self.compensation_data
        })
        return doc

    @classmethod
    def from_dict(cls, data: Dict) -> 'SagaStep':
        return cls(
            name=data['name'],
            status=StepStatus(data.get('status', StepStatus.PENDING.value)),
            error_message=data.get('error_message'),
            compensation_data=data.get('compensation_data') or {},
            **{key: data.get(key) for key in cls.TIMESTAMP_KEYS}
        )


@dataclass
class SagaTransactionLog:
    transaction_id: str

    # 복구 잡이 단계별 보상 함수를 찾을 때 사용 (onboard_user, offboard_user, book_rental)
    saga_name: str = ''
    status: SagaStatus = SagaStatus.PENDING
    steps: List[SagaStep] = field(default_factory=list)

    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    compensation_started_at: Optional[datetime] = None
    compensation_completed_at: Optional[datetime] = None

    # 이메일, 가젯 ID 등 추적용
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'transaction_id': self.transaction_id,
            'saga_name': self.saga_name,
            'status': self.status.value,
            'steps': [step.to_dict() for step in self.steps],
            'created_at': self.created_at,
            'completed_at': self.completed_at,
            'compensation_started_at': self.compensation_started_at,
            'compensation_completed_at': self.compensation_completed_at,
            'metadata': self.metadata
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SagaTransactionLog':
        return cls(
            transaction_id=data['transaction_id'],
            saga_name=data.get('saga_name', ''),
            status=SagaStatus(data.get('status', SagaStatus.PENDING.value)),
            steps=[SagaStep.from_dict(step) for step in data.get('steps', [])],
            created_at=data.get('created_at') or datetime.utcnow(),
            completed_at=data.get('completed_at'),
            compensation_started_at=data.get('compensation_started_at'),
            compensation_completed_at=data.get('compensation_completed_at'),
            metadata=data.get('metadata') or {}
        )

    def add_step(self, step_name: str, compensation_data: Dict[str, Any] = None):
        self.steps.append(SagaStep(name=step_name, compensation_data=compensation_data or {}))


class SagaTransactionLogRepository:
    """
    사가 실행 기록 저장소

    단계 상태는 steps.<index>.<field> 경로로 개별 갱신하고,
    사가 전체 상태는 상태값과 해당 시각 필드를 함께 갱신한다.
    """

    COLLECTION_NAME = 'saga_transaction_log'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        self.collection.create_index('transaction_id', unique=True)
        self.collection.create_index([('status', 1), ('created_at', 1)])

    def insert(self, saga_log: SagaTransactionLog):
        self.collection.insert_one(saga_log.to_dict())

    def find_by_transaction_id(self, transaction_id: str) -> Optional[SagaTransactionLog]:
        doc = self.collection.find_one({'transaction_id': transaction_id})
        return SagaTransactionLog.from_dict(doc) if doc else None

    def find_stale(self, before: datetime) -> List[SagaTransactionLog]:
        docs = self.collection.find({
            'status': {'$in': [status.value for status in UNFINISHED_STATUSES]},
            'created_at': {'$lt': before}
        }).sort('created_at', 1)
        return [SagaTransactionLog.from_dict(doc) for doc in docs]

    # ==================== 단계 상태 ====================

    def update_step(self, transaction_id: str, step_index: int, update_data: Dict):
        self.collection.update_one(
            {'transaction_id': transaction_id},
            {'$set': {f'steps.{step_index}.{key}': value for key, value in update_data.items()}}
        )

    def mark_step_failed(self, transaction_id: str, step_index: int, error_message: str):
        self.update_step(transaction_id, step_index, {
            'status': StepStatus.FAILED.value,
            'error_message': error_message,
            'completed_at': datetime.utcnow()
        })

    def mark_step_compensated(self, transaction_id: str, step_index: int):
        self.update_step(transaction_id, step_index, {
            'status': StepStatus.COMPENSATED.value,
            'compensated_at': datetime.utcnow()
        })

    def mark_step_compensation_failed(self, transaction_id: str, step_index: int, error_message: str):
        self.update_step(transaction_id, step_index, {
            'status': StepStatus.COMPENSATION_FAILED.value,
            'error_message': error_message
        })

    # ==================== 사가 상태 ====================

    def _transition(self, transaction_id: str, status: SagaStatus, timestamp_field: str):
        self.collection.update_one(
            {'transaction_id': transaction_id},
            {'$set': {'status': status.value, timestamp_field: datetime.utcnow()}}
        )

    def start_compensation(self, transaction_id: str):
        self._transition(transaction_id, SagaStatus.COMPENSATING, 'compensation_started_at')

    def complete_compensation(self, transaction_id: str):
        self._transition(transaction_id, SagaStatus.COMPENSATED, 'compensation_completed_at')

    def complete_saga(self, transaction_id: str):
        self._transition(transaction_id, SagaStatus.COMPLETED, 'completed_at')

    def mark_failed(self, transaction_id: str):
        self._transition(transaction_id, SagaStatus.FAILED, 'completed_at')

    def delete_old_logs(self, days: int = 30) -> int:
        # NOTE : failed 로그는 수동 정리 전까지 보관
        result = self.collection.delete_many({
            'created_at': {'$lt': datetime.utcnow() - timedelta(days=days)},
            'status': {'$in': [status.value for status in FINISHED_STATUSES]}
        })
        return result.deleted_count
